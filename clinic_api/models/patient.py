from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Boolean, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)

    # Personal information
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    gender = Column(String(10), nullable=False)

    # Contact information
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=False)
    address = Column(JSON, nullable=True)
    emergency_contact = Column(JSON, nullable=False)

    # Medical information
    blood_group = Column(String(3), nullable=True)
    allergies = Column(JSON, default=list)
    chronic_conditions = Column(JSON, default=list)

    is_active = Column(Boolean, nullable=False, default=True)
    registered_by_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    registered_by = relationship("Doctor")
    appointments = relationship("Appointment", back_populates="patient")
    medical_records = relationship("MedicalRecord", back_populates="patient")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Patient(id={self.id}, name='{self.first_name} {self.last_name}')>"
