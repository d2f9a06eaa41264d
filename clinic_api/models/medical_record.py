from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, JSON
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class MedicalRecord(Base):
    __tablename__ = "medical_records"

    id = Column(Integer, primary_key=True, index=True)

    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    # Owning practitioner; set once at creation
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False, index=True)

    # Visit
    visit_date = Column(DateTime, nullable=False, server_default=func.now())
    chief_complaint = Column(Text, nullable=False)
    diagnosis = Column(Text, nullable=False)
    symptoms = Column(JSON, default=list)
    vital_signs = Column(JSON, nullable=True)
    prescriptions = Column(JSON, default=list)
    lab_tests = Column(JSON, default=list)
    notes = Column(Text, nullable=True)
    follow_up_date = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("Patient", back_populates="medical_records")
    doctor = relationship("Doctor", back_populates="medical_records")

    def __repr__(self):
        return f"<MedicalRecord(id={self.id}, patient_id={self.patient_id}, doctor_id={self.doctor_id})>"
