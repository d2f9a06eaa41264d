from sqlalchemy import Column, Integer, String, DateTime, Boolean, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..core.security import UserRole

class Doctor(Base):
    """A practitioner account: identity, credential and role."""

    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)

    # Identity
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)  # stored lower-cased
    password_hash = Column(String(255), nullable=False)

    # Professional information
    specialization = Column(String(100), nullable=False)
    license_number = Column(String(50), nullable=False, unique=True)
    phone = Column(String(20), nullable=False)

    # Access
    role = Column(
        SQLEnum(UserRole, values_callable=lambda roles: [r.value for r in roles], name="user_role"),
        nullable=False,
        default=UserRole.DOCTOR,
    )
    is_active = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    appointments = relationship(
        "Appointment", back_populates="doctor", foreign_keys="Appointment.doctor_id"
    )
    medical_records = relationship("MedicalRecord", back_populates="doctor")

    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}', role='{self.role}')>"
