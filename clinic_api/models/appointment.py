from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Date, Text, Index, Enum as SQLEnum, text
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum

from ..core.database import Base

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"

# Statuses that occupy a (doctor, date, time) slot
ACTIVE_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)

_ACTIVE_SLOT_PREDICATE = text("status IN ('scheduled', 'confirmed')")

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)

    # Relationships
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    created_by_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)

    # Appointment details
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(String(5), nullable=False)
    duration = Column(Integer, nullable=False, default=30)
    reason = Column(Text, nullable=False)
    status = Column(
        SQLEnum(
            AppointmentStatus,
            values_callable=lambda statuses: [s.value for s in statuses],
            name="appointment_status",
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )
    notes = Column(Text, nullable=True)

    # Tracking
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments", foreign_keys=[doctor_id])
    created_by = relationship("Doctor", foreign_keys=[created_by_id])

    __table_args__ = (
        Index("ix_appointments_doctor_slot", "doctor_id", "appointment_date", "appointment_time"),
        # At most one active appointment per doctor slot, enforced by the database
        Index(
            "uq_appointments_active_slot",
            "doctor_id",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_PREDICATE,
            sqlite_where=_ACTIVE_SLOT_PREDICATE,
        ),
    )

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, "
            f"date='{self.appointment_date}', time='{self.appointment_time}', status='{self.status}')>"
        )
