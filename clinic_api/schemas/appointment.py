from datetime import date, datetime
from typing import List, Optional

from pydantic import ConfigDict, field_validator

from ..models.appointment import AppointmentStatus
from .auth import CreatorSummary, DoctorContactSummary, DoctorSummary
from .common import CamelModel, normalize_time, parse_id, parse_iso_date, require_text
from .patient import PatientContactSummary, PatientSummary

STATUS_VALUES = [status.value for status in AppointmentStatus]
DEFAULT_DURATION = 30


def parse_duration(value) -> int:
    if value is None or isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError("Duration must be a positive number of minutes")
    try:
        minutes = int(value)
    except ValueError:
        raise ValueError("Duration must be a positive number of minutes")
    if minutes < 1:
        raise ValueError("Duration must be a positive number of minutes")
    return minutes


class AppointmentFields(CamelModel):
    """Field rules shared by appointment create and update."""

    patient: Optional[int] = None
    doctor: Optional[int] = None
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = None
    duration: Optional[int] = None
    reason: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("patient", mode="before")
    @classmethod
    def validate_patient(cls, value):
        return parse_id(value, "Patient ID is required")

    @field_validator("doctor", mode="before")
    @classmethod
    def validate_doctor(cls, value):
        return parse_id(value, "Doctor ID is required")

    @field_validator("appointment_date", mode="before")
    @classmethod
    def validate_appointment_date(cls, value):
        return parse_iso_date(value, "Valid appointment date is required")

    @field_validator("appointment_time", mode="before")
    @classmethod
    def validate_appointment_time(cls, value):
        return normalize_time(value)

    @field_validator("duration", mode="before")
    @classmethod
    def validate_duration(cls, value):
        return parse_duration(value)

    @field_validator("reason", mode="before")
    @classmethod
    def validate_reason(cls, value):
        return require_text(value, "Reason is required")


class AppointmentCreate(AppointmentFields):
    # Absent required fields still run their validators and report a message
    model_config = ConfigDict(validate_default=True)

    @field_validator("duration", mode="before")
    @classmethod
    def validate_duration(cls, value):
        if value is None:
            return DEFAULT_DURATION
        return parse_duration(value)


class AppointmentUpdate(AppointmentFields):
    status: Optional[AppointmentStatus] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, value):
        if value not in STATUS_VALUES:
            raise ValueError(f"Status must be one of: {', '.join(STATUS_VALUES)}")
        return value

    @property
    def changes_slot(self) -> bool:
        """True when the request moves the appointment in time."""
        return bool({"appointment_date", "appointment_time"} & self.model_fields_set)


class AppointmentResponse(CamelModel):
    id: int
    patient: PatientSummary
    doctor: DoctorSummary
    appointment_date: date
    appointment_time: str
    duration: int
    reason: str
    status: AppointmentStatus
    notes: Optional[str] = None
    created_by: CreatorSummary
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AppointmentDetailResponse(AppointmentResponse):
    patient: PatientContactSummary
    doctor: DoctorContactSummary


class DoctorSchedule(CamelModel):
    doctor: DoctorSummary
    appointments: List[AppointmentResponse]


class DoctorScheduleResponse(CamelModel):
    success: bool = True
    count: int
    data: DoctorSchedule
