from .doctor import Doctor
from .patient import Patient
from .appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from .medical_record import MedicalRecord

__all__ = [
    "Doctor",
    "Patient",
    "Appointment",
    "AppointmentStatus",
    "ACTIVE_STATUSES",
    "MedicalRecord",
]
