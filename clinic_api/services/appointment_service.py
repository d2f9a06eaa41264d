from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from datetime import date
from typing import List, Optional, Tuple
import logging

from ..core.exceptions import NotFoundError, SlotConflictError
from ..models.appointment import Appointment, AppointmentStatus
from ..models.doctor import Doctor
from ..models.patient import Patient
from ..schemas.appointment import AppointmentCreate, AppointmentUpdate
from .access_control import PractitionerIdentity
from .queries import on_day, paginate
from .slot_conflicts import SlotConflictDetector

logger = logging.getLogger(__name__)

# Request field -> model column, where they differ
_COLUMN_FOR_FIELD = {
    "patient": "patient_id",
    "doctor": "doctor_id",
}

class AppointmentService:
    """Creates, updates and removes appointments while keeping one active booking per slot."""

    def __init__(self, db: Session):
        self.db = db
        self.conflicts = SlotConflictDetector(db)

    def _joined_query(self):
        return self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor),
            joinedload(Appointment.created_by),
        )

    def get_appointment(self, appointment_id: int) -> Appointment:
        """Fetch one appointment with patient, doctor and creator loaded."""
        appointment = self._joined_query().filter(
            Appointment.id == appointment_id
        ).first()
        if not appointment:
            raise NotFoundError("Appointment")
        return appointment

    def list_appointments(
        self,
        page: int,
        limit: int,
        patient_id: Optional[int] = None,
        doctor_id: Optional[int] = None,
        status: Optional[AppointmentStatus] = None,
        on_date: Optional[date] = None,
    ) -> Tuple[List[Appointment], int, int]:
        query = self._joined_query()

        if patient_id is not None:
            query = query.filter(Appointment.patient_id == patient_id)
        if doctor_id is not None:
            query = query.filter(Appointment.doctor_id == doctor_id)
        if status is not None:
            query = query.filter(Appointment.status == status)
        if on_date is not None:
            query = query.filter(on_day(Appointment.appointment_date, on_date))

        query = query.order_by(
            Appointment.appointment_date.asc(),
            Appointment.appointment_time.asc(),
            Appointment.id.asc(),
        )
        return paginate(query, page, limit)

    def create_appointment(
        self,
        appointment_data: AppointmentCreate,
        creator: PractitionerIdentity,
    ) -> Appointment:
        """Book a slot for a patient with a doctor."""
        # Existence checks come before the slot check
        self._ensure_patient_exists(appointment_data.patient)
        self._ensure_doctor_exists(appointment_data.doctor)

        if self.conflicts.has_conflict(
            appointment_data.doctor,
            appointment_data.appointment_date,
            appointment_data.appointment_time,
        ):
            logger.warning(
                f"Slot already booked for doctor {appointment_data.doctor} at "
                f"{appointment_data.appointment_date} {appointment_data.appointment_time}"
            )
            raise SlotConflictError()

        appointment = Appointment(
            patient_id=appointment_data.patient,
            doctor_id=appointment_data.doctor,
            appointment_date=appointment_data.appointment_date,
            appointment_time=appointment_data.appointment_time,
            duration=appointment_data.duration,
            reason=appointment_data.reason,
            notes=appointment_data.notes,
            status=AppointmentStatus.SCHEDULED,
            created_by_id=creator.id,
        )

        self.db.add(appointment)
        self._commit()

        logger.info(
            f"Appointment {appointment.id} created for doctor {appointment.doctor_id} "
            f"by doctor {creator.id}"
        )
        return self.get_appointment(appointment.id)

    def update_appointment(
        self,
        appointment_id: int,
        appointment_data: AppointmentUpdate,
    ) -> Appointment:
        """Merge the supplied fields into an existing appointment."""
        appointment = self.get_appointment(appointment_id)
        changes = appointment_data.model_dump(exclude_unset=True)

        if "patient" in changes:
            self._ensure_patient_exists(changes["patient"])
        if "doctor" in changes:
            self._ensure_doctor_exists(changes["doctor"])

        if appointment_data.changes_slot:
            doctor_id = changes.get("doctor", appointment.doctor_id)
            appointment_date = changes.get("appointment_date", appointment.appointment_date)
            appointment_time = changes.get("appointment_time", appointment.appointment_time)

            if self.conflicts.has_conflict(
                doctor_id,
                appointment_date,
                appointment_time,
                exclude_appointment_id=appointment.id,
            ):
                logger.warning(
                    f"Cannot move appointment {appointment.id}: slot {appointment_date} "
                    f"{appointment_time} already booked for doctor {doctor_id}"
                )
                raise SlotConflictError()

        for field, value in changes.items():
            setattr(appointment, _COLUMN_FOR_FIELD.get(field, field), value)

        self._commit()

        logger.info(f"Appointment {appointment_id} updated: {sorted(changes)}")
        return self.get_appointment(appointment_id)

    def delete_appointment(self, appointment_id: int) -> None:
        appointment = self.get_appointment(appointment_id)

        self.db.delete(appointment)
        self.db.commit()

        logger.info(f"Appointment {appointment_id} deleted")

    def _ensure_patient_exists(self, patient_id: int) -> None:
        if not self.db.query(Patient.id).filter(Patient.id == patient_id).first():
            raise NotFoundError("Patient")

    def _ensure_doctor_exists(self, doctor_id: int) -> None:
        if not self.db.query(Doctor.id).filter(Doctor.id == doctor_id).first():
            raise NotFoundError("Doctor")

    def _commit(self) -> None:
        """Commit, turning a violation of the active-slot index into a booking conflict.

        Two requests can both pass the pre-check for the same slot; the partial
        unique index lets only one of them commit.
        """
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            message = str(e.orig).lower()
            if "unique" in message or "duplicate key" in message:
                logger.warning(f"Active-slot index rejected booking: {e.orig}")
                raise SlotConflictError()
            logger.error(f"Failed to save appointment: {e}")
            raise
