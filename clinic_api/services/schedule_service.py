from sqlalchemy.orm import Session, joinedload
from datetime import date
from typing import List, Optional, Tuple

from ..core.exceptions import NotFoundError
from ..models.appointment import Appointment
from ..models.doctor import Doctor
from .queries import on_day

class ScheduleService:
    """Read-only agenda views over the appointment table."""

    def __init__(self, db: Session):
        self.db = db

    def get_doctor_schedule(
        self,
        doctor_id: int,
        on_date: Optional[date] = None,
    ) -> Tuple[Doctor, List[Appointment]]:
        """Return the doctor and their appointments in chronological order.

        Every status is included, so cancelled and completed visits still
        appear on the agenda. ``on_date`` limits the view to one calendar day.
        """
        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise NotFoundError("Doctor")

        query = self.db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor),
            joinedload(Appointment.created_by),
        ).filter(Appointment.doctor_id == doctor_id)

        if on_date is not None:
            query = query.filter(on_day(Appointment.appointment_date, on_date))

        appointments = query.order_by(
            Appointment.appointment_date.asc(),
            Appointment.appointment_time.asc(),
            Appointment.id.asc(),
        ).all()

        return doctor, appointments
