from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ..models.appointment import ACTIVE_STATUSES, Appointment


class SlotConflictDetector:
    """Checks whether a doctor's (date, time) slot is held by an active appointment.

    Slots match on exact calendar day and exact ``HH:MM`` start time; duration
    is not considered, so 10:00 and 10:15 never conflict. Only scheduled and
    confirmed appointments occupy a slot.
    """

    def __init__(self, db: Session):
        self.db = db

    def has_conflict(
        self,
        doctor_id: int,
        appointment_date: date,
        appointment_time: str,
        exclude_appointment_id: Optional[int] = None,
    ) -> bool:
        query = self.db.query(Appointment.id).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == appointment_date,
            Appointment.appointment_time == appointment_time,
            Appointment.status.in_(ACTIVE_STATUSES),
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)

        return self.db.query(query.exists()).scalar()
