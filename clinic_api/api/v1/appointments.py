from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional

from ...core.config import settings
from ...core.database import get_db
from ...core.exceptions import field_error
from ...api.deps import ResourceId, get_current_user
from ...models.appointment import AppointmentStatus
from ...services.access_control import PractitionerIdentity
from ...services.appointment_service import AppointmentService
from ...services.schedule_service import ScheduleService
from ...schemas.appointment import (
    AppointmentCreate, AppointmentUpdate, AppointmentResponse,
    AppointmentDetailResponse, DoctorSchedule, DoctorScheduleResponse
)
from ...schemas.auth import DoctorSummary
from ...schemas.common import MAX_ID, PaginatedResponse, ResponseEnvelope, parse_iso_date

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    dependencies=[Depends(get_current_user)],
)

def _parse_date_filter(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value, "Valid date is required")
    except ValueError as e:
        raise field_error("query", "date", str(e))

@router.post(
    "",
    response_model=ResponseEnvelope[AppointmentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    current_user: PractitionerIdentity = Depends(get_current_user),
):
    """Book an appointment; the caller is recorded as its creator."""
    appointment = AppointmentService(db).create_appointment(appointment_data, current_user)

    return ResponseEnvelope[AppointmentResponse](
        message="Appointment created successfully",
        data=AppointmentResponse.model_validate(appointment),
    )

@router.get("", response_model=PaginatedResponse[AppointmentResponse])
def list_appointments(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    patient: Optional[int] = Query(None, ge=1, le=MAX_ID),
    doctor: Optional[int] = Query(None, ge=1, le=MAX_ID),
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status"),
    date_filter: Optional[str] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    """List appointments in chronological order."""
    appointments, total, total_pages = AppointmentService(db).list_appointments(
        page,
        limit,
        patient_id=patient,
        doctor_id=doctor,
        status=status_filter,
        on_date=_parse_date_filter(date_filter),
    )

    return PaginatedResponse[AppointmentResponse](
        count=len(appointments),
        total=total,
        total_pages=total_pages,
        current_page=page,
        data=[AppointmentResponse.model_validate(a) for a in appointments],
    )

@router.get("/doctor/{doctor_id}/schedule", response_model=DoctorScheduleResponse)
def get_doctor_schedule(
    doctor_id: ResourceId,
    date_filter: Optional[str] = Query(None, alias="date"),
    db: Session = Depends(get_db),
):
    """A doctor's agenda, optionally for a single day."""
    doctor, appointments = ScheduleService(db).get_doctor_schedule(
        doctor_id, _parse_date_filter(date_filter)
    )

    return DoctorScheduleResponse(
        count=len(appointments),
        data=DoctorSchedule(
            doctor=DoctorSummary.model_validate(doctor),
            appointments=[AppointmentResponse.model_validate(a) for a in appointments],
        ),
    )

@router.get("/{appointment_id}", response_model=ResponseEnvelope[AppointmentDetailResponse])
def get_appointment(
    appointment_id: ResourceId,
    db: Session = Depends(get_db),
):
    appointment = AppointmentService(db).get_appointment(appointment_id)
    return ResponseEnvelope[AppointmentDetailResponse](
        data=AppointmentDetailResponse.model_validate(appointment)
    )

@router.put("/{appointment_id}", response_model=ResponseEnvelope[AppointmentResponse])
def update_appointment(
    appointment_id: ResourceId,
    appointment_data: AppointmentUpdate,
    db: Session = Depends(get_db),
):
    """Partially update an appointment; moving it re-checks the slot."""
    appointment = AppointmentService(db).update_appointment(appointment_id, appointment_data)

    return ResponseEnvelope[AppointmentResponse](
        message="Appointment updated successfully",
        data=AppointmentResponse.model_validate(appointment),
    )

@router.delete("/{appointment_id}", response_model=ResponseEnvelope[dict])
def delete_appointment(
    appointment_id: ResourceId,
    db: Session = Depends(get_db),
):
    AppointmentService(db).delete_appointment(appointment_id)
    return ResponseEnvelope[dict](message="Appointment deleted successfully", data={})
