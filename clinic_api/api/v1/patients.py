from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ...core.config import settings
from ...core.database import get_db
from ...api.deps import ResourceId, get_current_user
from ...services.access_control import PractitionerIdentity
from ...services.patient_service import PatientService
from ...schemas.patient import PatientCreate, PatientUpdate, PatientResponse
from ...schemas.common import PaginatedResponse, ResponseEnvelope

router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
    dependencies=[Depends(get_current_user)],
)

@router.post("", response_model=ResponseEnvelope[PatientResponse], status_code=status.HTTP_201_CREATED)
def create_patient(
    patient_data: PatientCreate,
    db: Session = Depends(get_db),
    current_user: PractitionerIdentity = Depends(get_current_user),
):
    patient = PatientService(db).create_patient(patient_data, current_user)

    return ResponseEnvelope[PatientResponse](
        message="Patient created successfully",
        data=PatientResponse.model_validate(patient),
    )

@router.get("", response_model=PaginatedResponse[PatientResponse])
def list_patients(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    db: Session = Depends(get_db),
):
    """List patients, newest first; ``search`` matches name or phone."""
    patients, total, total_pages = PatientService(db).list_patients(
        page, limit, search=search, is_active=is_active
    )

    return PaginatedResponse[PatientResponse](
        count=len(patients),
        total=total,
        total_pages=total_pages,
        current_page=page,
        data=[PatientResponse.model_validate(p) for p in patients],
    )

@router.get("/{patient_id}", response_model=ResponseEnvelope[PatientResponse])
def get_patient(
    patient_id: ResourceId,
    db: Session = Depends(get_db),
):
    patient = PatientService(db).get_patient(patient_id)
    return ResponseEnvelope[PatientResponse](data=PatientResponse.model_validate(patient))

@router.put("/{patient_id}", response_model=ResponseEnvelope[PatientResponse])
def update_patient(
    patient_id: ResourceId,
    patient_data: PatientUpdate,
    db: Session = Depends(get_db),
):
    patient = PatientService(db).update_patient(patient_id, patient_data)

    return ResponseEnvelope[PatientResponse](
        message="Patient updated successfully",
        data=PatientResponse.model_validate(patient),
    )

@router.delete("/{patient_id}", response_model=ResponseEnvelope[dict])
def delete_patient(
    patient_id: ResourceId,
    db: Session = Depends(get_db),
):
    PatientService(db).delete_patient(patient_id)
    return ResponseEnvelope[dict](message="Patient deleted successfully", data={})
