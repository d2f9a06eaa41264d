from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from ...core.config import settings
from ...core.database import get_db
from ...api.deps import ResourceId, get_current_user, get_admin_user
from ...services.access_control import PractitionerIdentity
from ...services.medical_record_service import MedicalRecordService
from ...schemas.medical_record import (
    MedicalRecordCreate, MedicalRecordUpdate, MedicalRecordResponse,
    MedicalRecordDetailResponse, HistoryRecord, PatientHistory,
    PatientHistoryProfile, PatientHistoryResponse
)
from ...schemas.common import MAX_ID, PaginatedResponse, ResponseEnvelope

router = APIRouter(
    prefix="/medical-records",
    tags=["Medical Records"],
    dependencies=[Depends(get_current_user)],
)

@router.post("", response_model=ResponseEnvelope[MedicalRecordResponse], status_code=status.HTTP_201_CREATED)
def create_medical_record(
    record_data: MedicalRecordCreate,
    db: Session = Depends(get_db),
    current_user: PractitionerIdentity = Depends(get_current_user),
):
    """File a medical record; the caller becomes its owning doctor."""
    record = MedicalRecordService(db).create_record(record_data, current_user)

    return ResponseEnvelope[MedicalRecordResponse](
        message="Medical record created successfully",
        data=MedicalRecordResponse.model_validate(record),
    )

@router.get("", response_model=PaginatedResponse[MedicalRecordResponse])
def list_medical_records(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    patient: Optional[int] = Query(None, ge=1, le=MAX_ID),
    doctor: Optional[int] = Query(None, ge=1, le=MAX_ID),
    db: Session = Depends(get_db),
):
    records, total, total_pages = MedicalRecordService(db).list_records(
        page, limit, patient_id=patient, doctor_id=doctor
    )

    return PaginatedResponse[MedicalRecordResponse](
        count=len(records),
        total=total,
        total_pages=total_pages,
        current_page=page,
        data=[MedicalRecordResponse.model_validate(r) for r in records],
    )

@router.get("/patient/{patient_id}/history", response_model=PatientHistoryResponse)
def get_patient_history(
    patient_id: ResourceId,
    db: Session = Depends(get_db),
):
    """Every medical record for one patient, most recent visit first."""
    patient, records = MedicalRecordService(db).get_patient_history(patient_id)

    return PatientHistoryResponse(
        count=len(records),
        data=PatientHistory(
            patient=PatientHistoryProfile(
                id=patient.id,
                name=patient.full_name,
                date_of_birth=patient.date_of_birth,
                gender=patient.gender,
                blood_group=patient.blood_group,
                allergies=patient.allergies or [],
                chronic_conditions=patient.chronic_conditions or [],
            ),
            records=[HistoryRecord.model_validate(r) for r in records],
        ),
    )

@router.get("/{record_id}", response_model=ResponseEnvelope[MedicalRecordDetailResponse])
def get_medical_record(
    record_id: ResourceId,
    db: Session = Depends(get_db),
):
    record = MedicalRecordService(db).get_record(record_id)
    return ResponseEnvelope[MedicalRecordDetailResponse](
        data=MedicalRecordDetailResponse.model_validate(record)
    )

@router.put("/{record_id}", response_model=ResponseEnvelope[MedicalRecordResponse])
def update_medical_record(
    record_id: ResourceId,
    record_data: MedicalRecordUpdate,
    db: Session = Depends(get_db),
    current_user: PractitionerIdentity = Depends(get_current_user),
):
    """Update a record; only its owning doctor or an admin may do so."""
    record = MedicalRecordService(db).update_record(record_id, record_data, current_user)

    return ResponseEnvelope[MedicalRecordResponse](
        message="Medical record updated successfully",
        data=MedicalRecordResponse.model_validate(record),
    )

@router.delete("/{record_id}", response_model=ResponseEnvelope[dict])
def delete_medical_record(
    record_id: ResourceId,
    db: Session = Depends(get_db),
    current_user: PractitionerIdentity = Depends(get_admin_user),
):
    """Delete a record (admin only; the role check runs before the lookup)."""
    MedicalRecordService(db).delete_record(record_id)
    return ResponseEnvelope[dict](message="Medical record deleted successfully", data={})
