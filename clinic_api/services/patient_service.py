from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from typing import List, Optional, Tuple
import logging

from ..core.exceptions import NotFoundError, ResourceInUseError
from ..models.appointment import Appointment
from ..models.medical_record import MedicalRecord
from ..models.patient import Patient
from ..schemas.patient import PatientCreate, PatientUpdate
from .access_control import PractitionerIdentity
from .queries import paginate

logger = logging.getLogger(__name__)

# Nested models are stored as JSON columns
_JSON_FIELDS = ("address", "emergency_contact")
_LIST_FIELDS = ("allergies", "chronic_conditions")

def _column_values(patient_data, fields) -> dict:
    values = {}
    for field in fields:
        value = getattr(patient_data, field)
        if field in _LIST_FIELDS and value is None:
            value = []
        if field in _JSON_FIELDS and value is not None:
            value = value.model_dump(by_alias=True)
        values[field] = value
    return values

class PatientService:
    def __init__(self, db: Session):
        self.db = db

    def get_patient(self, patient_id: int) -> Patient:
        patient = self.db.query(Patient).options(
            joinedload(Patient.registered_by)
        ).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError("Patient")
        return patient

    def list_patients(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[Patient], int, int]:
        query = self.db.query(Patient).options(joinedload(Patient.registered_by))

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Patient.first_name.ilike(pattern),
                    Patient.last_name.ilike(pattern),
                    Patient.phone.ilike(pattern),
                )
            )

        if is_active is not None:
            query = query.filter(Patient.is_active == is_active)

        query = query.order_by(Patient.created_at.desc(), Patient.id.desc())
        return paginate(query, page, limit)

    def create_patient(
        self,
        patient_data: PatientCreate,
        registered_by: PractitionerIdentity,
    ) -> Patient:
        values = _column_values(patient_data, PatientCreate.model_fields)

        patient = Patient(**values, registered_by_id=registered_by.id)

        self.db.add(patient)
        self.db.commit()

        logger.info(f"Patient {patient.id} registered by doctor {registered_by.id}")
        return self.get_patient(patient.id)

    def update_patient(self, patient_id: int, patient_data: PatientUpdate) -> Patient:
        patient = self.get_patient(patient_id)

        values = _column_values(patient_data, patient_data.model_fields_set)
        for field, value in values.items():
            setattr(patient, field, value)

        self.db.commit()
        return self.get_patient(patient_id)

    def delete_patient(self, patient_id: int) -> None:
        patient = self.get_patient(patient_id)

        # Appointments and medical records keep a required reference to the patient
        has_appointments = self.db.query(
            self.db.query(Appointment.id).filter(Appointment.patient_id == patient_id).exists()
        ).scalar()
        has_records = self.db.query(
            self.db.query(MedicalRecord.id).filter(MedicalRecord.patient_id == patient_id).exists()
        ).scalar()
        if has_appointments or has_records:
            raise ResourceInUseError(
                "Patient has appointments or medical records and cannot be deleted"
            )

        self.db.delete(patient)
        self.db.commit()

        logger.info(f"Patient {patient_id} deleted")
