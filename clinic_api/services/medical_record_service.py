from sqlalchemy.orm import Session, joinedload
from datetime import datetime
from typing import List, Optional, Tuple
import logging

from ..core.exceptions import NotFoundError
from ..models.medical_record import MedicalRecord
from ..models.patient import Patient
from ..schemas.medical_record import MedicalRecordCreate, MedicalRecordUpdate
from .access_control import AccessControl, PractitionerIdentity
from .queries import paginate

logger = logging.getLogger(__name__)

# Nested models are stored as JSON columns
_JSON_FIELDS = ("vital_signs", "prescriptions", "lab_tests")
_LIST_FIELDS = ("symptoms", "prescriptions", "lab_tests")

_COLUMN_FOR_FIELD = {"patient": "patient_id"}

def _column_values(record_data, fields) -> dict:
    values = {}
    for field in fields:
        value = getattr(record_data, field)
        if field in _LIST_FIELDS and value is None:
            value = []
        if field in _JSON_FIELDS and value is not None:
            if isinstance(value, list):
                value = [item.model_dump(by_alias=True, mode="json") for item in value]
            else:
                value = value.model_dump(by_alias=True, mode="json")
        values[_COLUMN_FOR_FIELD.get(field, field)] = value
    return values

class MedicalRecordService:
    """Medical records: any practitioner may read or file; only the owner or an admin may change."""

    def __init__(self, db: Session):
        self.db = db

    def _joined_query(self):
        return self.db.query(MedicalRecord).options(
            joinedload(MedicalRecord.patient),
            joinedload(MedicalRecord.doctor),
        )

    def get_record(self, record_id: int) -> MedicalRecord:
        record = self._joined_query().filter(MedicalRecord.id == record_id).first()
        if not record:
            raise NotFoundError("Medical record")
        return record

    def list_records(
        self,
        page: int,
        limit: int,
        patient_id: Optional[int] = None,
        doctor_id: Optional[int] = None,
    ) -> Tuple[List[MedicalRecord], int, int]:
        query = self._joined_query()

        if patient_id is not None:
            query = query.filter(MedicalRecord.patient_id == patient_id)
        if doctor_id is not None:
            query = query.filter(MedicalRecord.doctor_id == doctor_id)

        query = query.order_by(MedicalRecord.visit_date.desc(), MedicalRecord.id.desc())
        return paginate(query, page, limit)

    def create_record(
        self,
        record_data: MedicalRecordCreate,
        author: PractitionerIdentity,
    ) -> MedicalRecord:
        self._ensure_patient_exists(record_data.patient)

        values = _column_values(record_data, MedicalRecordCreate.model_fields)
        if values["visit_date"] is None:
            values["visit_date"] = datetime.utcnow()

        # The author owns the record for its whole life
        record = MedicalRecord(**values, doctor_id=author.id)

        self.db.add(record)
        self.db.commit()

        logger.info(f"Medical record {record.id} filed by doctor {author.id}")
        return self.get_record(record.id)

    def update_record(
        self,
        record_id: int,
        record_data: MedicalRecordUpdate,
        editor: PractitionerIdentity,
    ) -> MedicalRecord:
        record = self.get_record(record_id)
        AccessControl.authorize_ownership(
            editor,
            record.doctor_id,
            detail="Not authorized to update this medical record",
        )

        changes = record_data.model_fields_set
        if "patient" in changes:
            self._ensure_patient_exists(record_data.patient)

        for column, value in _column_values(record_data, changes).items():
            setattr(record, column, value)

        self.db.commit()

        logger.info(f"Medical record {record_id} updated by doctor {editor.id}")
        return self.get_record(record_id)

    def delete_record(self, record_id: int) -> None:
        record = self.get_record(record_id)

        self.db.delete(record)
        self.db.commit()

        logger.info(f"Medical record {record_id} deleted")

    def get_patient_history(self, patient_id: int) -> Tuple[Patient, List[MedicalRecord]]:
        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError("Patient")

        records = self._joined_query().filter(
            MedicalRecord.patient_id == patient_id
        ).order_by(MedicalRecord.visit_date.desc(), MedicalRecord.id.desc()).all()

        return patient, records

    def _ensure_patient_exists(self, patient_id: int) -> None:
        if not self.db.query(Patient.id).filter(Patient.id == patient_id).first():
            raise NotFoundError("Patient")
