from datetime import date, datetime
from typing import List, Optional

from pydantic import ConfigDict, field_validator

from .auth import DoctorLicenseSummary, DoctorSummary
from .common import CamelModel, parse_id, parse_iso_datetime, require_text
from .patient import PatientDemographics, PatientNameSummary


class VitalSigns(CamelModel):
    blood_pressure: Optional[str] = None
    heart_rate: Optional[float] = None
    temperature: Optional[float] = None
    respiratory_rate: Optional[float] = None
    oxygen_saturation: Optional[float] = None
    weight: Optional[float] = None
    height: Optional[float] = None


class Prescription(CamelModel):
    medication: str
    dosage: str
    frequency: str
    duration: Optional[str] = None
    instructions: Optional[str] = None


class LabTest(CamelModel):
    test_name: Optional[str] = None
    result: Optional[str] = None
    date: Optional[datetime] = None


class MedicalRecordFields(CamelModel):
    """Field rules shared by medical record create and update.

    The owning doctor is never accepted from the request body; it is the
    authenticated caller at creation time and cannot change afterwards.
    """

    patient: Optional[int] = None
    visit_date: Optional[datetime] = None
    chief_complaint: Optional[str] = None
    diagnosis: Optional[str] = None
    symptoms: Optional[List[str]] = None
    vital_signs: Optional[VitalSigns] = None
    prescriptions: Optional[List[Prescription]] = None
    lab_tests: Optional[List[LabTest]] = None
    notes: Optional[str] = None
    follow_up_date: Optional[datetime] = None

    @field_validator("patient", mode="before")
    @classmethod
    def validate_patient(cls, value):
        return parse_id(value, "Patient ID is required")

    @field_validator("chief_complaint", mode="before")
    @classmethod
    def validate_chief_complaint(cls, value):
        return require_text(value, "Chief complaint is required")

    @field_validator("diagnosis", mode="before")
    @classmethod
    def validate_diagnosis(cls, value):
        return require_text(value, "Diagnosis is required")

    @field_validator("visit_date", mode="before")
    @classmethod
    def validate_visit_date(cls, value):
        if value is None:
            return None
        return parse_iso_datetime(value, "Valid visit date is required")

    @field_validator("follow_up_date", mode="before")
    @classmethod
    def validate_follow_up_date(cls, value):
        if value is None:
            return None
        return parse_iso_datetime(value, "Valid follow-up date is required")


class MedicalRecordCreate(MedicalRecordFields):
    model_config = ConfigDict(validate_default=True)


class MedicalRecordUpdate(MedicalRecordFields):
    # visit_date is only defaulted at creation; an update may not clear it
    @field_validator("visit_date", mode="before")
    @classmethod
    def validate_visit_date(cls, value):
        return parse_iso_datetime(value, "Valid visit date is required")


class MedicalRecordResponse(CamelModel):
    id: int
    patient: PatientDemographics
    doctor: DoctorSummary
    visit_date: datetime
    chief_complaint: str
    diagnosis: str
    symptoms: List[str] = []
    vital_signs: Optional[VitalSigns] = None
    prescriptions: List[Prescription] = []
    lab_tests: List[LabTest] = []
    notes: Optional[str] = None
    follow_up_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MedicalRecordDetailResponse(MedicalRecordResponse):
    doctor: DoctorLicenseSummary


class HistoryRecord(MedicalRecordResponse):
    patient: PatientNameSummary


class PatientHistoryProfile(CamelModel):
    id: int
    name: str
    date_of_birth: date
    gender: str
    blood_group: Optional[str] = None
    allergies: List[str] = []
    chronic_conditions: List[str] = []


class PatientHistory(CamelModel):
    patient: PatientHistoryProfile
    records: List[HistoryRecord]


class PatientHistoryResponse(CamelModel):
    success: bool = True
    count: int
    data: PatientHistory
