from datetime import date, datetime
from typing import List, Optional

from pydantic import ConfigDict, field_validator

from .auth import DoctorSummary
from .common import CamelModel, normalize_optional_email, parse_iso_date, require_text

GENDERS = ("male", "female", "other")
BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")


class Address(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class EmergencyContact(CamelModel):
    model_config = ConfigDict(validate_default=True)

    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value):
        return require_text(value, "Emergency contact name is required")

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, value):
        return require_text(value, "Emergency contact phone is required")


class PatientFields(CamelModel):
    """Field rules shared by patient create and update."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    emergency_contact: Optional[EmergencyContact] = None
    blood_group: Optional[str] = None
    allergies: Optional[List[str]] = None
    chronic_conditions: Optional[List[str]] = None
    is_active: bool = True

    @field_validator("first_name", mode="before")
    @classmethod
    def validate_first_name(cls, value):
        name = require_text(value, "First name is required")
        if len(name) > 50:
            raise ValueError("First name cannot be more than 50 characters")
        return name

    @field_validator("last_name", mode="before")
    @classmethod
    def validate_last_name(cls, value):
        name = require_text(value, "Last name is required")
        if len(name) > 50:
            raise ValueError("Last name cannot be more than 50 characters")
        return name

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def validate_date_of_birth(cls, value):
        return parse_iso_date(value, "Valid date of birth is required")

    @field_validator("gender", mode="before")
    @classmethod
    def validate_gender(cls, value):
        if value not in GENDERS:
            raise ValueError("Gender must be male, female, or other")
        return value

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, value):
        return normalize_optional_email(value)

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, value):
        return require_text(value, "Phone number is required")

    @field_validator("emergency_contact", mode="before")
    @classmethod
    def validate_emergency_contact(cls, value):
        if value is None:
            raise ValueError("Emergency contact is required")
        return value

    @field_validator("blood_group", mode="before")
    @classmethod
    def validate_blood_group(cls, value):
        if value is not None and value not in BLOOD_GROUPS:
            raise ValueError(f"Blood group must be one of: {', '.join(BLOOD_GROUPS)}")
        return value


class PatientCreate(PatientFields):
    # Absent required fields still run their validators and report a message
    model_config = ConfigDict(validate_default=True)


class PatientUpdate(PatientFields):
    pass


class PatientSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    phone: str


class PatientContactSummary(PatientSummary):
    email: Optional[str] = None


class PatientDemographics(CamelModel):
    id: int
    first_name: str
    last_name: str
    date_of_birth: date
    gender: str


class PatientNameSummary(CamelModel):
    id: int
    first_name: str
    last_name: str


class PatientResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    date_of_birth: date
    gender: str
    email: Optional[str] = None
    phone: str
    address: Optional[Address] = None
    emergency_contact: EmergencyContact
    blood_group: Optional[str] = None
    allergies: List[str] = []
    chronic_conditions: List[str] = []
    is_active: bool
    registered_by: DoctorSummary
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
