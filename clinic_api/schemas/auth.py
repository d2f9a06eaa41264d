from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, field_validator

from ..core.security import UserRole
from .common import CamelModel, normalize_email, require_text

PASSWORD_MIN_LENGTH = 6


class DoctorRegister(CamelModel):
    model_config = ConfigDict(validate_default=True)

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = UserRole.DOCTOR

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, value):
        name = require_text(value, "Name is required")
        if len(name) > 100:
            raise ValueError("Name cannot be more than 100 characters")
        return name

    @field_validator("email", mode="before")
    @classmethod
    def validate_email_address(cls, value):
        return normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value):
        if not isinstance(value, str) or len(value) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        return value

    @field_validator("specialization", mode="before")
    @classmethod
    def validate_specialization(cls, value):
        return require_text(value, "Specialization is required")

    @field_validator("license_number", mode="before")
    @classmethod
    def validate_license_number(cls, value):
        return require_text(value, "License number is required")

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, value):
        return require_text(value, "Phone number is required")

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, value):
        if value is None:
            return UserRole.DOCTOR
        if value not in [role.value for role in UserRole]:
            raise ValueError("Role must be doctor or admin")
        return value


class DoctorLogin(CamelModel):
    model_config = ConfigDict(validate_default=True)

    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def validate_email_address(cls, value):
        return normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value):
        if not isinstance(value, str) or not value:
            raise ValueError("Password is required")
        return value


class DoctorSummary(CamelModel):
    id: int
    name: str
    specialization: str


class DoctorContactSummary(DoctorSummary):
    phone: str


class DoctorLicenseSummary(DoctorSummary):
    license_number: str


class CreatorSummary(CamelModel):
    id: int
    name: str


class DoctorProfile(CamelModel):
    id: int
    name: str
    email: str
    specialization: str
    license_number: str
    phone: str
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(CamelModel):
    success: bool = True
    message: str
    data: DoctorProfile
    token: str
