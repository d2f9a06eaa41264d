from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Tuple
import logging

from ..core.exceptions import DuplicateResourceError, NotFoundError
from ..core.security import (
    AccountInactiveError, verify_password, get_password_hash, create_doctor_token
)
from ..models.doctor import Doctor
from ..schemas.auth import DoctorLogin, DoctorRegister

logger = logging.getLogger(__name__)

class AuthService:
    """Identity and credential store for practitioners."""

    def __init__(self, db: Session):
        self.db = db

    def register_doctor(self, doctor_data: DoctorRegister) -> Tuple[Doctor, str]:
        """Register a new practitioner and issue their first token."""
        # Emails arrive lower-cased, so this check is case-insensitive
        existing_doctor = self.db.query(Doctor).filter(
            Doctor.email == doctor_data.email
        ).first()

        if existing_doctor:
            raise DuplicateResourceError("Doctor with this email already exists")

        if self.db.query(Doctor).filter(
            Doctor.license_number == doctor_data.license_number
        ).first():
            raise DuplicateResourceError("Doctor with this license number already exists")

        new_doctor = Doctor(
            name=doctor_data.name,
            email=doctor_data.email,
            password_hash=get_password_hash(doctor_data.password),
            specialization=doctor_data.specialization,
            license_number=doctor_data.license_number,
            phone=doctor_data.phone,
            role=doctor_data.role,
            is_active=True,
        )

        self.db.add(new_doctor)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email or license
            self.db.rollback()
            raise DuplicateResourceError("Doctor with this email already exists")
        self.db.refresh(new_doctor)

        logger.info(f"Registered doctor {new_doctor.id} with role {new_doctor.role.value}")
        return new_doctor, create_doctor_token(new_doctor.id, new_doctor.role)

    def authenticate_doctor(self, login_data: DoctorLogin) -> Tuple[Doctor, str]:
        """Check credentials and issue a token."""
        doctor = self.db.query(Doctor).filter(
            Doctor.email == login_data.email
        ).first()

        if not doctor or not verify_password(login_data.password, doctor.password_hash):
            logger.info(f"Failed login for {login_data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        if not doctor.is_active:
            raise AccountInactiveError()

        return doctor, create_doctor_token(doctor.id, doctor.role)

    def get_doctor(self, doctor_id: int) -> Doctor:
        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise NotFoundError("Doctor")
        return doctor

    def set_active_status(self, doctor_id: int, is_active: bool) -> Doctor:
        """Deactivate or reactivate a practitioner; existing tokens stop working while inactive."""
        doctor = self.get_doctor(doctor_id)

        doctor.is_active = is_active
        self.db.commit()
        self.db.refresh(doctor)

        logger.info(f"Doctor {doctor_id} {'activated' if is_active else 'deactivated'}")
        return doctor
