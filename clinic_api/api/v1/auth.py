from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import ResourceId, get_current_user, get_admin_user
from ...services.access_control import PractitionerIdentity
from ...services.auth_service import AuthService
from ...schemas.auth import AuthResponse, DoctorLogin, DoctorProfile, DoctorRegister
from ...schemas.common import ResponseEnvelope

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    doctor_data: DoctorRegister,
    db: Session = Depends(get_db),
):
    """Register a new doctor."""
    doctor, token = AuthService(db).register_doctor(doctor_data)

    return AuthResponse(
        message="Doctor registered successfully",
        data=DoctorProfile.model_validate(doctor),
        token=token,
    )

@router.post("/login", response_model=AuthResponse)
def login(
    login_data: DoctorLogin,
    db: Session = Depends(get_db),
):
    """Authenticate a doctor and return an access token."""
    doctor, token = AuthService(db).authenticate_doctor(login_data)

    return AuthResponse(
        message="Login successful",
        data=DoctorProfile.model_validate(doctor),
        token=token,
    )

@router.get("/me", response_model=ResponseEnvelope[DoctorProfile])
def get_current_user_info(
    current_user: PractitionerIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get current doctor profile."""
    doctor = AuthService(db).get_doctor(current_user.id)
    return ResponseEnvelope[DoctorProfile](data=DoctorProfile.model_validate(doctor))

@router.post("/logout", response_model=ResponseEnvelope[dict])
def logout(
    current_user: PractitionerIdentity = Depends(get_current_user),
):
    """Acknowledge logout.

    Tokens are stateless: the client discards its token, and the server keeps
    accepting it until it expires.
    """
    return ResponseEnvelope[dict](message="Logout successful")

# Admin routes
@router.patch("/doctors/{doctor_id}/status", response_model=ResponseEnvelope[DoctorProfile])
def update_doctor_status(
    doctor_id: ResourceId,
    is_active: bool = Query(..., alias="isActive"),
    db: Session = Depends(get_db),
    current_user: PractitionerIdentity = Depends(get_admin_user),
):
    """Activate or deactivate a doctor account (admin only)."""
    doctor = AuthService(db).set_active_status(doctor_id, is_active)

    return ResponseEnvelope[DoctorProfile](
        message=f"Doctor {'activated' if is_active else 'deactivated'} successfully",
        data=DoctorProfile.model_validate(doctor),
    )
