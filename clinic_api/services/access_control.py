"""
Access control: who is calling, and may they do this?

Authentication turns a bearer token into a ``PractitionerIdentity``; role and
ownership checks are pure decisions over that identity. Tokens are stateless,
so nothing here keeps session state and logout cannot revoke a token before
it expires.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..core.security import (
    AccountInactiveError,
    AuthenticationError,
    AuthorizationError,
    UserRole,
    verify_token,
)
from ..models.doctor import Doctor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PractitionerIdentity:
    """Resolved caller attached to each authenticated request."""

    id: int
    email: str
    name: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_doctor(cls, doctor: Doctor) -> "PractitionerIdentity":
        return cls(
            id=doctor.id,
            email=doctor.email,
            name=doctor.name,
            role=UserRole(doctor.role),
        )


class AccessControl:
    def __init__(self, db: Session):
        self.db = db

    def authenticate(self, token: Optional[str]) -> PractitionerIdentity:
        """Resolve a bearer token to the practitioner it was issued for."""
        if not token:
            raise AuthenticationError()

        payload = verify_token(token)
        if not payload or payload.token_type != "access" or not payload.sub:
            raise AuthenticationError()

        try:
            doctor_id = int(payload.sub)
        except ValueError:
            raise AuthenticationError()

        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise AuthenticationError()

        if not doctor.is_active:
            logger.info(f"Rejected token for inactive doctor {doctor_id}")
            raise AccountInactiveError()

        return PractitionerIdentity.from_doctor(doctor)

    @staticmethod
    def authorize(
        identity: PractitionerIdentity,
        required_role: Optional[UserRole] = None,
    ) -> None:
        """Allow the action if no role is required or the caller holds it.

        Admins satisfy every role requirement.
        """
        if required_role is None or identity.is_admin:
            return
        if identity.role != required_role:
            raise AuthorizationError(
                f"User role {identity.role.value} is not authorized to access this route"
            )

    @staticmethod
    def authorize_ownership(
        identity: PractitionerIdentity,
        owner_id: int,
        detail: str = "Not authorized to modify this resource",
    ) -> None:
        """Allow mutation by the owning practitioner or an admin."""
        if identity.id == owner_id or identity.is_admin:
            return
        raise AuthorizationError(detail)
