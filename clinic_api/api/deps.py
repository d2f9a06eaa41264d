from fastapi import Depends, HTTPException, Path, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Annotated, Optional
import logging

from redis.exceptions import ConnectionError, TimeoutError

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import security, UserRole
from ..services.access_control import AccessControl, PractitionerIdentity
from ..schemas.common import MAX_ID

logger = logging.getLogger(__name__)

# Path ids outside the storage integer range are rejected as "Invalid ID format"
ResourceId = Annotated[int, Path(ge=1, le=MAX_ID)]

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> PractitionerIdentity:
    """Authenticate the bearer token on the request."""
    token = credentials.credentials if credentials else None
    return AccessControl(db).authenticate(token)

# Role-based access control dependencies
def require_role(required_role: UserRole):
    """Create a dependency that requires a specific user role."""
    def role_checker(
        current_user: PractitionerIdentity = Depends(get_current_user)
    ) -> PractitionerIdentity:
        AccessControl.authorize(current_user, required_role)
        return current_user

    return role_checker

get_admin_user = require_role(UserRole.ADMIN)

# Rate limiting dependency
def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Fixed-window request limit per client IP, shared by every API route."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{client_ip}"

    try:
        current_requests = redis_client.incr(key)
        if current_requests == 1:
            redis_client.expire(key, settings.RATE_LIMIT_WINDOW_SECONDS)
    except (ConnectionError, TimeoutError) as e:
        # Redis outage: serve the request unlimited
        logger.warning(f"Rate limit skipped for {client_ip}, Redis unavailable: {e}")
        return

    if current_requests > settings.RATE_LIMIT_REQUESTS:
        logger.warning(f"Rate limit exceeded for {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests from this IP, please try again later."
        )
