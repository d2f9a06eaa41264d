import re
from datetime import date, datetime
from typing import Any, Generic, List, Optional, TypeVar

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

# Primary keys are 32-bit integer columns
MAX_ID = 2**31 - 1


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ResponseEnvelope(CamelModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PaginatedResponse(CamelModel, Generic[T]):
    success: bool = True
    count: int
    total: int
    total_pages: int
    current_page: int
    data: List[T]


# Field-level validation helpers shared by the request schemas

def require_text(value: Any, message: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    return value.strip()


def normalize_email(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Please provide a valid email")
    try:
        validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError:
        raise ValueError("Please provide a valid email")
    return value.strip().lower()


def normalize_optional_email(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return normalize_email(value)


def parse_id(value: Any, message: str) -> int:
    if value is None or value == "":
        raise ValueError(message)
    if isinstance(value, bool):
        raise ValueError("Invalid ID format")
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValueError("Invalid ID format")
    if parsed < 1 or parsed > MAX_ID:
        raise ValueError("Invalid ID format")
    return parsed


def parse_iso_date(value: Any, message: str) -> date:
    """Accept a date, a datetime or an ISO 8601 string and keep the calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    candidate = value.strip()
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(candidate.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(message)


def parse_iso_datetime(value: Any, message: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(message)
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(message)
    # Stored as naive wall-clock values
    return parsed.replace(tzinfo=None)


def normalize_time(value: Any) -> str:
    """Validate a wall-clock ``H:MM``/``HH:MM`` value and zero-pad it to ``HH:MM``."""
    text = require_text(value, "Appointment time is required")
    match = _TIME_PATTERN.match(text)
    if not match:
        raise ValueError("Appointment time must be in HH:MM format")
    hours, minutes = match.groups()
    return f"{int(hours):02d}:{minutes}"
