from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError


class NotFoundError(HTTPException):
    def __init__(self, resource: str = "Resource"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class SlotConflictError(HTTPException):
    """Raised when a doctor's (date, time) slot is already held by an active appointment."""

    def __init__(self, detail: str = "This time slot is already booked"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class DuplicateResourceError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


def field_error(location: str, field: str, message: str) -> RequestValidationError:
    """Build a validation error for a single field outside a request body model."""
    return RequestValidationError([
        {"loc": (location, field), "msg": message, "type": "value_error"}
    ])


class ResourceInUseError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )
