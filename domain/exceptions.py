"""Domain Exceptions - booking error taxonomy

Every error carries the HTTP-style status code the API layer answers with,
a caller-safe message and, for validation failures, the list of violated
fields.
"""
from typing import Dict, List, Optional


class BookingError(Exception):
    """Base class for all booking errors"""

    status_code = 500
    default_message = "Booking operation failed"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, str]]] = None):
        self.message = message or self.default_message
        self.errors = errors or []
        super().__init__(self.message)


class ValidationError(BookingError):
    """Malformed or out-of-range input"""

    status_code = 400
    default_message = "Validation failed"

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(errors=[{"field": field, "message": message}])


class AuthenticationRequired(BookingError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(BookingError):
    status_code = 403
    default_message = "Access denied"


class NotFound(BookingError):
    status_code = 404
    default_message = "Booking not found"


class InvalidTransition(BookingError):
    """Status change not allowed from the current status"""

    status_code = 400
    default_message = "Cannot cancel this booking"


class ConflictError(BookingError):
    status_code = 409
    default_message = "Conflicting booking state"


class DuplicateReference(ConflictError):
    """Raised by a repository when a booking reference is already taken"""

    default_message = "Booking reference already exists"


class UnexpectedError(BookingError):
    status_code = 500
    default_message = "Server error processing booking"
