"""Explicit validation pass for booking commands.

Each check collects every violated field instead of stopping at the first
one; ``ValidationError.errors`` then lists ``{field, message}`` pairs named
the way clients send them (``travelDates.startDate``, ``guests.adults``).
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from application.commands import (
    BookingRequest, ContactInfoInput, DestinationInput, PaymentConfirmation,
    StaffUpdate, TravelerUpdate
)
from domain.exceptions import ValidationError
from domain.value_objects import MAX_ADULTS, MAX_CHILDREN, MAX_DESTINATION_PRICE, PHONE_PATTERN

MAX_SPECIAL_REQUESTS_LENGTH = 500
MAX_NOTES_LENGTH = 1000

FieldErrors = List[Dict[str, str]]


def _error(field: str, message: str) -> Dict[str, str]:
    return {"field": field, "message": message}


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def raise_if_errors(errors: FieldErrors) -> None:
    if errors:
        raise ValidationError(errors=errors)


def errors_from_pydantic(exc: PydanticValidationError, skip_prefix=("body", "query", "path")) -> FieldErrors:
    """Translate pydantic errors into ``{field, message}`` pairs"""
    errors = []
    for item in exc.errors():
        loc = [str(part) for part in item.get("loc", ())]
        if loc and loc[0] in skip_prefix:
            loc = loc[1:]
        errors.append(_error(".".join(loc) or "body", item.get("msg", "Invalid value")))
    return errors


# ==================== FIELD CHECKS ====================

def check_destination(destination: DestinationInput, prefix: str = "destination") -> FieldErrors:
    errors = []
    if not (destination.id or "").strip():
        errors.append(_error(f"{prefix}.id", "Destination ID is required"))
    if not (destination.name or "").strip():
        errors.append(_error(f"{prefix}.name", "Destination name is required"))
    if destination.price is None:
        errors.append(_error(f"{prefix}.price", "Price is required"))
    elif destination.price < 0:
        errors.append(_error(f"{prefix}.price", "Price cannot be negative"))
    elif destination.price > MAX_DESTINATION_PRICE:
        errors.append(_error(f"{prefix}.price", f"Price cannot exceed {MAX_DESTINATION_PRICE}"))
    if destination.discount < 0 or destination.discount > 100:
        errors.append(_error(f"{prefix}.discount", "Discount must be between 0 and 100 percent"))
    return errors


def check_travel_dates(
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    now: Optional[datetime] = None,
    prefix: str = "travelDates"
) -> FieldErrors:
    """Both dates present, end after start and, when ``now`` is given,
    start strictly in the future."""
    errors = []
    if start_date is None:
        errors.append(_error(f"{prefix}.startDate", "Valid start date is required"))
    elif now is not None and _as_utc(start_date) <= now:
        errors.append(_error(f"{prefix}.startDate", "Start date must be in the future"))

    if end_date is None:
        errors.append(_error(f"{prefix}.endDate", "Valid end date is required"))
    elif start_date is not None and _as_utc(end_date) <= _as_utc(start_date):
        errors.append(_error(f"{prefix}.endDate", "End date must be after start date"))
    return errors


def check_guests(adults: Optional[int], children: Optional[int], prefix: str = "guests") -> FieldErrors:
    errors = []
    if adults is None or not 1 <= adults <= MAX_ADULTS:
        errors.append(_error(f"{prefix}.adults", f"Number of adults must be between 1 and {MAX_ADULTS}"))
    if children is None or not 0 <= children <= MAX_CHILDREN:
        errors.append(_error(f"{prefix}.children", f"Number of children must be between 0 and {MAX_CHILDREN}"))
    return errors


def _valid_phone(value: Optional[str]) -> bool:
    return bool(value) and PHONE_PATTERN.match(value) is not None


def check_contact_info(contact: ContactInfoInput, prefix: str = "contactInfo") -> FieldErrors:
    errors = []
    if not _valid_phone(contact.phone):
        errors.append(_error(f"{prefix}.phone", "Please provide a valid phone number"))
    if contact.alternate_phone and not _valid_phone(contact.alternate_phone):
        errors.append(_error(f"{prefix}.alternatePhone", "Please provide a valid phone number"))
    emergency = contact.emergency_contact
    if emergency is not None and emergency.phone and not _valid_phone(emergency.phone):
        errors.append(_error(f"{prefix}.emergencyContact.phone", "Please provide a valid phone number"))
    return errors


def check_length(value: Optional[str], field: str, limit: int, label: str) -> FieldErrors:
    if value is not None and len(value) > limit:
        return [_error(field, f"{label} cannot exceed {limit} characters")]
    return []


def check_payment(paid_amount: Optional[Decimal], prefix: str = "paymentDetails") -> FieldErrors:
    if paid_amount is not None and paid_amount < 0:
        return [_error(f"{prefix}.paidAmount", "Paid amount cannot be negative")]
    return []


def check_not_null(update, fields: Dict[str, str]) -> FieldErrors:
    """Explicit nulls are only meaningful for clearable text fields"""
    errors = []
    for attr, field in fields.items():
        if attr in update.model_fields_set and getattr(update, attr) is None:
            errors.append(_error(field, "Field cannot be null"))
    return errors


# ==================== COMMAND CHECKS ====================

def validate_booking_request(request: BookingRequest, now: datetime) -> None:
    errors = []
    errors += check_destination(request.destination)
    errors += check_travel_dates(request.travel_dates.start_date, request.travel_dates.end_date, now=now)
    errors += check_guests(request.guests.adults, request.guests.children)
    errors += check_contact_info(request.contact_info)
    errors += check_length(request.special_requests, "specialRequests",
                           MAX_SPECIAL_REQUESTS_LENGTH, "Special requests")
    raise_if_errors(errors)


def _traveler_field_errors(update: TravelerUpdate) -> FieldErrors:
    errors = check_not_null(update, {
        "contact_info": "contactInfo",
        "accommodation_preference": "accommodationPreference",
        "meal_preference": "mealPreference",
    })
    if update.contact_info is not None:
        errors += check_contact_info(update.contact_info)
    errors += check_length(update.special_requests, "specialRequests",
                           MAX_SPECIAL_REQUESTS_LENGTH, "Special requests")
    return errors


def validate_traveler_update(update: TravelerUpdate) -> None:
    raise_if_errors(_traveler_field_errors(update))


def validate_staff_update(
    update: StaffUpdate,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    adults: Optional[int],
    children: Optional[int]
) -> None:
    """Validate a staff update.

    Dates and guest counts are checked after merging the partial update with
    the stored values, which the caller passes in.
    """
    errors = _traveler_field_errors(update)
    errors += check_not_null(update, {
        "destination": "destination",
        "travel_dates": "travelDates",
        "guests": "guests",
        "status": "status",
        "payment_status": "paymentStatus",
    })
    if update.destination is not None:
        errors += check_destination(update.destination)
    if update.travel_dates is not None:
        errors += check_travel_dates(start_date, end_date)
    if update.guests is not None:
        errors += check_guests(adults, children)
    if update.payment_details is not None:
        errors += check_payment(update.payment_details.paid_amount)
    errors += check_length(update.notes, "notes", MAX_NOTES_LENGTH, "Notes")
    raise_if_errors(errors)


def validate_payment_confirmation(confirmation: PaymentConfirmation) -> None:
    raise_if_errors(check_payment(confirmation.paid_amount, prefix="payment"))


def validate_paging(page: int, limit: int, max_limit: int) -> None:
    errors = []
    if page < 1:
        errors.append(_error("page", "Page must be at least 1"))
    if limit < 1 or limit > max_limit:
        errors.append(_error("limit", f"Limit must be between 1 and {max_limit}"))
    raise_if_errors(errors)
