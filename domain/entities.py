"""Domain Entities - Aggregates"""
from pydantic import BaseModel, ConfigDict, Field, computed_field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from domain.enums import AccommodationPreference, BookingStatus, MealPreference, PaymentStatus
from domain.exceptions import InvalidTransition, ValidationError
from domain.value_objects import (
    ContactInfo, DestinationSnapshot, GuestCount, PaymentDetails, Pricing, TravelDates
)

# Fields a traveler may change on their own booking
TRAVELER_MUTABLE_FIELDS = frozenset({
    "contact_info",
    "special_requests",
    "accommodation_preference",
    "meal_preference",
})

# Fields staff may change; identity, owner, reference and pricing stay fixed
STAFF_MUTABLE_FIELDS = TRAVELER_MUTABLE_FIELDS | frozenset({
    "destination",
    "travel_dates",
    "guests",
    "status",
    "payment_status",
    "payment_details",
    "notes",
})

CANCELLABLE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Booking(BaseModel):
    """Booking Aggregate Root Entity"""

    # Identity
    id: UUID = Field(default_factory=uuid4)
    booking_reference: str

    # Owner
    user_id: UUID

    # Value Objects
    destination: DestinationSnapshot
    travel_dates: TravelDates
    guests: GuestCount
    pricing: Pricing
    contact_info: ContactInfo

    # Preferences
    special_requests: Optional[str] = Field(default=None, max_length=500)
    accommodation_preference: AccommodationPreference = AccommodationPreference.STANDARD
    meal_preference: MealPreference = MealPreference.VEGETARIAN

    # Status
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_details: PaymentDetails = Field(default_factory=PaymentDetails)

    # Staff only
    notes: Optional[str] = Field(default=None, max_length=1000)

    # Metadata
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = 1

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    @computed_field
    @property
    def total_guests(self) -> int:
        """Always derived from ``guests``"""
        return self.guests.total

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        user_id: UUID,
        booking_reference: str,
        destination: DestinationSnapshot,
        travel_dates: TravelDates,
        guests: GuestCount,
        pricing: Pricing,
        contact_info: ContactInfo,
        special_requests: Optional[str] = None,
        accommodation_preference: AccommodationPreference = AccommodationPreference.STANDARD,
        meal_preference: MealPreference = MealPreference.VEGETARIAN,
        now: Optional[datetime] = None
    ) -> "Booking":
        """Create a new pending booking"""
        now = now or utcnow()
        if travel_dates.start_date <= now:
            raise ValidationError.for_field("travelDates.startDate", "Start date must be in the future")

        return Booking(
            booking_reference=booking_reference,
            user_id=user_id,
            destination=destination,
            travel_dates=travel_dates,
            guests=guests,
            pricing=pricing,
            contact_info=contact_info,
            special_requests=special_requests,
            accommodation_preference=accommodation_preference,
            meal_preference=meal_preference,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            created_at=now,
            updated_at=now
        )

    # ==================== MODIFICATION METHODS ====================
    def apply_traveler_changes(self, changes: Dict[str, Any], now: Optional[datetime] = None) -> None:
        """Apply an owner's update; only preference and contact fields"""
        self._apply(changes, TRAVELER_MUTABLE_FIELDS, now)

    def apply_staff_changes(self, changes: Dict[str, Any], now: Optional[datetime] = None) -> None:
        """Apply a staff update. Status and payment fields are written as
        given, with no transition guard."""
        self._apply(changes, STAFF_MUTABLE_FIELDS, now)

    def record_payment(
        self,
        payment_status: PaymentStatus,
        payment_details: PaymentDetails,
        now: Optional[datetime] = None
    ) -> None:
        """Apply the recorded result of a payment event"""
        self.payment_status = payment_status
        self.payment_details = payment_details
        self._touch(now)

    # ==================== STATE TRANSITION METHODS ====================
    def cancel(self, now: Optional[datetime] = None) -> None:
        """Cancel booking; payment status is left for staff to reconcile"""
        if not self.is_cancellable():
            raise InvalidTransition(
                f"Cannot cancel booking with status {self.status.value}"
            )
        self.status = BookingStatus.CANCELLED
        self._touch(now)

    # ==================== QUERY METHODS ====================
    def is_cancellable(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def is_owned_by(self, user_id: UUID) -> bool:
        return self.user_id == user_id

    def consistency_warnings(self) -> List[str]:
        """Status / payment combinations that make no operational sense.

        These are reported, not rejected.
        """
        warnings = []
        if self.status == BookingStatus.COMPLETED and self.payment_status in (
            PaymentStatus.PENDING, PaymentStatus.FAILED
        ):
            warnings.append(
                f"Booking is completed but payment is {self.payment_status.value}"
            )
        if self.status == BookingStatus.CONFIRMED and self.payment_status == PaymentStatus.FAILED:
            warnings.append("Booking is confirmed but payment failed")
        if self.status == BookingStatus.CANCELLED and self.payment_status == PaymentStatus.PAID:
            warnings.append("Booking is cancelled but payment has not been refunded")
        if self.payment_status == PaymentStatus.REFUNDED and self.status != BookingStatus.CANCELLED:
            warnings.append(
                f"Payment is refunded but booking is {self.status.value}"
            )
        return warnings

    # ==================== PRIVATE METHODS ====================
    def _apply(self, changes: Dict[str, Any], allowed: frozenset, now: Optional[datetime]) -> None:
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Fields not updatable: {', '.join(sorted(unknown))}")

        for field, value in changes.items():
            setattr(self, field, value)
        self._touch(now)

    def _touch(self, now: Optional[datetime]) -> None:
        self.updated_at = now or utcnow()
        self.version += 1
