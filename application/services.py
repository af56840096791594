"""Application Services - Business use cases"""
import functools
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from application.commands import (
    BookingRequest, PaymentConfirmation, StaffUpdate, TravelerUpdate
)
from application.validation import (
    errors_from_pydantic, validate_booking_request, validate_paging,
    validate_payment_confirmation, validate_staff_update, validate_traveler_update
)
from domain.access_policy import can_mutate, can_read, require_admin, require_principal, scope_query
from domain.auth import User
from domain.entities import Booking, TRAVELER_MUTABLE_FIELDS, utcnow
from domain.exceptions import DuplicateReference, Forbidden, NotFound, UnexpectedError, ValidationError
from domain.pricing import calculate_pricing
from domain.reference import generate_booking_reference
from domain.repositories import BookingPage, BookingQuery, BookingRepository, StatusSummary
from domain.value_objects import GuestCount, PaymentDetails, TravelDates
from infrastructure.config import settings

logger = logging.getLogger(__name__)

BookingUpdate = Union[TravelerUpdate, StaffUpdate]


def update_command_for(principal: User, payload: dict) -> BookingUpdate:
    """Parse an update payload into the shape the principal's role allows.

    Admins get a StaffUpdate; everyone else a TravelerUpdate, which has no
    place for status, payment or staff-only keys.
    """
    model = StaffUpdate if principal.is_admin else TravelerUpdate
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(errors=errors_from_pydantic(exc))


class BookingService:
    """Service for Booking business use cases.

    Every operation takes the acting principal explicitly.
    """

    def __init__(
        self,
        repository: BookingRepository,
        reference_generator: Optional[Callable[[datetime], str]] = None,
        clock: Callable[[], datetime] = utcnow,
        max_reference_attempts: Optional[int] = None
    ):
        self.repository = repository
        self.reference_generator = reference_generator or functools.partial(
            generate_booking_reference, prefix=settings.REFERENCE_PREFIX
        )
        self.clock = clock
        self.max_reference_attempts = max_reference_attempts or settings.REFERENCE_MAX_ATTEMPTS

    async def create_booking(self, principal: Optional[User], request: BookingRequest) -> Booking:
        """Price, reference and store a new booking owned by the principal"""
        principal = require_principal(principal)
        now = self.clock()
        validate_booking_request(request, now)

        try:
            destination = request.destination.to_snapshot()
            travel_dates = request.travel_dates.to_travel_dates()
            guests = request.guests.to_guest_count()
            contact_info = request.contact_info.to_contact_info()
        except PydanticValidationError as exc:
            raise ValidationError(errors=errors_from_pydantic(exc))

        pricing = calculate_pricing(
            destination.price, guests.adults, guests.children, request.destination.discount
        )

        for attempt in range(1, self.max_reference_attempts + 1):
            booking = Booking.create(
                user_id=principal.user_id,
                booking_reference=self.reference_generator(now),
                destination=destination,
                travel_dates=travel_dates,
                guests=guests,
                pricing=pricing,
                contact_info=contact_info,
                special_requests=request.special_requests,
                accommodation_preference=request.accommodation_preference,
                meal_preference=request.meal_preference,
                now=now
            )
            try:
                await self.repository.insert(booking)
            except DuplicateReference:
                logger.warning(
                    "Booking reference collision (%s), attempt %d of %d",
                    booking.booking_reference, attempt, self.max_reference_attempts
                )
                continue

            logger.info(
                "Booking %s created by user %s, total %s",
                booking.booking_reference, principal.user_id, booking.pricing.total_amount
            )
            return booking

        logger.error("Could not allocate a unique booking reference after %d attempts",
                     self.max_reference_attempts)
        raise UnexpectedError("Server error creating booking")

    async def get_booking(self, principal: Optional[User], booking_id: UUID) -> Booking:
        """Get booking by ID"""
        principal = require_principal(principal)
        booking = await self._load(booking_id)
        if not can_read(principal, booking):
            raise Forbidden()
        return booking

    async def get_booking_by_reference(self, principal: Optional[User], reference: str) -> Booking:
        """Get booking by its human-readable reference"""
        principal = require_principal(principal)
        booking = await self.repository.find_by_reference(reference.strip().upper())
        if booking is None:
            raise NotFound()
        if not can_read(principal, booking):
            raise Forbidden()
        return booking

    async def list_bookings(
        self,
        principal: Optional[User],
        query: Optional[BookingQuery] = None,
        page: int = 1,
        limit: Optional[int] = None
    ) -> BookingPage:
        """List bookings visible to the principal, newest first"""
        principal = require_principal(principal)
        limit = settings.DEFAULT_PAGE_LIMIT if limit is None else limit
        validate_paging(page, limit, settings.MAX_PAGE_LIMIT)
        scoped = scope_query(principal, query or BookingQuery())
        return await self.repository.find_page(scoped, page, limit)

    async def update_booking(
        self,
        principal: Optional[User],
        booking_id: UUID,
        update: Union[BookingUpdate, Dict[str, Any]]
    ) -> Booking:
        """Apply an owner or staff update.

        A raw payload is parsed with ``update_command_for`` once the booking
        is known to exist and the principal may change it.
        """
        principal = require_principal(principal)
        booking = await self._load(booking_id)
        if not can_mutate(principal, booking):
            raise Forbidden()
        if isinstance(update, dict):
            update = update_command_for(principal, update)

        now = self.clock()
        if principal.is_admin:
            changes = self._staff_changes(booking, update)
            booking.apply_staff_changes(changes, now=now)
        else:
            update = self._narrow_to_traveler(update)
            validate_traveler_update(update)
            changes = self._traveler_changes(update)
            booking.apply_traveler_changes(changes, now=now)

        await self.repository.update(booking)
        logger.info("Booking %s updated by %s (%s): %s",
                    booking.booking_reference, principal.user_id, principal.role.value,
                    ", ".join(sorted(changes)) or "no changes")
        for warning in booking.consistency_warnings():
            logger.warning("Booking %s: %s", booking.booking_reference, warning)
        return booking

    async def cancel_booking(self, principal: Optional[User], booking_id: UUID) -> Booking:
        """Cancel booking; refunds are a separate staff payment update"""
        principal = require_principal(principal)
        booking = await self._load(booking_id)
        if not can_mutate(principal, booking):
            raise Forbidden()

        booking.cancel(now=self.clock())
        await self.repository.update(booking)
        logger.info("Booking %s cancelled by %s", booking.booking_reference, principal.user_id)
        return booking

    async def record_payment(
        self,
        principal: Optional[User],
        booking_id: UUID,
        confirmation: PaymentConfirmation
    ) -> Booking:
        """Apply a payment-confirmation event (staff only)"""
        principal = require_admin(principal)
        booking = await self._load(booking_id)
        validate_payment_confirmation(confirmation)

        try:
            details = confirmation.to_payment_details()
        except PydanticValidationError as exc:
            raise ValidationError(errors=errors_from_pydantic(exc))

        booking.record_payment(confirmation.payment_status, details, now=self.clock())
        await self.repository.update(booking)
        logger.info("Payment %s recorded for booking %s",
                    confirmation.payment_status.value, booking.booking_reference)
        for warning in booking.consistency_warnings():
            logger.warning("Booking %s: %s", booking.booking_reference, warning)
        return booking

    async def admin_list(
        self,
        principal: Optional[User],
        query: Optional[BookingQuery] = None,
        page: int = 1,
        limit: Optional[int] = None
    ) -> Tuple[BookingPage, List[StatusSummary]]:
        """List all bookings with per-status statistics"""
        require_admin(principal)
        limit = settings.ADMIN_PAGE_LIMIT if limit is None else limit
        validate_paging(page, limit, settings.MAX_PAGE_LIMIT)
        listing = await self.repository.find_page(query or BookingQuery(), page, limit)
        stats = await self.repository.status_summary()
        return listing, stats

    async def admin_stats(self, principal: Optional[User]) -> List[StatusSummary]:
        """Count and summed total amount per status"""
        require_admin(principal)
        return await self.repository.status_summary()

    # ==================== HELPERS ====================
    async def _load(self, booking_id: UUID) -> Booking:
        booking = await self.repository.find_by_id(booking_id)
        if booking is None:
            raise NotFound()
        return booking

    @staticmethod
    def _narrow_to_traveler(update: BookingUpdate) -> TravelerUpdate:
        if not isinstance(update, StaffUpdate):
            return update
        dropped = update.model_fields_set - TRAVELER_MUTABLE_FIELDS
        if dropped:
            logger.debug("Ignoring staff-only fields in traveler update: %s", ", ".join(sorted(dropped)))
        return TravelerUpdate.model_validate(
            update.model_dump(include=set(TRAVELER_MUTABLE_FIELDS), exclude_unset=True)
        )

    @staticmethod
    def _traveler_changes(update: TravelerUpdate) -> dict:
        fields_set = update.model_fields_set
        changes = {}
        try:
            if "contact_info" in fields_set:
                changes["contact_info"] = update.contact_info.to_contact_info()
        except PydanticValidationError as exc:
            raise ValidationError(errors=errors_from_pydantic(exc))
        for field in ("special_requests", "accommodation_preference", "meal_preference"):
            if field in fields_set:
                changes[field] = getattr(update, field)
        return changes

    def _staff_changes(self, booking: Booking, update: BookingUpdate) -> dict:
        fields_set = update.model_fields_set
        staff = update if isinstance(update, StaffUpdate) else None

        start_date, end_date = booking.travel_dates.start_date, booking.travel_dates.end_date
        adults, children = booking.guests.adults, booking.guests.children
        if staff is not None and staff.travel_dates is not None:
            dates_set = staff.travel_dates.model_fields_set
            if "start_date" in dates_set:
                start_date = staff.travel_dates.start_date
            if "end_date" in dates_set:
                end_date = staff.travel_dates.end_date
        if staff is not None and staff.guests is not None:
            guests_set = staff.guests.model_fields_set
            if "adults" in guests_set:
                adults = staff.guests.adults
            if "children" in guests_set:
                children = staff.guests.children

        if staff is not None:
            validate_staff_update(staff, start_date, end_date, adults, children)
        else:
            validate_traveler_update(update)

        changes = self._traveler_changes(update)
        if staff is None:
            return changes

        try:
            if "destination" in fields_set:
                changes["destination"] = staff.destination.to_snapshot()
            if "travel_dates" in fields_set:
                changes["travel_dates"] = TravelDates(start_date=start_date, end_date=end_date)
            if "guests" in fields_set:
                changes["guests"] = GuestCount(adults=adults, children=children)
            if "payment_details" in fields_set:
                changes["payment_details"] = (
                    staff.payment_details.to_payment_details()
                    if staff.payment_details is not None else PaymentDetails()
                )
        except PydanticValidationError as exc:
            raise ValidationError(errors=errors_from_pydantic(exc))

        for field in ("status", "payment_status", "notes"):
            if field in fields_set:
                changes[field] = getattr(staff, field)
        return changes
