"""In-Memory Repository Implementations"""
import logging
import threading
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from domain.entities import Booking
from domain.enums import BookingStatus
from domain.exceptions import DuplicateReference, NotFound
from domain.repositories import BookingPage, BookingQuery, BookingRepository, StatusSummary

logger = logging.getLogger(__name__)


class InMemoryBookingRepository(BookingRepository):
    """In-memory implementation of BookingRepository.

    Bookings are stored as copies so callers never share state with the
    store. A lock makes the reference check and the insert one atomic step,
    also when the store is shared between worker threads.
    """

    def __init__(self):
        self._storage: Dict[UUID, Booking] = {}
        self._by_reference: Dict[str, UUID] = {}
        self._sequence: Dict[UUID, int] = {}
        self._lock = threading.Lock()

    async def insert(self, booking: Booking) -> Booking:
        """Insert booking, enforcing reference uniqueness"""
        with self._lock:
            if booking.booking_reference in self._by_reference:
                raise DuplicateReference(
                    f"Booking reference {booking.booking_reference} already exists"
                )
            if booking.id in self._storage:
                raise DuplicateReference(f"Booking {booking.id} already exists")
            self._storage[booking.id] = booking.model_copy(deep=True)
            self._by_reference[booking.booking_reference] = booking.id
            self._sequence[booking.id] = len(self._sequence)
        logger.debug("Stored booking %s", booking.booking_reference)
        return booking

    async def find_by_id(self, booking_id: UUID) -> Optional[Booking]:
        """Find booking by ID"""
        booking = self._storage.get(booking_id)
        return booking.model_copy(deep=True) if booking else None

    async def find_by_reference(self, reference: str) -> Optional[Booking]:
        """Find booking by reference"""
        booking_id = self._by_reference.get(reference.upper())
        if booking_id is None:
            return None
        return await self.find_by_id(booking_id)

    async def find_page(self, query: BookingQuery, page: int, limit: int) -> BookingPage:
        """Filter, sort newest first and slice"""
        with self._lock:
            matches = [b for b in self._storage.values() if self._matches(b, query)]
            matches.sort(key=lambda b: (b.created_at, self._sequence[b.id]), reverse=True)

        start = (page - 1) * limit
        items = [b.model_copy(deep=True) for b in matches[start:start + limit]]
        return BookingPage(items=items, total=len(matches), page=page, limit=limit)

    async def update(self, booking: Booking) -> Booking:
        """Update booking"""
        with self._lock:
            if booking.id not in self._storage:
                raise NotFound()
            self._storage[booking.id] = booking.model_copy(deep=True)
        return booking

    async def status_summary(self) -> List[StatusSummary]:
        """Count and sum total amounts per status"""
        counts: Dict[BookingStatus, int] = {}
        totals: Dict[BookingStatus, Decimal] = {}
        with self._lock:
            for booking in self._storage.values():
                counts[booking.status] = counts.get(booking.status, 0) + 1
                totals[booking.status] = totals.get(booking.status, Decimal("0")) + booking.pricing.total_amount

        return [
            StatusSummary(status=status, count=counts[status], total_amount=totals[status])
            for status in BookingStatus
            if status in counts
        ]

    @staticmethod
    def _matches(booking: Booking, query: BookingQuery) -> bool:
        if query.user_id is not None and booking.user_id != query.user_id:
            return False
        if query.status is not None and booking.status != query.status:
            return False
        if query.payment_status is not None and booking.payment_status != query.payment_status:
            return False
        if query.destination and query.destination.lower() not in booking.destination.name.lower():
            return False
        return True
