"""Domain Repository Interfaces"""
import math
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from domain.entities import Booking
from domain.enums import BookingStatus, PaymentStatus


class BookingQuery(BaseModel):
    """Listing filters; ``None`` means no filter"""
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    destination: Optional[str] = None  # case-insensitive substring of destination name
    user_id: Optional[UUID] = None

    model_config = ConfigDict(frozen=True)


class BookingPage(BaseModel):
    """One page of a listing plus the total number of matches"""
    items: List[Booking]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class StatusSummary(BaseModel):
    """Count and summed total amount of bookings in one status"""
    status: BookingStatus
    count: int
    total_amount: Decimal


class BookingRepository(ABC):
    """Repository interface for Booking Aggregate"""

    @abstractmethod
    async def insert(self, booking: Booking) -> Booking:
        """Insert a new booking.

        Must raise DuplicateReference, atomically, when another booking
        already holds the same reference.
        """
        pass

    @abstractmethod
    async def find_by_id(self, booking_id: UUID) -> Optional[Booking]:
        """Find booking by ID"""
        pass

    @abstractmethod
    async def find_by_reference(self, reference: str) -> Optional[Booking]:
        """Find booking by its reference"""
        pass

    @abstractmethod
    async def find_page(self, query: BookingQuery, page: int, limit: int) -> BookingPage:
        """Find matching bookings, newest first"""
        pass

    @abstractmethod
    async def update(self, booking: Booking) -> Booking:
        """Replace a stored booking (last write wins)"""
        pass

    @abstractmethod
    async def status_summary(self) -> List[StatusSummary]:
        """Aggregate bookings by status"""
        pass
