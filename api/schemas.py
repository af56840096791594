"""API Schemas - Response DTOs and envelopes

Request bodies are the application commands (``application.commands``).
Responses use camelCase keys and plain numbers for money.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from uuid import UUID
from typing import List, Optional


class ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================

class DestinationResponse(ResponseModel):
    id: str
    name: str
    region: Optional[str] = None
    price: float


class TravelDatesResponse(ResponseModel):
    start_date: datetime
    end_date: datetime


class GuestsResponse(ResponseModel):
    adults: int
    children: int


class PricingResponse(ResponseModel):
    base_price: float
    discount: float
    taxes: float
    total_amount: float


class EmergencyContactResponse(ResponseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None


class ContactInfoResponse(ResponseModel):
    phone: str
    alternate_phone: Optional[str] = None
    emergency_contact: Optional[EmergencyContactResponse] = None


class PaymentDetailsResponse(ResponseModel):
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    paid_amount: Optional[float] = None
    payment_date: Optional[datetime] = None


class BookingResponse(ResponseModel):
    """Booking response DTO"""
    id: UUID
    booking_reference: str
    user_id: UUID
    destination: DestinationResponse
    travel_dates: TravelDatesResponse
    guests: GuestsResponse
    total_guests: int
    pricing: PricingResponse
    contact_info: ContactInfoResponse
    special_requests: Optional[str] = None
    accommodation_preference: str
    meal_preference: str
    status: str
    payment_status: str
    payment_details: PaymentDetailsResponse
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    version: int


class PaginationResponse(ResponseModel):
    page: int
    limit: int
    total: int
    pages: int


class StatusSummaryResponse(ResponseModel):
    status: str
    count: int
    total_amount: float


# ============================================================================
# ENVELOPES
# ============================================================================

class MessageEnvelope(ResponseModel):
    success: bool = True
    message: Optional[str] = None


class BookingEnvelope(MessageEnvelope):
    booking: BookingResponse
    warnings: List[str] = []


class BookingListEnvelope(MessageEnvelope):
    bookings: List[BookingResponse]
    pagination: PaginationResponse


class AdminBookingListEnvelope(BookingListEnvelope):
    stats: List[StatusSummaryResponse]


class StatsEnvelope(MessageEnvelope):
    stats: List[StatusSummaryResponse]


class FieldErrorResponse(ResponseModel):
    field: str
    message: str


class ErrorEnvelope(ResponseModel):
    success: bool = False
    message: str
    errors: Optional[List[FieldErrorResponse]] = None
    error: Optional[str] = None  # only in development mode


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str


class TokenData(BaseModel):
    """Token payload DTO"""
    username: Optional[str] = None


class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: str
    disabled: bool
