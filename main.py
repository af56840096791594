import logging
from datetime import timedelta
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.schemas import (
    # Bookings
    BookingResponse, BookingEnvelope, BookingListEnvelope, AdminBookingListEnvelope,
    StatsEnvelope, PaginationResponse, StatusSummaryResponse,
    DestinationResponse, TravelDatesResponse, GuestsResponse, PricingResponse,
    ContactInfoResponse, EmergencyContactResponse, PaymentDetailsResponse,
    # Auth
    Token, UserResponse
)
from api.dependencies import get_current_active_user, get_current_principal, fake_users_db, get_user
from application.commands import BookingRequest, PaymentConfirmation
from application.services import BookingService
from domain.access_policy import require_principal
from domain.auth import User
from domain.enums import AccommodationPreference, BookingStatus, MealPreference, PaymentStatus
from domain.exceptions import BookingError
from domain.repositories import BookingPage, BookingQuery
from infrastructure.config import settings
from infrastructure.repositories.in_memory_repositories import InMemoryBookingRepository
from infrastructure.security import verify_password, create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Trip package bookings: pricing, references, access control and lifecycle",
    version="1.0.0"
)

# Initialize repositories
booking_repo = InMemoryBookingRepository()


# Dependency injection
def get_booking_service() -> BookingService:
    return BookingService(booking_repo)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

def _error_response(status_code: int, message: str, errors=None, detail: Optional[str] = None) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    if detail and settings.debug:
        content["error"] = detail
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in item["loc"][1:]) or str(item["loc"][0]), "message": item["msg"]}
        for item in exc.errors()
    ]
    return _error_response(400, "Validation failed", errors)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, "Server error", detail=str(exc))


# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"success": True, "status": "OK", "message": f"{settings.APP_NAME} is running"}


@app.get("/api/enums/booking-status", tags=["Enum Reference"])
async def get_booking_statuses():
    return {"values": [item.value for item in BookingStatus]}


@app.get("/api/enums/payment-status", tags=["Enum Reference"])
async def get_payment_statuses():
    return {"values": [item.value for item in PaymentStatus]}


@app.get("/api/enums/accommodation-preference", tags=["Enum Reference"])
async def get_accommodation_preferences():
    return {"values": [item.value for item in AccommodationPreference]}


@app.get("/api/enums/meal-preference", tags=["Enum Reference"])
async def get_meal_preferences():
    return {"values": [item.value for item in MealPreference]}


# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    user = get_user(fake_users_db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(
        data={"sub": user.username, "role": user.role.value},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return {"access_token": access_token, "token_type": "bearer"}


@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return UserResponse(
        user_id=current_user.user_id,
        username=current_user.username,
        email=current_user.email,
        full_name=current_user.full_name,
        role=current_user.role.value,
        disabled=current_user.disabled
    )


# ============================================================================
# BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings", response_model=BookingEnvelope, status_code=201, tags=["Bookings"])
async def create_booking(
    request: BookingRequest,
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """Create a new booking"""
    booking = await service.create_booking(principal, request)
    return BookingEnvelope(message="Booking created successfully", booking=_booking_to_response(booking))


@app.get("/api/bookings", response_model=BookingListEnvelope, tags=["Bookings"])
async def list_bookings(
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    status: Optional[BookingStatus] = Query(None),
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """List the caller's bookings (all bookings for admins)"""
    listing = await service.list_bookings(principal, BookingQuery(status=status), page, limit)
    return BookingListEnvelope(
        bookings=[_booking_to_response(b) for b in listing.items],
        pagination=_pagination(listing)
    )


@app.get("/api/bookings/admin/all", response_model=AdminBookingListEnvelope, tags=["Admin"])
async def admin_list_bookings(
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    status: Optional[BookingStatus] = Query(None),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    destination: Optional[str] = Query(None),
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """Get all bookings with statistics (admin only)"""
    query = BookingQuery(status=status, payment_status=payment_status, destination=destination)
    listing, stats = await service.admin_list(principal, query, page, limit)
    return AdminBookingListEnvelope(
        bookings=[_booking_to_response(b) for b in listing.items],
        stats=[_summary_to_response(s) for s in stats],
        pagination=_pagination(listing)
    )


@app.get("/api/bookings/admin/stats", response_model=StatsEnvelope, tags=["Admin"])
async def admin_booking_stats(
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """Per-status counts and amounts (admin only)"""
    stats = await service.admin_stats(principal)
    return StatsEnvelope(stats=[_summary_to_response(s) for s in stats])


@app.get("/api/bookings/reference/{reference}", response_model=BookingEnvelope, tags=["Bookings"])
async def get_booking_by_reference(
    reference: str,
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """Get booking by reference"""
    booking = await service.get_booking_by_reference(principal, reference)
    return BookingEnvelope(booking=_booking_to_response(booking))


@app.get("/api/bookings/{booking_id}", response_model=BookingEnvelope, tags=["Bookings"])
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """Get booking by ID"""
    booking = await service.get_booking(principal, booking_id)
    return BookingEnvelope(booking=_booking_to_response(booking))


@app.put("/api/bookings/{booking_id}", response_model=BookingEnvelope, tags=["Bookings"])
async def update_booking(
    booking_id: UUID,
    payload: Dict[str, Any] = Body(...),
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """Update booking; the accepted fields depend on the caller's role"""
    principal = require_principal(principal)
    booking = await service.update_booking(principal, booking_id, payload)
    warnings = booking.consistency_warnings() if principal.is_admin else []
    return BookingEnvelope(
        message="Booking updated successfully",
        booking=_booking_to_response(booking),
        warnings=warnings
    )


@app.delete("/api/bookings/{booking_id}", response_model=BookingEnvelope, tags=["Bookings"])
async def cancel_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """Cancel booking"""
    booking = await service.cancel_booking(principal, booking_id)
    return BookingEnvelope(message="Booking cancelled successfully", booking=_booking_to_response(booking))


@app.post("/api/bookings/{booking_id}/payment", response_model=BookingEnvelope, tags=["Admin"])
async def record_payment(
    booking_id: UUID,
    confirmation: PaymentConfirmation,
    service: BookingService = Depends(get_booking_service),
    principal: Optional[User] = Depends(get_current_principal)
):
    """Record the result of a payment event (admin only)"""
    booking = await service.record_payment(principal, booking_id, confirmation)
    return BookingEnvelope(
        message="Payment recorded",
        booking=_booking_to_response(booking),
        warnings=booking.consistency_warnings()
    )


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _booking_to_response(booking) -> BookingResponse:
    """Convert Booking entity to BookingResponse"""
    contact = booking.contact_info
    emergency = contact.emergency_contact
    details = booking.payment_details
    return BookingResponse(
        id=booking.id,
        booking_reference=booking.booking_reference,
        user_id=booking.user_id,
        destination=DestinationResponse(
            id=booking.destination.id,
            name=booking.destination.name,
            region=booking.destination.region,
            price=float(booking.destination.price)
        ),
        travel_dates=TravelDatesResponse(
            start_date=booking.travel_dates.start_date,
            end_date=booking.travel_dates.end_date
        ),
        guests=GuestsResponse(adults=booking.guests.adults, children=booking.guests.children),
        total_guests=booking.total_guests,
        pricing=PricingResponse(
            base_price=float(booking.pricing.base_price),
            discount=float(booking.pricing.discount),
            taxes=float(booking.pricing.taxes),
            total_amount=float(booking.pricing.total_amount)
        ),
        contact_info=ContactInfoResponse(
            phone=contact.phone,
            alternate_phone=contact.alternate_phone,
            emergency_contact=EmergencyContactResponse(
                name=emergency.name, phone=emergency.phone, relationship=emergency.relationship
            ) if emergency else None
        ),
        special_requests=booking.special_requests,
        accommodation_preference=booking.accommodation_preference.value,
        meal_preference=booking.meal_preference.value,
        status=booking.status.value,
        payment_status=booking.payment_status.value,
        payment_details=PaymentDetailsResponse(
            transaction_id=details.transaction_id,
            payment_method=details.payment_method,
            paid_amount=float(details.paid_amount) if details.paid_amount is not None else None,
            payment_date=details.payment_date
        ),
        notes=booking.notes,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
        version=booking.version
    )


def _pagination(listing: BookingPage) -> PaginationResponse:
    return PaginationResponse(page=listing.page, limit=listing.limit, total=listing.total, pages=listing.pages)


def _summary_to_response(summary) -> StatusSummaryResponse:
    return StatusSummaryResponse(
        status=summary.status.value,
        count=summary.count,
        total_amount=float(summary.total_amount)
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
