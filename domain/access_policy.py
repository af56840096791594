"""Access Policy - owner-or-admin authorization for bookings"""
from typing import Optional

from domain.auth import User
from domain.entities import Booking
from domain.exceptions import AuthenticationRequired, Forbidden
from domain.repositories import BookingQuery


def can_read(principal: Optional[User], booking: Booking) -> bool:
    if principal is None:
        return False
    return principal.is_admin or booking.is_owned_by(principal.user_id)


def can_mutate(principal: Optional[User], booking: Booking) -> bool:
    return can_read(principal, booking)


def require_principal(principal: Optional[User]) -> User:
    if principal is None:
        raise AuthenticationRequired()
    return principal


def require_admin(principal: Optional[User]) -> User:
    principal = require_principal(principal)
    if not principal.is_admin:
        raise Forbidden("Admin access required")
    return principal


def scope_query(principal: User, query: BookingQuery) -> BookingQuery:
    """Restrict a listing query to what the principal may see.

    Admins keep every filter they asked for. Anyone else is pinned to their
    own bookings and may only filter by status.
    """
    if principal.is_admin:
        return query
    return BookingQuery(status=query.status, user_id=principal.user_id)
