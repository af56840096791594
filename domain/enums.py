"""Domain Enums"""
from enum import Enum


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class AccommodationPreference(str, Enum):
    STANDARD = "standard"
    DELUXE = "deluxe"
    LUXURY = "luxury"


class MealPreference(str, Enum):
    VEGETARIAN = "vegetarian"
    NON_VEGETARIAN = "non-vegetarian"
    VEGAN = "vegan"
    JAIN = "jain"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"
