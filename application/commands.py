"""Application Commands - typed inputs of the booking use cases

Commands only describe the shape of a request. Business rules are checked
by ``application.validation`` before anything is turned into domain value
objects, so most fields are optional here and reported field by field when
missing. Keys are camelCase on the wire; unknown keys are ignored.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.enums import AccommodationPreference, BookingStatus, MealPreference, PaymentStatus
from domain.value_objects import (
    ContactInfo, DestinationSnapshot, EmergencyContact, GuestCount, PaymentDetails, TravelDates
)


class CommandModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class DestinationInput(CommandModel):
    id: Optional[str] = None
    name: Optional[str] = None
    region: Optional[str] = None
    price: Optional[Decimal] = None
    discount: Decimal = Decimal("0")  # percent

    def to_snapshot(self) -> DestinationSnapshot:
        return DestinationSnapshot(id=self.id, name=self.name, region=self.region, price=self.price)


class TravelDatesInput(CommandModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def to_travel_dates(self) -> TravelDates:
        return TravelDates(start_date=self.start_date, end_date=self.end_date)


class GuestsInput(CommandModel):
    adults: Optional[int] = None
    children: int = 0

    def to_guest_count(self) -> GuestCount:
        return GuestCount(adults=self.adults, children=self.children)


class ContactInfoInput(CommandModel):
    phone: Optional[str] = None
    alternate_phone: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None

    def to_contact_info(self) -> ContactInfo:
        return ContactInfo(
            phone=self.phone,
            alternate_phone=self.alternate_phone,
            emergency_contact=self.emergency_contact
        )


class PaymentDetailsInput(CommandModel):
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    paid_amount: Optional[Decimal] = None
    payment_date: Optional[datetime] = None

    def to_payment_details(self) -> PaymentDetails:
        return PaymentDetails(**self.model_dump())


class BookingRequest(CommandModel):
    """Traveler request to book a trip package"""
    destination: DestinationInput = Field(default_factory=DestinationInput)
    travel_dates: TravelDatesInput = Field(default_factory=TravelDatesInput)
    guests: GuestsInput = Field(default_factory=GuestsInput)
    contact_info: ContactInfoInput = Field(default_factory=ContactInfoInput)
    special_requests: Optional[str] = None
    accommodation_preference: AccommodationPreference = AccommodationPreference.STANDARD
    meal_preference: MealPreference = MealPreference.VEGETARIAN


class TravelerUpdate(CommandModel):
    """Changes an owner may make to their booking"""
    contact_info: Optional[ContactInfoInput] = None
    special_requests: Optional[str] = None
    accommodation_preference: Optional[AccommodationPreference] = None
    meal_preference: Optional[MealPreference] = None


class StaffUpdate(TravelerUpdate):
    """Changes staff may make to any booking.

    Nested ``travelDates`` and ``guests`` may be partial; missing parts keep
    their stored values.
    """
    destination: Optional[DestinationInput] = None
    travel_dates: Optional[TravelDatesInput] = None
    guests: Optional[GuestsInput] = None
    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None
    payment_details: Optional[PaymentDetailsInput] = None
    notes: Optional[str] = None


class PaymentConfirmation(CommandModel):
    """Recorded result of an external payment event"""
    payment_status: PaymentStatus = PaymentStatus.PAID
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    paid_amount: Optional[Decimal] = None
    payment_date: Optional[datetime] = None

    def to_payment_details(self) -> PaymentDetails:
        return PaymentDetails(
            transaction_id=self.transaction_id,
            payment_method=self.payment_method,
            paid_amount=self.paid_amount,
            payment_date=self.payment_date
        )
