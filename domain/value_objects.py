"""Domain Value Objects"""
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")

MAX_ADULTS = 20
MAX_CHILDREN = 10
MAX_DESTINATION_PRICE = Decimal("1000000000")


class DestinationSnapshot(BaseModel):
    """Copy of the destination taken at booking time, never a live reference"""
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    region: Optional[str] = None
    price: Decimal = Field(ge=0, le=MAX_DESTINATION_PRICE)

    model_config = ConfigDict(frozen=True)


class TravelDates(BaseModel):
    """Value Object for the travel window"""
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v):
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self

    model_config = ConfigDict(frozen=True)


class GuestCount(BaseModel):
    """Value Object for guest composition"""
    adults: int = Field(ge=1, le=MAX_ADULTS)
    children: int = Field(default=0, ge=0, le=MAX_CHILDREN)

    @property
    def total(self) -> int:
        return self.adults + self.children

    model_config = ConfigDict(frozen=True)


class Pricing(BaseModel):
    """Itemized amounts of a booking; total always reconciles"""
    base_price: Decimal = Field(ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    taxes: Decimal = Field(default=Decimal("0"), ge=0)
    total_amount: Decimal = Field(ge=0)

    @model_validator(mode="after")
    def total_reconciles(self):
        expected = self.base_price - self.discount + self.taxes
        if abs(expected - self.total_amount) > Decimal("0.01"):
            raise ValueError("Total amount must equal base price - discount + taxes")
        return self

    model_config = ConfigDict(frozen=True)


class EmergencyContact(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class ContactInfo(BaseModel):
    """Value Object for traveler contact details"""
    phone: str
    alternate_phone: Optional[str] = None
    emergency_contact: Optional[EmergencyContact] = None

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v):
        if not PHONE_PATTERN.match(v):
            raise ValueError("Please provide a valid phone number")
        return v

    model_config = ConfigDict(frozen=True)


class PaymentDetails(BaseModel):
    """Recorded result of a payment event"""
    transaction_id: Optional[str] = None
    payment_method: Optional[str] = None
    paid_amount: Optional[Decimal] = Field(default=None, ge=0)
    payment_date: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)
