"""Pricing Calculator - quote for a booking"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from domain.exceptions import ValidationError
from domain.value_objects import MAX_ADULTS, MAX_CHILDREN, MAX_DESTINATION_PRICE, Pricing

CHILD_PRICE_FACTOR = Decimal("0.7")
TAX_RATE = Decimal("0.18")

_CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Round an amount half-up to 2 decimal places"""
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def calculate_pricing(
    destination_price: Number,
    adults: int,
    children: int = 0,
    discount_percent: Number = 0
) -> Pricing:
    """Compute the itemized price of a trip package.

    Children are charged at 70% of the adult rate and an 18% tax applies to
    the discounted amount. Each stored amount is rounded to cents and the
    total is built from the rounded parts, so
    ``total_amount == base_price - discount + taxes`` holds exactly.

    Raises ValidationError instead of clamping when an input is out of range.
    """
    price = Decimal(str(destination_price))
    percent = Decimal(str(discount_percent or 0))

    errors = []
    if price < 0:
        errors.append({"field": "destination.price", "message": "Price cannot be negative"})
    elif price > MAX_DESTINATION_PRICE:
        errors.append({"field": "destination.price", "message": f"Price cannot exceed {MAX_DESTINATION_PRICE}"})
    if not 1 <= adults <= MAX_ADULTS:
        errors.append({"field": "guests.adults", "message": f"Number of adults must be between 1 and {MAX_ADULTS}"})
    if not 0 <= children <= MAX_CHILDREN:
        errors.append({"field": "guests.children", "message": f"Number of children must be between 0 and {MAX_CHILDREN}"})
    if percent < 0 or percent > 100:
        errors.append({"field": "destination.discount", "message": "Discount must be between 0 and 100 percent"})
    if errors:
        raise ValidationError(errors=errors)

    base_price = to_money(price * (adults + children * CHILD_PRICE_FACTOR))
    discount = to_money(base_price * percent / 100)
    taxable = base_price - discount
    taxes = to_money(taxable * TAX_RATE)

    return Pricing(
        base_price=base_price,
        discount=discount,
        taxes=taxes,
        total_amount=taxable + taxes
    )
