"""
Stay Pricing and Refund Policy

Pure functions over property rates and booking totals, shared by the
booking use cases and their tests.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from math import ceil
from typing import Optional

from shared.domain.base import utcnow
from shared.domain.value_objects import DateRange, Money, day_start

from .entities import Pricing, ZERO, to_decimal

FULL_REFUND_DAYS = 7
PARTIAL_REFUND_DAYS = 3
PARTIAL_REFUND_RATE = Decimal('0.5')


def quote_stay(
    stay: DateRange,
    base_price,
    cleaning_fee=ZERO,
    service_fee_percent=ZERO,
    tax_rate_percent=ZERO,
    currency: str = 'USD',
    discount_code: Optional[str] = None,
    discount_amount=ZERO,
) -> Pricing:
    """
    Price a stay from the property's rates

    subtotal = base price x nights
    service fee = subtotal x service fee %, rounded to whole units
    taxes = (subtotal + cleaning + service fee) x tax rate %, rounded
    total = subtotal + cleaning + service fee + taxes - discount
    """
    nights = len(stay)
    nightly_rate = Money(base_price, currency)
    subtotal = nightly_rate * nights
    cleaning = Money(cleaning_fee, currency)
    service = subtotal.percent(service_fee_percent)
    taxes = (subtotal + cleaning + service).percent(tax_rate_percent)

    discount = min(to_decimal(discount_amount), (subtotal + cleaning + service + taxes).amount)
    pricing = Pricing(
        nightly_rate=nightly_rate.amount,
        nights=nights,
        subtotal=subtotal.amount,
        cleaning_fee=cleaning.amount,
        service_fee=service.amount,
        taxes=taxes.amount,
        discount_code=discount_code or None,
        discount_amount=discount,
        currency=currency,
    )
    return pricing.recomputed()


def days_until_check_in(check_in, now: Optional[datetime] = None) -> int:
    """Whole days, rounded up, from ``now`` to midnight UTC of check-in"""
    now = now or utcnow()
    seconds = (day_start(check_in) - now).total_seconds()
    return ceil(seconds / 86400)


def policy_refund(total, check_in, now: Optional[datetime] = None) -> Decimal:
    """
    Refund owed to a guest cancelling their own booking

    - 7 or more days before check-in: the full total
    - 3 to 6 days: half of the total, rounded to whole units
    - later than that: nothing
    """
    total = to_decimal(total)
    days = days_until_check_in(check_in, now)
    if days >= FULL_REFUND_DAYS:
        return total
    if days >= PARTIAL_REFUND_DAYS:
        return (total * PARTIAL_REFUND_RATE).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    return ZERO
