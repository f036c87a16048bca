"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new booking was created

    Triggers:
    - Append the booking to the guest's history
    - Notify the guest and the host
    """
    booking_id: UUID
    booking_number: str
    property_id: int
    user_id: int
    check_in: date
    check_out: date
    total: Decimal


@dataclass(kw_only=True)
class BookingConfirmed(DomainEvent):
    """
    Event: Booking confirmed (PENDING -> CONFIRMED)

    Triggers:
    - Send booking confirmation to guest
    """
    booking_id: UUID
    property_id: int
    user_id: int


@dataclass(kw_only=True)
class BookingCompleted(DomainEvent):
    """
    Event: Guest has checked out (CONFIRMED -> COMPLETED)

    Triggers:
    - Request review from guest
    """
    booking_id: UUID
    property_id: int
    user_id: int


@dataclass(kw_only=True)
class BookingCanceled(DomainEvent):
    """
    Event: Booking was canceled

    Triggers:
    - Record the refund in the payment ledger (if applicable)
    - Notify guest and host
    """
    booking_id: UUID
    property_id: int
    user_id: int
    reason: str
    canceled_by: str
    refund_amount: Decimal
    transaction_id: Optional[str]
    previous_status: str


@dataclass(kw_only=True)
class BookingRejected(DomainEvent):
    """
    Event: Booking request was declined (PENDING -> REJECTED)

    Triggers:
    - Notify guest
    """
    booking_id: UUID
    property_id: int
    user_id: int
    reason: str
    rejected_by: Optional[str]


@dataclass(kw_only=True)
class PaymentRecorded(DomainEvent):
    """Event: Payment for the stay was captured in the ledger"""
    booking_id: UUID
    transaction_id: str
    amount: Decimal
