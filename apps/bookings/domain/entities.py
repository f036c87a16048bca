"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: Main aggregate representing a reservation
- BookingStatus: FSM states for booking lifecycle
- PaymentStatus: Payment state tracking
- GuestCounts, ContactInformation, AddOn, Pricing, PaymentInfo,
  Cancellation: value objects stored as the booking's JSON documents
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from shared.domain.base import Aggregate, ValueObject, utcnow
from shared.domain.exceptions import (
    AlreadyCanceled,
    CapacityExceeded,
    InvalidGuestCounts,
    InvalidTransition,
)
from shared.domain.value_objects import DateRange, day_start

ZERO = Decimal('0')


def to_decimal(value) -> Decimal:
    if value is None or value == '':
        return ZERO
    return value if isinstance(value, Decimal) else Decimal(str(value))


def money_str(value: Decimal) -> str:
    return str(to_decimal(value).quantize(Decimal('0.01')))


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (payment recorded or admin confirmation)
    - PENDING -> REJECTED (admin declined the request)
    - PENDING -> CANCELED (guest or admin cancelled)
    - CONFIRMED -> CANCELED (guest or admin cancelled)
    - CONFIRMED -> COMPLETED (after check-out)

    CANCELED, COMPLETED and REJECTED are terminal.
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELED = 'canceled'
    COMPLETED = 'completed'
    REJECTED = 'rejected'


TERMINAL_STATUSES = frozenset({
    BookingStatus.CANCELED,
    BookingStatus.COMPLETED,
    BookingStatus.REJECTED,
})


class PaymentStatus(Enum):
    """Payment status tracking"""
    PENDING = 'pending'
    PAID = 'paid'
    REFUNDED = 'refunded'
    PARTIALLY_REFUNDED = 'partially_refunded'
    FAILED = 'failed'


@dataclass(frozen=True)
class GuestCounts(ValueObject):
    """Party size; infants and pets don't count against capacity"""
    adults: int = 1
    children: int = 0
    infants: int = 0
    pets: int = 0

    def __post_init__(self):
        if self.adults < 1:
            raise InvalidGuestCounts("At least one adult is required.", adults=self.adults)
        for name in ('children', 'infants', 'pets'):
            if getattr(self, name) < 0:
                raise InvalidGuestCounts(f"{name.capitalize()} cannot be negative.", **{name: getattr(self, name)})

    @property
    def occupants(self) -> int:
        return self.adults + self.children

    def ensure_fits(self, max_guests: int):
        if self.occupants > max_guests:
            raise CapacityExceeded(
                f"This property can only accommodate up to {max_guests} guests.",
                max_guests=max_guests,
                requested=self.occupants,
            )

    @classmethod
    def from_document(cls, data: dict) -> 'GuestCounts':
        return cls(
            adults=int(data.get('adults', 1)),
            children=int(data.get('children', 0)),
            infants=int(data.get('infants', 0)),
            pets=int(data.get('pets', 0)),
        )

    def to_document(self) -> dict:
        return {
            'adults': self.adults,
            'children': self.children,
            'infants': self.infants,
            'pets': self.pets,
        }


@dataclass(frozen=True)
class ContactInformation(ValueObject):
    full_name: str
    email: str
    phone: str = ''
    emergency_contact: Optional[dict] = None

    @classmethod
    def from_document(cls, data: dict) -> 'ContactInformation':
        return cls(
            full_name=data.get('fullName', ''),
            email=data.get('email', ''),
            phone=data.get('phone', ''),
            emergency_contact=data.get('emergencyContact') or None,
        )

    def to_document(self) -> dict:
        document = {
            'fullName': self.full_name,
            'email': self.email,
            'phone': self.phone,
        }
        if self.emergency_contact:
            document['emergencyContact'] = dict(self.emergency_contact)
        return document

    def merged(self, changes: dict) -> 'ContactInformation':
        """Copy with the camelCase ``changes`` applied field by field"""
        emergency = dict(self.emergency_contact or {})
        emergency.update(changes.get('emergencyContact') or {})
        return ContactInformation(
            full_name=changes.get('fullName', self.full_name),
            email=changes.get('email', self.email),
            phone=changes.get('phone', self.phone),
            emergency_contact=emergency or None,
        )


@dataclass(frozen=True)
class AddOn(ValueObject):
    """Optional experience package attached to a stay"""
    id: str
    name: str
    price: Decimal
    quantity: int = 1

    def __post_init__(self):
        object.__setattr__(self, 'price', to_decimal(self.price))
        if self.price < 0:
            raise ValueError("Add-on price cannot be negative")
        if self.quantity < 1:
            raise ValueError("Add-on quantity must be at least 1")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_document(cls, data: dict) -> 'AddOn':
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            price=to_decimal(data.get('price')),
            quantity=int(data.get('quantity', 1)),
        )

    def to_document(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'price': money_str(self.price),
            'quantity': self.quantity,
        }


@dataclass(frozen=True)
class Pricing(ValueObject):
    """
    Price breakdown captured at booking time

    ``total == subtotal + cleaning_fee + service_fee + taxes
    + add-ons - discount_amount``; every component is non-negative.
    """
    nightly_rate: Decimal
    nights: int
    subtotal: Decimal
    cleaning_fee: Decimal = ZERO
    service_fee: Decimal = ZERO
    taxes: Decimal = ZERO
    total: Decimal = ZERO
    discount_code: Optional[str] = None
    discount_amount: Decimal = ZERO
    currency: str = 'USD'

    def __post_init__(self):
        for name in ('nightly_rate', 'subtotal', 'cleaning_fee', 'service_fee',
                     'taxes', 'total', 'discount_amount'):
            value = to_decimal(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} cannot be negative")
            object.__setattr__(self, name, value)

    def recomputed(self, add_ons_total: Decimal = ZERO) -> 'Pricing':
        """Copy with ``total`` derived from the components"""
        total = (
            self.subtotal + self.cleaning_fee + self.service_fee + self.taxes
            + to_decimal(add_ons_total) - self.discount_amount
        )
        return replace(self, total=max(total, ZERO))

    @classmethod
    def from_document(cls, data: dict) -> 'Pricing':
        return cls(
            nightly_rate=to_decimal(data.get('nightlyRate')),
            nights=int(data.get('nights', 0)),
            subtotal=to_decimal(data.get('subtotal')),
            cleaning_fee=to_decimal(data.get('cleaningFee')),
            service_fee=to_decimal(data.get('serviceFee')),
            taxes=to_decimal(data.get('taxes')),
            total=to_decimal(data.get('total')),
            discount_code=data.get('discountCode') or None,
            discount_amount=to_decimal(data.get('discountAmount')),
            currency=data.get('currency', 'USD'),
        )

    def to_document(self) -> dict:
        document = {
            'nightlyRate': money_str(self.nightly_rate),
            'nights': self.nights,
            'subtotal': money_str(self.subtotal),
            'cleaningFee': money_str(self.cleaning_fee),
            'serviceFee': money_str(self.service_fee),
            'taxes': money_str(self.taxes),
            'total': money_str(self.total),
            'currency': self.currency,
        }
        if self.discount_code:
            document['discountCode'] = self.discount_code
        if self.discount_amount:
            document['discountAmount'] = money_str(self.discount_amount)
        return document


@dataclass(frozen=True)
class PaymentInfo(ValueObject):
    status: PaymentStatus = PaymentStatus.PENDING
    method: Optional[str] = None
    transaction_id: Optional[str] = None
    refund_amount: Decimal = ZERO

    @classmethod
    def from_document(cls, data: dict) -> 'PaymentInfo':
        return cls(
            status=PaymentStatus(data.get('status', PaymentStatus.PENDING.value)),
            method=data.get('method') or None,
            transaction_id=data.get('transactionId') or None,
            refund_amount=to_decimal(data.get('refundAmount')),
        )

    def to_document(self) -> dict:
        document = {'status': self.status.value}
        if self.method:
            document['method'] = self.method
        if self.transaction_id:
            document['transactionId'] = self.transaction_id
        if self.refund_amount:
            document['refundAmount'] = money_str(self.refund_amount)
        return document


@dataclass(frozen=True)
class Cancellation(ValueObject):
    date: datetime
    reason: str
    canceled_by: str
    refund_amount: Decimal = ZERO

    @classmethod
    def from_document(cls, data: dict) -> 'Cancellation':
        return cls(
            date=datetime.fromisoformat(data['date']),
            reason=data.get('reason', ''),
            canceled_by=str(data.get('canceledBy', '')),
            refund_amount=to_decimal(data.get('refundAmount')),
        )

    def to_document(self) -> dict:
        return {
            'date': self.date.isoformat(),
            'reason': self.reason,
            'canceledBy': self.canceled_by,
            'refundAmount': money_str(self.refund_amount),
        }


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Represents a guest's reservation of a property for specific dates.
    This is the main aggregate that enforces booking business rules.

    Key invariants:
    - Booking must have valid date range (check_in < check_out)
    - Status only moves along the FSM above; terminal states are final
    - ``cancellation`` is present exactly when status is CANCELED
    - Pending and confirmed bookings hold their nights in the calendar
    """

    # Booking identification
    booking_number: str

    # References
    property_id: int
    user_id: int

    # Stay
    stay: DateRange
    guests: GuestCounts
    contact: ContactInformation
    special_requests: str = ''

    # Money
    pricing: Pricing
    add_ons: List[AddOn] = field(default_factory=list)
    payment: PaymentInfo = field(default_factory=PaymentInfo)

    # Status tracking
    status: BookingStatus = BookingStatus.PENDING
    cancellation: Optional[Cancellation] = None

    # Notes
    public_notes: str = ''
    private_notes: str = ''

    # ===== Lifecycle =====

    def confirm(self, now: Optional[datetime] = None):
        """
        Confirm booking (PENDING -> CONFIRMED)

        Events: BookingConfirmed
        """
        self._require_status(BookingStatus.PENDING, action='confirm')

        from apps.bookings.domain.events import BookingConfirmed

        self.status = BookingStatus.CONFIRMED
        self.touch(now)
        self.add_event(BookingConfirmed(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            user_id=self.user_id,
        ))

    def complete(self, now: Optional[datetime] = None):
        """
        Complete booking (CONFIRMED -> COMPLETED)

        Only allowed once the check-out day has started.
        Events: BookingCompleted
        """
        self._require_status(BookingStatus.CONFIRMED, action='complete')
        now = now or utcnow()
        if now <= day_start(self.stay.end_date):
            raise InvalidTransition(
                f"Booking {self.booking_number} cannot be completed before check-out "
                f"({self.stay.end_date.isoformat()}).",
                booking_id=str(self.id),
            )

        from apps.bookings.domain.events import BookingCompleted

        self.status = BookingStatus.COMPLETED
        self.touch(now)
        self.add_event(BookingCompleted(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            user_id=self.user_id,
        ))

    def cancel(
        self,
        reason: str,
        canceled_by,
        refund_amount: Decimal = ZERO,
        now: Optional[datetime] = None,
    ):
        """
        Cancel booking (PENDING or CONFIRMED -> CANCELED)

        Any positive refund marks the payment ``refunded``; the ledger keeps
        the partial/full distinction.
        Events: BookingCanceled
        """
        if self.status == BookingStatus.CANCELED:
            raise AlreadyCanceled(
                f"Booking {self.booking_number} is already canceled.",
                booking_id=str(self.id),
            )
        if self.status in TERMINAL_STATUSES:
            raise InvalidTransition(
                f"Cannot cancel booking with status {self.status.value}.",
                booking_id=str(self.id),
                status=self.status.value,
            )

        refund_amount = to_decimal(refund_amount)
        if refund_amount < 0 or refund_amount > self.pricing.total:
            raise InvalidTransition(
                f"Refund must be between 0 and the booking total ({money_str(self.pricing.total)}).",
                refund_amount=money_str(refund_amount),
            )

        from apps.bookings.domain.events import BookingCanceled

        now = now or utcnow()
        previous_status = self.status
        self.status = BookingStatus.CANCELED
        self.cancellation = Cancellation(
            date=now,
            reason=reason,
            canceled_by=str(canceled_by),
            refund_amount=refund_amount,
        )

        payment_status = self.payment.status
        if refund_amount > 0:
            payment_status = PaymentStatus.REFUNDED
        self.payment = replace(self.payment, status=payment_status, refund_amount=refund_amount)

        self.touch(now)
        self.add_event(BookingCanceled(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            user_id=self.user_id,
            reason=reason,
            canceled_by=str(canceled_by),
            refund_amount=refund_amount,
            transaction_id=self.payment.transaction_id,
            previous_status=previous_status.value,
        ))

    def reject(self, reason: str = '', rejected_by=None, now: Optional[datetime] = None):
        """
        Reject booking request (PENDING -> REJECTED)

        Events: BookingRejected
        """
        self._require_status(BookingStatus.PENDING, action='reject')

        from apps.bookings.domain.events import BookingRejected

        self.status = BookingStatus.REJECTED
        if reason:
            self.private_notes = '\n'.join(filter(None, [self.private_notes, f"Rejected: {reason}"]))
        self.touch(now)
        self.add_event(BookingRejected(
            aggregate_id=self.id,
            booking_id=self.id,
            property_id=self.property_id,
            user_id=self.user_id,
            reason=reason,
            rejected_by=str(rejected_by) if rejected_by is not None else None,
        ))

    def record_payment(self, transaction_id: str, method: str, now: Optional[datetime] = None):
        """
        Mark the stay as paid; a pending booking is confirmed

        Events: PaymentRecorded (+ BookingConfirmed)
        """
        if self.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
            raise InvalidTransition(
                f"Cannot take payment for a {self.status.value} booking.",
                booking_id=str(self.id),
            )
        if self.payment.status == PaymentStatus.PAID:
            raise InvalidTransition(
                f"Booking {self.booking_number} is already paid.",
                booking_id=str(self.id),
            )

        from apps.bookings.domain.events import PaymentRecorded

        self.payment = replace(
            self.payment,
            status=PaymentStatus.PAID,
            method=method,
            transaction_id=transaction_id,
        )
        self.touch(now)
        self.add_event(PaymentRecorded(
            aggregate_id=self.id,
            booking_id=self.id,
            transaction_id=transaction_id,
            amount=self.pricing.total,
        ))
        if self.status == BookingStatus.PENDING:
            self.confirm(now)

    # ===== Guest and admin edits =====

    def add_notes(self, public: Optional[str] = None, private: Optional[str] = None):
        """Replace the note fields that are passed in"""
        if public is not None:
            self.public_notes = public
        if private is not None:
            self.private_notes = private
        self.touch()

    def add_special_requests(self, text: str):
        self._require_open(action='update special requests for')
        self.special_requests = text
        self.touch()

    def update_guest_information(
        self,
        max_guests: int,
        guests: Optional[dict] = None,
        contact: Optional[dict] = None,
    ):
        """
        Change party size or contact details of a pending booking

        ``guests`` and ``contact`` are partial camelCase documents; the new
        party size is checked against ``max_guests``.
        """
        self._require_status(BookingStatus.PENDING, action='update guest information for')
        if guests:
            merged = {**self.guests.to_document(), **guests}
            updated = GuestCounts.from_document(merged)
            updated.ensure_fits(max_guests)
            self.guests = updated
        if contact:
            self.contact = self.contact.merged(contact)
        self.touch()

    def set_add_ons(self, add_ons: List[AddOn]):
        """Replace the add-ons and recompute the total from its components"""
        self._require_open(action='add experiences to')
        self.add_ons = list(add_ons)
        self.pricing = self.pricing.recomputed(self.add_ons_total)
        self.touch()

    # ===== Queries =====

    @property
    def add_ons_total(self) -> Decimal:
        return sum((item.line_total for item in self.add_ons), ZERO)

    @property
    def nights(self) -> int:
        return len(self.stay)

    @property
    def holds_dates(self) -> bool:
        """Pending and confirmed bookings hold their nights"""
        return self.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    # ===== Internals =====

    def _require_status(self, expected: BookingStatus, action: str):
        if self.status != expected:
            raise InvalidTransition(
                f"Cannot {action} booking with status {self.status.value}. "
                f"Booking must be {expected.value}.",
                booking_id=str(self.id),
                status=self.status.value,
            )

    def _require_open(self, action: str):
        if self.is_terminal:
            raise InvalidTransition(
                f"Cannot {action} a {self.status.value} booking.",
                booking_id=str(self.id),
                status=self.status.value,
            )

    def __str__(self):
        return f"Booking {self.booking_number} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, booking_number={self.booking_number}, "
            f"status={self.status.value}, stay={self.stay})"
        )
