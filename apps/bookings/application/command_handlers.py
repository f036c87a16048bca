"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Create a new booking and hold its nights
- CancelBookingCommand: Cancel a booking and release its nights
- RejectBookingCommand: Decline a pending booking and release its nights
- ConfirmBookingCommand: Confirm a pending booking
- CompleteBookingCommand: Complete a booking after check-out
- RecordPaymentCommand: Record payment and confirm a pending booking
- AddBookingNotesCommand, AddSpecialRequestsCommand,
  UpdateGuestInformationCommand, SetAddOnsCommand: booking edits

Every handler runs its unit of work through ``retry_on_conflict``, so a
write that loses a race on the calendar or booking version is replayed
from a fresh read a bounded number of times.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import UUID, uuid4

import structlog

from shared.application.uow import DjangoUnitOfWork, retry_on_conflict
from shared.domain.base import utcnow
from shared.domain.exceptions import InvalidDateRange, NotFound
from shared.domain.value_objects import DateRange, parse_day
from apps.bookings.domain.entities import (
    AddOn,
    Booking,
    BookingStatus,
    ContactInformation,
    GuestCounts,
)
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.pricing import policy_refund, quote_stay
from apps.bookings.repositories import BookingRepository
from apps.properties.repositories import AvailabilityRepository

logger = structlog.get_logger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    This is the primary entry point for creating bookings.
    ``guests`` and ``contact`` are camelCase documents
    (``{adults, children, infants, pets}``, ``{fullName, email, phone}``).
    """
    property_id: int
    user_id: int
    check_in: date
    check_out: date
    guests: dict
    contact: dict
    special_requests: str = ''
    add_ons: List[dict] = field(default_factory=list)
    discount_code: Optional[str] = None
    discount_amount: Decimal = Decimal('0')


@dataclass
class CancelBookingCommand:
    """
    Command to cancel a booking

    ``refund_amount=None`` applies the guest cancellation policy.
    """
    booking_id: UUID
    reason: str
    canceled_by: str
    refund_amount: Optional[Decimal] = None


@dataclass
class RejectBookingCommand:
    booking_id: UUID
    reason: str = ''
    rejected_by: Optional[str] = None


@dataclass
class ConfirmBookingCommand:
    booking_id: UUID


@dataclass
class CompleteBookingCommand:
    booking_id: UUID


@dataclass
class RecordPaymentCommand:
    """Command to record a captured payment for the booking total"""
    booking_id: UUID
    method: str = 'card'
    transaction_id: Optional[str] = None


@dataclass
class AddBookingNotesCommand:
    booking_id: UUID
    public: Optional[str] = None
    private: Optional[str] = None


@dataclass
class AddSpecialRequestsCommand:
    booking_id: UUID
    special_requests: str


@dataclass
class UpdateGuestInformationCommand:
    booking_id: UUID
    guests: Optional[dict] = None
    contact: Optional[dict] = None


@dataclass
class SetAddOnsCommand:
    booking_id: UUID
    add_ons: List[dict]


# ===== Command Handlers =====

class BookingHandler:
    """Shared wiring: repositories and the locked load of one booking"""

    def __init__(self, booking_repo=None, availability_repo=None):
        self.booking_repo = booking_repo or BookingRepository()
        self.availability_repo = availability_repo or AvailabilityRepository()

    def _load_for_update(self, booking_id) -> Booking:
        booking = self.booking_repo.get_for_update(booking_id)
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found.", booking_id=str(booking_id))
        return booking

    def _mutate(self, booking_id, mutate: Callable[[Booking], None]) -> Booking:
        """Apply ``mutate`` to the locked booking and save it"""

        def operation():
            with DjangoUnitOfWork() as uow:
                booking = self._load_for_update(booking_id)
                mutate(booking)
                uow.collect_events(booking)
                self.booking_repo.save(booking)
            return booking

        return retry_on_conflict(operation)


class CreateBookingHandler(BookingHandler):
    """
    Handler for CreateBooking command

    This implements the critical business logic for creating bookings
    with double booking prevention.

    Strategy:
    1. Load the property; it must exist and be active
    2. Start database transaction (atomic)
    3. Load the calendar with SELECT FOR UPDATE, creating it if missing
    4. Check availability on the locked calendar, then guest capacity
    5. Create the Booking aggregate (pending) and mark its nights booked
    6. Save both; the calendar save is a version compare-and-set
    7. Commit; BookingCreated is published after commit and appends the
       booking to the guest's history
    """

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Handle booking creation

        Returns: Created Booking aggregate

        Raises:
            NotFound: property missing or not active
            InvalidDateRange: check-in not before check-out
            Unavailable: any night already held, closed or blocked
            CapacityExceeded: adults + children above the property maximum
            InvalidGuestCounts: no adult or a negative count
        """
        from apps.properties.services import get_property

        property_obj = get_property(command.property_id)
        if property_obj is None or not property_obj.is_bookable:
            raise NotFound(
                f"Property {command.property_id} not found or not active.",
                property_id=command.property_id,
            )

        try:
            stay = DateRange(parse_day(command.check_in), parse_day(command.check_out))
        except ValueError as exc:
            raise InvalidDateRange("Check-out date must be after check-in date.") from exc

        logger.info(
            "booking.create_requested",
            property_id=command.property_id,
            user_id=command.user_id,
            check_in=stay.start_date.isoformat(),
            check_out=stay.end_date.isoformat(),
        )

        def operation():
            with DjangoUnitOfWork() as uow:
                calendar = self.availability_repo.get_or_initialize_for_update(property_obj.id)

                booking_id = uuid4()
                calendar.reserve(booking_id, stay.start_date, stay.end_date)

                guests = GuestCounts.from_document(command.guests)
                guests.ensure_fits(property_obj.max_guests)

                add_ons = [AddOn.from_document(item) for item in command.add_ons]
                pricing = quote_stay(
                    stay,
                    base_price=property_obj.base_price,
                    cleaning_fee=property_obj.cleaning_fee,
                    service_fee_percent=property_obj.service_fee,
                    tax_rate_percent=property_obj.tax_rate,
                    currency=property_obj.currency,
                    discount_code=command.discount_code,
                    discount_amount=command.discount_amount,
                )

                booking = Booking(
                    id=booking_id,
                    booking_number=self._generate_booking_number(),
                    property_id=property_obj.id,
                    user_id=command.user_id,
                    stay=stay,
                    guests=guests,
                    contact=ContactInformation.from_document(command.contact),
                    special_requests=command.special_requests,
                    pricing=pricing.recomputed(sum((item.line_total for item in add_ons), Decimal('0'))),
                    add_ons=add_ons,
                    status=BookingStatus.PENDING,
                )
                booking.add_event(BookingCreated(
                    aggregate_id=booking.id,
                    booking_id=booking.id,
                    booking_number=booking.booking_number,
                    property_id=booking.property_id,
                    user_id=booking.user_id,
                    check_in=stay.start_date,
                    check_out=stay.end_date,
                    total=booking.pricing.total,
                ))

                uow.collect_events(booking)
                uow.collect_events(calendar)
                self.booking_repo.add(booking)
                self.availability_repo.save(calendar)
            return booking

        booking = retry_on_conflict(operation)

        logger.info(
            "booking.created",
            booking_id=str(booking.id),
            booking_number=booking.booking_number,
            property_id=booking.property_id,
            total=str(booking.pricing.total),
        )
        return booking

    def _generate_booking_number(self) -> str:
        """Generate unique booking number: BK{timestamp}{random}"""
        timestamp = datetime.now().strftime('%Y%m%d%H%M%S')
        random_part = uuid4().hex[:6].upper()
        return f"BK{timestamp}{random_part}"


class CancelBookingHandler(BookingHandler):
    """
    Handler for cancelling a booking

    The status change and the release of the booking's nights commit
    together. The refund is recorded in the payment ledger after commit.
    """

    def handle(self, command: CancelBookingCommand, now: Optional[datetime] = None) -> Booking:
        logger.info("booking.cancel_requested", booking_id=str(command.booking_id))

        def operation():
            with DjangoUnitOfWork() as uow:
                booking = self._load_for_update(command.booking_id)

                refund_amount = command.refund_amount
                if refund_amount is None:
                    refund_amount = policy_refund(booking.pricing.total, booking.stay.start_date, now)

                booking.cancel(command.reason, command.canceled_by, refund_amount, now)
                self._release_dates(uow, booking)

                uow.collect_events(booking)
                self.booking_repo.save(booking)
            return booking

        booking = retry_on_conflict(operation)
        logger.info(
            "booking.canceled",
            booking_id=str(booking.id),
            refund_amount=str(booking.payment.refund_amount),
            payment_status=booking.payment.status.value,
        )
        return booking

    def _release_dates(self, uow, booking: Booking):
        calendar = self.availability_repo.get_for_update(booking.property_id)
        if calendar is None:
            logger.warning("booking.calendar_missing", property_id=booking.property_id)
            return
        calendar.release_booking(booking.id, booking.stay.start_date, booking.stay.end_date)
        uow.collect_events(calendar)
        self.availability_repo.save(calendar)


class RejectBookingHandler(CancelBookingHandler):
    """Handler for declining a pending booking; nights are released like a cancel"""

    def handle(self, command: RejectBookingCommand, now: Optional[datetime] = None) -> Booking:
        def operation():
            with DjangoUnitOfWork() as uow:
                booking = self._load_for_update(command.booking_id)
                booking.reject(command.reason, command.rejected_by, now)
                self._release_dates(uow, booking)

                uow.collect_events(booking)
                self.booking_repo.save(booking)
            return booking

        booking = retry_on_conflict(operation)
        logger.info("booking.rejected", booking_id=str(booking.id))
        return booking


class ConfirmBookingHandler(BookingHandler):
    """Handler for confirming a pending booking"""

    def handle(self, command: ConfirmBookingCommand) -> Booking:
        booking = self._mutate(command.booking_id, lambda booking: booking.confirm())
        logger.info("booking.confirmed", booking_id=str(booking.id))
        return booking


class CompleteBookingHandler(BookingHandler):
    """Handler for completing a booking (check out)"""

    def handle(self, command: CompleteBookingCommand, now: Optional[datetime] = None) -> Booking:
        now = now or utcnow()
        booking = self._mutate(command.booking_id, lambda booking: booking.complete(now))
        logger.info("booking.completed", booking_id=str(booking.id))
        return booking


class RecordPaymentHandler(BookingHandler):
    """
    Handler for recording a payment

    The ledger entry and the booking's paid status commit together; a
    pending booking is confirmed by the same transaction.
    """

    def handle(self, command: RecordPaymentCommand) -> Booking:
        from apps.finances import services as ledger

        def operation():
            with DjangoUnitOfWork() as uow:
                booking = self._load_for_update(command.booking_id)
                transaction_id = command.transaction_id or ledger.generate_transaction_id()
                booking.record_payment(transaction_id, command.method)
                ledger.record_payment(
                    booking.id,
                    booking.pricing.total,
                    user_id=booking.user_id,
                    currency=booking.pricing.currency,
                    method=command.method,
                    transaction_id=transaction_id,
                )
                uow.collect_events(booking)
                self.booking_repo.save(booking)
            return booking

        booking = retry_on_conflict(operation)
        logger.info(
            "booking.paid",
            booking_id=str(booking.id),
            transaction_id=booking.payment.transaction_id,
            status=booking.status.value,
        )
        return booking


class AddBookingNotesHandler(BookingHandler):
    def handle(self, command: AddBookingNotesCommand) -> Booking:
        return self._mutate(
            command.booking_id,
            lambda booking: booking.add_notes(public=command.public, private=command.private),
        )


class AddSpecialRequestsHandler(BookingHandler):
    def handle(self, command: AddSpecialRequestsCommand) -> Booking:
        return self._mutate(
            command.booking_id,
            lambda booking: booking.add_special_requests(command.special_requests),
        )


class UpdateGuestInformationHandler(BookingHandler):
    """Handler for changing party size or contact details of a pending booking"""

    def handle(self, command: UpdateGuestInformationCommand) -> Booking:
        from apps.properties.services import require_property

        def mutate(booking: Booking):
            max_guests = require_property(booking.property_id).max_guests
            booking.update_guest_information(max_guests, guests=command.guests, contact=command.contact)

        booking = self._mutate(command.booking_id, mutate)
        logger.info("booking.guest_information_updated", booking_id=str(booking.id))
        return booking


class SetAddOnsHandler(BookingHandler):
    """Handler for attaching experience add-ons; the total is recomputed"""

    def handle(self, command: SetAddOnsCommand) -> Booking:
        add_ons = [AddOn.from_document(item) for item in command.add_ons]
        booking = self._mutate(command.booking_id, lambda booking: booking.set_add_ons(add_ons))
        logger.info(
            "booking.add_ons_updated",
            booking_id=str(booking.id),
            add_ons=len(add_ons),
            total=str(booking.pricing.total),
        )
        return booking
