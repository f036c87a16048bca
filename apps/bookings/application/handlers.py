"""
Booking event subscribers

Registered on the message bus by ``BookingsConfig.ready``. They run after the
booking transaction has committed.
"""

from uuid import uuid4

import structlog

from shared.application.message_bus import message_bus
from shared.domain.base import DomainEvent
from apps.bookings.application.reconciliation import run_step
from apps.bookings.domain.entities import money_str
from apps.bookings.domain.events import BookingCanceled, BookingCreated
from apps.bookings.models import ReconciliationEntry

logger = structlog.get_logger(__name__)


def append_to_guest_history(event: BookingCreated):
    run_step(
        ReconciliationEntry.Kind.HISTORY_APPEND,
        event.booking_id,
        {'user_id': event.user_id, 'booking_id': str(event.booking_id)},
    )


def record_refund(event: BookingCanceled):
    """Append the refund to the original payment, if money was taken"""
    if event.refund_amount <= 0 or not event.transaction_id:
        return
    refund = {
        'amount': money_str(event.refund_amount),
        'date': event.occurred_at.isoformat(),
        'reason': event.reason,
        'transactionId': f"refund_{uuid4().hex[:20]}",
    }
    run_step(
        ReconciliationEntry.Kind.REFUND_LEDGER,
        event.booking_id,
        {'transaction_id': event.transaction_id, 'refund': refund},
    )


def log_booking_event(event: DomainEvent):
    logger.info("booking.event", **event.to_dict())


def register_handlers(bus=message_bus):
    bus.register_event_handler(BookingCreated, append_to_guest_history)
    bus.register_event_handler(BookingCanceled, record_refund)
    bus.register_event_handler(DomainEvent, log_booking_event)
