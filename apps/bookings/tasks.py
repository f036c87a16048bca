"""Celery tasks for the booking domain."""

from __future__ import annotations

import structlog
from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import DomainError

from .application.command_handlers import CompleteBookingCommand, CompleteBookingHandler
from .application.reconciliation import retry_open_entries
from .models import Booking

logger = structlog.get_logger(__name__)


# ============================================================================
# PERIODIC TASKS (запускаются автоматически через Celery Beat)
# ============================================================================

@shared_task(name="bookings.retry_reconciliation_entries")
def retry_reconciliation_entries() -> dict[str, int]:
    """
    Replay follow-up steps that failed after a booking commit.

    Guest history appends and refund ledger records are idempotent, so an
    entry replayed after a partial success does not duplicate anything.

    Запускается каждые 5 минут.
    """
    summary = retry_open_entries()
    if summary["resolved"] or summary["failed"]:
        logger.info("bookings.reconciliation_run", **summary)
    return summary


@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Автоматическое завершение броней после выезда.

    Confirmed bookings whose check-out day has started are moved to
    COMPLETED. Запускается каждый час.
    """
    today = timezone.now().date()
    completed_count = 0
    handler = CompleteBookingHandler()

    booking_ids = Booking.objects.filter(
        status=Booking.Status.CONFIRMED,
        check_out__lte=today,
    ).values_list("id", flat=True)

    for booking_id in booking_ids:
        try:
            handler.handle(CompleteBookingCommand(booking_id=booking_id))
        except DomainError as exc:
            logger.warning("bookings.complete_skipped", booking_id=str(booking_id), code=exc.code)
            continue
        completed_count += 1

    if completed_count > 0:
        logger.info("bookings.completed_finished", completed=completed_count)

    return {"completed": completed_count}
