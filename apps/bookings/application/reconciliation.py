"""
Reconciliation of follow-up steps

A booking commit is the primary fact. The guest's booking history and the
refund ledger are updated after it, and a failure there must not undo the
booking. Such failures are stored as ``ReconciliationEntry`` rows and
replayed by the ``bookings.retry_reconciliation_entries`` task.
"""

from typing import Callable, Dict

import structlog
from django.conf import settings
from django.utils import timezone

from shared.domain.exceptions import PartialFailure
from apps.bookings.models import ReconciliationEntry

logger = structlog.get_logger(__name__)


def run_history_append(payload: dict):
    from apps.users.services import append_booking_to_history

    append_booking_to_history(payload['user_id'], payload['booking_id'])


def run_refund_append(payload: dict):
    from apps.finances.services import append_refund

    append_refund(payload['transaction_id'], payload['refund'])


STEPS: Dict[str, Callable[[dict], None]] = {
    ReconciliationEntry.Kind.HISTORY_APPEND: run_history_append,
    ReconciliationEntry.Kind.REFUND_LEDGER: run_refund_append,
}


def run_step(kind: str, booking_id, payload: dict) -> bool:
    """
    Run one follow-up step, recording it for reconciliation on failure

    Returns True when the step succeeded.
    """
    try:
        STEPS[kind](payload)
    except Exception as exc:  # noqa: BLE001 - the primary commit already stands
        record_partial_failure(kind, booking_id, payload, exc)
        return False
    return True


def record_partial_failure(kind: str, booking_id, payload: dict, error: Exception) -> ReconciliationEntry:
    failure = PartialFailure(
        f"{kind} failed for booking {booking_id}: {error}",
        kind=kind,
        booking_id=str(booking_id),
    )
    entry = ReconciliationEntry.objects.create(
        booking_id=booking_id,
        kind=kind,
        payload=payload,
        last_error=str(error),
    )
    logger.error(
        "booking.partial_failure",
        code=failure.code,
        detail=failure.message,
        entry_id=entry.pk,
        **failure.context,
    )
    return entry


def open_entries():
    return ReconciliationEntry.objects.filter(resolved_at__isnull=True)


def retry_open_entries(max_attempts: int | None = None) -> dict:
    """
    Replay every unresolved entry below ``max_attempts``

    Returns ``{"resolved", "failed", "skipped"}`` counts; entries that have
    used up their attempts are skipped and left for an operator.
    """
    if max_attempts is None:
        max_attempts = getattr(settings, 'BOOKING_RECONCILIATION_MAX_ATTEMPTS', 5)

    summary = {'resolved': 0, 'failed': 0, 'skipped': 0}
    for entry in open_entries().order_by('created_at'):
        if entry.attempts >= max_attempts:
            summary['skipped'] += 1
            continue
        try:
            STEPS[entry.kind](entry.payload)
        except Exception as exc:  # noqa: BLE001
            entry.attempts += 1
            entry.last_error = str(exc)
            entry.save(update_fields=['attempts', 'last_error', 'updated_at'])
            summary['failed'] += 1
            logger.warning(
                "booking.reconciliation_failed",
                entry_id=entry.pk,
                kind=entry.kind,
                attempts=entry.attempts,
                error=str(exc),
            )
            continue

        entry.resolved_at = timezone.now()
        entry.save(update_fields=['resolved_at', 'updated_at'])
        summary['resolved'] += 1
        logger.info("booking.reconciled", entry_id=entry.pk, kind=entry.kind)

    return summary
