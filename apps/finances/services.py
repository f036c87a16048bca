"""Payment ledger operations used by the booking workflows."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import structlog
from django.db import IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import DuplicateTransaction, NotFound
from shared.infrastructure.locking import lock_queryset_if_possible

from .models import Payment

logger = structlog.get_logger(__name__)


def generate_transaction_id(prefix: str = "txn") -> str:
    return f"{prefix}_{uuid4().hex[:20]}"


def record_payment(
    booking_id,
    amount: Decimal,
    *,
    user_id=None,
    currency: str = "USD",
    method: str = Payment.Method.CARD,
    transaction_id: str | None = None,
) -> Payment:
    """
    Add a completed payment to the ledger

    Raises DuplicateTransaction when ``transaction_id`` is already recorded.
    """
    transaction_id = transaction_id or generate_transaction_id()
    if Payment.objects.filter(transaction_id=transaction_id).exists():
        raise DuplicateTransaction(transaction_id=transaction_id)

    try:
        with transaction.atomic():
            payment = Payment.objects.create(
                transaction_id=transaction_id,
                booking_id=booking_id,
                user_id=user_id,
                amount=amount,
                currency=currency,
                method=method,
                status=Payment.Status.COMPLETED,
                paid_at=timezone.now(),
            )
    except IntegrityError as exc:
        raise DuplicateTransaction(transaction_id=transaction_id) from exc

    logger.info(
        "finances.payment_recorded",
        transaction_id=payment.transaction_id,
        booking_id=str(booking_id),
        amount=str(amount),
        currency=currency,
    )
    return payment


@transaction.atomic
def append_refund(transaction_id: str, refund_record: dict) -> Payment:
    """
    Append ``refund_record`` to the payment with ``transaction_id``

    ``refund_record`` is ``{amount, date, reason, transactionId}``. A record
    whose ``transactionId`` is already on the payment is not added twice, so
    reconciliation may call this again after a partial failure.
    """
    payment = lock_queryset_if_possible(
        Payment.objects.filter(transaction_id=transaction_id)
    ).first()
    if payment is None:
        raise NotFound(f"Payment {transaction_id} not found.", transaction_id=transaction_id)

    if payment.add_refund(refund_record):
        logger.info(
            "finances.refund_recorded",
            transaction_id=transaction_id,
            amount=str(refund_record.get("amount")),
            status=payment.status,
        )
    return payment
