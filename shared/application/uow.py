"""
Unit of Work Pattern

Manages database transactions and ensures that domain events
are published only after successful transaction commit.
"""

from abc import ABC, abstractmethod
from typing import Callable, List, TypeVar
import logging

from django.conf import settings
from django.db import transaction

from shared.domain.base import DomainEvent
from shared.domain.exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)

T = TypeVar('T')


class AbstractUnitOfWork(ABC):
    """Abstract Unit of Work pattern"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    @abstractmethod
    def commit(self):
        """Commit the transaction"""
        pass

    @abstractmethod
    def rollback(self):
        """Rollback the transaction"""
        pass

    @abstractmethod
    def collect_events(self, aggregate):
        """Collect events from aggregate root"""
        pass


class DjangoUnitOfWork(AbstractUnitOfWork):
    """
    Django implementation of Unit of Work

    Wraps ``transaction.atomic`` so every record saved inside the block is
    committed together or not at all, and publishes collected domain events
    only once the outermost transaction has committed.

    Usage:
        with DjangoUnitOfWork() as uow:
            calendar = availability_repo.get_for_update(property_id)
            booking = booking_repo.get_for_update(booking_id)

            booking.cancel(reason, canceled_by, refund_amount)
            calendar.release_booking(booking.id, booking.stay)

            uow.collect_events(booking)
            booking_repo.save(booking)
            availability_repo.save(calendar)
        # Events are published after commit
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def commit(self):
        """
        Schedule event publishing for after the database commit

        ``transaction.on_commit`` drops the callback if the surrounding
        transaction rolls back, so events never describe uncommitted state.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def collect_events(self, aggregate):
        """
        Collect events from aggregate root

        Extracts all domain events from the aggregate and
        clears them from the aggregate.
        """
        if hasattr(aggregate, 'events'):
            new_events = aggregate.events
            if new_events:
                self._events.extend(new_events)
                aggregate.clear_events()
                logger.debug(
                    f"Collected {len(new_events)} events from "
                    f"{aggregate.__class__.__name__} (ID: {aggregate.id})"
                )

    def _publish_events(self, events: List[DomainEvent]):
        """
        Publish collected events to message bus

        Called after successful transaction commit. Handler failures are
        contained by the message bus; the committed state stands.
        """
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        message_bus.publish_events(events)


def retry_on_conflict(operation: Callable[[], T], attempts: int | None = None) -> T:
    """
    Run ``operation`` again when it loses an optimistic concurrency race

    ``operation`` must open its own unit of work so every attempt starts from
    a fresh read. After ``attempts`` tries the last ConcurrencyConflict is
    re-raised for the caller to report as a transient failure.
    """
    if attempts is None:
        attempts = getattr(settings, 'BOOKING_CONFLICT_RETRIES', 3)
    attempts = max(1, attempts)

    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except ConcurrencyConflict as exc:
            if attempt == attempts:
                logger.error(f"Giving up after {attempts} conflicting attempts: {exc}")
                raise
            logger.warning(f"Concurrent write detected (attempt {attempt}/{attempts}), retrying")
