"""Property directory and availability store services.

Every calendar write loads the calendar under lock, applies the change on the
``AvailabilityCalendar`` aggregate and saves it with a version check, inside a
unit of work retried on concurrent writes. A property without a calendar gets
one lazily on its first write.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping

import structlog

from shared.application.uow import DjangoUnitOfWork, retry_on_conflict
from shared.domain.exceptions import NotFound
from shared.domain.value_objects import parse_day, to_day_key

from .domain.availability import AvailabilityCalendar, BlockedRange, DayEntry
from .models import Property
from .repositories import AvailabilityRepository

logger = structlog.get_logger(__name__)

availability_repo = AvailabilityRepository()


# ===== Property directory =====

def get_property(property_id) -> Property | None:
    """Property by id, or ``None``."""

    return Property.objects.filter(pk=property_id).first()


def require_property(property_id) -> Property:
    property_obj = get_property(property_id)
    if property_obj is None:
        raise NotFound(f"Property {property_id} not found.", property_id=property_id)
    return property_obj


# ===== Reads =====

def get_availability(property_id) -> AvailabilityCalendar | None:
    return availability_repo.get(property_id)


def get_unavailable_dates(property_id) -> list[str]:
    """Booked, closed and blocked day keys, sorted; empty without a calendar."""

    calendar = availability_repo.get(property_id)
    if calendar is None:
        return []
    return calendar.unavailable_dates()


def get_date_price(property_id, day, base_price: Decimal | None = None) -> Decimal:
    """Custom price for ``day``, falling back to the property's base price."""

    if base_price is None:
        base_price = require_property(property_id).base_price
    calendar = availability_repo.get(property_id)
    if calendar is None:
        return base_price
    return calendar.date_price(day, base_price)


# ===== Writes =====

def initialize_availability(property_id, start=None, horizon_days: int | None = None) -> AvailabilityCalendar:
    """Create the calendar for ``property_id``; an existing one is returned as is."""

    require_property(property_id)

    def operation():
        with DjangoUnitOfWork():
            existing = availability_repo.get_for_update(property_id)
            if existing is not None:
                return existing
            calendar = availability_repo.new_calendar(
                property_id,
                start=parse_day(start) if start else None,
                horizon_days=horizon_days,
            )
            availability_repo.add(calendar)
        logger.info(
            "availability.initialized",
            property_id=property_id,
            days=len(calendar.dates),
        )
        return calendar

    return retry_on_conflict(operation)


def _edit_calendar(property_id, edit):
    """Run ``edit(calendar)`` on the locked calendar and save it."""

    require_property(property_id)

    def operation():
        with DjangoUnitOfWork() as uow:
            calendar = availability_repo.get_or_initialize_for_update(property_id)
            result = edit(calendar)
            uow.collect_events(calendar)
            availability_repo.save(calendar)
        return result

    return retry_on_conflict(operation)


def set_date_status(
    property_id,
    day,
    is_available: bool | None = None,
    price: Decimal | None = None,
    minimum_stay: int | None = None,
    notes: str | None = None,
) -> DayEntry:
    entry = _edit_calendar(
        property_id,
        lambda calendar: calendar.set_date_status(
            day,
            is_available=is_available,
            price=price,
            minimum_stay=minimum_stay,
            notes=notes,
        ),
    )
    logger.info(
        "availability.date_updated",
        property_id=property_id,
        day=to_day_key(day),
        is_available=entry.is_available,
    )
    return entry


def set_date_range_status(property_id, updates: Mapping[str, Mapping]) -> dict[str, DayEntry]:
    """Apply several day updates in one save; nothing is written if one is rejected."""

    applied = _edit_calendar(property_id, lambda calendar: calendar.set_date_range_status(updates))
    logger.info("availability.dates_updated", property_id=property_id, days=len(applied))
    return applied


def update_seasonal_pricing(property_id, start, end, price: Decimal) -> list[str]:
    days = _edit_calendar(
        property_id,
        lambda calendar: calendar.update_seasonal_pricing(start, end, price),
    )
    logger.info(
        "availability.seasonal_pricing",
        property_id=property_id,
        start=to_day_key(start),
        end=to_day_key(end),
        price=str(price),
    )
    return days


def add_blocked_range(property_id, start, end, reason: str | None = None) -> BlockedRange:
    blocked = _edit_calendar(
        property_id,
        lambda calendar: calendar.add_blocked_range(start, end, reason),
    )
    logger.info(
        "availability.range_blocked",
        property_id=property_id,
        start=to_day_key(blocked.dates.start_date),
        end=to_day_key(blocked.dates.end_date),
        reason=blocked.reason,
    )
    return blocked


def remove_blocked_range(property_id, start, end) -> list[str]:
    """Lift a block; returns the days that became available again."""

    restored = _edit_calendar(
        property_id,
        lambda calendar: calendar.remove_blocked_range(start, end),
    )
    logger.info(
        "availability.range_unblocked",
        property_id=property_id,
        start=to_day_key(start),
        end=to_day_key(end),
        restored=len(restored),
    )
    return restored
