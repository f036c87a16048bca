"""Persistence for the availability calendar aggregate."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.exceptions import ConcurrencyConflict
from shared.infrastructure.locking import compare_and_set, lock_queryset_if_possible

from .domain.availability import AvailabilityCalendar, BlockedRange, DayEntry
from .models import PropertyAvailability


class AvailabilityRepository:
    """Maps ``PropertyAvailability`` rows to ``AvailabilityCalendar`` aggregates.

    Calendars read with ``get_for_update`` are row-locked for the rest of the
    surrounding transaction; ``save`` is a compare-and-set on ``version``.
    """

    def get(self, property_id: int) -> AvailabilityCalendar | None:
        record = PropertyAvailability.objects.filter(property_id=property_id).first()
        return self._to_domain(record) if record else None

    def get_for_update(self, property_id: int) -> AvailabilityCalendar | None:
        queryset = lock_queryset_if_possible(
            PropertyAvailability.objects.filter(property_id=property_id)
        )
        record = queryset.first()
        return self._to_domain(record) if record else None

    def get_or_initialize_for_update(self, property_id: int, start=None) -> AvailabilityCalendar:
        """Locked calendar, created with the default horizon if missing."""
        calendar = self.get_for_update(property_id)
        if calendar is not None:
            return calendar
        return self.add(self.new_calendar(property_id, start=start))

    def new_calendar(self, property_id: int, start=None, horizon_days: int | None = None) -> AvailabilityCalendar:
        if horizon_days is None:
            horizon_days = getattr(settings, "AVAILABILITY_HORIZON_DAYS", 365)
        return AvailabilityCalendar.initial(
            property_id=property_id,
            start=start or timezone.now().date(),
            horizon_days=horizon_days,
        )

    def add(self, calendar: AvailabilityCalendar) -> AvailabilityCalendar:
        """Insert a new calendar; a concurrent insert surfaces as a conflict."""
        try:
            with transaction.atomic():
                record = PropertyAvailability.objects.create(
                    property_id=calendar.property_id,
                    dates=self._dates_document(calendar),
                    blocked_ranges=self._blocked_document(calendar),
                    version=0,
                    last_updated=calendar.last_updated,
                )
        except IntegrityError as exc:
            raise ConcurrencyConflict(
                f"Availability for property {calendar.property_id} was created concurrently.",
                property_id=calendar.property_id,
            ) from exc
        calendar.version = record.version
        return calendar

    def save(self, calendar: AvailabilityCalendar) -> AvailabilityCalendar:
        calendar.version = compare_and_set(
            PropertyAvailability.objects.filter(property_id=calendar.property_id),
            calendar.version,
            dates=self._dates_document(calendar),
            blocked_ranges=self._blocked_document(calendar),
            last_updated=calendar.last_updated,
        )
        return calendar

    @staticmethod
    def _dates_document(calendar: AvailabilityCalendar) -> dict:
        return {day: entry.to_document() for day, entry in sorted(calendar.dates.items())}

    @staticmethod
    def _blocked_document(calendar: AvailabilityCalendar) -> list:
        return [blocked.to_document() for blocked in calendar.blocked_ranges]

    @staticmethod
    def _to_domain(record: PropertyAvailability) -> AvailabilityCalendar:
        return AvailabilityCalendar(
            property_id=record.property_id,
            dates={day: DayEntry.from_document(data) for day, data in (record.dates or {}).items()},
            blocked_ranges=[BlockedRange.from_document(item) for item in (record.blocked_ranges or [])],
            last_updated=record.last_updated,
            version=record.version,
        )
