"""
Availability Calendar Aggregate

This is the CRITICAL aggregate for preventing double bookings.
Every change to a property's calendar MUST go through this aggregate.

The calendar holds two facts about each property:
- a per-day map (availability, price, minimum stay, notes, holding booking)
- a list of blocked ranges (owner or maintenance holds)

Both are written here in lockstep. Blocked ranges are authoritative for
holds: a day under a blocked range is never reported or restored as
available, whatever its map entry says. Reads fail closed: a day without an
entry is unavailable.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Mapping, Optional

from shared.domain.base import Aggregate, ValueObject, utcnow
from shared.domain.exceptions import (
    BlockedRangeOverlap,
    InvalidDateRange,
    NotFound,
    Unavailable,
)
from shared.domain.value_objects import (
    DateRange,
    dates_in_range,
    day_start,
    parse_day,
    to_day_key,
)

BOOKED_NOTE = 'Booked'
DEFAULT_BLOCK_REASON = 'Unavailable'


@dataclass(frozen=True)
class DayEntry(ValueObject):
    """One day of the calendar, as stored under its day key"""
    is_available: bool
    price: Optional[Decimal] = None
    minimum_stay: Optional[int] = None
    notes: Optional[str] = None
    booking_id: Optional[str] = None

    @classmethod
    def from_document(cls, data: Mapping) -> 'DayEntry':
        price = data.get('price')
        return cls(
            is_available=data.get('isAvailable') is True,
            price=Decimal(str(price)) if price is not None else None,
            minimum_stay=data.get('minimumStay'),
            notes=data.get('notes'),
            booking_id=data.get('bookingId'),
        )

    def to_document(self) -> dict:
        document = {'isAvailable': self.is_available}
        if self.price is not None:
            document['price'] = float(self.price)
        if self.minimum_stay is not None:
            document['minimumStay'] = self.minimum_stay
        if self.notes:
            document['notes'] = self.notes
        if self.booking_id:
            document['bookingId'] = self.booking_id
        return document


@dataclass(frozen=True)
class BlockedRange(ValueObject):
    """Owner or maintenance hold over [start, end)"""
    dates: DateRange
    reason: str = DEFAULT_BLOCK_REASON

    @classmethod
    def from_document(cls, data: Mapping) -> 'BlockedRange':
        return cls(
            dates=DateRange(parse_day(data['startDate']), parse_day(data['endDate'])),
            reason=data.get('reason') or DEFAULT_BLOCK_REASON,
        )

    def to_document(self) -> dict:
        return {
            'startDate': day_start(self.dates.start_date).isoformat(),
            'endDate': day_start(self.dates.end_date).isoformat(),
            'reason': self.reason,
        }

    def covers(self, day) -> bool:
        return self.dates.contains(day)


@dataclass(kw_only=True, eq=False)
class AvailabilityCalendar(Aggregate):
    """
    Availability Calendar Aggregate Root

    Consistency boundary for one property's calendar.

    Key invariants:
    - A range is bookable iff every day has an entry marked available AND
      no blocked range overlaps it
    - Blocked ranges never overlap each other
    - A day held by a booking is only released by that booking

    Usage:
        # Load calendar for property (with SELECT FOR UPDATE lock)
        calendar = availability_repo.get_for_update(property_id)

        # Reserve the stay; raises Unavailable if any day is taken
        calendar.reserve(booking_id, check_in, check_out)
        availability_repo.save(calendar)
    """

    property_id: int
    dates: Dict[str, DayEntry] = field(default_factory=dict)
    blocked_ranges: List[BlockedRange] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utcnow)

    @classmethod
    def initial(cls, property_id: int, start, horizon_days: int) -> 'AvailabilityCalendar':
        """Fresh calendar with ``horizon_days`` available days from ``start``"""
        first = parse_day(start)
        dates = {
            to_day_key(first + timedelta(days=offset)): DayEntry(is_available=True)
            for offset in range(horizon_days)
        }
        return cls(property_id=property_id, dates=dates)

    # ===== Queries =====

    def entry(self, day) -> Optional[DayEntry]:
        return self.dates.get(to_day_key(day))

    def blocking_range_for(self, day, exclude: Optional[BlockedRange] = None) -> Optional[BlockedRange]:
        """The blocked range covering ``day``, ignoring ``exclude``"""
        for blocked in self.blocked_ranges:
            if blocked is exclude or blocked == exclude:
                continue
            if blocked.covers(day):
                return blocked
        return None

    def is_day_available(self, day) -> bool:
        """Missing days are unavailable; blocked days are unavailable"""
        entry = self.entry(day)
        if entry is None or not entry.is_available:
            return False
        return self.blocking_range_for(day) is None

    def overlapping_blocks(self, check_in, check_out) -> List[BlockedRange]:
        """Blocked ranges overlapping [check_in, check_out)"""
        start, end = parse_day(check_in), parse_day(check_out)
        return [
            blocked for blocked in self.blocked_ranges
            if start < blocked.dates.end_date and end > blocked.dates.start_date
        ]

    def is_range_available(self, check_in, check_out) -> bool:
        """
        Check if every night of [check_in, check_out) can be booked

        Two independent checks, both required:
        1. every day has an entry with isAvailable True (missing -> False)
        2. no blocked range overlaps the stay (touching boundaries don't)

        An empty or inverted range is reported unavailable.
        """
        days = dates_in_range(check_in, check_out)
        if not days:
            return False

        all_days_available = all(
            (entry := self.dates.get(day)) is not None and entry.is_available
            for day in days
        )
        if not all_days_available:
            return False

        return not self.overlapping_blocks(check_in, check_out)

    def unavailable_dates(self) -> List[str]:
        """Sorted, de-duplicated day keys that cannot be booked"""
        unavailable = {day for day, entry in self.dates.items() if not entry.is_available}
        for blocked in self.blocked_ranges:
            unavailable.update(blocked.dates.days())
        return sorted(unavailable)

    def date_price(self, day, base_price: Decimal) -> Decimal:
        """Custom price for the day, or ``base_price`` when none is set"""
        entry = self.entry(day)
        if entry is None or not entry.price:
            return base_price
        return entry.price

    def bookings_holding(self, check_in, check_out) -> List[str]:
        """Distinct booking ids holding any day of the range"""
        holders: List[str] = []
        for day in dates_in_range(check_in, check_out):
            entry = self.dates.get(day)
            if entry and entry.booking_id and entry.booking_id not in holders:
                holders.append(entry.booking_id)
        return holders

    # ===== Calendar edits =====

    def set_date_status(
        self,
        day,
        is_available: Optional[bool] = None,
        price: Optional[Decimal] = None,
        minimum_stay: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> DayEntry:
        """
        Upsert one day, preserving every field not passed in

        A day held by a booking or covered by a blocked range cannot be
        opened here; cancel the booking or remove the block instead.
        """
        key = to_day_key(day)
        current = self.dates.get(key)
        if is_available is None and current is None:
            is_available = True

        if is_available:
            self._ensure_can_open(key, current)

        changes = {}
        if is_available is not None:
            changes['is_available'] = is_available
        if price is not None:
            changes['price'] = Decimal(str(price))
        if minimum_stay is not None:
            changes['minimum_stay'] = minimum_stay
        if notes is not None:
            changes['notes'] = notes

        updated = replace(current, **changes) if current else DayEntry(**changes)
        self.dates[key] = updated
        self.touch()
        return updated

    def set_date_range_status(self, updates: Mapping[str, Mapping]) -> Dict[str, DayEntry]:
        """
        Batched form of set_date_status

        ``updates`` maps day keys to partial ``{isAvailable, price,
        minimumStay, notes}`` documents. Every update is validated before
        any is applied.
        """
        normalized = {to_day_key(day): dict(changes) for day, changes in updates.items()}
        for key, changes in normalized.items():
            if changes.get('isAvailable') is True:
                self._ensure_can_open(key, self.dates.get(key))

        applied = {}
        for key, changes in sorted(normalized.items()):
            applied[key] = self.set_date_status(
                key,
                is_available=changes.get('isAvailable'),
                price=changes.get('price'),
                minimum_stay=changes.get('minimumStay'),
                notes=changes.get('notes'),
            )
        return applied

    def update_seasonal_pricing(self, start, end, price: Decimal) -> List[str]:
        """Set ``price`` on every day of [start, end), keeping availability"""
        days = dates_in_range(start, end)
        if not days:
            raise InvalidDateRange("Pricing end date must be after the start date.")
        for day in days:
            current = self.dates.get(day) or DayEntry(is_available=True)
            self.dates[day] = replace(current, price=Decimal(str(price)))
        self.touch()
        return days

    def add_blocked_range(self, start, end, reason: Optional[str] = None) -> BlockedRange:
        """
        Hold [start, end) for the owner or maintenance

        The range is appended and every spanned day is written unavailable
        with the reason as its note. A booking holding a day keeps its mark.
        """
        try:
            dates = DateRange(start, end)
        except ValueError as exc:
            raise InvalidDateRange("Blocked range end must be after its start.") from exc

        for existing in self.blocked_ranges:
            if existing.dates.overlaps_with(dates):
                raise BlockedRangeOverlap(
                    f"Blocked range {dates} overlaps existing blocked range {existing.dates}.",
                    existing=str(existing.dates),
                )

        blocked = BlockedRange(dates=dates, reason=reason or DEFAULT_BLOCK_REASON)
        self.blocked_ranges.append(blocked)
        self.blocked_ranges.sort(key=lambda item: item.dates.start_date)

        for day in dates.days():
            current = self.dates.get(day) or DayEntry(is_available=False)
            self.dates[day] = replace(current, is_available=False, notes=blocked.reason)

        self.touch()
        return blocked

    def remove_blocked_range(self, start, end) -> List[str]:
        """
        Lift the hold over [start, end)

        Each formerly covered day is restored only if no other blocked range
        covers it and no booking holds it. Returns the restored day keys.
        """
        start_day, end_day = parse_day(start), parse_day(end)
        target = next(
            (
                blocked for blocked in self.blocked_ranges
                if blocked.dates.start_date == start_day and blocked.dates.end_date == end_day
            ),
            None,
        )
        if target is None:
            raise NotFound(
                f"No blocked range {start_day} - {end_day} for property {self.property_id}."
            )

        self.blocked_ranges.remove(target)

        restored = []
        for day in target.dates.days():
            current = self.dates.get(day)
            other = self.blocking_range_for(day)
            if other is not None:
                if current is not None:
                    self.dates[day] = replace(current, is_available=False, notes=other.reason)
                continue
            if current is not None and current.booking_id:
                continue
            base = current or DayEntry(is_available=True)
            self.dates[day] = replace(base, is_available=True, notes=None)
            restored.append(day)

        self.touch()
        return restored

    # ===== Booking marks =====

    def reserve(self, booking_id, check_in, check_out) -> List[str]:
        """
        Mark every night of the stay as booked

        This method enforces the critical business rule:
        NO TWO BOOKINGS CAN HOLD THE SAME NIGHT OF THE SAME PROPERTY

        Raises:
            Unavailable: If any night is not free
        """
        if not self.is_range_available(check_in, check_out):
            raise Unavailable(
                f"Dates {to_day_key(check_in)} - {to_day_key(check_out)} are not available "
                f"for property {self.property_id}.",
                held_by=self.bookings_holding(check_in, check_out),
            )

        days = dates_in_range(check_in, check_out)
        for day in days:
            self.dates[day] = replace(
                self.dates[day],
                is_available=False,
                notes=BOOKED_NOTE,
                booking_id=str(booking_id),
            )
        self.touch()
        return days

    def release_booking(self, booking_id, check_in, check_out) -> List[str]:
        """
        Undo a booking's marks after cancellation or rejection

        Days held by a different booking are left alone. Days under a
        blocked range stay unavailable with the block's reason. Returns the
        day keys made available again.
        """
        booking_key = str(booking_id)
        released = []
        for day in dates_in_range(check_in, check_out):
            current = self.dates.get(day)
            if current is not None and current.booking_id and current.booking_id != booking_key:
                continue

            blocked = self.blocking_range_for(day)
            base = current or DayEntry(is_available=True)
            if blocked is not None:
                self.dates[day] = replace(base, is_available=False, notes=blocked.reason, booking_id=None)
                continue

            self.dates[day] = replace(base, is_available=True, notes=None, booking_id=None)
            released.append(day)

        self.touch()
        return released

    # ===== Internals =====

    def _ensure_can_open(self, key: str, current: Optional[DayEntry]):
        if current is not None and current.booking_id:
            raise Unavailable(
                f"{key} is held by booking {current.booking_id}; cancel the booking to release it.",
                booking_id=current.booking_id,
            )
        blocked = self.blocking_range_for(key)
        if blocked is not None:
            raise Unavailable(
                f"{key} is inside blocked range {blocked.dates}; remove the block to open it.",
            )

    def touch(self, now: Optional[datetime] = None):
        super().touch(now)
        self.last_updated = self.updated_at

    @property
    def horizon_end(self) -> Optional[date]:
        """Last initialised day, if any"""
        if not self.dates:
            return None
        return parse_day(max(self.dates))

    def __str__(self):
        return f"AvailabilityCalendar(property={self.property_id}, days={len(self.dates)})"

    def __repr__(self):
        return (
            f"AvailabilityCalendar(id={self.id}, property_id={self.property_id}, "
            f"blocked_ranges={len(self.blocked_ranges)}, version={self.version})"
        )
