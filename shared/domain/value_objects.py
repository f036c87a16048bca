"""
Common Value Objects

Value objects and calendar helpers used across the availability and
booking contexts:
- Money: Represents monetary amounts with currency
- DateRange: Half-open range of calendar days (check-in to check-out)
- to_day_key / parse_day / dates_in_range: day-key normalisation
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, List

from shared.domain.base import ValueObject

DAY_KEY_FORMAT = '%Y-%m-%d'
SUPPORTED_CURRENCIES = ('USD', 'EUR', 'GBP', 'CAD')


def parse_day(value) -> date:
    """
    Normalise a date-like value to a calendar day

    Accepts ``date``, ``datetime`` and ISO-8601 strings (``YYYY-MM-DD`` or a
    full timestamp). Aware datetimes are converted to UTC first so the same
    instant always maps to the same day key.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return datetime.strptime(text, DAY_KEY_FORMAT).date()
        return parse_day(datetime.fromisoformat(text.replace('Z', '+00:00')))
    raise TypeError(f"Cannot interpret {value!r} as a calendar day")


def to_day_key(value) -> str:
    """Format a date-like value as a ``YYYY-MM-DD`` day key"""
    return parse_day(value).strftime(DAY_KEY_FORMAT)


def day_start(value) -> datetime:
    """Midnight UTC of the given day, used as the stored timestamp"""
    return datetime.combine(parse_day(value), time.min, tzinfo=timezone.utc)


def iter_days(start, end) -> Iterator[date]:
    """Yield every day in [start, end)"""
    current = parse_day(start)
    stop = parse_day(end)
    while current < stop:
        yield current
        current += timedelta(days=1)


def dates_in_range(start, end) -> List[str]:
    """
    Day keys spanned by the half-open interval [start, end)

    Includes ``start`` and excludes ``end``. Iteration happens on calendar
    days, never on wall-clock instants, so daylight-saving shifts cannot
    skip or repeat a day. ``end <= start`` yields an empty list; callers
    validate ordering themselves.

    Examples:
        dates_in_range('2025-06-01', '2025-06-04')
            -> ['2025-06-01', '2025-06-02', '2025-06-03']
        dates_in_range('2025-06-04', '2025-06-04') -> []
    """
    return [day.strftime(DAY_KEY_FORMAT) for day in iter_days(start, end)]


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a non-negative monetary amount with currency.
    Immutable and supports arithmetic operations.
    """
    amount: Decimal
    currency: str = 'USD'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def zero(cls, currency: str = 'USD') -> 'Money':
        return cls(Decimal('0'), currency)

    def _check_currency(self, other: 'Money', operation: str):
        if not isinstance(other, Money):
            raise TypeError(f"Can only {operation} Money and Money")
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot {operation} different currencies: {self.currency} and {other.currency}"
            )

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other, 'add')
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other, 'subtract')
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        if not isinstance(factor, (int, float, Decimal)):
            raise TypeError("Can only multiply Money by number")
        return Money(self.amount * Decimal(str(factor)), self.currency)

    def percent(self, rate) -> 'Money':
        """Rate percent of this amount, rounded to whole currency units"""
        value = (self.amount * Decimal(str(rate)) / Decimal('100')).quantize(
            Decimal('1'), rounding=ROUND_HALF_UP
        )
        return Money(value, self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for stays, blocked ranges and availability checks.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        object.__setattr__(self, 'start_date', parse_day(self.start_date))
        object.__setattr__(self, 'end_date', parse_day(self.end_date))
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        end_date is exclusive, so back-to-back ranges don't overlap.

        Examples:
            - DateRange(10, 15) overlaps with DateRange(12, 14) -> True
            - DateRange(10, 15) overlaps with DateRange(15, 18) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def contains(self, check_date) -> bool:
        """start_date is inclusive, end_date is exclusive"""
        return self.start_date <= parse_day(check_date) < self.end_date

    def days(self) -> List[str]:
        """Day keys covered by this range"""
        return dates_in_range(self.start_date, self.end_date)

    def __len__(self) -> int:
        """Number of nights"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
