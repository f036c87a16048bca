"""
Domain Errors

Every failure the availability and booking use cases can report.
Each error carries a stable ``code`` that the API layer turns into a
user-facing message, so callers can tell "dates taken" from "too many
guests" from "property missing".
"""


class DomainError(Exception):
    """Base class for expected, user-recoverable domain failures"""

    code = 'domain_error'
    default_message = 'The request could not be completed.'

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class NotFound(DomainError):
    """Property, booking or availability record missing"""

    code = 'not_found'
    default_message = 'The requested record was not found.'


class Unavailable(DomainError):
    """Requested dates fail the availability check"""

    code = 'dates_unavailable'
    default_message = 'The selected dates are not available.'


class CapacityExceeded(DomainError):
    """Guest count exceeds the property capacity"""

    code = 'capacity_exceeded'
    default_message = 'The number of guests exceeds what this property can accommodate.'


class InvalidGuestCounts(DomainError):
    """Party size is malformed: no adult or a negative count"""

    code = 'invalid_guests'
    default_message = 'At least one adult is required and counts cannot be negative.'


class InvalidTransition(DomainError):
    """Booking state machine violation or unmet precondition"""

    code = 'invalid_transition'
    default_message = 'This action is not allowed for the booking in its current state.'


class AlreadyCanceled(InvalidTransition):
    """Booking has already been canceled"""

    code = 'already_canceled'
    default_message = 'This booking is already canceled.'


class DuplicateTransaction(InvalidTransition):
    """A payment with this transaction id is already on the ledger"""

    code = 'duplicate_transaction'
    default_message = 'This transaction id has already been used.'


class InvalidDateRange(DomainError):
    """Check-in is not before check-out"""

    code = 'invalid_date_range'
    default_message = 'Check-out must be after check-in.'


class BlockedRangeOverlap(DomainError):
    """A new blocked range would overlap an existing one"""

    code = 'blocked_range_overlap'
    default_message = 'The blocked range overlaps an existing blocked range.'


class ConcurrencyConflict(DomainError):
    """
    Concurrent write detected by the optimistic version check

    Raised by repositories; use cases retry it a bounded number of times.
    """

    code = 'conflict'
    default_message = 'The record was modified concurrently. Please retry.'


class PartialFailure(DomainError):
    """
    A secondary step failed after the primary commit

    Never aborts the primary operation; it is logged and recorded for
    reconciliation.
    """

    code = 'partial_failure'
    default_message = 'A follow-up step failed and was queued for reconciliation.'
