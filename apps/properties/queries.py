"""Read-only availability queries."""

from __future__ import annotations

from shared.domain.exceptions import NotFound

from .repositories import AvailabilityRepository

availability_repo = AvailabilityRepository()


def is_range_available(property_id, check_in, check_out) -> bool:
    """
    True when every night of [check_in, check_out) is bookable

    Raises NotFound when the property has no calendar yet. Inside a write
    use case, check the locked calendar aggregate instead.
    """
    calendar = availability_repo.get(property_id)
    if calendar is None:
        raise NotFound(
            f"Availability for property {property_id} not found.",
            property_id=property_id,
        )
    return calendar.is_range_available(check_in, check_out)
