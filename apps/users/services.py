"""User directory operations used by the booking workflows."""

from __future__ import annotations

import structlog
from django.db import transaction  # type: ignore

from shared.domain.exceptions import NotFound
from shared.infrastructure.locking import lock_queryset_if_possible

from .models import User

logger = structlog.get_logger(__name__)


@transaction.atomic
def append_booking_to_history(user_id, booking_id) -> list[str]:
    """Append ``booking_id`` to the user's history; repeated calls are no-ops."""

    user = lock_queryset_if_possible(User.objects.filter(pk=user_id)).first()
    if user is None:
        raise NotFound(f"User {user_id} not found.", user_id=user_id)

    booking_key = str(booking_id)
    history = list(user.booking_history or [])
    if booking_key in history:
        return history

    history.append(booking_key)
    user.booking_history = history
    user.save(update_fields=["booking_history", "updated_at"])
    logger.info("users.history_appended", user_id=user.pk, booking_id=booking_key)
    return history
