"""
Row locking and compare-and-set helpers for repositories.

Contended records are read with ``SELECT ... FOR UPDATE`` where the backend
supports it and written with a version check, so overlapping writers are
serialised by the lock and any writer that slipped past it (SQLite, stale
read) is caught by the version comparison.
"""

from __future__ import annotations

from django.db import connection, transaction  # type: ignore
from django.db.models import F, QuerySet  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.domain.exceptions import ConcurrencyConflict


def lock_queryset_if_possible(queryset: QuerySet) -> QuerySet:
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset
    if not connection.features.has_select_for_update:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def compare_and_set(queryset: QuerySet, expected_version: int, **values) -> int:
    """
    Update the rows of ``queryset`` only if they are still at ``expected_version``

    Bumps the version on success and returns the new value. Raises
    ConcurrencyConflict when another writer got there first.
    """
    updated = queryset.filter(version=expected_version).update(
        version=F("version") + 1,
        **values,
    )
    if not updated:
        raise ConcurrencyConflict(
            expected_version=expected_version,
            model=queryset.model.__name__,
        )
    return expected_version + 1
