"""DRF exception handling for domain errors."""

from __future__ import annotations

import structlog
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler  # type: ignore

from shared.domain import exceptions as domain

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR = (
    (domain.NotFound, status.HTTP_404_NOT_FOUND),
    (domain.Unavailable, status.HTTP_409_CONFLICT),
    (domain.ConcurrencyConflict, status.HTTP_409_CONFLICT),
    (domain.CapacityExceeded, status.HTTP_400_BAD_REQUEST),
    (domain.InvalidGuestCounts, status.HTTP_400_BAD_REQUEST),
    (domain.InvalidDateRange, status.HTTP_400_BAD_REQUEST),
    (domain.BlockedRangeOverlap, status.HTTP_400_BAD_REQUEST),
    (domain.InvalidTransition, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: domain.DomainError) -> int:
    for error_class, http_status in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def domain_exception_handler(exc, context):
    """Turn domain errors into ``{"code", "detail"}`` responses."""

    if isinstance(exc, domain.DomainError):
        http_status = status_for(exc)
        view = context.get("view")
        logger.info(
            "api.domain_error",
            code=exc.code,
            detail=exc.message,
            view=view.__class__.__name__ if view else None,
        )
        return Response({"code": exc.code, "detail": exc.message}, status=http_status)
    return exception_handler(exc, context)
