"""Shared service plumbing: id parsing and optimistic retry."""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

from django.conf import settings
from django.utils import timezone

from planner.domain.errors import ConcurrentModificationError, InvalidIdError, VersionConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")
IdT = TypeVar("IdT")

Clock = Callable[[], datetime]

# Marks an optional update argument the caller did not pass.
UNSET = object()


def parse_id(id_type: type[IdT], raw: object, kind: str) -> IdT:
    """Parse a string into an identifier value object.

    Raises:
        InvalidIdError: If raw is not a valid UUID.
    """
    if isinstance(raw, id_type):
        return raw
    try:
        return id_type.from_string(str(raw))
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError(kind) from None


class LedgerService:
    """Base for services whose writes go through a versioned save."""

    def __init__(self, clock: Clock | None = None, max_retries: int | None = None) -> None:
        self._clock = clock or timezone.now
        if max_retries is None:
            max_retries = getattr(settings, "PLANNER_LEDGER_MAX_RETRIES", 3)
        self._max_retries = max_retries

    def _now(self) -> datetime:
        return self._clock()

    def _with_retry(self, operation: Callable[[], T], record_id: object) -> T:
        """Run a load-apply-save operation, re-running it on version conflicts.

        operation must reload the record on each call. Domain errors other than
        VersionConflictError propagate unchanged on the first occurrence.

        Raises:
            ConcurrentModificationError: If every attempt hit a version conflict.
        """
        attempts = self._max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return operation()
            except VersionConflictError:
                logger.warning(
                    "Version conflict on %s (attempt %d/%d)", record_id, attempt, attempts
                )
        raise ConcurrentModificationError(attempts)
