"""Event service - CRUD for the events the ledgers belong to.

Events carry no ledger state, so updates are plain overwrites without a
version check.
"""

import logging
from dataclasses import replace
from datetime import datetime

from django.utils import timezone

from planner.domain import Event, EventId
from planner.domain.errors import EventNotFoundError, InvalidValueError
from planner.services.base import Clock, parse_id
from planner.stores.interfaces import EventStore

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 3


def _checked(event: Event) -> Event:
    if len(event.name) < MIN_NAME_LENGTH:
        raise InvalidValueError(f"Event name must be at least {MIN_NAME_LENGTH} characters")
    return event


class EventService:
    """Service for event catalog operations."""

    def __init__(self, store: EventStore, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or timezone.now

    def list_events(
        self, is_private: bool | None = None, upcoming: bool = False
    ) -> list[Event]:
        """Return events by start time; upcoming keeps those not yet started."""
        starts_after = self._clock() if upcoming else None
        return self._store.list_events(is_private, starts_after)

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._store.get_event(parse_id(EventId, event_id, "event"))
        if event is None:
            raise EventNotFoundError(str(event_id))
        return event

    def create_event(
        self,
        name: str,
        description: str,
        location: str,
        starts_at: datetime,
        ends_at: datetime,
        is_private: bool = False,
    ) -> Event:
        """Create an event.

        Raises:
            InvalidValueError: If the name is too short or the event ends before it starts.
        """
        now = self._clock()
        try:
            event = Event(
                id=EventId.new(),
                name=name.strip(),
                description=description,
                location=location.strip(),
                starts_at=starts_at,
                ends_at=ends_at,
                created_at=now,
                updated_at=now,
                is_private=is_private,
            )
        except ValueError as exc:
            raise InvalidValueError(str(exc)) from None

        created = self._store.insert_event(_checked(event))
        logger.info("Event %s created", created.id)
        return created

    def update_event(
        self,
        event_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        location: str | None = None,
        starts_at: datetime | None = None,
        ends_at: datetime | None = None,
        is_private: bool | None = None,
    ) -> Event:
        """Update event details. The merged dates must still be in order.

        Raises:
            EventNotFoundError: If the event does not exist.
            InvalidValueError: If the name is too short or the event ends before it starts.
        """
        event = self.get_event(event_id)
        changes: dict = {"updated_at": self._clock()}
        if name is not None:
            changes["name"] = name.strip()
        if description is not None:
            changes["description"] = description
        if location is not None:
            changes["location"] = location.strip()
        if starts_at is not None:
            changes["starts_at"] = starts_at
        if ends_at is not None:
            changes["ends_at"] = ends_at
        if is_private is not None:
            changes["is_private"] = is_private

        try:
            updated = replace(event, **changes)
        except ValueError as exc:
            raise InvalidValueError(str(exc)) from None

        saved = self._store.update_event(_checked(updated))
        if saved is None:
            raise EventNotFoundError(str(event_id))
        return saved

    def delete_event(self, event_id: str) -> None:
        """Delete an event together with its polls, carpools and ticket types."""
        parsed = parse_id(EventId, event_id, "event")
        if not self._store.delete_event(parsed):
            raise EventNotFoundError(str(event_id))
        logger.info("Event %s deleted", parsed)
