"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.

Every save takes the version the caller loaded. A store applies the write
only if the stored version still matches, bumps it by one, and otherwise
raises VersionConflictError without writing anything.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from planner.domain import (
    Carpool,
    CarpoolId,
    Email,
    Event,
    EventId,
    Poll,
    PollId,
    PurchaseId,
    TicketPurchase,
    TicketType,
    TicketTypeId,
)


class EventLookup(ABC):
    @abstractmethod
    def event_exists(self, event_id: EventId) -> bool:
        """Check if an event exists."""
        ...


class EventStore(EventLookup):
    """Interface for event persistence operations."""

    @abstractmethod
    def list_events(
        self, is_private: bool | None = None, starts_after: datetime | None = None
    ) -> list[Event]:
        """Return events ordered by start time ascending."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        ...

    @abstractmethod
    def insert_event(self, event: Event) -> Event:
        ...

    @abstractmethod
    def update_event(self, event: Event) -> Event | None:
        """Overwrite the stored event. Returns None if it no longer exists."""
        ...

    @abstractmethod
    def delete_event(self, event_id: EventId) -> bool:
        """Delete an event with its polls, carpools and ticket types."""
        ...


class PollStore(EventLookup):
    """Interface for poll persistence operations."""

    @abstractmethod
    def list_polls(self, event_id: EventId | None = None) -> list[Poll]:
        """Return polls ordered by created_at descending."""
        ...

    @abstractmethod
    def get_poll(self, poll_id: PollId) -> Poll | None:
        """Return a poll with its options and votes, or None if not found."""
        ...

    @abstractmethod
    def insert_poll(self, poll: Poll) -> Poll:
        ...

    @abstractmethod
    def save_poll(self, poll: Poll, expected_version: int) -> Poll:
        """Persist the poll and return it with its new version.

        Raises:
            VersionConflictError: If the stored version is not expected_version.
        """
        ...

    @abstractmethod
    def delete_poll(self, poll_id: PollId) -> bool:
        """Delete a poll; return False if it did not exist."""
        ...


class CarpoolStore(EventLookup):
    """Interface for carpool persistence operations."""

    @abstractmethod
    def list_carpools(
        self, event_id: EventId | None = None, is_active: bool | None = None
    ) -> list[Carpool]:
        """Return carpools ordered by departure_time ascending."""
        ...

    @abstractmethod
    def get_carpool(self, carpool_id: CarpoolId) -> Carpool | None:
        ...

    @abstractmethod
    def insert_carpool(self, carpool: Carpool) -> Carpool:
        ...

    @abstractmethod
    def save_carpool(self, carpool: Carpool, expected_version: int) -> Carpool:
        """Persist the carpool and its passengers and return it with its new version.

        Raises:
            VersionConflictError: If the stored version is not expected_version.
        """
        ...

    @abstractmethod
    def delete_carpool(self, carpool_id: CarpoolId) -> bool:
        ...


class TicketStore(EventLookup):
    """Interface for ticket type and purchase persistence operations."""

    @abstractmethod
    def list_ticket_types(self, event_id: EventId | None = None) -> list[TicketType]:
        """Return active ticket types ordered by price ascending."""
        ...

    @abstractmethod
    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        ...

    @abstractmethod
    def insert_ticket_type(self, ticket_type: TicketType) -> TicketType:
        ...

    @abstractmethod
    def save_ticket_type(self, ticket_type: TicketType, expected_version: int) -> TicketType:
        """Raises VersionConflictError if the stored version is not expected_version."""
        ...

    @abstractmethod
    def get_purchase(self, purchase_id: PurchaseId) -> TicketPurchase | None:
        ...

    @abstractmethod
    def list_purchases(
        self, email: Email | None = None, ticket_type_id: TicketTypeId | None = None
    ) -> list[TicketPurchase]:
        """Return purchases ordered by purchased_at descending."""
        ...

    @abstractmethod
    def has_active_purchase(self, email: Email, ticket_type_id: TicketTypeId) -> bool:
        """Check for a non-cancelled purchase of this ticket type by this email."""
        ...

    @abstractmethod
    def record_purchase(
        self, ticket_type: TicketType, purchase: TicketPurchase, expected_version: int
    ) -> tuple[TicketType, TicketPurchase]:
        """Save the decremented ticket type and insert the purchase as one unit.

        Raises:
            VersionConflictError: If the ticket type changed since it was loaded.
            DuplicatePurchaseError: If the email already holds an active purchase.
        """
        ...

    @abstractmethod
    def record_cancellation(
        self, purchase: TicketPurchase, ticket_type: TicketType, expected_version: int
    ) -> tuple[TicketPurchase, TicketType]:
        """Save the cancelled purchase and the restocked ticket type as one unit.

        Raises:
            VersionConflictError: If the ticket type changed since it was loaded.
        """
        ...
