"""Ticket service - inventory ledger orchestration.

A purchase reads the ticket type, applies the inventory rule and hands the
decremented ticket type plus the new purchase to the store as one unit,
conditioned on the version it read. Two buyers racing for the last ticket
therefore cannot both succeed: the loser gets a version conflict, reloads,
and then sees SoldOutError.
"""

import logging
from dataclasses import replace
from decimal import Decimal

from planner.domain import (
    Address,
    Buyer,
    Capacity,
    Email,
    EventId,
    Money,
    PurchaseId,
    TicketPurchase,
    TicketType,
    TicketTypeId,
    UserId,
)
from planner.domain import inventory
from planner.domain.errors import (
    EventNotFoundError,
    InvalidValueError,
    PurchaseNotFoundError,
    TicketTypeNotFoundError,
)
from planner.services.base import Clock, LedgerService, parse_id
from planner.stores.interfaces import TicketStore

logger = logging.getLogger(__name__)


def _email(raw: str) -> Email:
    try:
        return Email(raw)
    except ValueError as exc:
        raise InvalidValueError(str(exc)) from None


def _money(raw) -> Money:
    try:
        return Money(Decimal(str(raw)))
    except ValueError as exc:
        raise InvalidValueError(str(exc)) from None


class TicketService(LedgerService):
    """Service for ticket types, purchases and the inventory ledger."""

    def __init__(
        self, store: TicketStore, clock: Clock | None = None, max_retries: int | None = None
    ) -> None:
        self._store = store
        super().__init__(clock, max_retries)

    def list_ticket_types(self, event_id: str | None = None) -> list[TicketType]:
        """Return active ticket types, cheapest first."""
        event = parse_id(EventId, event_id, "event") if event_id is not None else None
        return self._store.list_ticket_types(event)

    def get_ticket_type(self, ticket_type_id: str) -> TicketType:
        """Return a ticket type by ID.

        Raises:
            InvalidIdError: If the ticket_type_id is not a valid UUID.
            TicketTypeNotFoundError: If the ticket type does not exist.
        """
        parsed = parse_id(TicketTypeId, ticket_type_id, "ticket type")
        ticket_type = self._store.get_ticket_type(parsed)
        if ticket_type is None:
            raise TicketTypeNotFoundError(str(ticket_type_id))
        return ticket_type

    def create_ticket_type(
        self,
        event_id: str,
        name: str,
        price: Decimal,
        quantity: int,
        description: str = "",
    ) -> TicketType:
        """Create a ticket type with its whole quantity available.

        Raises:
            EventNotFoundError: If the event does not exist.
            InvalidValueError: If price is negative or quantity below 1.
        """
        event = parse_id(EventId, event_id, "event")
        if not self._store.event_exists(event):
            raise EventNotFoundError(str(event_id))

        try:
            ticket_type = TicketType(
                id=TicketTypeId.new(),
                event_id=event,
                name=name.strip(),
                price=_money(price),
                quantity_total=Capacity(quantity),
                quantity_available=quantity,
                created_at=self._now(),
                description=description,
            )
        except ValueError as exc:
            raise InvalidValueError(str(exc)) from None

        created = self._store.insert_ticket_type(ticket_type)
        logger.info("Ticket type %s created with %d tickets", created.id, quantity)
        return created

    def update_ticket_type(
        self,
        ticket_type_id: str,
        *,
        name: str | None = None,
        price: Decimal | None = None,
        description: str | None = None,
        is_active: bool | None = None,
    ) -> TicketType:
        """Update descriptive fields. Stock only moves through purchase and cancel."""
        changes: dict = {}
        if name is not None:
            changes["name"] = name.strip()
        if price is not None:
            changes["price"] = _money(price)
        if description is not None:
            changes["description"] = description
        if is_active is not None:
            changes["is_active"] = is_active

        def apply() -> TicketType:
            ticket_type = self.get_ticket_type(ticket_type_id)
            return self._store.save_ticket_type(replace(ticket_type, **changes), ticket_type.version)

        return self._with_retry(apply, ticket_type_id)

    def deactivate_ticket_type(self, ticket_type_id: str) -> TicketType:
        """Soft delete: the ticket type stays for existing purchases."""
        deactivated = self.update_ticket_type(ticket_type_id, is_active=False)
        logger.info("Ticket type %s deactivated", deactivated.id)
        return deactivated

    def get_purchase(self, purchase_id: str) -> TicketPurchase:
        parsed = parse_id(PurchaseId, purchase_id, "purchase")
        found = self._store.get_purchase(parsed)
        if found is None:
            raise PurchaseNotFoundError(str(purchase_id))
        return found

    def list_purchases(
        self, email: str | None = None, ticket_type_id: str | None = None
    ) -> list[TicketPurchase]:
        return self._store.list_purchases(
            _email(email) if email is not None else None,
            parse_id(TicketTypeId, ticket_type_id, "ticket type")
            if ticket_type_id is not None
            else None,
        )

    def purchase(
        self,
        ticket_type_id: str,
        *,
        first_name: str,
        last_name: str,
        email: str,
        address: Address,
        user_id: str | None = None,
    ) -> TicketPurchase:
        """Buy one ticket.

        Raises:
            TicketTypeNotFoundError, TicketTypeInactiveError, SoldOutError,
            DuplicatePurchaseError, ConcurrentModificationError
        """
        buyer = Buyer(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=_email(email),
            address=address,
            user_id=parse_id(UserId, user_id, "user") if user_id is not None else None,
        )

        def apply() -> TicketPurchase:
            ticket_type = self.get_ticket_type(ticket_type_id)
            now = self._now()
            sold_type, sold = inventory.purchase(
                ticket_type,
                buyer,
                has_active_purchase=self._store.has_active_purchase(buyer.email, ticket_type.id),
                ticket_number=inventory.generate_ticket_number(now),
                now=now,
            )
            self._store.record_purchase(sold_type, sold, ticket_type.version)
            return sold

        sold = self._with_retry(apply, ticket_type_id)
        logger.info("Ticket %s sold for ticket type %s", sold.ticket_number, ticket_type_id)
        return sold

    def cancel_purchase(self, purchase_id: str) -> TicketPurchase:
        """Cancel a purchase and put its ticket back on sale.

        Raises:
            PurchaseNotFoundError, AlreadyCancelledError, ConcurrentModificationError
        """

        def apply() -> TicketPurchase:
            current = self.get_purchase(purchase_id)
            ticket_type = self.get_ticket_type(str(current.ticket_type_id))
            cancelled, restocked = inventory.cancel(current, ticket_type)
            self._store.record_cancellation(cancelled, restocked, ticket_type.version)
            return cancelled

        cancelled = self._with_retry(apply, purchase_id)
        logger.info("Ticket %s cancelled", cancelled.ticket_number)
        return cancelled
