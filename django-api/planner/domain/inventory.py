"""Inventory ledger: ticket stock and purchases.

quantity_available on the TicketType is the only stock counter. A purchase
takes one unit and a cancellation gives it back; the caller persists the
returned pair as one unit.
"""

import secrets
import string
from dataclasses import replace
from datetime import datetime

from planner.domain.errors import (
    AlreadyCancelledError,
    DuplicatePurchaseError,
    SoldOutError,
    TicketTypeInactiveError,
)
from planner.domain.models import Buyer, PurchaseStatus, TicketPurchase, TicketType
from planner.domain.value_objects import PurchaseId

_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase
_SUFFIX_LENGTH = 9


def generate_ticket_number(now: datetime) -> str:
    """Return a ticket number such as ``TICKET-1718000000000-K3Q9Z0A1B``."""
    millis = int(now.timestamp() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"TICKET-{millis}-{suffix}"


def purchase(
    ticket_type: TicketType,
    buyer: Buyer,
    *,
    has_active_purchase: bool,
    ticket_number: str,
    now: datetime,
) -> tuple[TicketType, TicketPurchase]:
    """Sell one ticket.

    has_active_purchase tells whether the buyer's email already holds a
    non-cancelled purchase of this ticket type.

    Raises:
        TicketTypeInactiveError: If the ticket type was deactivated.
        SoldOutError: If no stock is left.
        DuplicatePurchaseError: If the email already holds a ticket of this type.
    """
    if not ticket_type.is_active:
        raise TicketTypeInactiveError()
    if ticket_type.quantity_available <= 0:
        raise SoldOutError()
    if has_active_purchase:
        raise DuplicatePurchaseError()

    sold = TicketPurchase(
        id=PurchaseId.new(),
        ticket_type_id=ticket_type.id,
        buyer=buyer,
        ticket_number=ticket_number,
        purchased_at=now,
        status=PurchaseStatus.CONFIRMED,
    )
    return replace(ticket_type, quantity_available=ticket_type.quantity_available - 1), sold


def cancel(
    ticket_purchase: TicketPurchase, ticket_type: TicketType
) -> tuple[TicketPurchase, TicketType]:
    """Cancel a purchase and return its unit to stock.

    Raises:
        AlreadyCancelledError: If the purchase is already cancelled.
    """
    if ticket_purchase.is_cancelled:
        raise AlreadyCancelledError()

    restocked = min(ticket_type.quantity_available + 1, ticket_type.quantity_total.value)
    return (
        replace(ticket_purchase, status=PurchaseStatus.CANCELLED),
        replace(ticket_type, quantity_available=restocked),
    )
