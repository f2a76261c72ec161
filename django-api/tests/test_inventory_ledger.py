"""Unit tests for the inventory ledger.

Run with: pytest tests/test_inventory_ledger.py -v
"""

import random
import re
from datetime import datetime, timezone

import pytest

from planner.domain import PurchaseStatus
from planner.domain import inventory
from planner.domain.errors import (
    AlreadyCancelledError,
    DuplicatePurchaseError,
    SoldOutError,
    TicketTypeInactiveError,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _buy(ticket_type, buyer, has_active_purchase=False):
    return inventory.purchase(
        ticket_type,
        buyer,
        has_active_purchase=has_active_purchase,
        ticket_number=inventory.generate_ticket_number(NOW),
        now=NOW,
    )


class TestTicketNumber:
    """Tests for generate_ticket_number."""

    def test_format(self):
        """Ticket numbers are TICKET-<epoch ms>-<9 upper-case chars>."""
        number = inventory.generate_ticket_number(NOW)
        millis = int(NOW.timestamp() * 1000)
        assert re.fullmatch(rf"TICKET-{millis}-[0-9A-Z]{{9}}", number)

    def test_numbers_differ_within_same_millisecond(self):
        """Numbers generated at the same instant are still distinct."""
        numbers = {inventory.generate_ticket_number(NOW) for _ in range(500)}
        assert len(numbers) == 500


class TestPurchase:
    """Tests for purchase."""

    def test_purchase_takes_one_unit(self, make_ticket_type, make_buyer):
        """A purchase decrements stock and returns a confirmed ticket."""
        ticket_type = make_ticket_type(quantity=5)
        buyer = make_buyer()

        sold_type, sold = _buy(ticket_type, buyer)

        assert sold_type.quantity_available == 4
        assert sold.status is PurchaseStatus.CONFIRMED
        assert sold.ticket_type_id == ticket_type.id
        assert sold.buyer == buyer
        assert sold.purchased_at == NOW
        assert ticket_type.quantity_available == 5

    def test_inactive_type_rejected(self, make_ticket_type, make_buyer):
        """A deactivated ticket type raises TicketTypeInactiveError."""
        with pytest.raises(TicketTypeInactiveError):
            _buy(make_ticket_type(is_active=False), make_buyer())

    def test_sold_out_rejected(self, make_ticket_type, make_buyer):
        """No stock left raises SoldOutError."""
        with pytest.raises(SoldOutError):
            _buy(make_ticket_type(quantity=1, quantity_available=0), make_buyer())

    def test_duplicate_rejected(self, make_ticket_type, make_buyer):
        """An email with an active purchase raises DuplicatePurchaseError."""
        with pytest.raises(DuplicatePurchaseError):
            _buy(make_ticket_type(), make_buyer(), has_active_purchase=True)

    def test_sold_out_reported_before_duplicate(self, make_ticket_type, make_buyer):
        """Stock is checked before the duplicate rule."""
        ticket_type = make_ticket_type(quantity=1, quantity_available=0)
        with pytest.raises(SoldOutError):
            _buy(ticket_type, make_buyer(), has_active_purchase=True)


class TestCancel:
    """Tests for cancel."""

    def test_cancel_restocks(self, make_ticket_type, make_buyer):
        """Cancelling marks the purchase cancelled and returns the unit."""
        sold_type, sold = _buy(make_ticket_type(quantity=3), make_buyer())

        cancelled, restocked = inventory.cancel(sold, sold_type)

        assert cancelled.status is PurchaseStatus.CANCELLED
        assert cancelled.is_cancelled
        assert restocked.quantity_available == 3

    def test_cancel_twice_rejected(self, make_ticket_type, make_buyer):
        """A cancelled purchase cannot be cancelled again."""
        sold_type, sold = _buy(make_ticket_type(), make_buyer())
        cancelled, restocked = inventory.cancel(sold, sold_type)

        with pytest.raises(AlreadyCancelledError):
            inventory.cancel(cancelled, restocked)

    def test_restock_never_exceeds_total(self, make_ticket_type, make_buyer):
        """Restocking a full ticket type stays at the total."""
        _, sold = _buy(make_ticket_type(quantity=2), make_buyer())
        _, restocked = inventory.cancel(sold, make_ticket_type(quantity=2))
        assert restocked.quantity_available == 2

    def test_single_ticket_scenario(self, make_ticket_type, make_buyer):
        """Total 1: a@x.com buys, b@x.com is sold out, cancelling a@x.com restores 1."""
        ticket_type = make_ticket_type(quantity=1)

        ticket_type, first = _buy(ticket_type, make_buyer("a@x.com"))
        assert ticket_type.quantity_available == 0

        with pytest.raises(SoldOutError):
            _buy(ticket_type, make_buyer("b@x.com"))

        _, ticket_type = inventory.cancel(first, ticket_type)
        assert ticket_type.quantity_available == 1


class TestStockInvariant:
    """Stock stays within [0, total] for any purchase/cancel interleaving."""

    def test_random_purchase_cancel_sequence(self, make_ticket_type, make_buyer):
        """quantity_available never goes negative nor above the total."""
        rng = random.Random(3)
        ticket_type = make_ticket_type(quantity=3)
        active = []

        for i in range(80):
            if active and rng.random() < 0.4:
                purchase = active.pop(rng.randrange(len(active)))
                _, ticket_type = inventory.cancel(purchase, ticket_type)
            else:
                try:
                    ticket_type, purchase = _buy(ticket_type, make_buyer(f"user{i}@example.com"))
                    active.append(purchase)
                except SoldOutError:
                    assert ticket_type.quantity_available == 0
            assert 0 <= ticket_type.quantity_available <= ticket_type.quantity_total.value
            assert ticket_type.quantity_available == 3 - len(active)
