"""Integration tests for the Django ORM stores.

These test the versioned conditional updates and the database constraints.
Run with: pytest tests/test_django_store.py -v
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction
from django.db.models import F

from planner import models as orm
from planner.domain import Event, EventId, UserId, inventory, seats, votes
from planner.domain.errors import DuplicatePurchaseError, VersionConflictError
from planner.services import CarpoolService, PollService, TicketService
from planner.stores.django_store import (
    DjangoCarpoolStore,
    DjangoEventStore,
    DjangoPollStore,
    DjangoTicketStore,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def event_key(event) -> EventId:
    return EventId(event.id)


@pytest.mark.django_db
class TestDjangoPollStore:
    """Tests for DjangoPollStore."""

    def test_event_lookup(self, event_key):
        """event_exists reflects the events table."""
        store = DjangoPollStore()
        assert store.event_exists(event_key)
        assert not store.event_exists(EventId.new())

    def test_insert_and_load_keeps_option_order(self, event_key, make_poll):
        """Options come back in insertion order."""
        store = DjangoPollStore()
        poll = make_poll(options=("C", "A", "B"), event_id=event_key)
        store.insert_poll(poll)

        loaded = store.get_poll(poll.id)

        assert [o.text for o in loaded.options] == ["C", "A", "B"]
        assert loaded.version == 1

    def test_save_writes_votes_and_bumps_version(self, event_key, make_poll):
        """A save rewrites the votes and increments the version."""
        store = DjangoPollStore()
        poll = store.insert_poll(make_poll(event_id=event_key))
        user = UserId.new()

        saved = store.save_poll(votes.cast_vote(poll, user, poll.options[1].id, NOW), 1)

        loaded = store.get_poll(poll.id)
        assert saved.version == loaded.version == 2
        assert loaded.options[1].has_vote_from(user)

    def test_stale_save_raises_and_writes_nothing(self, event_key, make_poll):
        """A save with an outdated version raises VersionConflictError."""
        store = DjangoPollStore()
        poll = store.insert_poll(make_poll(event_id=event_key))
        store.save_poll(votes.cast_vote(poll, UserId.new(), poll.options[0].id, NOW), 1)

        stale = votes.cast_vote(poll, UserId.new(), poll.options[1].id, NOW)
        with pytest.raises(VersionConflictError):
            store.save_poll(stale, 1)

        loaded = store.get_poll(poll.id)
        assert [len(o.votes) for o in loaded.options] == [1, 0]
        assert loaded.version == 2

    def test_vote_unique_per_option(self, event_key, make_poll):
        """The database refuses two votes by one user on one option."""
        store = DjangoPollStore()
        poll = store.insert_poll(make_poll(event_id=event_key))
        option_id = poll.options[0].id.value
        user = UserId.new().value
        orm.Vote.objects.create(option_id=option_id, user_id=user, voted_at=NOW)

        with pytest.raises(IntegrityError), transaction.atomic():
            orm.Vote.objects.create(option_id=option_id, user_id=user, voted_at=NOW)

    def test_list_and_delete(self, event_key, make_poll):
        """Polls are listed per event and deleted with their options."""
        store = DjangoPollStore()
        poll = store.insert_poll(make_poll(event_id=event_key))

        assert [p.id for p in store.list_polls(event_key)] == [poll.id]
        assert store.delete_poll(poll.id)
        assert not orm.PollOption.objects.filter(poll_id=poll.id.value).exists()
        assert not store.delete_poll(poll.id)


@pytest.mark.django_db
class TestDjangoCarpoolStore:
    """Tests for DjangoCarpoolStore."""

    def test_passengers_are_rewritten(self, event_key, make_carpool):
        """Joining and leaving is reflected in the passengers table."""
        store = DjangoCarpoolStore()
        carpool = store.insert_carpool(make_carpool(event_id=event_key, seats=2))
        stays, goes = UserId.new(), UserId.new()

        carpool, _ = seats.join_carpool(carpool, stays, "Gate A", NOW)
        carpool = store.save_carpool(carpool, 1)
        carpool, _ = seats.join_carpool(carpool, goes, "", NOW)
        carpool = store.save_carpool(carpool, 2)
        carpool = store.save_carpool(seats.leave_carpool(carpool, goes, NOW), 3)

        loaded = store.get_carpool(carpool.id)
        assert [(p.user_id, p.pickup_point) for p in loaded.passengers] == [(stays, "Gate A")]
        assert loaded.version == 4
        assert loaded.price_per_person.amount == Decimal("5.00")

    def test_stale_save_raises(self, event_key, make_carpool):
        """Two joins from the same read: the second save conflicts."""
        store = DjangoCarpoolStore()
        carpool = store.insert_carpool(make_carpool(event_id=event_key, seats=1))

        first, _ = seats.join_carpool(carpool, UserId.new(), "", NOW)
        second, _ = seats.join_carpool(carpool, UserId.new(), "", NOW)
        store.save_carpool(first, 1)

        with pytest.raises(VersionConflictError):
            store.save_carpool(second, 1)
        assert orm.Passenger.objects.filter(carpool_id=carpool.id.value).count() == 1

    def test_service_over_django_store(self, event):
        """CarpoolService works end to end over the ORM."""
        service = CarpoolService(DjangoCarpoolStore(), clock=lambda: NOW)
        carpool = service.create_carpool(
            event_id=str(event.id),
            driver_id=str(UserId.new()),
            departure_location="Station",
            departure_time=NOW + timedelta(days=1),
            available_seats=2,
            price_per_person=Decimal("3"),
        )

        result = service.join(str(carpool.id), str(UserId.new()))

        assert result.remaining_seats == 1
        assert orm.Carpool.objects.get(pk=carpool.id.value).version == 2


@pytest.mark.django_db
class TestDjangoTicketStore:
    """Tests for DjangoTicketStore."""

    def test_purchase_is_recorded_with_stock(self, event_key, make_ticket_type, make_buyer):
        """record_purchase writes the purchase and the decremented stock together."""
        store = DjangoTicketStore()
        ticket_type = store.insert_ticket_type(make_ticket_type(event_id=event_key, quantity=2))
        sold_type, sold = inventory.purchase(
            ticket_type,
            make_buyer(),
            has_active_purchase=False,
            ticket_number=inventory.generate_ticket_number(NOW),
            now=NOW,
        )

        store.record_purchase(sold_type, sold, ticket_type.version)

        row = orm.TicketType.objects.get(pk=ticket_type.id.value)
        assert (row.quantity_available, row.version) == (1, 2)
        assert store.get_purchase(sold.id) == sold
        assert store.has_active_purchase(sold.buyer.email, ticket_type.id)

    def test_duplicate_purchase_blocked_by_constraint(
        self, event_key, make_ticket_type, make_buyer
    ):
        """Without the pre-check, the partial unique index still refuses a second ticket."""
        store = DjangoTicketStore()
        ticket_type = store.insert_ticket_type(make_ticket_type(event_id=event_key, quantity=5))

        for attempt in range(2):
            current = store.get_ticket_type(ticket_type.id)
            sold_type, sold = inventory.purchase(
                current,
                make_buyer(),
                has_active_purchase=False,
                ticket_number=inventory.generate_ticket_number(NOW),
                now=NOW,
            )
            if attempt == 0:
                store.record_purchase(sold_type, sold, current.version)
            else:
                with pytest.raises(DuplicatePurchaseError):
                    store.record_purchase(sold_type, sold, current.version)

        assert store.get_ticket_type(ticket_type.id).quantity_available == 4
        assert orm.TicketPurchase.objects.count() == 1

    def test_cancelled_purchase_frees_the_email(self, event, address):
        """The partial index ignores cancelled purchases."""
        service = TicketService(DjangoTicketStore(), clock=lambda: NOW)
        ticket_type = service.create_ticket_type(str(event.id), "GA", Decimal("10"), 3)
        buy = dict(first_name="Ana", last_name="Silva", email="ana@example.com", address=address)

        first = service.purchase(str(ticket_type.id), **buy)
        service.cancel_purchase(str(first.id))
        second = service.purchase(str(ticket_type.id), **buy)

        assert service.get_purchase(str(first.id)).is_cancelled
        assert not service.get_purchase(str(second.id)).is_cancelled
        assert service.get_ticket_type(str(ticket_type.id)).quantity_available == 2

    def test_stale_purchase_conflicts(self, event_key, make_ticket_type, make_buyer):
        """A purchase built on an outdated read raises VersionConflictError."""
        store = DjangoTicketStore()
        ticket_type = store.insert_ticket_type(make_ticket_type(event_id=event_key, quantity=1))
        store.save_ticket_type(replace(ticket_type, name="Renamed"), 1)

        sold_type, sold = inventory.purchase(
            ticket_type,
            make_buyer(),
            has_active_purchase=False,
            ticket_number=inventory.generate_ticket_number(NOW),
            now=NOW,
        )
        with pytest.raises(VersionConflictError):
            store.record_purchase(sold_type, sold, ticket_type.version)

        assert store.get_ticket_type(ticket_type.id).quantity_available == 1
        assert not orm.TicketPurchase.objects.exists()

    def test_stock_cannot_exceed_total(self, event_key, make_ticket_type):
        """The check constraint refuses quantity_available above quantity."""
        store = DjangoTicketStore()
        ticket_type = store.insert_ticket_type(make_ticket_type(event_id=event_key, quantity=1))

        with pytest.raises(IntegrityError), transaction.atomic():
            orm.TicketType.objects.filter(pk=ticket_type.id.value).update(
                quantity_available=F("quantity") + 1
            )

    def test_new_rows_start_fully_stocked(self, event):
        """Ticket types created outside the service start with all tickets available."""
        row = orm.TicketType.objects.create(event=event, name="Door", price=Decimal("15"), quantity=7)
        assert row.quantity_available == 7

    def test_list_only_active_by_price(self, event, event_key):
        """Inactive ticket types are hidden; the rest are sorted by price."""
        service = TicketService(DjangoTicketStore(), clock=lambda: NOW)
        dear = service.create_ticket_type(str(event.id), "VIP", Decimal("90"), 5)
        cheap = service.create_ticket_type(str(event.id), "GA", Decimal("15"), 5)
        hidden = service.create_ticket_type(str(event.id), "Old", Decimal("1"), 5)
        service.deactivate_ticket_type(str(hidden.id))

        listed = DjangoTicketStore().list_ticket_types(event_key)

        assert [t.id for t in listed] == [cheap.id, dear.id]


@pytest.mark.django_db
class TestPollServiceOverDjango:
    """PollService against the ORM store."""

    def test_vote_flow(self, event):
        """Vote, revote and retract persist through the ORM."""
        service = PollService(DjangoPollStore(), clock=lambda: NOW)
        poll = service.create_poll(
            event_id=str(event.id),
            question="Which day works best?",
            options=["Friday", "Saturday"],
            created_by=str(UserId.new()),
        )
        user = str(UserId.new())

        service.cast_vote(str(poll.id), user, str(poll.options[0].id))
        service.change_vote(str(poll.id), user, str(poll.options[1].id))
        results = service.get_results(str(poll.id))
        assert [s.vote_count for s in results.statistics] == [0, 1]
        assert [s.percentage for s in results.statistics] == [0, 100.0]

        retracted = service.retract_vote(str(poll.id), user)
        assert retracted.version == 4
        assert orm.Vote.objects.count() == 0


@pytest.mark.django_db
class TestDjangoEventStore:
    """Tests for DjangoEventStore."""

    def _event(self, **overrides) -> Event:
        fields = {
            "id": EventId.new(),
            "name": "Summer meetup",
            "description": "Annual summer meetup",
            "location": "Lisbon",
            "starts_at": NOW + timedelta(days=7),
            "ends_at": NOW + timedelta(days=7, hours=6),
            "created_at": NOW,
            "updated_at": NOW,
        }
        fields.update(overrides)
        return Event(**fields)

    def test_insert_list_and_filter(self):
        """Events come back by start time and filtered by privacy and start."""
        store = DjangoEventStore()
        later = store.insert_event(
            self._event(starts_at=NOW + timedelta(days=8), ends_at=NOW + timedelta(days=9))
        )
        sooner = store.insert_event(self._event(is_private=True))

        assert [e.id for e in store.list_events()] == [sooner.id, later.id]
        assert [e.id for e in store.list_events(is_private=False)] == [later.id]
        assert [e.id for e in store.list_events(starts_after=NOW + timedelta(days=8))] == [
            later.id
        ]
        assert store.event_exists(sooner.id)

    def test_update_missing_event(self):
        """Updating an event that does not exist returns None."""
        assert DjangoEventStore().update_event(self._event()) is None

    def test_update_overwrites_details(self):
        """update_event writes the new details."""
        store = DjangoEventStore()
        event = store.insert_event(self._event())

        saved = store.update_event(replace(event, location="Porto", updated_at=NOW))

        assert saved.location == "Porto"
        assert orm.Event.objects.get(pk=event.id.value).location == "Porto"

    def test_delete_cascades(self, make_carpool):
        """Deleting an event removes its carpools."""
        store = DjangoEventStore()
        event = store.insert_event(self._event())
        DjangoCarpoolStore().insert_carpool(make_carpool(event_id=event.id))

        assert store.delete_event(event.id)
        assert not orm.Carpool.objects.exists()
        assert not store.delete_event(event.id)
