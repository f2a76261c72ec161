"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from planner.domain import (
    Address,
    Buyer,
    Capacity,
    Carpool,
    CarpoolId,
    Email,
    EventId,
    Money,
    OptionId,
    Poll,
    PollId,
    PollOption,
    SeatCount,
    TicketType,
    TicketTypeId,
    UserId,
)
from planner.services import CarpoolService, EventService, PollService, TicketService
from memory_store import (
    InMemoryCarpoolStore,
    InMemoryEventStore,
    InMemoryPollStore,
    InMemoryTicketStore,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def event_id() -> EventId:
    return EventId.new()


# Domain record builders


@pytest.fixture
def make_poll(event_id):
    def build(options=("Friday", "Saturday"), **overrides) -> Poll:
        fields = {
            "id": PollId.new(),
            "event_id": event_id,
            "question": "Which day works best?",
            "options": tuple(PollOption(id=OptionId.new(), text=text) for text in options),
            "created_by": UserId.new(),
            "created_at": NOW,
            "updated_at": NOW,
        }
        fields.update(overrides)
        return Poll(**fields)

    return build


@pytest.fixture
def make_carpool(event_id):
    def build(seats: int = 3, **overrides) -> Carpool:
        fields = {
            "id": CarpoolId.new(),
            "event_id": event_id,
            "driver_id": UserId.new(),
            "departure_location": "Central Station",
            "departure_time": NOW + timedelta(days=2),
            "available_seats": SeatCount(seats),
            "price_per_person": Money(Decimal("5.00")),
            "created_at": NOW,
            "updated_at": NOW,
        }
        fields.update(overrides)
        return Carpool(**fields)

    return build


@pytest.fixture
def make_ticket_type(event_id):
    def build(quantity: int = 10, **overrides) -> TicketType:
        fields = {
            "id": TicketTypeId.new(),
            "event_id": event_id,
            "name": "General admission",
            "price": Money(Decimal("25.00")),
            "quantity_total": Capacity(quantity),
            "quantity_available": quantity,
            "created_at": NOW,
        }
        fields.update(overrides)
        return TicketType(**fields)

    return build


@pytest.fixture
def address() -> Address:
    return Address(street="1 Main Street", city="Lisbon", postal_code="1000-001", country="PT")


@pytest.fixture
def make_buyer(address):
    def build(email: str = "ana@example.com") -> Buyer:
        return Buyer(first_name="Ana", last_name="Silva", email=Email(email), address=address)

    return build


# In-memory services

@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def event_service(event_store, clock) -> EventService:
    return EventService(event_store, clock=clock)



@pytest.fixture
def poll_store(event_id) -> InMemoryPollStore:
    return InMemoryPollStore({event_id})


@pytest.fixture
def poll_service(poll_store, clock) -> PollService:
    return PollService(poll_store, clock=clock, max_retries=3)


@pytest.fixture
def carpool_store(event_id) -> InMemoryCarpoolStore:
    return InMemoryCarpoolStore({event_id})


@pytest.fixture
def carpool_service(carpool_store, clock) -> CarpoolService:
    return CarpoolService(carpool_store, clock=clock, max_retries=3)


@pytest.fixture
def ticket_store(event_id) -> InMemoryTicketStore:
    return InMemoryTicketStore({event_id})


@pytest.fixture
def ticket_service(ticket_store, clock) -> TicketService:
    return TicketService(ticket_store, clock=clock, max_retries=3)


# Database


@pytest.fixture
def event(db):
    from planner.models import Event

    return Event.objects.create(
        name="Summer meetup",
        description="Annual summer meetup",
        location="Lisbon",
        starts_at=NOW + timedelta(days=7),
        ends_at=NOW + timedelta(days=7, hours=6),
    )
