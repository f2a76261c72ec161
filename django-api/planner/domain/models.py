"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in planner/models.py (persistence layer).

Records are immutable: the ledgers return updated copies, so a failed
operation can never leave a half-applied mutation behind.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from planner.domain.value_objects import (
    Capacity,
    CarpoolId,
    Email,
    EventId,
    Money,
    OptionId,
    PollId,
    PurchaseId,
    SeatCount,
    TicketTypeId,
    UserId,
)


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    name: str
    description: str
    location: str
    starts_at: datetime
    ends_at: datetime
    created_at: datetime
    updated_at: datetime
    is_private: bool = False

    def __post_init__(self) -> None:
        if self.ends_at <= self.starts_at:
            raise ValueError("An event must end after it starts")


@dataclass(frozen=True)
class Vote:
    """A single user's vote for one option."""

    user_id: UserId
    voted_at: datetime


@dataclass(frozen=True)
class PollOption:
    """Domain representation of a poll answer and its votes."""

    id: OptionId
    text: str
    votes: tuple[Vote, ...] = ()

    def has_vote_from(self, user_id: UserId) -> bool:
        return any(vote.user_id == user_id for vote in self.votes)


@dataclass(frozen=True)
class Poll:
    """Domain representation of a Poll."""

    id: PollId
    event_id: EventId
    question: str
    options: tuple[PollOption, ...]
    created_by: UserId
    created_at: datetime
    updated_at: datetime
    allow_multiple_choices: bool = False
    is_closed: bool = False
    close_date: datetime | None = None
    version: int = 1

    def __post_init__(self) -> None:
        if len(self.options) < 2:
            raise ValueError("A poll must have at least 2 options")

    def option(self, option_id: OptionId) -> PollOption | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def has_user_voted(self, user_id: UserId) -> bool:
        return any(option.has_vote_from(user_id) for option in self.options)


@dataclass(frozen=True)
class OptionTally:
    """Vote statistics for one option."""

    option_id: OptionId
    text: str
    vote_count: int
    percentage: float


@dataclass(frozen=True)
class Passenger:
    user_id: UserId
    pickup_point: str
    joined_at: datetime


@dataclass(frozen=True)
class VehicleInfo:
    model: str = ""
    color: str = ""
    license_plate: str = ""


@dataclass(frozen=True)
class Carpool:
    """Domain representation of a Carpool offered for an event."""

    id: CarpoolId
    event_id: EventId
    driver_id: UserId
    departure_location: str
    departure_time: datetime
    available_seats: SeatCount
    price_per_person: Money
    created_at: datetime
    updated_at: datetime
    max_detour: Capacity = field(default_factory=lambda: Capacity(10))
    passengers: tuple[Passenger, ...] = ()
    notes: str = ""
    vehicle: VehicleInfo = field(default_factory=VehicleInfo)
    is_active: bool = True
    version: int = 1

    def __post_init__(self) -> None:
        if len(self.passengers) > self.available_seats.value:
            raise ValueError("Passengers cannot exceed the available seats")

    @property
    def remaining_seats(self) -> int:
        return self.available_seats.value - len(self.passengers)

    def has_passenger(self, user_id: UserId) -> bool:
        return any(p.user_id == user_id for p in self.passengers)


@dataclass(frozen=True)
class TicketType:
    """Domain representation of a TicketType.

    quantity_available is the only source of truth for remaining stock.
    """

    id: TicketTypeId
    event_id: EventId
    name: str
    price: Money
    quantity_total: Capacity
    quantity_available: int
    created_at: datetime
    description: str = ""
    is_active: bool = True
    version: int = 1

    def __post_init__(self) -> None:
        if self.quantity_total.value < 1:
            raise ValueError("Ticket quantity must be at least 1")
        if not 0 <= self.quantity_available <= self.quantity_total.value:
            raise ValueError("Available quantity must stay within the total quantity")


class PurchaseStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    postal_code: str
    country: str


@dataclass(frozen=True)
class Buyer:
    """Person buying a ticket; user_id links a registered account if any."""

    first_name: str
    last_name: str
    email: Email
    address: Address
    user_id: UserId | None = None


@dataclass(frozen=True)
class TicketPurchase:
    """Domain representation of a ticket sale."""

    id: PurchaseId
    ticket_type_id: TicketTypeId
    buyer: Buyer
    ticket_number: str
    purchased_at: datetime
    status: PurchaseStatus = PurchaseStatus.CONFIRMED

    @property
    def is_cancelled(self) -> bool:
        return self.status is PurchaseStatus.CANCELLED
