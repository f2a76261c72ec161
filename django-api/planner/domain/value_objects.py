"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Self
from uuid import UUID, uuid4


@dataclass(frozen=True)
class _Identifier:
    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventId(_Identifier):
    """Unique identifier for an Event."""


@dataclass(frozen=True)
class PollId(_Identifier):
    """Unique identifier for a Poll."""


@dataclass(frozen=True)
class OptionId(_Identifier):
    """Unique identifier for a PollOption."""


@dataclass(frozen=True)
class CarpoolId(_Identifier):
    """Unique identifier for a Carpool."""


@dataclass(frozen=True)
class TicketTypeId(_Identifier):
    """Unique identifier for a TicketType."""


@dataclass(frozen=True)
class PurchaseId(_Identifier):
    """Unique identifier for a TicketPurchase."""


@dataclass(frozen=True)
class UserId(_Identifier):
    """Identifier of a platform user (owned by the accounts subsystem)."""


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


MIN_SEATS = 1
MAX_SEATS = 8


@dataclass(frozen=True)
class SeatCount:
    """Seats offered by a carpool driver, between 1 and 8."""

    value: int

    def __post_init__(self) -> None:
        if not MIN_SEATS <= self.value <= MAX_SEATS:
            raise ValueError(f"Seat count must be between {MIN_SEATS} and {MAX_SEATS}")


@dataclass(frozen=True)
class Email:
    """Buyer email, normalised to lower case."""

    value: str

    def __post_init__(self) -> None:
        normalised = self.value.strip().lower()
        local, _, domain = normalised.partition("@")
        host, _, tld = domain.rpartition(".")
        if not (local and host and tld) or any(c.isspace() for c in normalised):
            raise ValueError("Invalid email address")
        object.__setattr__(self, "value", normalised)

    def __str__(self) -> str:
        return self.value
