"""Domain error codes for the planner module.

Every failure a ledger or service can report is a DomainError subclass.
The category base (NotFoundError, PreconditionFailedError, ConflictError,
InvalidInputError) decides how the HTTP layer reports it; only ConflictError
is retryable.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    POLL_NOT_FOUND = "POLL_NOT_FOUND"
    OPTION_NOT_FOUND = "OPTION_NOT_FOUND"
    CARPOOL_NOT_FOUND = "CARPOOL_NOT_FOUND"
    PASSENGER_NOT_FOUND = "PASSENGER_NOT_FOUND"
    TICKET_TYPE_NOT_FOUND = "TICKET_TYPE_NOT_FOUND"
    PURCHASE_NOT_FOUND = "PURCHASE_NOT_FOUND"

    INVALID_ID = "INVALID_ID"
    INVALID_INPUT = "INVALID_INPUT"

    POLL_CLOSED = "POLL_CLOSED"
    ALREADY_VOTED = "ALREADY_VOTED"
    CARPOOL_INACTIVE = "CARPOOL_INACTIVE"
    DRIVER_CONFLICT = "DRIVER_CONFLICT"
    DUPLICATE_PASSENGER = "DUPLICATE_PASSENGER"
    CARPOOL_FULL = "CARPOOL_FULL"
    SEAT_CONFLICT = "SEAT_CONFLICT"
    TICKET_TYPE_INACTIVE = "TICKET_TYPE_INACTIVE"
    SOLD_OUT = "SOLD_OUT"
    DUPLICATE_PURCHASE = "DUPLICATE_PURCHASE"
    ALREADY_CANCELLED = "ALREADY_CANCELLED"

    VERSION_CONFLICT = "VERSION_CONFLICT"
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(DomainError):
    """A referenced record or sub-record is absent."""


class PreconditionFailedError(DomainError):
    """A business rule rejected the operation."""


class ConflictError(DomainError):
    """A concurrent modification was detected."""


class InvalidInputError(DomainError):
    """Input could not be turned into domain values."""


# Not found


class EventNotFoundError(NotFoundError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(code=ErrorCode.EVENT_NOT_FOUND, message="Event not found")
        self.event_id = event_id


class PollNotFoundError(NotFoundError):
    """Raised when a poll is not found."""

    def __init__(self, poll_id: str) -> None:
        super().__init__(code=ErrorCode.POLL_NOT_FOUND, message="Poll not found")
        self.poll_id = poll_id


class OptionNotFoundError(NotFoundError):
    """Raised when an option does not belong to the poll."""

    def __init__(self, option_id: str) -> None:
        super().__init__(code=ErrorCode.OPTION_NOT_FOUND, message="Option not found")
        self.option_id = option_id


class CarpoolNotFoundError(NotFoundError):
    """Raised when a carpool is not found."""

    def __init__(self, carpool_id: str) -> None:
        super().__init__(code=ErrorCode.CARPOOL_NOT_FOUND, message="Carpool not found")
        self.carpool_id = carpool_id


class PassengerNotFoundError(NotFoundError):
    """Raised when leaving a carpool the user never joined."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            code=ErrorCode.PASSENGER_NOT_FOUND,
            message="User is not a passenger of this carpool",
        )
        self.user_id = user_id


class TicketTypeNotFoundError(NotFoundError):
    """Raised when a ticket type is not found."""

    def __init__(self, ticket_type_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_NOT_FOUND, message="Ticket type not found"
        )
        self.ticket_type_id = ticket_type_id


class PurchaseNotFoundError(NotFoundError):
    """Raised when a ticket purchase is not found."""

    def __init__(self, purchase_id: str) -> None:
        super().__init__(code=ErrorCode.PURCHASE_NOT_FOUND, message="Purchase not found")
        self.purchase_id = purchase_id


# Invalid input


class InvalidIdError(InvalidInputError):
    """Raised when an ID is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(code=ErrorCode.INVALID_ID, message=f"Invalid {kind} ID format")
        self.kind = kind


class InvalidValueError(InvalidInputError):
    """Raised when a value object rejects its input."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.INVALID_INPUT, message=message)


# Preconditions


class PollClosedError(PreconditionFailedError):
    """Raised when voting on a poll that is closed or past its close date."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.POLL_CLOSED, message="This poll is closed")


class AlreadyVotedError(PreconditionFailedError):
    """Raised when a user votes twice in a single-choice poll."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_VOTED, message="You have already voted in this poll"
        )


class CarpoolInactiveError(PreconditionFailedError):
    """Raised when joining a carpool that is no longer active."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.CARPOOL_INACTIVE, message="This carpool is no longer active"
        )


class DriverConflictError(PreconditionFailedError):
    """Raised when the driver tries to join their own carpool."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DRIVER_CONFLICT, message="The driver cannot be a passenger"
        )


class DuplicatePassengerError(PreconditionFailedError):
    """Raised when a user joins a carpool twice."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_PASSENGER,
            message="You have already joined this carpool",
        )


class CarpoolFullError(PreconditionFailedError):
    """Raised when a carpool has no seats left."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.CARPOOL_FULL, message="No seats left")


class SeatConflictError(PreconditionFailedError):
    """Raised when shrinking a carpool below its passenger count."""

    def __init__(self, passengers: int) -> None:
        super().__init__(
            code=ErrorCode.SEAT_CONFLICT,
            message="Cannot reduce seats below the current number of passengers",
        )
        self.passengers = passengers


class TicketTypeInactiveError(PreconditionFailedError):
    """Raised when buying a deactivated ticket type."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.TICKET_TYPE_INACTIVE,
            message="This ticket type is no longer available",
        )


class SoldOutError(PreconditionFailedError):
    """Raised when a ticket type has no stock left."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.SOLD_OUT, message="No tickets left")


class DuplicatePurchaseError(PreconditionFailedError):
    """Raised when an email already holds an active ticket of the type."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.DUPLICATE_PURCHASE,
            message="A ticket of this type was already bought with this email",
        )


class AlreadyCancelledError(PreconditionFailedError):
    """Raised when cancelling a purchase that is already cancelled."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_CANCELLED, message="This ticket is already cancelled"
        )


# Conflicts


class VersionConflictError(ConflictError):
    """Raised by a store when the saved version no longer matches."""

    def __init__(self, record_id: str, expected_version: int) -> None:
        super().__init__(
            code=ErrorCode.VERSION_CONFLICT, message="Record was modified concurrently"
        )
        self.record_id = record_id
        self.expected_version = expected_version


class ConcurrentModificationError(ConflictError):
    """Raised by a service once its retries are exhausted."""

    def __init__(self, attempts: int) -> None:
        super().__init__(
            code=ErrorCode.CONCURRENT_MODIFICATION,
            message="Record is busy, please retry",
        )
        self.attempts = attempts
