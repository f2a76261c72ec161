from planner.domain.models import (
    Address,
    Buyer,
    Carpool,
    Event,
    OptionTally,
    Passenger,
    Poll,
    PollOption,
    PurchaseStatus,
    TicketPurchase,
    TicketType,
    VehicleInfo,
    Vote,
)
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

__all__ = [
    "Address",
    "Buyer",
    "Carpool",
    "Event",
    "OptionTally",
    "Passenger",
    "Poll",
    "PollOption",
    "PurchaseStatus",
    "TicketPurchase",
    "TicketType",
    "VehicleInfo",
    "Vote",
    "EventId",
    "PollId",
    "OptionId",
    "CarpoolId",
    "TicketTypeId",
    "PurchaseId",
    "UserId",
    "Money",
    "Capacity",
    "SeatCount",
    "Email",
]
