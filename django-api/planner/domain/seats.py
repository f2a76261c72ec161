"""Seat ledger: carpool passenger bookkeeping.

Invariants kept by every operation:
- len(passengers) <= available_seats
- the driver never rides as a passenger
- a user appears at most once in passengers
"""

from dataclasses import replace
from datetime import datetime

from planner.domain.errors import (
    CarpoolFullError,
    CarpoolInactiveError,
    DriverConflictError,
    DuplicatePassengerError,
    PassengerNotFoundError,
    SeatConflictError,
)
from planner.domain.models import Carpool, Passenger
from planner.domain.value_objects import SeatCount, UserId


def join_carpool(
    carpool: Carpool, user_id: UserId, pickup_point: str, now: datetime
) -> tuple[Carpool, int]:
    """Add a passenger and return the updated carpool with its remaining seats.

    Raises:
        CarpoolInactiveError: If the carpool is no longer active.
        DriverConflictError: If the user is the driver.
        DuplicatePassengerError: If the user already joined.
        CarpoolFullError: If every seat is taken.
    """
    if not carpool.is_active:
        raise CarpoolInactiveError()
    if user_id == carpool.driver_id:
        raise DriverConflictError()
    if carpool.has_passenger(user_id):
        raise DuplicatePassengerError()
    if len(carpool.passengers) >= carpool.available_seats.value:
        raise CarpoolFullError()

    passenger = Passenger(user_id=user_id, pickup_point=pickup_point, joined_at=now)
    updated = replace(carpool, passengers=carpool.passengers + (passenger,), updated_at=now)
    return updated, updated.remaining_seats


def leave_carpool(carpool: Carpool, user_id: UserId, now: datetime) -> Carpool:
    """Remove the user's passenger entry.

    Raises:
        PassengerNotFoundError: If the user is not a passenger.
    """
    remaining = tuple(p for p in carpool.passengers if p.user_id != user_id)
    if len(remaining) == len(carpool.passengers):
        raise PassengerNotFoundError(str(user_id))
    return replace(carpool, passengers=remaining, updated_at=now)


def resize(carpool: Carpool, seats: SeatCount, now: datetime) -> Carpool:
    """Change the number of offered seats.

    Raises:
        SeatConflictError: If fewer seats than current passengers are requested.
    """
    if seats.value < len(carpool.passengers):
        raise SeatConflictError(len(carpool.passengers))
    if seats == carpool.available_seats:
        return carpool
    return replace(carpool, available_seats=seats, updated_at=now)
