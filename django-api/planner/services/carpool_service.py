"""Carpool service - seat ledger orchestration."""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from planner.domain import (
    Capacity,
    Carpool,
    CarpoolId,
    EventId,
    Money,
    SeatCount,
    UserId,
    VehicleInfo,
)
from planner.domain import seats
from planner.domain.errors import CarpoolNotFoundError, EventNotFoundError, InvalidValueError
from planner.services.base import Clock, LedgerService, parse_id
from planner.stores.interfaces import CarpoolStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JoinResult:
    carpool: Carpool
    remaining_seats: int


def _value(factory, raw):
    try:
        return factory(raw)
    except ValueError as exc:
        raise InvalidValueError(str(exc)) from None


class CarpoolService(LedgerService):
    """Service for carpools and the seat ledger."""

    def __init__(
        self, store: CarpoolStore, clock: Clock | None = None, max_retries: int | None = None
    ) -> None:
        self._store = store
        super().__init__(clock, max_retries)

    def list_carpools(
        self, event_id: str | None = None, is_active: bool | None = None
    ) -> list[Carpool]:
        event = parse_id(EventId, event_id, "event") if event_id is not None else None
        return self._store.list_carpools(event, is_active)

    def get_carpool(self, carpool_id: str) -> Carpool:
        """Return a carpool by ID.

        Raises:
            InvalidIdError: If the carpool_id is not a valid UUID.
            CarpoolNotFoundError: If the carpool does not exist.
        """
        carpool = self._store.get_carpool(parse_id(CarpoolId, carpool_id, "carpool"))
        if carpool is None:
            raise CarpoolNotFoundError(str(carpool_id))
        return carpool

    def create_carpool(
        self,
        event_id: str,
        driver_id: str,
        departure_location: str,
        departure_time: datetime,
        available_seats: int,
        price_per_person: Decimal,
        max_detour: int = 10,
        notes: str = "",
        vehicle: VehicleInfo | None = None,
    ) -> Carpool:
        """Offer a new carpool for an event.

        Raises:
            EventNotFoundError: If the event does not exist.
            InvalidValueError: If seats, price or detour are out of range.
        """
        event = parse_id(EventId, event_id, "event")
        driver = parse_id(UserId, driver_id, "user")
        if not self._store.event_exists(event):
            raise EventNotFoundError(str(event_id))

        now = self._now()
        carpool = Carpool(
            id=CarpoolId.new(),
            event_id=event,
            driver_id=driver,
            departure_location=departure_location.strip(),
            departure_time=departure_time,
            available_seats=_value(SeatCount, available_seats),
            price_per_person=_value(Money, Decimal(str(price_per_person))),
            created_at=now,
            updated_at=now,
            max_detour=_value(Capacity, max_detour),
            notes=notes,
            vehicle=vehicle or VehicleInfo(),
        )
        created = self._store.insert_carpool(carpool)
        logger.info("Carpool %s created for event %s", created.id, event)
        return created

    def update_carpool(
        self,
        carpool_id: str,
        *,
        departure_location: str | None = None,
        departure_time: datetime | None = None,
        available_seats: int | None = None,
        price_per_person: Decimal | None = None,
        max_detour: int | None = None,
        notes: str | None = None,
        vehicle: VehicleInfo | None = None,
        is_active: bool | None = None,
    ) -> Carpool:
        """Update carpool details. Seat changes go through the seat ledger.

        Raises:
            SeatConflictError: If available_seats is below the passenger count.
        """
        new_seats = _value(SeatCount, available_seats) if available_seats is not None else None
        changes: dict = {}
        if departure_location is not None:
            changes["departure_location"] = departure_location.strip()
        if departure_time is not None:
            changes["departure_time"] = departure_time
        if price_per_person is not None:
            changes["price_per_person"] = _value(Money, Decimal(str(price_per_person)))
        if max_detour is not None:
            changes["max_detour"] = _value(Capacity, max_detour)
        if notes is not None:
            changes["notes"] = notes
        if vehicle is not None:
            changes["vehicle"] = vehicle
        if is_active is not None:
            changes["is_active"] = is_active

        def apply() -> Carpool:
            carpool = self.get_carpool(carpool_id)
            now = self._now()
            updated = seats.resize(carpool, new_seats, now) if new_seats is not None else carpool
            updated = replace(updated, updated_at=now, **changes)
            return self._store.save_carpool(updated, carpool.version)

        return self._with_retry(apply, carpool_id)

    def delete_carpool(self, carpool_id: str) -> None:
        parsed = parse_id(CarpoolId, carpool_id, "carpool")
        if not self._store.delete_carpool(parsed):
            raise CarpoolNotFoundError(str(carpool_id))
        logger.info("Carpool %s deleted", parsed)

    def join(self, carpool_id: str, user_id: str, pickup_point: str = "") -> JoinResult:
        """Add the user as a passenger.

        Raises:
            CarpoolNotFoundError, CarpoolInactiveError, DriverConflictError,
            DuplicatePassengerError, CarpoolFullError, ConcurrentModificationError
        """
        passenger = parse_id(UserId, user_id, "user")

        def apply() -> JoinResult:
            carpool = self.get_carpool(carpool_id)
            updated, remaining = seats.join_carpool(carpool, passenger, pickup_point, self._now())
            return JoinResult(self._store.save_carpool(updated, carpool.version), remaining)

        result = self._with_retry(apply, carpool_id)
        logger.info(
            "User %s joined carpool %s (%d seats left)", passenger, carpool_id, result.remaining_seats
        )
        return result

    def leave(self, carpool_id: str, user_id: str) -> Carpool:
        """Remove the user from the passengers.

        Raises:
            CarpoolNotFoundError, PassengerNotFoundError, ConcurrentModificationError
        """
        passenger = parse_id(UserId, user_id, "user")

        def apply() -> Carpool:
            carpool = self.get_carpool(carpool_id)
            updated = seats.leave_carpool(carpool, passenger, self._now())
            return self._store.save_carpool(updated, carpool.version)

        saved = self._with_retry(apply, carpool_id)
        logger.info("User %s left carpool %s", passenger, carpool_id)
        return saved
