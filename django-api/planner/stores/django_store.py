"""Django ORM implementation of the planner stores.

Saves are conditional updates: ``UPDATE ... WHERE id = %s AND version = %s``
with the version bumped through an F() expression, so the check and the
write are a single statement. Child rows (votes, passengers) are rewritten
inside the same transaction.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import F

from planner import models as orm
from planner.domain import (
    Address,
    Buyer,
    Capacity,
    Carpool,
    CarpoolId,
    Email,
    Event,
    EventId,
    Money,
    OptionId,
    Passenger,
    Poll,
    PollId,
    PollOption,
    PurchaseId,
    PurchaseStatus,
    SeatCount,
    TicketPurchase,
    TicketType,
    TicketTypeId,
    UserId,
    VehicleInfo,
    Vote,
)
from planner.domain.errors import DuplicatePurchaseError, VersionConflictError
from planner.stores.interfaces import CarpoolStore, EventStore, PollStore, TicketStore


class _DjangoEventLookup:
    def event_exists(self, event_id: EventId) -> bool:
        return orm.Event.objects.filter(pk=event_id.value).exists()


def _event_to_domain(row: orm.Event) -> Event:
    return Event(
        id=EventId(row.id),
        name=row.name,
        description=row.description,
        location=row.location,
        starts_at=row.starts_at,
        ends_at=row.ends_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        is_private=row.is_private,
    )


def _event_fields(event: Event) -> dict:
    return {
        "name": event.name,
        "description": event.description,
        "location": event.location,
        "starts_at": event.starts_at,
        "ends_at": event.ends_at,
        "is_private": event.is_private,
    }


class DjangoEventStore(_DjangoEventLookup, EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    def list_events(
        self, is_private: bool | None = None, starts_after: datetime | None = None
    ) -> list[Event]:
        queryset = orm.Event.objects.order_by("starts_at")
        if is_private is not None:
            queryset = queryset.filter(is_private=is_private)
        if starts_after is not None:
            queryset = queryset.filter(starts_at__gte=starts_after)
        return [_event_to_domain(row) for row in queryset]

    def get_event(self, event_id: EventId) -> Event | None:
        row = orm.Event.objects.filter(pk=event_id.value).first()
        return _event_to_domain(row) if row is not None else None

    def insert_event(self, event: Event) -> Event:
        row = orm.Event.objects.create(id=event.id.value, **_event_fields(event))
        return _event_to_domain(row)

    def update_event(self, event: Event) -> Event | None:
        updated = orm.Event.objects.filter(pk=event.id.value).update(
            updated_at=event.updated_at, **_event_fields(event)
        )
        return self.get_event(event.id) if updated else None

    def delete_event(self, event_id: EventId) -> bool:
        deleted, _ = orm.Event.objects.filter(pk=event_id.value).delete()
        return deleted > 0


def _poll_to_domain(row: orm.Poll) -> Poll:
    return Poll(
        id=PollId(row.id),
        event_id=EventId(row.event_id),
        question=row.question,
        options=tuple(
            PollOption(
                id=OptionId(option.id),
                text=option.text,
                votes=tuple(
                    Vote(user_id=UserId(vote.user_id), voted_at=vote.voted_at)
                    for vote in option.votes.all()
                ),
            )
            for option in row.options.all()
        ),
        created_by=UserId(row.created_by),
        created_at=row.created_at,
        updated_at=row.updated_at,
        allow_multiple_choices=row.allow_multiple_choices,
        is_closed=row.is_closed,
        close_date=row.close_date,
        version=row.version,
    )


class DjangoPollStore(_DjangoEventLookup, PollStore):
    """PostgreSQL-backed poll store using Django ORM."""

    def _queryset(self):
        return orm.Poll.objects.prefetch_related("options__votes")

    def list_polls(self, event_id: EventId | None = None) -> list[Poll]:
        queryset = self._queryset().order_by("-created_at")
        if event_id is not None:
            queryset = queryset.filter(event_id=event_id.value)
        return [_poll_to_domain(row) for row in queryset]

    def get_poll(self, poll_id: PollId) -> Poll | None:
        row = self._queryset().filter(pk=poll_id.value).first()
        return _poll_to_domain(row) if row is not None else None

    @transaction.atomic
    def insert_poll(self, poll: Poll) -> Poll:
        orm.Poll.objects.create(
            id=poll.id.value,
            event_id=poll.event_id.value,
            question=poll.question,
            allow_multiple_choices=poll.allow_multiple_choices,
            is_closed=poll.is_closed,
            close_date=poll.close_date,
            created_by=poll.created_by.value,
            version=poll.version,
            created_at=poll.created_at,
            updated_at=poll.updated_at,
        )
        orm.PollOption.objects.bulk_create(
            orm.PollOption(id=option.id.value, poll_id=poll.id.value, text=option.text, position=i)
            for i, option in enumerate(poll.options)
        )
        self._write_votes(poll)
        return poll

    @transaction.atomic
    def save_poll(self, poll: Poll, expected_version: int) -> Poll:
        updated = orm.Poll.objects.filter(pk=poll.id.value, version=expected_version).update(
            question=poll.question,
            is_closed=poll.is_closed,
            close_date=poll.close_date,
            updated_at=poll.updated_at,
            version=F("version") + 1,
        )
        if not updated:
            raise VersionConflictError(str(poll.id), expected_version)
        orm.Vote.objects.filter(option__poll_id=poll.id.value).delete()
        self._write_votes(poll)
        return replace(poll, version=expected_version + 1)

    def _write_votes(self, poll: Poll) -> None:
        orm.Vote.objects.bulk_create(
            orm.Vote(option_id=option.id.value, user_id=vote.user_id.value, voted_at=vote.voted_at)
            for option in poll.options
            for vote in option.votes
        )

    def delete_poll(self, poll_id: PollId) -> bool:
        deleted, _ = orm.Poll.objects.filter(pk=poll_id.value).delete()
        return deleted > 0


def _carpool_to_domain(row: orm.Carpool) -> Carpool:
    return Carpool(
        id=CarpoolId(row.id),
        event_id=EventId(row.event_id),
        driver_id=UserId(row.driver_id),
        departure_location=row.departure_location,
        departure_time=row.departure_time,
        available_seats=SeatCount(row.available_seats),
        price_per_person=Money(Decimal(row.price_per_person)),
        created_at=row.created_at,
        updated_at=row.updated_at,
        max_detour=Capacity(row.max_detour),
        passengers=tuple(
            Passenger(
                user_id=UserId(p.user_id), pickup_point=p.pickup_point, joined_at=p.joined_at
            )
            for p in row.passengers.all()
        ),
        notes=row.notes,
        vehicle=VehicleInfo(
            model=row.vehicle_model,
            color=row.vehicle_color,
            license_plate=row.vehicle_license_plate,
        ),
        is_active=row.is_active,
        version=row.version,
    )


def _carpool_fields(carpool: Carpool) -> dict:
    return {
        "departure_location": carpool.departure_location,
        "departure_time": carpool.departure_time,
        "available_seats": carpool.available_seats.value,
        "price_per_person": carpool.price_per_person.amount,
        "max_detour": carpool.max_detour.value,
        "notes": carpool.notes,
        "vehicle_model": carpool.vehicle.model,
        "vehicle_color": carpool.vehicle.color,
        "vehicle_license_plate": carpool.vehicle.license_plate,
        "is_active": carpool.is_active,
        "updated_at": carpool.updated_at,
    }


class DjangoCarpoolStore(_DjangoEventLookup, CarpoolStore):
    """PostgreSQL-backed carpool store using Django ORM."""

    def list_carpools(
        self, event_id: EventId | None = None, is_active: bool | None = None
    ) -> list[Carpool]:
        queryset = orm.Carpool.objects.prefetch_related("passengers").order_by("departure_time")
        if event_id is not None:
            queryset = queryset.filter(event_id=event_id.value)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return [_carpool_to_domain(row) for row in queryset]

    def get_carpool(self, carpool_id: CarpoolId) -> Carpool | None:
        row = orm.Carpool.objects.prefetch_related("passengers").filter(pk=carpool_id.value).first()
        return _carpool_to_domain(row) if row is not None else None

    @transaction.atomic
    def insert_carpool(self, carpool: Carpool) -> Carpool:
        orm.Carpool.objects.create(
            id=carpool.id.value,
            event_id=carpool.event_id.value,
            driver_id=carpool.driver_id.value,
            version=carpool.version,
            created_at=carpool.created_at,
            **_carpool_fields(carpool),
        )
        self._write_passengers(carpool)
        return carpool

    @transaction.atomic
    def save_carpool(self, carpool: Carpool, expected_version: int) -> Carpool:
        updated = orm.Carpool.objects.filter(
            pk=carpool.id.value, version=expected_version
        ).update(version=F("version") + 1, **_carpool_fields(carpool))
        if not updated:
            raise VersionConflictError(str(carpool.id), expected_version)
        orm.Passenger.objects.filter(carpool_id=carpool.id.value).delete()
        self._write_passengers(carpool)
        return replace(carpool, version=expected_version + 1)

    def _write_passengers(self, carpool: Carpool) -> None:
        orm.Passenger.objects.bulk_create(
            orm.Passenger(
                carpool_id=carpool.id.value,
                user_id=p.user_id.value,
                pickup_point=p.pickup_point,
                joined_at=p.joined_at,
            )
            for p in carpool.passengers
        )

    def delete_carpool(self, carpool_id: CarpoolId) -> bool:
        deleted, _ = orm.Carpool.objects.filter(pk=carpool_id.value).delete()
        return deleted > 0


def _ticket_type_to_domain(row: orm.TicketType) -> TicketType:
    return TicketType(
        id=TicketTypeId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        price=Money(Decimal(row.price)),
        quantity_total=Capacity(row.quantity),
        quantity_available=row.quantity_available,
        created_at=row.created_at,
        description=row.description,
        is_active=row.is_active,
        version=row.version,
    )


def _purchase_to_domain(row: orm.TicketPurchase) -> TicketPurchase:
    return TicketPurchase(
        id=PurchaseId(row.id),
        ticket_type_id=TicketTypeId(row.ticket_type_id),
        buyer=Buyer(
            first_name=row.first_name,
            last_name=row.last_name,
            email=Email(row.email),
            address=Address(
                street=row.street,
                city=row.city,
                postal_code=row.postal_code,
                country=row.country,
            ),
            user_id=UserId(row.user_id) if row.user_id else None,
        ),
        ticket_number=row.ticket_number,
        purchased_at=row.purchased_at,
        status=PurchaseStatus(row.status),
    )


class DjangoTicketStore(_DjangoEventLookup, TicketStore):
    """PostgreSQL-backed ticketing store using Django ORM."""

    def list_ticket_types(self, event_id: EventId | None = None) -> list[TicketType]:
        queryset = orm.TicketType.objects.filter(is_active=True).order_by("price")
        if event_id is not None:
            queryset = queryset.filter(event_id=event_id.value)
        return [_ticket_type_to_domain(row) for row in queryset]

    def get_ticket_type(self, ticket_type_id: TicketTypeId) -> TicketType | None:
        row = orm.TicketType.objects.filter(pk=ticket_type_id.value).first()
        return _ticket_type_to_domain(row) if row is not None else None

    def insert_ticket_type(self, ticket_type: TicketType) -> TicketType:
        orm.TicketType.objects.create(
            id=ticket_type.id.value,
            event_id=ticket_type.event_id.value,
            name=ticket_type.name,
            price=ticket_type.price.amount,
            quantity=ticket_type.quantity_total.value,
            quantity_available=ticket_type.quantity_available,
            description=ticket_type.description,
            is_active=ticket_type.is_active,
            version=ticket_type.version,
            created_at=ticket_type.created_at,
        )
        return ticket_type

    @transaction.atomic
    def save_ticket_type(self, ticket_type: TicketType, expected_version: int) -> TicketType:
        updated = orm.TicketType.objects.filter(
            pk=ticket_type.id.value, version=expected_version
        ).update(
            name=ticket_type.name,
            price=ticket_type.price.amount,
            quantity_available=ticket_type.quantity_available,
            description=ticket_type.description,
            is_active=ticket_type.is_active,
            version=F("version") + 1,
        )
        if not updated:
            raise VersionConflictError(str(ticket_type.id), expected_version)
        return replace(ticket_type, version=expected_version + 1)

    def get_purchase(self, purchase_id: PurchaseId) -> TicketPurchase | None:
        row = orm.TicketPurchase.objects.filter(pk=purchase_id.value).first()
        return _purchase_to_domain(row) if row is not None else None

    def list_purchases(
        self, email: Email | None = None, ticket_type_id: TicketTypeId | None = None
    ) -> list[TicketPurchase]:
        queryset = orm.TicketPurchase.objects.order_by("-purchased_at")
        if email is not None:
            queryset = queryset.filter(email=email.value)
        if ticket_type_id is not None:
            queryset = queryset.filter(ticket_type_id=ticket_type_id.value)
        return [_purchase_to_domain(row) for row in queryset]

    def has_active_purchase(self, email: Email, ticket_type_id: TicketTypeId) -> bool:
        return (
            orm.TicketPurchase.objects.filter(email=email.value, ticket_type_id=ticket_type_id.value)
            .exclude(status=orm.TicketPurchase.Status.CANCELLED)
            .exists()
        )

    def record_purchase(
        self, ticket_type: TicketType, purchase: TicketPurchase, expected_version: int
    ) -> tuple[TicketType, TicketPurchase]:
        buyer = purchase.buyer
        try:
            with transaction.atomic():
                saved = self.save_ticket_type(ticket_type, expected_version)
                orm.TicketPurchase.objects.create(
                    id=purchase.id.value,
                    ticket_type_id=purchase.ticket_type_id.value,
                    first_name=buyer.first_name,
                    last_name=buyer.last_name,
                    email=buyer.email.value,
                    street=buyer.address.street,
                    city=buyer.address.city,
                    postal_code=buyer.address.postal_code,
                    country=buyer.address.country,
                    user_id=buyer.user_id.value if buyer.user_id else None,
                    status=purchase.status.value,
                    ticket_number=purchase.ticket_number,
                    purchased_at=purchase.purchased_at,
                )
        except IntegrityError:
            if self.has_active_purchase(buyer.email, purchase.ticket_type_id):
                raise DuplicatePurchaseError() from None
            raise
        return saved, purchase

    @transaction.atomic
    def record_cancellation(
        self, purchase: TicketPurchase, ticket_type: TicketType, expected_version: int
    ) -> tuple[TicketPurchase, TicketType]:
        saved = self.save_ticket_type(ticket_type, expected_version)
        orm.TicketPurchase.objects.filter(pk=purchase.id.value).update(status=purchase.status.value)
        return purchase, saved
