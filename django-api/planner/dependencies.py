"""
Dependency wiring for the planner views.
"""

from planner.services import CarpoolService, EventService, PollService, TicketService
from planner.stores.django_store import (
    DjangoCarpoolStore,
    DjangoEventStore,
    DjangoPollStore,
    DjangoTicketStore,
)


def get_event_service() -> EventService:
    return EventService(DjangoEventStore())


def get_poll_service() -> PollService:
    return PollService(DjangoPollStore())


def get_carpool_service() -> CarpoolService:
    return CarpoolService(DjangoCarpoolStore())


def get_ticket_service() -> TicketService:
    return TicketService(DjangoTicketStore())
