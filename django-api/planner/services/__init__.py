from planner.services.carpool_service import CarpoolService, JoinResult
from planner.services.event_service import EventService
from planner.services.poll_service import PollResults, PollService
from planner.services.ticket_service import TicketService

__all__ = [
    "CarpoolService",
    "EventService",
    "JoinResult",
    "PollResults",
    "PollService",
    "TicketService",
]
