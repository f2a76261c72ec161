from planner.stores.interfaces import CarpoolStore, EventStore, PollStore, TicketStore

__all__ = ["CarpoolStore", "EventStore", "PollStore", "TicketStore"]
