from planner.handlers.views import (
    CarpoolDetailView,
    CarpoolJoinView,
    CarpoolLeaveView,
    CarpoolListView,
    EventDetailView,
    EventListView,
    PollCloseView,
    PollDetailView,
    PollListView,
    PollRetractVoteView,
    PollVoteView,
    PurchaseCancelView,
    PurchaseDetailView,
    PurchaseListView,
    TicketTypeDetailView,
    TicketTypeListView,
)

__all__ = [
    "EventListView",
    "EventDetailView",
    "PollListView",
    "PollDetailView",
    "PollCloseView",
    "PollVoteView",
    "PollRetractVoteView",
    "CarpoolListView",
    "CarpoolDetailView",
    "CarpoolJoinView",
    "CarpoolLeaveView",
    "TicketTypeListView",
    "TicketTypeDetailView",
    "PurchaseListView",
    "PurchaseDetailView",
    "PurchaseCancelView",
]
