from django.urls import path

from planner.handlers import (
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

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("polls", PollListView.as_view(), name="poll-list"),
    path("polls/<str:poll_id>", PollDetailView.as_view(), name="poll-detail"),
    path("polls/<str:poll_id>/close", PollCloseView.as_view(), name="poll-close"),
    path("polls/<str:poll_id>/vote", PollVoteView.as_view(), name="poll-vote"),
    path(
        "polls/<str:poll_id>/vote/<str:user_id>",
        PollRetractVoteView.as_view(),
        name="poll-vote-retract",
    ),
    path("carpools", CarpoolListView.as_view(), name="carpool-list"),
    path("carpools/<str:carpool_id>", CarpoolDetailView.as_view(), name="carpool-detail"),
    path("carpools/<str:carpool_id>/join", CarpoolJoinView.as_view(), name="carpool-join"),
    path(
        "carpools/<str:carpool_id>/leave/<str:user_id>",
        CarpoolLeaveView.as_view(),
        name="carpool-leave",
    ),
    path("tickets/types", TicketTypeListView.as_view(), name="ticket-type-list"),
    path(
        "tickets/types/<str:ticket_type_id>",
        TicketTypeDetailView.as_view(),
        name="ticket-type-detail",
    ),
    path("tickets/purchases", PurchaseListView.as_view(), name="purchase-list"),
    path(
        "tickets/purchases/<str:purchase_id>",
        PurchaseDetailView.as_view(),
        name="purchase-detail",
    ),
    path(
        "tickets/purchases/<str:purchase_id>/cancel",
        PurchaseCancelView.as_view(),
        name="purchase-cancel",
    ),
]
