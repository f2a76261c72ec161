"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from planner.dependencies import (
    get_carpool_service,
    get_event_service,
    get_poll_service,
    get_ticket_service,
)
from planner.domain import Address, VehicleInfo
from planner.handlers.serializers import (
    CarpoolCreateSerializer,
    CarpoolSerializer,
    CarpoolUpdateSerializer,
    EventCreateSerializer,
    EventSerializer,
    EventUpdateSerializer,
    JoinRequestSerializer,
    OptionTallySerializer,
    PollCreateSerializer,
    PollSerializer,
    PollUpdateSerializer,
    PurchaseRequestSerializer,
    TicketPurchaseSerializer,
    TicketTypeCreateSerializer,
    TicketTypeSerializer,
    TicketTypeUpdateSerializer,
    VoteRequestSerializer,
)
from planner.services import PollResults


def _validated(serializer_class, request: Request) -> dict:
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _listing(items: list) -> dict:
    return {"count": len(items), "results": items}


def _query_bool(request: Request, name: str) -> bool | None:
    raw = request.query_params.get(name)
    if raw is None:
        return None
    return raw.lower() in ("1", "true", "yes")


def _poll_results(results: PollResults) -> dict:
    return {
        **PollSerializer(results.poll).data,
        "statistics": OptionTallySerializer(results.statistics, many=True).data,
        "total_votes": results.total_votes,
        "is_open": results.is_open,
    }


def _vehicle(data: dict | None) -> VehicleInfo | None:
    return VehicleInfo(**data) if data is not None else None


# Events


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    def get(self, request: Request) -> Response:
        events = get_event_service().list_events(
            is_private=_query_bool(request, "is_private"),
            upcoming=bool(_query_bool(request, "upcoming")),
        )
        return Response(_listing(EventSerializer(events, many=True).data))

    def post(self, request: Request) -> Response:
        data = _validated(EventCreateSerializer, request)
        event = get_event_service().create_event(**data)
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """Handler for GET/PUT/DELETE /api/events/{event_id}

    DELETE removes the event's polls, carpools and ticket types with it.
    """

    def get(self, request: Request, event_id: str) -> Response:
        return Response(EventSerializer(get_event_service().get_event(event_id)).data)

    def put(self, request: Request, event_id: str) -> Response:
        data = _validated(EventUpdateSerializer, request)
        event = get_event_service().update_event(event_id, **data)
        return Response(EventSerializer(event).data)

    def delete(self, request: Request, event_id: str) -> Response:
        get_event_service().delete_event(event_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Polls


class PollListView(APIView):
    """Handler for GET/POST /api/polls"""

    def get(self, request: Request) -> Response:
        polls = get_poll_service().list_polls(request.query_params.get("event"))
        return Response(_listing(PollSerializer(polls, many=True).data))

    def post(self, request: Request) -> Response:
        data = _validated(PollCreateSerializer, request)
        poll = get_poll_service().create_poll(
            event_id=str(data["event"]),
            question=data["question"],
            options=data["options"],
            created_by=str(data["created_by"]),
            allow_multiple_choices=data["allow_multiple_choices"],
            close_date=data["close_date"],
        )
        return Response(PollSerializer(poll).data, status=status.HTTP_201_CREATED)


class PollDetailView(APIView):
    """Handler for GET/PUT/DELETE /api/polls/{poll_id}"""

    def get(self, request: Request, poll_id: str) -> Response:
        return Response(_poll_results(get_poll_service().get_results(poll_id)))

    def put(self, request: Request, poll_id: str) -> Response:
        data = _validated(PollUpdateSerializer, request)
        poll = get_poll_service().update_poll(poll_id, **data)
        return Response(PollSerializer(poll).data)

    def delete(self, request: Request, poll_id: str) -> Response:
        get_poll_service().delete_poll(poll_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class PollCloseView(APIView):
    """Handler for POST /api/polls/{poll_id}/close"""

    def post(self, request: Request, poll_id: str) -> Response:
        return Response(PollSerializer(get_poll_service().close_poll(poll_id)).data)


class PollVoteView(APIView):
    """Handler for /api/polls/{poll_id}/vote

    POST adds a vote (a single-choice poll rejects a second one); PUT moves
    the user's vote to another option.
    """

    def post(self, request: Request, poll_id: str) -> Response:
        data = _validated(VoteRequestSerializer, request)
        poll = get_poll_service().cast_vote(poll_id, str(data["user_id"]), str(data["option_id"]))
        return Response(PollSerializer(poll).data)

    def put(self, request: Request, poll_id: str) -> Response:
        data = _validated(VoteRequestSerializer, request)
        poll = get_poll_service().change_vote(
            poll_id, str(data["user_id"]), str(data["option_id"])
        )
        return Response(PollSerializer(poll).data)


class PollRetractVoteView(APIView):
    """Handler for DELETE /api/polls/{poll_id}/vote/{user_id}"""

    def delete(self, request: Request, poll_id: str, user_id: str) -> Response:
        poll = get_poll_service().retract_vote(poll_id, user_id)
        return Response(PollSerializer(poll).data)


# Carpools


class CarpoolListView(APIView):
    """Handler for GET/POST /api/carpools"""

    def get(self, request: Request) -> Response:
        carpools = get_carpool_service().list_carpools(
            request.query_params.get("event"), _query_bool(request, "is_active")
        )
        return Response(_listing(CarpoolSerializer(carpools, many=True).data))

    def post(self, request: Request) -> Response:
        data = _validated(CarpoolCreateSerializer, request)
        carpool = get_carpool_service().create_carpool(
            event_id=str(data["event"]),
            driver_id=str(data["driver"]),
            departure_location=data["departure_location"],
            departure_time=data["departure_time"],
            available_seats=data["available_seats"],
            price_per_person=data["price_per_person"],
            max_detour=data["max_detour"],
            notes=data["notes"],
            vehicle=_vehicle(data.get("vehicle_info")),
        )
        return Response(CarpoolSerializer(carpool).data, status=status.HTTP_201_CREATED)


class CarpoolDetailView(APIView):
    """Handler for GET/PUT/DELETE /api/carpools/{carpool_id}"""

    def get(self, request: Request, carpool_id: str) -> Response:
        return Response(CarpoolSerializer(get_carpool_service().get_carpool(carpool_id)).data)

    def put(self, request: Request, carpool_id: str) -> Response:
        data = dict(_validated(CarpoolUpdateSerializer, request))
        vehicle = _vehicle(data.pop("vehicle_info", None))
        carpool = get_carpool_service().update_carpool(carpool_id, vehicle=vehicle, **data)
        return Response(CarpoolSerializer(carpool).data)

    def delete(self, request: Request, carpool_id: str) -> Response:
        get_carpool_service().delete_carpool(carpool_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class CarpoolJoinView(APIView):
    """Handler for POST /api/carpools/{carpool_id}/join"""

    def post(self, request: Request, carpool_id: str) -> Response:
        data = _validated(JoinRequestSerializer, request)
        result = get_carpool_service().join(carpool_id, str(data["user_id"]), data["pickup_point"])
        return Response(CarpoolSerializer(result.carpool).data)


class CarpoolLeaveView(APIView):
    """Handler for DELETE /api/carpools/{carpool_id}/leave/{user_id}"""

    def delete(self, request: Request, carpool_id: str, user_id: str) -> Response:
        carpool = get_carpool_service().leave(carpool_id, user_id)
        return Response(CarpoolSerializer(carpool).data)


# Tickets


class TicketTypeListView(APIView):
    """Handler for GET/POST /api/tickets/types"""

    def get(self, request: Request) -> Response:
        ticket_types = get_ticket_service().list_ticket_types(request.query_params.get("event"))
        return Response(_listing(TicketTypeSerializer(ticket_types, many=True).data))

    def post(self, request: Request) -> Response:
        data = _validated(TicketTypeCreateSerializer, request)
        ticket_type = get_ticket_service().create_ticket_type(
            event_id=str(data["event"]),
            name=data["name"],
            price=data["price"],
            quantity=data["quantity"],
            description=data["description"],
        )
        return Response(TicketTypeSerializer(ticket_type).data, status=status.HTTP_201_CREATED)


class TicketTypeDetailView(APIView):
    """Handler for GET/PUT/DELETE /api/tickets/types/{ticket_type_id}

    DELETE deactivates the ticket type instead of removing it.
    """

    def get(self, request: Request, ticket_type_id: str) -> Response:
        ticket_type = get_ticket_service().get_ticket_type(ticket_type_id)
        return Response(TicketTypeSerializer(ticket_type).data)

    def put(self, request: Request, ticket_type_id: str) -> Response:
        data = _validated(TicketTypeUpdateSerializer, request)
        ticket_type = get_ticket_service().update_ticket_type(ticket_type_id, **data)
        return Response(TicketTypeSerializer(ticket_type).data)

    def delete(self, request: Request, ticket_type_id: str) -> Response:
        ticket_type = get_ticket_service().deactivate_ticket_type(ticket_type_id)
        return Response(TicketTypeSerializer(ticket_type).data)


class PurchaseListView(APIView):
    """Handler for GET/POST /api/tickets/purchases"""

    def get(self, request: Request) -> Response:
        purchases = get_ticket_service().list_purchases(
            email=request.query_params.get("email"),
            ticket_type_id=request.query_params.get("ticket_type"),
        )
        return Response(_listing(TicketPurchaseSerializer(purchases, many=True).data))

    def post(self, request: Request) -> Response:
        data = _validated(PurchaseRequestSerializer, request)
        sold = get_ticket_service().purchase(
            str(data["ticket_type"]),
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            address=Address(**data["address"]),
            user_id=str(data["user"]) if data["user"] is not None else None,
        )
        return Response(TicketPurchaseSerializer(sold).data, status=status.HTTP_201_CREATED)


class PurchaseDetailView(APIView):
    """Handler for GET /api/tickets/purchases/{purchase_id}"""

    def get(self, request: Request, purchase_id: str) -> Response:
        return Response(TicketPurchaseSerializer(get_ticket_service().get_purchase(purchase_id)).data)


class PurchaseCancelView(APIView):
    """Handler for PUT /api/tickets/purchases/{purchase_id}/cancel"""

    def put(self, request: Request, purchase_id: str) -> Response:
        cancelled = get_ticket_service().cancel_purchase(purchase_id)
        return Response(TicketPurchaseSerializer(cancelled).data)
