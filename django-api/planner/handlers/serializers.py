"""Serializers for request shape validation and domain model responses.

Input serializers only check the shape of a request; business rules live in
the domain ledgers. Output serializers read the frozen domain dataclasses
through dotted sources.
"""

from decimal import Decimal

from rest_framework import serializers

from planner.domain.value_objects import MAX_SEATS, MIN_SEATS

# Requests


class EventCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(max_length=2000)
    location = serializers.CharField(max_length=255)
    starts_at = serializers.DateTimeField()
    ends_at = serializers.DateTimeField()
    is_private = serializers.BooleanField(default=False)


class EventUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(max_length=2000, required=False)
    location = serializers.CharField(max_length=255, required=False)
    starts_at = serializers.DateTimeField(required=False)
    ends_at = serializers.DateTimeField(required=False)
    is_private = serializers.BooleanField(required=False)


class PollCreateSerializer(serializers.Serializer):
    event = serializers.UUIDField()
    question = serializers.CharField(min_length=5, max_length=500)
    options = serializers.ListField(
        child=serializers.CharField(max_length=255), min_length=2
    )
    allow_multiple_choices = serializers.BooleanField(default=False)
    close_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    created_by = serializers.UUIDField()


class PollUpdateSerializer(serializers.Serializer):
    question = serializers.CharField(min_length=5, max_length=500, required=False)
    close_date = serializers.DateTimeField(required=False, allow_null=True)
    is_closed = serializers.BooleanField(required=False)


class VoteRequestSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    option_id = serializers.UUIDField()


class VehicleInfoSerializer(serializers.Serializer):
    model = serializers.CharField(max_length=100, allow_blank=True, default="")
    color = serializers.CharField(max_length=50, allow_blank=True, default="")
    license_plate = serializers.CharField(max_length=20, allow_blank=True, default="")


class CarpoolCreateSerializer(serializers.Serializer):
    event = serializers.UUIDField()
    driver = serializers.UUIDField()
    departure_location = serializers.CharField(max_length=255)
    departure_time = serializers.DateTimeField()
    available_seats = serializers.IntegerField(min_value=MIN_SEATS, max_value=MAX_SEATS)
    price_per_person = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0")
    )
    max_detour = serializers.IntegerField(min_value=0, default=10)
    notes = serializers.CharField(max_length=500, allow_blank=True, default="")
    vehicle_info = VehicleInfoSerializer(required=False)


class CarpoolUpdateSerializer(serializers.Serializer):
    departure_location = serializers.CharField(max_length=255, required=False)
    departure_time = serializers.DateTimeField(required=False)
    available_seats = serializers.IntegerField(
        min_value=MIN_SEATS, max_value=MAX_SEATS, required=False
    )
    price_per_person = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), required=False
    )
    max_detour = serializers.IntegerField(min_value=0, required=False)
    notes = serializers.CharField(max_length=500, allow_blank=True, required=False)
    vehicle_info = VehicleInfoSerializer(required=False)
    is_active = serializers.BooleanField(required=False)


class JoinRequestSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    pickup_point = serializers.CharField(max_length=255, allow_blank=True, default="")


class TicketTypeCreateSerializer(serializers.Serializer):
    event = serializers.UUIDField()
    name = serializers.CharField(max_length=100)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0"))
    quantity = serializers.IntegerField(min_value=1)
    description = serializers.CharField(max_length=500, allow_blank=True, default="")


class TicketTypeUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0"), required=False
    )
    description = serializers.CharField(max_length=500, allow_blank=True, required=False)
    is_active = serializers.BooleanField(required=False)


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100)


class PurchaseRequestSerializer(serializers.Serializer):
    ticket_type = serializers.UUIDField()
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    address = AddressSerializer()
    user = serializers.UUIDField(required=False, allow_null=True, default=None)


# Responses


class EventSerializer(serializers.Serializer):
    """Serializer for Event domain model."""

    id = serializers.UUIDField(source="id.value")
    name = serializers.CharField()
    description = serializers.CharField()
    location = serializers.CharField()
    starts_at = serializers.DateTimeField()
    ends_at = serializers.DateTimeField()
    is_private = serializers.BooleanField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class VoteSerializer(serializers.Serializer):
    user_id = serializers.UUIDField(source="user_id.value")
    voted_at = serializers.DateTimeField()


class PollOptionSerializer(serializers.Serializer):
    id = serializers.UUIDField(source="id.value")
    text = serializers.CharField()
    votes = VoteSerializer(many=True)


class PollSerializer(serializers.Serializer):
    """Serializer for Poll domain model."""

    id = serializers.UUIDField(source="id.value")
    event = serializers.UUIDField(source="event_id.value")
    question = serializers.CharField()
    options = PollOptionSerializer(many=True)
    allow_multiple_choices = serializers.BooleanField()
    is_closed = serializers.BooleanField()
    close_date = serializers.DateTimeField(allow_null=True)
    created_by = serializers.UUIDField(source="created_by.value")
    version = serializers.IntegerField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class OptionTallySerializer(serializers.Serializer):
    option_id = serializers.UUIDField(source="option_id.value")
    text = serializers.CharField()
    vote_count = serializers.IntegerField()
    percentage = serializers.FloatField()


class PassengerSerializer(serializers.Serializer):
    user_id = serializers.UUIDField(source="user_id.value")
    pickup_point = serializers.CharField()
    joined_at = serializers.DateTimeField()


class CarpoolSerializer(serializers.Serializer):
    """Serializer for Carpool domain model."""

    id = serializers.UUIDField(source="id.value")
    event = serializers.UUIDField(source="event_id.value")
    driver = serializers.UUIDField(source="driver_id.value")
    departure_location = serializers.CharField()
    departure_time = serializers.DateTimeField()
    available_seats = serializers.IntegerField(source="available_seats.value")
    remaining_seats = serializers.IntegerField()
    price_per_person = serializers.DecimalField(
        source="price_per_person.amount", max_digits=10, decimal_places=2
    )
    max_detour = serializers.IntegerField(source="max_detour.value")
    passengers = PassengerSerializer(many=True)
    notes = serializers.CharField()
    vehicle_info = VehicleInfoSerializer(source="vehicle")
    is_active = serializers.BooleanField()
    version = serializers.IntegerField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class TicketTypeSerializer(serializers.Serializer):
    """Serializer for TicketType domain model."""

    id = serializers.UUIDField(source="id.value")
    event = serializers.UUIDField(source="event_id.value")
    name = serializers.CharField()
    price = serializers.DecimalField(source="price.amount", max_digits=10, decimal_places=2)
    quantity = serializers.IntegerField(source="quantity_total.value")
    quantity_available = serializers.IntegerField()
    description = serializers.CharField()
    is_active = serializers.BooleanField()
    created_at = serializers.DateTimeField()


class TicketPurchaseSerializer(serializers.Serializer):
    """Serializer for TicketPurchase domain model."""

    id = serializers.UUIDField(source="id.value")
    ticket_type = serializers.UUIDField(source="ticket_type_id.value")
    first_name = serializers.CharField(source="buyer.first_name")
    last_name = serializers.CharField(source="buyer.last_name")
    email = serializers.CharField(source="buyer.email.value")
    address = AddressSerializer(source="buyer.address")
    user = serializers.UUIDField(source="buyer.user_id.value", allow_null=True)
    status = serializers.CharField(source="status.value")
    ticket_number = serializers.CharField()
    purchased_at = serializers.DateTimeField()
