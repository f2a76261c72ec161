"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/.
Aggregates that the ledgers mutate (Poll, Carpool, TicketType) carry a
version column used for optimistic concurrency control.
"""

import uuid

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(max_length=2000)
    location = models.CharField(max_length=255)
    starts_at = models.DateTimeField()
    ends_at = models.DateTimeField()
    is_private = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="event_created_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        if self.starts_at and self.ends_at and self.ends_at <= self.starts_at:
            raise ValidationError({"ends_at": "An event must end after it starts."})


class Poll(models.Model):
    """Persistence model for polls."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="polls")
    question = models.CharField(max_length=500)
    allow_multiple_choices = models.BooleanField(default=False)
    is_closed = models.BooleanField(default=False)
    close_date = models.DateTimeField(blank=True, null=True)
    created_by = models.UUIDField()
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.question


class PollOption(models.Model):
    """Persistence model for a poll answer."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    poll = models.ForeignKey(Poll, on_delete=models.CASCADE, related_name="options")
    text = models.CharField(max_length=255)
    position = models.PositiveSmallIntegerField()

    class Meta:
        ordering = ["position"]

    def __str__(self) -> str:
        return self.text


class Vote(models.Model):
    """Persistence model for a user's vote on an option."""

    option = models.ForeignKey(PollOption, on_delete=models.CASCADE, related_name="votes")
    user_id = models.UUIDField()
    voted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["voted_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["option", "user_id"], name="unique_vote_per_option"),
        ]


class Carpool(models.Model):
    """Persistence model for carpools offered to an event."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="carpools")
    driver_id = models.UUIDField()
    departure_location = models.CharField(max_length=255)
    departure_time = models.DateTimeField()
    available_seats = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(8)]
    )
    price_per_person = models.DecimalField(max_digits=10, decimal_places=2)
    max_detour = models.PositiveIntegerField(default=10)
    notes = models.TextField(max_length=500, blank=True, default="")
    vehicle_model = models.CharField(max_length=100, blank=True, default="")
    vehicle_color = models.CharField(max_length=50, blank=True, default="")
    vehicle_license_plate = models.CharField(max_length=20, blank=True, default="")
    is_active = models.BooleanField(default=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["departure_time"]
        indexes = [
            models.Index(fields=["event", "is_active"], name="carpool_event_active_idx"),
            models.Index(fields=["driver_id"], name="carpool_driver_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.departure_location} - {self.departure_time}"


class Passenger(models.Model):
    """Persistence model for a carpool passenger."""

    carpool = models.ForeignKey(Carpool, on_delete=models.CASCADE, related_name="passengers")
    user_id = models.UUIDField()
    pickup_point = models.CharField(max_length=255, blank=True, default="")
    joined_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["carpool", "user_id"], name="unique_passenger_per_carpool"
            ),
        ]


class TicketType(models.Model):
    """Persistence model for ticket types."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="ticket_types")
    name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    quantity = models.PositiveIntegerField()
    quantity_available = models.PositiveIntegerField()
    description = models.TextField(max_length=500, blank=True, default="")
    is_active = models.BooleanField(default=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["price"]
        indexes = [
            models.Index(fields=["event", "is_active"], name="ticket_type_event_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantity_available__lte=models.F("quantity")),
                name="ticket_stock_within_total",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"

    def save(self, *args, **kwargs):
        # New ticket types start fully stocked.
        if self._state.adding and self.quantity_available is None:
            self.quantity_available = self.quantity
        super().save(*args, **kwargs)


class TicketPurchase(models.Model):
    """Persistence model for ticket sales."""

    class Status(models.TextChoices):
        PENDING = "pending"
        CONFIRMED = "confirmed"
        CANCELLED = "cancelled"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket_type = models.ForeignKey(
        TicketType, on_delete=models.CASCADE, related_name="purchases"
    )
    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField()
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=100)
    user_id = models.UUIDField(blank=True, null=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.CONFIRMED)
    ticket_number = models.CharField(max_length=40, unique=True, editable=False)
    purchased_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-purchased_at"]
        indexes = [
            models.Index(fields=["email", "ticket_type"], name="purchase_email_type_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["email", "ticket_type"],
                condition=~Q(status="cancelled"),
                name="one_active_purchase_per_email",
            ),
        ]

    def __str__(self) -> str:
        return self.ticket_number
