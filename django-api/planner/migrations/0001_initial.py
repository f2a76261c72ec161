import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(max_length=2000)),
                ("location", models.CharField(max_length=255)),
                ("starts_at", models.DateTimeField()),
                ("ends_at", models.DateTimeField()),
                ("is_private", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["-created_at"], name="event_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="Poll",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("question", models.CharField(max_length=500)),
                ("allow_multiple_choices", models.BooleanField(default=False)),
                ("is_closed", models.BooleanField(default=False)),
                ("close_date", models.DateTimeField(blank=True, null=True)),
                ("created_by", models.UUIDField()),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="polls",
                        to="planner.event",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="PollOption",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("text", models.CharField(max_length=255)),
                ("position", models.PositiveSmallIntegerField()),
                (
                    "poll",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="options",
                        to="planner.poll",
                    ),
                ),
            ],
            options={
                "ordering": ["position"],
            },
        ),
        migrations.CreateModel(
            name="Vote",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("user_id", models.UUIDField()),
                ("voted_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "option",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="votes",
                        to="planner.polloption",
                    ),
                ),
            ],
            options={
                "ordering": ["voted_at", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("option", "user_id"), name="unique_vote_per_option"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Carpool",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("driver_id", models.UUIDField()),
                ("departure_location", models.CharField(max_length=255)),
                ("departure_time", models.DateTimeField()),
                (
                    "available_seats",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(8),
                        ]
                    ),
                ),
                ("price_per_person", models.DecimalField(decimal_places=2, max_digits=10)),
                ("max_detour", models.PositiveIntegerField(default=10)),
                ("notes", models.TextField(blank=True, default="", max_length=500)),
                ("vehicle_model", models.CharField(blank=True, default="", max_length=100)),
                ("vehicle_color", models.CharField(blank=True, default="", max_length=50)),
                (
                    "vehicle_license_plate",
                    models.CharField(blank=True, default="", max_length=20),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="carpools",
                        to="planner.event",
                    ),
                ),
            ],
            options={
                "ordering": ["departure_time"],
                "indexes": [
                    models.Index(fields=["event", "is_active"], name="carpool_event_active_idx"),
                    models.Index(fields=["driver_id"], name="carpool_driver_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Passenger",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("user_id", models.UUIDField()),
                ("pickup_point", models.CharField(blank=True, default="", max_length=255)),
                ("joined_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "carpool",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="passengers",
                        to="planner.carpool",
                    ),
                ),
            ],
            options={
                "ordering": ["joined_at", "id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("carpool", "user_id"), name="unique_passenger_per_carpool"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketType",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=100)),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("quantity", models.PositiveIntegerField()),
                ("quantity_available", models.PositiveIntegerField()),
                ("description", models.TextField(blank=True, default="", max_length=500)),
                ("is_active", models.BooleanField(default=True)),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ticket_types",
                        to="planner.event",
                    ),
                ),
            ],
            options={
                "ordering": ["price"],
                "indexes": [
                    models.Index(
                        fields=["event", "is_active"], name="ticket_type_event_active_idx"
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("quantity_available__lte", models.F("quantity"))),
                        name="ticket_stock_within_total",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketPurchase",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("first_name", models.CharField(max_length=100)),
                ("last_name", models.CharField(max_length=100)),
                ("email", models.EmailField(max_length=254)),
                ("street", models.CharField(max_length=255)),
                ("city", models.CharField(max_length=100)),
                ("postal_code", models.CharField(max_length=20)),
                ("country", models.CharField(max_length=100)),
                ("user_id", models.UUIDField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="confirmed",
                        max_length=10,
                    ),
                ),
                (
                    "ticket_number",
                    models.CharField(editable=False, max_length=40, unique=True),
                ),
                ("purchased_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "ticket_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="purchases",
                        to="planner.tickettype",
                    ),
                ),
            ],
            options={
                "ordering": ["-purchased_at"],
                "indexes": [
                    models.Index(
                        fields=["email", "ticket_type"], name="purchase_email_type_idx"
                    )
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "cancelled"), _negated=True),
                        fields=("email", "ticket_type"),
                        name="one_active_purchase_per_email",
                    )
                ],
            },
        ),
    ]
