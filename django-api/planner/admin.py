from django.contrib import admin
from django.db.models import F
from django.utils import timezone

from planner.models import Carpool, Event, Passenger, Poll, PollOption, TicketPurchase, TicketType


class ReadOnlyInline(admin.TabularInline):
    """Inline for rows that only the ledgers may write."""

    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False


class PollOptionInline(ReadOnlyInline):
    model = PollOption
    fields = readonly_fields = ["text", "position"]


class PassengerInline(ReadOnlyInline):
    model = Passenger
    fields = readonly_fields = ["user_id", "pickup_point", "joined_at"]


class TicketTypeInline(ReadOnlyInline):
    model = TicketType
    fields = readonly_fields = ["name", "price", "quantity", "quantity_available", "is_active"]


class VersionedAdmin(admin.ModelAdmin):
    """Admin for rows the ledgers save with a version check.

    Ledger-owned fields are read-only once the row exists. A change writes only
    the edited fields and bumps the version, so a ledger save that started from
    an earlier read conflicts instead of overwriting the edit.
    """

    ledger_fields: list[str] = []

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ["version"]
        return ["version", *self.ledger_fields]

    def save_model(self, request, obj, form, change) -> None:
        if not change:
            super().save_model(request, obj, form, change)
            return
        update_fields = [*form.changed_data, "version"]
        if hasattr(obj, "updated_at"):
            obj.updated_at = timezone.now()
            update_fields.append("updated_at")
        obj.version = F("version") + 1
        obj.save(update_fields=update_fields)
        obj.refresh_from_db(fields=["version"])


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "location", "starts_at", "is_private"]
    search_fields = ["name", "location"]
    inlines = [TicketTypeInline]


@admin.register(Poll)
class PollAdmin(VersionedAdmin):
    list_display = ["question", "event", "allow_multiple_choices", "is_closed", "close_date"]
    list_filter = ["event", "is_closed"]
    ledger_fields = ["allow_multiple_choices", "is_closed"]
    inlines = [PollOptionInline]

    # Options are created with the poll, through the API.
    def has_add_permission(self, request) -> bool:
        return False


@admin.register(Carpool)
class CarpoolAdmin(VersionedAdmin):
    list_display = ["departure_location", "event", "departure_time", "available_seats", "is_active"]
    list_filter = ["event", "is_active"]
    ledger_fields = ["driver_id", "available_seats", "is_active"]
    inlines = [PassengerInline]


@admin.register(TicketType)
class TicketTypeAdmin(VersionedAdmin):
    list_display = ["name", "event", "price", "quantity", "quantity_available", "is_active"]
    list_filter = ["event", "is_active"]
    ledger_fields = ["quantity", "is_active"]

    def get_readonly_fields(self, request, obj=None):
        return ["quantity_available", *super().get_readonly_fields(request, obj)]

    # Ticket types are deactivated, never removed, so purchases keep them.
    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(TicketPurchase)
class TicketPurchaseAdmin(admin.ModelAdmin):
    list_display = ["ticket_number", "ticket_type", "email", "status", "purchased_at"]
    list_filter = ["status", "ticket_type__event"]
    search_fields = ["ticket_number", "email"]

    # Purchases and cancellations move stock, so they only go through the API.
    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
