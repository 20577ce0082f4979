"""Admin interface for the order lifecycle.

Transactions are read-only here: status changes go through the lifecycle
service so seats, points and notifications stay consistent.
"""

from django.contrib import admin
from django.http import HttpRequest

from events import models


class TicketTypeInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.TicketType
    extra = 0
    fields = ["name", "unit_price", "total_seats", "seats_remaining"]


@admin.register(models.Event)
class EventAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "organizer", "start", "status"]
    list_filter = ["status"]
    search_fields = ["name", "organizer__username", "location"]
    inlines = [TicketTypeInline]
    date_hierarchy = "start"


class TicketInline(admin.TabularInline):  # type: ignore[type-arg]
    model = models.Ticket
    extra = 0
    can_delete = False
    fields = ["attendee_name", "attendee_email", "checked_in", "checked_in_at"]
    readonly_fields = fields


@admin.register(models.Transaction)
class TransactionAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["id", "event", "buyer", "quantity", "final_price", "status", "expired_at", "created_at"]
    list_filter = ["status"]
    search_fields = ["id", "buyer__username", "buyer__email", "event__name"]
    date_hierarchy = "created_at"
    inlines = [TicketInline]

    def has_change_permission(self, request: HttpRequest, obj: models.Transaction | None = None) -> bool:
        return False


@admin.register(models.Voucher)
class VoucherAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["code", "event", "discount_type", "discount_amount", "used_count", "usage_limit", "valid_until"]
    list_filter = ["discount_type"]
    search_fields = ["code", "event__name"]
    readonly_fields = ["used_count"]


@admin.register(models.Coupon)
class CouponAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["code", "owner", "discount_amount", "expires_at", "used_at"]
    search_fields = ["code", "owner__username"]
    readonly_fields = ["used_at", "used_by_transaction"]


@admin.register(models.PointsLedgerEntry)
class PointsLedgerEntryAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["user", "amount", "reason", "remaining", "expires_at", "created_at"]
    list_filter = ["reason"]
    search_fields = ["user__username", "description"]

    def has_change_permission(self, request: HttpRequest, obj: models.PointsLedgerEntry | None = None) -> bool:
        return False
