"""Admin registration for reservations."""

from __future__ import annotations

from django.contrib import admin

from .models import Reservation, ReservationAuditLog, ReservationItem


class ReservationItemInline(admin.StackedInline):
    model = ReservationItem
    extra = 0
    can_delete = False


class ReservationAuditLogInline(admin.TabularInline):
    model = ReservationAuditLog
    extra = 0
    can_delete = False
    readonly_fields = ("action", "from_status", "to_status", "acted_by", "comment", "acted_at")

    def has_add_permission(self, request, obj=None):  # type: ignore
        return False


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    """Read-mostly view; status changes go through the API so the engine guards apply."""

    list_display = ("id", "requester", "status", "attendees", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("purpose", "requester__email", "item__facility__name")
    readonly_fields = ("status", "created_at", "updated_at")
    inlines = [ReservationItemInline, ReservationAuditLogInline]


@admin.register(ReservationAuditLog)
class ReservationAuditLogAdmin(admin.ModelAdmin):
    list_display = ("reservation", "action", "from_status", "to_status", "acted_by", "acted_at")
    list_filter = ("action",)
    search_fields = ("reservation__id", "comment")
