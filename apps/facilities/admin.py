"""Admin registration for facilities."""

from __future__ import annotations

from django.contrib import admin

from .models import Facility, FacilityType


@admin.register(FacilityType)
class FacilityTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "description")
    search_fields = ("name",)


@admin.register(Facility)
class FacilityAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "facility_type",
        "location",
        "capacity",
        "is_active",
        "maintenance_until",
    )
    list_filter = ("facility_type", "is_active")
    search_fields = ("name", "location", "description")
    readonly_fields = ("created_at", "updated_at")
