"""Facility registry models."""

from __future__ import annotations

from datetime import datetime

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class FacilityType(models.Model):
    """Lookup of facility kinds (room, hall, equipment and so on)."""

    name = models.CharField(_("Name"), max_length=100, unique=True)
    description = models.TextField(_("Description"), blank=True)

    class Meta:
        verbose_name = _("Facility type")
        verbose_name_plural = _("Facility types")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Facility(models.Model):
    """A bookable resource: a room, a hall or a piece of equipment."""

    name = models.CharField(_("Name"), max_length=255)
    facility_type = models.ForeignKey(
        FacilityType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="facilities",
        verbose_name=_("Type"),
    )
    location = models.CharField(_("Location"), max_length=255, blank=True)
    capacity = models.PositiveIntegerField(
        _("Capacity"),
        null=True,
        blank=True,
        help_text=_("Maximum number of attendees. Empty means unknown or unbounded."),
    )
    description = models.TextField(_("Description"), blank=True)
    is_active = models.BooleanField(_("Active"), default=True)
    maintenance_until = models.DateTimeField(_("Under maintenance until"), null=True, blank=True)
    maintenance_reason = models.TextField(_("Maintenance reason"), null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Facility")
        verbose_name_plural = _("Facilities")
        ordering = ["name", "id"]
        indexes = [
            models.Index(fields=["is_active"], name="facility_active_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    def is_under_maintenance(self, now: datetime | None = None) -> bool:
        if self.maintenance_until is None:
            return False
        return self.maintenance_until > (now or timezone.now())

    def has_room_for(self, attendees: int) -> bool:
        return self.capacity is None or attendees <= self.capacity
