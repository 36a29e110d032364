"""Reservation persistence models.

A reservation header carries the request itself; its time binding to a
facility lives in ReservationItem so the conflict index can query
windows directly. Rows are never deleted by the engine.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Reservation(models.Model):
    """A member's request to use a facility."""

    class Status(models.TextChoices):
        PENDING = "PENDING", _("Pending approval")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")
        CANCELED = "CANCELED", _("Canceled")

    ACTIVE_STATUSES = (Status.PENDING, Status.APPROVED)

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="reservations",
    )
    purpose = models.TextField(_("Purpose"))
    attendees = models.PositiveIntegerField(_("Attendees"), default=1)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    proposal_url = models.CharField(
        _("Proposal document"),
        max_length=500,
        blank=True,
        help_text=_("Reference to the uploaded proposal document."),
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["requester", "status"], name="reservation_requester_idx"),
            models.Index(fields=["status"], name="reservation_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation #{self.pk} ({self.status})"


class ReservationItem(models.Model):
    """The facility and time window a reservation occupies."""

    reservation = models.OneToOneField(
        Reservation,
        on_delete=models.CASCADE,
        related_name="item",
    )
    facility = models.ForeignKey(
        "facilities.Facility",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservation_items",
    )
    start_datetime = models.DateTimeField()
    end_datetime = models.DateTimeField()

    class Meta:
        verbose_name = _("Reservation item")
        verbose_name_plural = _("Reservation items")
        ordering = ["start_datetime"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_datetime__gt=models.F("start_datetime")),
                name="reservation_item_valid_window",
            ),
        ]
        indexes = [
            models.Index(
                fields=["facility", "start_datetime", "end_datetime"],
                name="reservation_item_window_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.facility_id}: {self.start_datetime:%Y-%m-%d %H:%M}-{self.end_datetime:%H:%M}"


class ReservationAuditLog(models.Model):
    """One row per successful mutation of a reservation."""

    class Action(models.TextChoices):
        CREATED = "CREATED", _("Created")
        UPDATED = "UPDATED", _("Updated")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")
        CANCELED = "CANCELED", _("Canceled")

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="audit_logs",
    )
    acted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reservation_actions",
    )
    action = models.CharField(max_length=16, choices=Action.choices)
    from_status = models.CharField(max_length=16, blank=True)
    to_status = models.CharField(max_length=16)
    comment = models.TextField(blank=True)
    acted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Reservation audit entry")
        verbose_name_plural = _("Reservation audit log")
        ordering = ["acted_at", "id"]

    def __str__(self) -> str:
        return f"{self.action} #{self.reservation_id} by {self.acted_by_id}"
