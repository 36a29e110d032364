"""
Reservation event handlers

Registered on the message bus at startup. They run after the reservation
transaction has committed; anything raised here is logged by the bus and
does not affect the reservation.
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore

from shared.application.message_bus import message_bus
from apps.reservations.domain.events import (
    ReservationApproved,
    ReservationCanceled,
    ReservationCreated,
    ReservationRejected,
    ReservationStatusChanged,
    ReservationUpdated,
)

from .services import notify, notify_many

logger = logging.getLogger(__name__)


def _facility_label(facility_id: int | None) -> str:
    if facility_id is None:
        return "no facility"
    from apps.facilities.models import Facility

    name = Facility.objects.filter(pk=facility_id).values_list("name", flat=True).first()
    return name or f"facility #{facility_id}"


def _administrator_ids(exclude: int | None = None) -> list[int]:
    users = get_user_model().objects.administrators()
    if exclude is not None:
        users = users.exclude(pk=exclude)
    return list(users.values_list("pk", flat=True))


def on_reservation_created(event: ReservationCreated) -> None:
    facility = _facility_label(event.facility_id)
    notify(
        event.requester_id,
        "Reservation submitted",
        f"Your request for {facility} on {event.window} is waiting for approval.",
        reservation_id=event.aggregate_id,
    )
    notify_many(
        _administrator_ids(exclude=event.requester_id),
        "New reservation request",
        f"Reservation #{event.aggregate_id} for {facility} on {event.window} needs a decision.",
        reservation_id=event.aggregate_id,
    )


def on_reservation_updated(event: ReservationUpdated) -> None:
    if not event.changed_fields:
        return
    notify(
        event.requester_id,
        "Reservation updated",
        f"Reservation #{event.aggregate_id} now reads: {event.window} "
        f"({', '.join(event.changed_fields)} changed).",
        reservation_id=event.aggregate_id,
    )


STATUS_TITLES = {
    "APPROVED": "Reservation approved",
    "REJECTED": "Reservation rejected",
    "CANCELED": "Reservation canceled",
}


def on_reservation_status_changed(event: ReservationStatusChanged) -> None:
    facility = _facility_label(event.facility_id)
    message = f"Reservation #{event.aggregate_id} for {facility} on {event.window} is now {event.new_status}."
    if event.comment:
        message = f"{message} Comment: {event.comment}"
    notify(
        event.requester_id,
        STATUS_TITLES.get(event.new_status, "Reservation status changed"),
        message,
        reservation_id=event.aggregate_id,
    )

    if event.acted_by == event.requester_id:
        return

    try:
        from .tasks import send_reservation_status_email

        send_reservation_status_email.delay(event.aggregate_id, event.comment)
    except Exception as e:
        logger.error(
            "Could not enqueue status email for reservation %s: %s",
            event.aggregate_id,
            e,
            exc_info=True,
        )


def register_handlers(bus=message_bus) -> None:
    bus.register_event_handler(ReservationCreated, on_reservation_created)
    bus.register_event_handler(ReservationUpdated, on_reservation_updated)
    for event_type in (ReservationApproved, ReservationRejected, ReservationCanceled):
        bus.register_event_handler(event_type, on_reservation_status_changed)
