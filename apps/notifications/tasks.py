"""Celery tasks for notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import send_reservation_status_email as send_status_email

logger = logging.getLogger(__name__)


@shared_task(name="notifications.send_reservation_status_email")
def send_reservation_status_email(reservation_id: int, comment: str = "") -> bool:
    """Email the requester about an administrator status change."""
    from apps.reservations.models import Reservation

    reservation = (
        Reservation.objects.select_related("requester", "item", "item__facility")
        .filter(pk=reservation_id)
        .first()
    )
    if reservation is None:
        logger.warning("Reservation %s vanished before the status email was sent", reservation_id)
        return False
    return send_status_email(reservation, comment)
