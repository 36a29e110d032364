"""Notification services: in-app rows and email."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import format_html, strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.notifications.models import Notification
    from apps.reservations.models import Reservation

logger = logging.getLogger(__name__)


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def notify(
    user_id: int,
    title: str,
    message: str,
    *,
    reservation_id: int | None = None,
) -> "Notification | None":
    """
    Create an in-app notification.

    Returns the notification, or None if it could not be stored. Failures
    are logged and never raised.
    """
    try:
        from .models import Notification

        notification = Notification.objects.create(
            user_id=user_id,
            reservation_id=reservation_id,
            title=title,
            message=message,
        )
        logger.info("In-app notification created for user %s: %s", user_id, title)
        return notification

    except Exception as e:
        logger.error("Failed to create in-app notification for user %s: %s", user_id, e, exc_info=True)
        return None


def notify_many(user_ids: Iterable[int], title: str, message: str, *, reservation_id: int | None = None) -> int:
    """Notify several users; returns how many rows were stored."""
    created = 0
    for user_id in user_ids:
        if notify(user_id, title, message, reservation_id=reservation_id) is not None:
            created += 1
    return created


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send one email.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        template_name: Django template to render (optional)
        context: Template context; ``message`` is used as plain body otherwise
        html_message: Pre-rendered HTML body (optional)

    Returns:
        bool: True if the message was handed to the email backend
    """
    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info("Email sent successfully to %s: %s", recipient_email, subject)
        return True

    except Exception as e:
        logger.error("Failed to send email to %s: %s", recipient_email, e, exc_info=True)
        return False


STATUS_EMAIL_SUBJECTS = {
    "APPROVED": "Your reservation #{id} was approved",
    "REJECTED": "Your reservation #{id} was rejected",
    "CANCELED": "Your reservation #{id} was canceled",
}


def send_reservation_status_email(reservation: "Reservation", comment: str = "") -> bool:
    """Tell the requester that an administrator changed the status."""
    requester = reservation.requester
    if not requester.email:
        logger.warning("Requester %s has no email address", requester.pk)
        return False

    item = reservation.item
    facility_name = item.facility.name if item.facility else "No facility"
    subject = STATUS_EMAIL_SUBJECTS.get(
        reservation.status, "Your reservation #{id} was updated"
    ).format(id=reservation.pk)

    comment_html = (
        format_html("<p><strong>Administrator comment:</strong> {}</p>", comment) if comment else ""
    )
    html_message = format_html(
        """
    <html>
    <body>
        <h2>Hello, {name}!</h2>
        <p>The status of your reservation is now <strong>{status}</strong>.</p>

        <h3>Reservation details:</h3>
        <ul>
            <li><strong>Facility:</strong> {facility}</li>
            <li><strong>Date:</strong> {day}</li>
            <li><strong>Time:</strong> {start} - {end}</li>
            <li><strong>Purpose:</strong> {purpose}</li>
        </ul>

        {comment}
    </body>
    </html>
    """,
        name=requester.display_name,
        status=reservation.get_status_display(),
        facility=facility_name,
        day=f"{item.start_datetime:%Y-%m-%d}",
        start=f"{item.start_datetime:%H:%M}",
        end=f"{item.end_datetime:%H:%M}",
        purpose=reservation.purpose,
        comment=comment_html,
    )

    return send_email_notification(
        recipient_email=requester.email,
        subject=subject,
        template_name=None,
        context={},
        html_message=html_message,
    )
