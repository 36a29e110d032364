"""
Booking Engine API

Entry points used by the REST adapter and by other apps. Every caller
passes the acting user explicitly; mutations are dispatched as commands
through the message bus and answered with a fresh detail view.
"""

from typing import List

from shared.application.message_bus import message_bus
from shared.domain.value_objects import TimeRange
from apps.reservations.application import queries
from apps.reservations.application.command_handlers import (
    CancelReservationCommand,
    CreateReservationCommand,
    SetReservationStatusCommand,
    UpdateReservationCommand,
)
from apps.reservations.application.queries import ReservationDetail, ReservationSummary


def create_reservation(
    requester_id: int,
    *,
    date: str,
    start_time: str,
    end_time: str,
    purpose: str,
    attendees: int,
    facility_id: int | None = None,
    proposal_url: str = '',
) -> ReservationDetail:
    reservation = message_bus.handle_command(CreateReservationCommand(
        requester_id=requester_id,
        facility_id=facility_id,
        date=date,
        start_time=start_time,
        end_time=end_time,
        purpose=purpose,
        attendees=attendees,
        proposal_url=proposal_url,
    ))
    return queries.get_reservation(reservation.id)


def update_reservation(reservation_id: int, requester_id: int, **changes) -> ReservationDetail:
    """
    Edit a PENDING reservation

    Accepted keyword arguments: date, start_time, end_time, purpose,
    attendees. Omitted ones keep their current value.
    """
    reservation = message_bus.handle_command(UpdateReservationCommand(
        reservation_id=reservation_id,
        requester_id=requester_id,
        **changes,
    ))
    return queries.get_reservation(reservation.id)


def cancel_reservation(reservation_id: int, requester_id: int) -> None:
    message_bus.handle_command(CancelReservationCommand(
        reservation_id=reservation_id,
        requester_id=requester_id,
    ))


def set_reservation_status(
    reservation_id: int,
    status: str,
    *,
    acted_by: int | None = None,
    comment: str = '',
) -> ReservationDetail:
    """Administrator status change; the caller has already been authorized"""
    reservation = message_bus.handle_command(SetReservationStatusCommand(
        reservation_id=reservation_id,
        status=status,
        acted_by=acted_by,
        comment=comment,
    ))
    return queries.get_reservation(reservation.id)


def get_reservation(
    reservation_id: int,
    requester_id: int | None = None,
    *,
    caller_is_admin: bool = False,
) -> ReservationDetail:
    return queries.get_reservation(reservation_id, requester_id, caller_is_admin=caller_is_admin)


def list_reservations_for_user(user_id: int) -> List[ReservationSummary]:
    return queries.list_reservations_for_user(user_id)


def list_all_reservations(status: str | None = None) -> List[ReservationSummary]:
    return queries.list_all_reservations(status)


def check_facility_availability(facility_id: int, date, start_time, end_time) -> bool:
    return queries.check_facility_availability(facility_id, date, start_time, end_time)


def get_busy_slots(facility_id: int, date) -> List[TimeRange]:
    return queries.get_busy_slots(facility_id, date)


__all__ = [
    "create_reservation",
    "update_reservation",
    "cancel_reservation",
    "set_reservation_status",
    "get_reservation",
    "list_reservations_for_user",
    "list_all_reservations",
    "check_facility_availability",
    "get_busy_slots",
]
