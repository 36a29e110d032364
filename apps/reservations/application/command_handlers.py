"""
Reservation Command Handlers

These are the use cases of the booking engine. Each handler runs inside
one DjangoUnitOfWork, so the conflict check and the writes commit or
roll back together, and events are published only after commit.

Commands:
- CreateReservationCommand: Submit a new PENDING reservation
- UpdateReservationCommand: Owner edit of a PENDING reservation
- CancelReservationCommand: Owner cancellation
- SetReservationStatusCommand: Administrator approve / reject / cancel
"""

from dataclasses import dataclass
import logging

from django.conf import settings
from django.contrib.auth import get_user_model

from shared.application.message_bus import message_bus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import TimeRange
from apps.facilities.services import get_facility
from apps.reservations.domain.entities import (
    MIN_PURPOSE_LENGTH,
    Reservation,
    ReservationStatus,
    validate_details,
)
from apps.reservations.domain.exceptions import (
    CapacityExceededError,
    FacilityUnavailableError,
    NotFoundError,
    ReservationValidationError,
    SlotConflictError,
)
from apps.reservations.models import ReservationAuditLog
from apps.reservations.repositories import DjangoReservationRepository
from apps.reservations.services import conflict_index

logger = logging.getLogger(__name__)

STATUS_ACTIONS = {
    ReservationStatus.APPROVED: ReservationAuditLog.Action.APPROVED,
    ReservationStatus.REJECTED: ReservationAuditLog.Action.REJECTED,
    ReservationStatus.CANCELED: ReservationAuditLog.Action.CANCELED,
}


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    """
    Command to submit a new reservation

    date is YYYY-MM-DD, start_time and end_time are HH:MM.
    """
    requester_id: int
    date: str
    start_time: str
    end_time: str
    purpose: str
    attendees: int
    facility_id: int | None = None
    proposal_url: str = ''


@dataclass
class UpdateReservationCommand:
    """Command to edit a PENDING reservation; None keeps the current value"""
    reservation_id: int
    requester_id: int
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    purpose: str | None = None
    attendees: int | None = None


@dataclass
class CancelReservationCommand:
    """Command for the requester to cancel their reservation"""
    reservation_id: int
    requester_id: int


@dataclass
class SetReservationStatusCommand:
    """Command for an administrator to change status (already authorized)"""
    reservation_id: int
    status: str
    acted_by: int | None = None
    comment: str = ''


# ===== Helpers =====

def _min_purpose_length() -> int:
    return getattr(settings, 'RESERVATION_MIN_PURPOSE_LENGTH', MIN_PURPOSE_LENGTH)


def _build_window(day, start_time, end_time) -> TimeRange:
    try:
        return TimeRange.on_day(day, start_time, end_time)
    except ValueError as e:
        raise ReservationValidationError(str(e)) from None


def _ensure_capacity(facility, attendees: int):
    if not facility.has_room_for(attendees):
        raise CapacityExceededError(
            f"Insufficient capacity: only {facility.capacity} places available"
        )


def _ensure_bookable(facility):
    if not facility.is_active:
        raise FacilityUnavailableError(f"Facility '{facility.name}' is not active")
    if facility.is_under_maintenance():
        message = f"Facility is under maintenance until {facility.maintenance_until:%Y-%m-%d %H:%M}"
        if facility.maintenance_reason:
            message = f"{message}: {facility.maintenance_reason}"
        raise FacilityUnavailableError(message)


def _ensure_no_conflict(facility_id: int, window: TimeRange, exclude_reservation_id: int | None = None):
    conflicts = conflict_index.find_conflicts(
        facility_id,
        window,
        exclude_reservation_id=exclude_reservation_id,
    )
    if conflicts:
        raise SlotConflictError(
            f"Time slot {window} overlaps {len(conflicts)} existing reservation(s)"
        )


def _load_facility(facility_id: int):
    facility = get_facility(facility_id, lock=True)
    if facility is None:
        raise NotFoundError(f"Facility {facility_id} not found")
    return facility


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    Double booking prevention:
    1. Start database transaction (atomic)
    2. Lock the facility row (SELECT FOR UPDATE); writers on the same
       facility queue up here
    3. Check capacity, then active flag and maintenance window
    4. Query the conflict index for overlapping active items
    5. Insert header + item and the audit row
    6. Commit, then publish ReservationCreated
    """

    def __init__(self, reservation_repo, user_model=None):
        self.reservation_repo = reservation_repo
        self.user_model = user_model or get_user_model()

    def handle(self, command: CreateReservationCommand) -> Reservation:
        logger.info(
            "Creating reservation for requester %s, facility %s on %s %s-%s",
            command.requester_id,
            command.facility_id,
            command.date,
            command.start_time,
            command.end_time,
        )

        if not self.user_model.objects.filter(pk=command.requester_id).exists():
            raise NotFoundError(f"User {command.requester_id} not found")

        validate_details(
            command.purpose,
            command.attendees,
            min_purpose_length=_min_purpose_length(),
        )
        window = _build_window(command.date, command.start_time, command.end_time)

        with DjangoUnitOfWork() as uow:
            if command.facility_id is not None:
                facility = _load_facility(command.facility_id)
                _ensure_capacity(facility, command.attendees)
                _ensure_bookable(facility)
                _ensure_no_conflict(facility.pk, window)

            reservation = Reservation.submit(
                requester_id=command.requester_id,
                window=window,
                purpose=command.purpose,
                attendees=command.attendees,
                facility_id=command.facility_id,
                proposal_url=command.proposal_url,
            )
            self.reservation_repo.add(reservation)
            self.reservation_repo.record_action(
                reservation,
                ReservationAuditLog.Action.CREATED,
                acted_by=command.requester_id,
            )
            uow.collect_events(reservation)

        logger.info("Reservation %s created for window %s", reservation.id, reservation.window)
        return reservation


class UpdateReservationHandler:
    """
    Handler for UpdateReservation command

    The facility row is locked before the reservation rows, in the same
    order CreateReservationHandler takes them. The conflict check
    excludes the reservation itself, so shifting or shrinking its own
    window never collides with its old slot.
    """

    def __init__(self, reservation_repo):
        self.reservation_repo = reservation_repo

    def handle(self, command: UpdateReservationCommand) -> Reservation:
        logger.info("Updating reservation %s", command.reservation_id)

        with DjangoUnitOfWork() as uow:
            # Facility row first, then the reservation: the order creates take
            facility_id = self.reservation_repo.facility_id_of(command.reservation_id)
            facility = _load_facility(facility_id) if facility_id is not None else None

            reservation = self.reservation_repo.get_by_id(command.reservation_id, lock=True)
            if not reservation:
                raise NotFoundError(f"Reservation {command.reservation_id} not found")

            reservation.ensure_owned_by(command.requester_id)
            reservation.ensure_editable()

            purpose = command.purpose if command.purpose is not None else reservation.purpose
            attendees = command.attendees if command.attendees is not None else reservation.attendees
            validate_details(purpose, attendees, min_purpose_length=_min_purpose_length())

            window = reservation.window
            if any(v is not None for v in (command.date, command.start_time, command.end_time)):
                window = _build_window(
                    command.date if command.date is not None else reservation.window.day,
                    command.start_time if command.start_time is not None else reservation.window.start_time,
                    command.end_time if command.end_time is not None else reservation.window.end_time,
                )

            window_changed = window != reservation.window
            attendees_changed = attendees != reservation.attendees

            if facility is not None and (window_changed or attendees_changed):
                if window_changed:
                    _ensure_no_conflict(facility.pk, window, exclude_reservation_id=reservation.id)
                _ensure_capacity(facility, attendees)

            changed = reservation.edit(window=window, purpose=purpose, attendees=attendees)
            self.reservation_repo.save(reservation)
            self.reservation_repo.record_action(
                reservation,
                ReservationAuditLog.Action.UPDATED,
                acted_by=command.requester_id,
                from_status=reservation.status,
                comment=", ".join(changed),
            )
            uow.collect_events(reservation)

        logger.info("Reservation %s updated (%s)", reservation.id, ", ".join(changed) or "no changes")
        return reservation


class CancelReservationHandler:
    """Handler for owner cancellation"""

    def __init__(self, reservation_repo):
        self.reservation_repo = reservation_repo

    def handle(self, command: CancelReservationCommand) -> Reservation:
        logger.info("Cancelling reservation %s by %s", command.reservation_id, command.requester_id)

        with DjangoUnitOfWork() as uow:
            reservation = self.reservation_repo.get_by_id(command.reservation_id, lock=True)
            if not reservation:
                raise NotFoundError(f"Reservation {command.reservation_id} not found")

            old_status = reservation.status
            reservation.cancel(command.requester_id)

            self.reservation_repo.save(reservation)
            self.reservation_repo.record_action(
                reservation,
                ReservationAuditLog.Action.CANCELED,
                acted_by=command.requester_id,
                from_status=old_status,
            )
            uow.collect_events(reservation)

        logger.info("Reservation %s canceled by requester", reservation.id)
        return reservation


class SetReservationStatusHandler:
    """Handler for administrator status changes"""

    def __init__(self, reservation_repo):
        self.reservation_repo = reservation_repo

    def handle(self, command: SetReservationStatusCommand) -> Reservation:
        new_status = ReservationStatus.parse(command.status)
        logger.info("Setting reservation %s to %s", command.reservation_id, new_status.value)

        with DjangoUnitOfWork() as uow:
            reservation = self.reservation_repo.get_by_id(command.reservation_id, lock=True)
            if not reservation:
                raise NotFoundError(f"Reservation {command.reservation_id} not found")

            old_status = reservation.status
            reservation.transition_to(
                new_status,
                acted_by=command.acted_by,
                comment=command.comment,
            )

            self.reservation_repo.save(reservation)
            self.reservation_repo.record_action(
                reservation,
                STATUS_ACTIONS[new_status],
                acted_by=command.acted_by,
                from_status=old_status,
                comment=command.comment,
            )
            uow.collect_events(reservation)

        logger.info(
            "Reservation %s moved from %s to %s",
            reservation.id,
            old_status.value,
            new_status.value,
        )
        return reservation


def register_handlers(bus=message_bus):
    """Wire command handlers into the message bus (called from AppConfig.ready)"""
    repo = DjangoReservationRepository()
    handlers = {
        CreateReservationCommand: CreateReservationHandler(repo).handle,
        UpdateReservationCommand: UpdateReservationHandler(repo).handle,
        CancelReservationCommand: CancelReservationHandler(repo).handle,
        SetReservationStatusCommand: SetReservationStatusHandler(repo).handle,
    }
    for command_type, handler in handlers.items():
        if not bus.has_command_handler(command_type):
            bus.register_command_handler(command_type, handler)
