"""
Reservation Queries

Read side of the booking engine. Returns plain dataclasses with the
display fields resolved, so two reads with no mutation in between
compare equal.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Tuple

from shared.domain.value_objects import DATE_FORMAT, TimeRange, parse_date
from apps.facilities.models import Facility
from apps.reservations.domain.entities import ReservationStatus
from apps.reservations.domain.exceptions import NotFoundError, ReservationValidationError
from apps.reservations.models import Reservation as ReservationModel
from apps.reservations.services import conflict_index


@dataclass(frozen=True)
class ReservationSummary:
    id: int
    status: str
    requester_id: int
    requester_name: str
    facility_id: int | None
    facility_name: str | None
    date: str
    start_time: str
    end_time: str
    purpose: str
    attendees: int
    created_at: datetime


@dataclass(frozen=True)
class AuditEntry:
    action: str
    from_status: str
    to_status: str
    acted_by_id: int | None
    comment: str
    acted_at: datetime


@dataclass(frozen=True)
class ReservationDetail(ReservationSummary):
    requester_email: str
    facility_type: str | None
    facility_location: str | None
    facility_capacity: int | None
    proposal_url: str
    updated_at: datetime
    history: Tuple[AuditEntry, ...]


def _summary_fields(row: ReservationModel) -> dict:
    item = row.item
    facility = item.facility
    window = TimeRange(item.start_datetime, item.end_datetime)
    return dict(
        id=row.pk,
        status=row.status,
        requester_id=row.requester_id,
        requester_name=row.requester.display_name,
        facility_id=item.facility_id,
        facility_name=facility.name if facility else None,
        date=window.day.strftime(DATE_FORMAT),
        start_time=window.start_time,
        end_time=window.end_time,
        purpose=row.purpose,
        attendees=row.attendees,
        created_at=row.created_at,
    )


def _base_queryset():
    return ReservationModel.objects.select_related("requester", "item", "item__facility__facility_type")


def _to_summary(row: ReservationModel) -> ReservationSummary:
    return ReservationSummary(**_summary_fields(row))


def _to_detail(row: ReservationModel) -> ReservationDetail:
    facility = row.item.facility
    history = tuple(
        AuditEntry(
            action=log.action,
            from_status=log.from_status,
            to_status=log.to_status,
            acted_by_id=log.acted_by_id,
            comment=log.comment,
            acted_at=log.acted_at,
        )
        for log in row.audit_logs.all()
    )
    return ReservationDetail(
        **_summary_fields(row),
        requester_email=row.requester.email,
        facility_type=facility.facility_type.name if facility and facility.facility_type else None,
        facility_location=facility.location if facility else None,
        facility_capacity=facility.capacity if facility else None,
        proposal_url=row.proposal_url,
        updated_at=row.updated_at,
        history=history,
    )


def get_reservation(
    reservation_id: int,
    requester_id: int | None = None,
    *,
    caller_is_admin: bool = False,
) -> ReservationDetail:
    """
    Load one reservation

    When requester_id is given and the caller is not an administrator,
    reservations of other members are reported as not found.
    """
    row = _base_queryset().filter(pk=reservation_id).first()
    if row is None:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    if requester_id is not None and not caller_is_admin and row.requester_id != requester_id:
        raise NotFoundError(f"Reservation {reservation_id} not found")
    return _to_detail(row)


def list_reservations_for_user(user_id: int) -> List[ReservationSummary]:
    return [_to_summary(row) for row in _base_queryset().filter(requester_id=user_id)]


def list_all_reservations(status: str | None = None) -> List[ReservationSummary]:
    """Administrative listing, optionally narrowed to one status"""
    queryset = _base_queryset()
    if status:
        queryset = queryset.filter(status=ReservationStatus.parse(status).value)
    return [_to_summary(row) for row in queryset]


def _get_facility_or_404(facility_id: int) -> Facility:
    facility = Facility.objects.filter(pk=facility_id).first()
    if facility is None:
        raise NotFoundError(f"Facility {facility_id} not found")
    return facility


def check_facility_availability(facility_id: int, day, start_time, end_time) -> bool:
    """
    Tell whether a new request for the window would be admitted

    False when the facility is inactive, under maintenance or the window
    overlaps an active reservation. Capacity is not considered.
    """
    try:
        window = TimeRange.on_day(day, start_time, end_time)
    except ValueError as e:
        raise ReservationValidationError(str(e)) from None

    facility = _get_facility_or_404(facility_id)
    if not facility.is_active or facility.is_under_maintenance():
        return False
    return not conflict_index.find_conflicts(facility.pk, window)


def get_busy_slots(facility_id: int, day) -> List[TimeRange]:
    """Active windows of a facility on one calendar date"""
    try:
        day = parse_date(day)
    except ValueError as e:
        raise ReservationValidationError(str(e)) from None

    facility = _get_facility_or_404(facility_id)
    return conflict_index.busy_slots(facility.pk, day)
