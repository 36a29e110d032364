"""Conflict index over reservation time windows."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import List, Set

from django.db import transaction  # type: ignore
from django.db.models import Q  # type: ignore

from shared.domain.value_objects import TimeRange

from .models import Reservation, ReservationItem


def _lock_queryset_if_possible(queryset):
    """
    Lock the matched item rows when inside transaction.atomic().

    Reservation headers joined for the status filter are left unlocked;
    handlers lock a header before its item, and this query must not hold
    them in the opposite order.
    """
    connection = transaction.get_connection()
    if not connection.in_atomic_block:
        return queryset
    if connection.features.has_select_for_update_of:
        return queryset.select_for_update(of=("self",))
    return queryset.select_for_update()


def _overlapping(window: TimeRange) -> Q:
    # [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1
    return Q(start_datetime__lt=window.end) & Q(end_datetime__gt=window.start)


def _active_items():
    return ReservationItem.objects.filter(reservation__status__in=Reservation.ACTIVE_STATUSES)


class ConflictIndex:
    """
    Queries active (PENDING or APPROVED) reservation items by window

    Called inside a unit of work, the matched rows are locked until the
    surrounding transaction ends.
    """

    def find_conflicts(
        self,
        facility_id: int,
        window: TimeRange,
        exclude_reservation_id: int | None = None,
    ) -> List[int]:
        """Return ids of active items on the facility overlapping ``window``."""
        queryset = _active_items().filter(facility_id=facility_id).filter(_overlapping(window))
        if exclude_reservation_id is not None:
            queryset = queryset.exclude(reservation_id=exclude_reservation_id)
        queryset = _lock_queryset_if_possible(queryset)
        return list(queryset.order_by("start_datetime", "id").values_list("id", flat=True))

    def find_conflicting_facility_ids(self, window: TimeRange) -> Set[int]:
        """Return ids of every facility with an active item overlapping ``window``."""
        queryset = (
            _active_items()
            .filter(facility__isnull=False)
            .filter(_overlapping(window))
            .values_list("facility_id", flat=True)
            .distinct()
        )
        return set(queryset)

    def busy_slots(self, facility_id: int, day: date) -> List[TimeRange]:
        """Return the active windows touching ``day``, ordered by start."""
        day_window = TimeRange(
            datetime.combine(day, time.min),
            datetime.combine(day + timedelta(days=1), time.min),
        )
        rows = (
            _active_items()
            .filter(facility_id=facility_id)
            .filter(_overlapping(day_window))
            .order_by("start_datetime", "id")
            .values_list("start_datetime", "end_datetime")
        )
        return [TimeRange(start, end) for start, end in rows]


conflict_index = ConflictIndex()
