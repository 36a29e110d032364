"""Racing writers against the same facility and window."""

from __future__ import annotations

import threading
from typing import Callable

from django.db import connections
from django.test import TransactionTestCase

from shared.domain.value_objects import TimeRange
from apps.facilities.models import Facility
from apps.reservations.application import booking_engine
from apps.reservations.domain.exceptions import SlotConflictError
from apps.reservations.models import Reservation, ReservationItem
from apps.users.models import User


class ConcurrentBookingTests(TransactionTestCase):
    workers = 4

    def setUp(self) -> None:
        self.members = [
            User.objects.create_user(email=f"member{i}@example.com", password="MemberPass123")
            for i in range(self.workers)
        ]
        self.facility = Facility.objects.create(name="Auditorium", capacity=200)

    def book(self, member: User, start: str, end: str):
        return booking_engine.create_reservation(
            member.id,
            facility_id=self.facility.id,
            date="2025-03-01",
            start_time=start,
            end_time=end,
            purpose="All-hands meeting",
            attendees=50,
        )

    def race(self, calls: list[Callable[[], object]]) -> tuple[list, list, list]:
        """Start every call at once; returns (results, conflicts, other failures)."""
        barrier = threading.Barrier(len(calls))
        results: list = []
        conflicts: list[SlotConflictError] = []
        failures: list[Exception] = []

        def run(call: Callable[[], object]) -> None:
            try:
                barrier.wait()
                results.append(call())
            except SlotConflictError as e:
                conflicts.append(e)
            except Exception as e:  # surfaced by the assertions in each test
                failures.append(e)
            finally:
                connections.close_all()

        threads = [threading.Thread(target=run, args=(call,)) for call in calls]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)
        return results, conflicts, failures

    def test_only_one_overlapping_request_wins(self) -> None:
        windows = [("10:00", "11:00"), ("10:30", "11:30"), ("09:30", "10:45"), ("10:15", "10:40")]
        calls = [
            (lambda member=member, start=start, end=end: self.book(member, start, end))
            for member, (start, end) in zip(self.members, windows)
        ]

        created, conflicts, failures = self.race(calls)

        self.assertEqual(failures, [])
        self.assertEqual(len(created), 1)
        self.assertEqual(len(conflicts), self.workers - 1)
        self.assertEqual(Reservation.objects.count(), 1)

    def test_edit_racing_a_create_ends_in_one_conflict(self) -> None:
        owner, other = self.members[0], self.members[1]
        existing = self.book(owner, "10:00", "11:00")

        done, conflicts, failures = self.race([
            lambda: booking_engine.update_reservation(existing.id, owner.id, end_time="12:00"),
            lambda: self.book(other, "11:30", "12:30"),
        ])

        self.assertEqual(failures, [])
        self.assertEqual(len(done), 1)
        self.assertEqual(len(conflicts), 1)
        slots = [
            TimeRange(start, end)
            for start, end in ReservationItem.objects.filter(
                reservation__status__in=Reservation.ACTIVE_STATUSES,
            ).values_list("start_datetime", "end_datetime")
        ]
        for i, slot in enumerate(slots):
            for later in slots[i + 1:]:
                self.assertFalse(slot.overlaps_with(later))
