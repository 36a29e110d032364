"""Tests for the booking engine entry points and the conflict index."""

from __future__ import annotations

from datetime import date, datetime
from unittest import mock

from django.db import connection, transaction
from django.test import TestCase

from shared.domain.value_objects import TimeRange
from apps.facilities import services as facility_services
from apps.facilities.models import Facility, FacilityType
from apps.notifications.models import Notification
from apps.reservations.application import booking_engine, command_handlers
from apps.reservations.application.command_handlers import (
    UpdateReservationCommand,
    UpdateReservationHandler,
)
from apps.reservations.domain.exceptions import (
    InvalidStatusError,
    NotFoundError,
    ReservationValidationError,
    SlotConflictError,
)
from apps.reservations.models import Reservation, ReservationItem
from apps.reservations.repositories import DjangoReservationRepository
from apps.reservations.services import _lock_queryset_if_possible, conflict_index
from apps.users.models import User


class BookingEngineTestCase(TestCase):
    def setUp(self) -> None:
        self.member = User.objects.create_user(email="member@example.com", password="MemberPass123")
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.facility = Facility.objects.create(
            name="Main hall", facility_type=FacilityType.objects.create(name="hall"), capacity=80
        )

    def book(self, start: str = "10:00", end: str = "11:00", day: str = "2025-03-01", **kwargs):
        fields = dict(
            facility_id=self.facility.id,
            date=day,
            start_time=start,
            end_time=end,
            purpose="Department seminar",
            attendees=20,
        )
        fields.update(kwargs)
        return booking_engine.create_reservation(self.member.id, **fields)


class CreateReservationTests(BookingEngineTestCase):
    def test_unknown_requester_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            booking_engine.create_reservation(
                987654,
                facility_id=self.facility.id,
                date="2025-03-01",
                start_time="10:00",
                end_time="11:00",
                purpose="Department seminar",
                attendees=3,
            )

    def test_malformed_time_is_invalid_input(self) -> None:
        with self.assertRaises(ReservationValidationError):
            self.book(start="10h")

    def test_conflict_leaves_no_rows_behind(self) -> None:
        self.book()

        with self.assertRaises(SlotConflictError):
            self.book("10:59", "12:00")

        self.assertEqual(Reservation.objects.count(), 1)
        self.assertEqual(ReservationItem.objects.count(), 1)

    def test_other_facility_is_independent(self) -> None:
        other = Facility.objects.create(name="Small hall", capacity=30)
        self.book()

        detail = self.book(facility_id=other.id)

        self.assertEqual(detail.facility_id, other.id)

    def test_purpose_length_is_configurable(self) -> None:
        with self.settings(RESERVATION_MIN_PURPOSE_LENGTH=20):
            with self.assertRaises(ReservationValidationError):
                self.book(purpose="Department seminar")


class ReadTests(BookingEngineTestCase):
    def test_get_reservation_is_idempotent(self) -> None:
        detail = self.book()

        first = booking_engine.get_reservation(detail.id, self.member.id)
        second = booking_engine.get_reservation(detail.id, self.member.id)

        self.assertEqual(first, second)
        self.assertEqual([entry.action for entry in first.history], ["CREATED"])

    def test_get_missing_reservation(self) -> None:
        with self.assertRaises(NotFoundError):
            booking_engine.get_reservation(123456)

    def test_list_for_user_is_newest_first(self) -> None:
        first = self.book("08:00", "09:00")
        second = self.book("09:00", "10:00")

        summaries = booking_engine.list_reservations_for_user(self.member.id)

        self.assertEqual([summary.id for summary in summaries], [second.id, first.id])

    def test_list_all_rejects_unknown_status(self) -> None:
        with self.assertRaises(InvalidStatusError):
            booking_engine.list_all_reservations("archived")


class AvailabilityTests(BookingEngineTestCase):
    def test_check_availability(self) -> None:
        self.book()

        self.assertFalse(booking_engine.check_facility_availability(self.facility.id, "2025-03-01", "10:30", "11:30"))
        self.assertTrue(booking_engine.check_facility_availability(self.facility.id, "2025-03-01", "11:00", "12:00"))

    def test_inactive_facility_is_never_available(self) -> None:
        self.facility.is_active = False
        self.facility.save()

        self.assertFalse(booking_engine.check_facility_availability(self.facility.id, "2025-03-01", "10:00", "11:00"))

    def test_canceled_reservation_does_not_block(self) -> None:
        detail = self.book()
        booking_engine.cancel_reservation(detail.id, self.member.id)

        self.assertTrue(booking_engine.check_facility_availability(self.facility.id, "2025-03-01", "10:00", "11:00"))

    def test_unknown_facility(self) -> None:
        with self.assertRaises(NotFoundError):
            booking_engine.check_facility_availability(424242, "2025-03-01", "10:00", "11:00")

    def test_busy_slots_are_ordered_and_skip_inactive(self) -> None:
        late = self.book("15:00", "16:00")
        self.book("09:00", "10:00")
        dropped = self.book("12:00", "13:00")
        self.book("09:00", "10:00", day="2025-03-02")
        booking_engine.set_reservation_status(late.id, "APPROVED", acted_by=self.admin.id)
        booking_engine.set_reservation_status(dropped.id, "REJECTED", acted_by=self.admin.id)

        slots = booking_engine.get_busy_slots(self.facility.id, "2025-03-01")

        self.assertEqual(
            [(slot.start_time, slot.end_time) for slot in slots],
            [("09:00", "10:00"), ("15:00", "16:00")],
        )

    def test_find_conflicts_excludes_given_reservation(self) -> None:
        detail = self.book()
        window = TimeRange(datetime(2025, 3, 1, 10, 30), datetime(2025, 3, 1, 11, 30))

        self.assertEqual(len(conflict_index.find_conflicts(self.facility.id, window)), 1)
        self.assertEqual(conflict_index.find_conflicts(self.facility.id, window, exclude_reservation_id=detail.id), [])

    def test_find_conflicting_facility_ids(self) -> None:
        other = Facility.objects.create(name="Lab", capacity=12)
        self.book()
        self.book(facility_id=other.id, start="13:00", end="14:00", attendees=5)

        busy = conflict_index.find_conflicting_facility_ids(TimeRange.on_day(date(2025, 3, 1), "10:30", "13:30"))

        self.assertEqual(busy, {self.facility.id, other.id})


class EventPublishingTests(BookingEngineTestCase):
    def test_events_are_published_after_commit(self) -> None:
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            detail = self.book()
        self.assertFalse(Notification.objects.exists())

        for callback in callbacks:
            callback()

        titles = set(Notification.objects.filter(reservation_id=detail.id).values_list("title", flat=True))
        self.assertEqual(titles, {"Reservation submitted", "New reservation request"})

    def test_failed_command_publishes_nothing(self) -> None:
        self.book()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(SlotConflictError):
                self.book("10:30", "11:30")

        self.assertEqual(callbacks, [])


class LockOrderTests(BookingEngineTestCase):
    def test_edit_locks_facility_before_reservation(self) -> None:
        detail = self.book()
        locks: list[str] = []
        repo = DjangoReservationRepository()
        read_reservation = repo.get_by_id

        def get_by_id(reservation_id, *, lock=False):
            if lock:
                locks.append("reservation")
            return read_reservation(reservation_id, lock=lock)

        def get_facility(facility_id, *, lock=False):
            if lock:
                locks.append("facility")
            return facility_services.get_facility(facility_id, lock=lock)

        repo.get_by_id = get_by_id
        with mock.patch.object(command_handlers, "get_facility", side_effect=get_facility):
            UpdateReservationHandler(repo).handle(
                UpdateReservationCommand(
                    reservation_id=detail.id,
                    requester_id=self.member.id,
                    start_time="10:30",
                    end_time="11:30",
                )
            )

        self.assertEqual(locks, ["facility", "reservation"])
        self.assertEqual(booking_engine.get_reservation(detail.id, self.member.id).start_time, "10:30")

    def test_conflict_query_locks_item_rows_only(self) -> None:
        with transaction.atomic(), mock.patch.object(connection.features, "has_select_for_update_of", True):
            queryset = _lock_queryset_if_possible(ReservationItem.objects.filter(facility=self.facility))

        self.assertTrue(queryset.query.select_for_update)
        self.assertEqual(queryset.query.select_for_update_of, ("self",))

    def test_edit_of_missing_reservation_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            booking_engine.update_reservation(424242, self.member.id, attendees=3)
