"""Integration tests for the facility registry API."""

from __future__ import annotations

from datetime import datetime, timedelta

from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.facilities.models import Facility, FacilityType
from apps.reservations.models import Reservation, ReservationItem
from apps.users.models import User


class FacilityAPITestCase(APITestCase):
    def setUp(self) -> None:
        self.member = User.objects.create_user(email="member@example.com", password="MemberPass123")
        self.admin = User.objects.create_user(
            email="admin@example.com",
            password="AdminPass123",
            role=User.RoleChoices.ADMIN,
        )
        self.room_type = FacilityType.objects.create(name="room", description="Meeting rooms")
        hall_type = FacilityType.objects.create(name="hall")
        equipment_type = FacilityType.objects.create(name="equipment")
        self.room = Facility.objects.create(
            name="Meeting room 101",
            facility_type=self.room_type,
            location="North wing",
            capacity=8,
            description="Whiteboard and screen",
        )
        self.hall = Facility.objects.create(
            name="Great hall",
            facility_type=hall_type,
            location="Main building",
            capacity=300,
        )
        self.projector = Facility.objects.create(name="Portable projector", facility_type=equipment_type)
        self.archived = Facility.objects.create(name="Old lab", facility_type=self.room_type, is_active=False)
        self.client.force_authenticate(self.member)
        self.list_url = reverse("facility-list")

    def _book(self, facility: Facility, start: datetime, end: datetime, status_value=Reservation.Status.PENDING):
        reservation = Reservation.objects.create(
            requester=self.member,
            purpose="Weekly sync",
            attendees=4,
            status=status_value,
        )
        ReservationItem.objects.create(
            reservation=reservation,
            facility=facility,
            start_datetime=start,
            end_datetime=end,
        )
        return reservation

    def _names(self, response) -> list[str]:
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        return [item["name"] for item in response.data]


class FacilitySearchTests(FacilityAPITestCase):
    def test_members_see_active_facilities_only(self) -> None:
        response = self.client.get(self.list_url)

        self.assertEqual(self._names(response), ["Great hall", "Meeting room 101", "Portable projector"])

    def test_admins_see_inactive_facilities(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.get(self.list_url)

        self.assertIn("Old lab", self._names(response))

    def test_filter_by_type_ignores_case(self) -> None:
        response = self.client.get(self.list_url, {"facility_type": "ROOM"})

        self.assertEqual(self._names(response), ["Meeting room 101"])

    def test_filter_by_type_id(self) -> None:
        response = self.client.get(self.list_url, {"type_id": self.room_type.id})

        self.assertEqual(self._names(response), ["Meeting room 101"])

    def test_min_capacity_keeps_unknown_capacity(self) -> None:
        response = self.client.get(self.list_url, {"min_capacity": 10})

        self.assertEqual(self._names(response), ["Great hall", "Portable projector"])

    def test_text_search(self) -> None:
        response = self.client.get(self.list_url, {"q": "whiteboard"})

        self.assertEqual(self._names(response), ["Meeting room 101"])

    def test_availability_window_hides_busy_facilities(self) -> None:
        self._book(self.room, datetime(2025, 3, 1, 10, 0), datetime(2025, 3, 1, 11, 0))
        self._book(
            self.hall,
            datetime(2025, 3, 1, 10, 0),
            datetime(2025, 3, 1, 11, 0),
            status_value=Reservation.Status.CANCELED,
        )

        response = self.client.get(
            self.list_url,
            {"date": "2025-03-01", "start_time": "10:30", "end_time": "11:30"},
        )

        self.assertEqual(self._names(response), ["Great hall", "Portable projector"])

    def test_availability_window_hides_facilities_under_maintenance(self) -> None:
        self.projector.maintenance_until = timezone.now() + timedelta(days=3)
        self.projector.save()

        response = self.client.get(
            self.list_url,
            {"date": "2025-03-01", "start_time": "10:00", "end_time": "11:00"},
        )

        self.assertEqual(self._names(response), ["Great hall", "Meeting room 101"])

    def test_incomplete_availability_window_is_invalid(self) -> None:
        response = self.client.get(self.list_url, {"date": "2025-03-01", "start_time": "10:00"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "invalid_input")


class FacilityManagementTests(FacilityAPITestCase):
    def test_members_cannot_create_facilities(self) -> None:
        response = self.client.post(self.list_url, {"name": "Studio"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_admin_creates_and_updates_facility(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(
            self.list_url,
            {"name": "Studio", "facility_type": "room", "capacity": 6, "maintenance_until": "2099-01-01T00:00:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertIsNone(response.data["maintenance_until"])
        self.assertEqual(response.data["facility_type"], "room")
        facility_id = response.data["id"]
        self.assertEqual(Facility.objects.get(pk=facility_id).facility_type, self.room_type)

        update = self.client.patch(reverse("facility-detail", args=[facility_id]), {"capacity": 12}, format="json")

        self.assertEqual(update.status_code, status.HTTP_200_OK, update.data)
        self.assertEqual(Facility.objects.get(pk=facility_id).capacity, 12)

    def test_unknown_facility_type_is_rejected(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.post(self.list_url, {"name": "Studio", "facility_type": "kitchen"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertIn("facility_type", response.data["errors"])

    def test_admin_sets_and_clears_maintenance(self) -> None:
        self.client.force_authenticate(self.admin)
        url = reverse("facility-maintenance", args=[self.room.id])

        response = self.client.post(
            url,
            {"maintenance_until": "2099-01-01T00:00:00", "maintenance_reason": "Roof repair"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["is_under_maintenance"])
        self.assertEqual(response.data["maintenance_reason"], "Roof repair")

        cleared = self.client.post(url, {"maintenance_until": None, "maintenance_reason": "ignored"}, format="json")

        self.assertEqual(cleared.status_code, status.HTTP_200_OK, cleared.data)
        self.room.refresh_from_db()
        self.assertIsNone(self.room.maintenance_until)
        self.assertIsNone(self.room.maintenance_reason)

    def test_members_cannot_set_maintenance(self) -> None:
        response = self.client.post(
            reverse("facility-maintenance", args=[self.room.id]),
            {"maintenance_until": "2099-01-01T00:00:00"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)


class FacilityTypeTests(FacilityAPITestCase):
    def test_members_list_types_by_name(self) -> None:
        response = self.client.get(reverse("facility-type-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual([item["name"] for item in response.data], ["equipment", "hall", "room"])
        self.assertEqual(response.data[2]["description"], "Meeting rooms")

    def test_members_cannot_create_types(self) -> None:
        response = self.client.post(reverse("facility-type-list"), {"name": "kitchen"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)

    def test_admin_creates_type_and_uses_it(self) -> None:
        self.client.force_authenticate(self.admin)

        created = self.client.post(reverse("facility-type-list"), {"name": "kitchen"}, format="json")
        facility = self.client.post(self.list_url, {"name": "Tea kitchen", "facility_type": "kitchen"}, format="json")

        self.assertEqual(created.status_code, status.HTTP_201_CREATED, created.data)
        self.assertEqual(facility.status_code, status.HTTP_201_CREATED, facility.data)
        self.assertEqual(FacilityType.objects.get(name="kitchen").facilities.count(), 1)

    def test_deleting_a_type_keeps_its_facilities(self) -> None:
        self.client.force_authenticate(self.admin)

        response = self.client.delete(reverse("facility-type-detail", args=[self.room_type.id]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.room.refresh_from_db()
        self.assertIsNone(self.room.facility_type)


class BusySlotsTests(FacilityAPITestCase):
    def test_busy_slots_for_a_day(self) -> None:
        self._book(self.room, datetime(2025, 3, 1, 14, 0), datetime(2025, 3, 1, 15, 0))
        self._book(self.room, datetime(2025, 3, 1, 9, 0), datetime(2025, 3, 1, 9, 30))
        self._book(
            self.room,
            datetime(2025, 3, 1, 11, 0),
            datetime(2025, 3, 1, 12, 0),
            status_value=Reservation.Status.REJECTED,
        )
        self._book(self.room, datetime(2025, 3, 2, 9, 0), datetime(2025, 3, 2, 10, 0))

        response = self.client.get(reverse("facility-busy-slots", args=[self.room.id]), {"date": "2025-03-01"})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["facility_id"], self.room.id)
        self.assertEqual(
            response.data["busy_slots"],
            [
                {"date": "2025-03-01", "start_time": "09:00", "end_time": "09:30"},
                {"date": "2025-03-01", "start_time": "14:00", "end_time": "15:00"},
            ],
        )

    def test_date_is_required(self) -> None:
        response = self.client.get(reverse("facility-busy-slots", args=[self.room.id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "invalid_input")

    def test_inactive_facility_is_hidden_from_members(self) -> None:
        response = self.client.get(reverse("facility-busy-slots", args=[self.archived.id]), {"date": "2025-03-01"})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)
        self.assertEqual(response.data["code"], "not_found")


@override_settings(AVAILABILITY_CACHE_ENABLED=True)
class AvailabilityCacheTests(FacilityAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        from django.core.cache import cache

        cache.clear()
        self.query = {"date": "2025-03-01", "start_time": "10:00", "end_time": "11:00"}

    def test_cached_result_is_dropped_after_booking_commits(self) -> None:
        self.assertIn("Meeting room 101", self._names(self.client.get(self.list_url, self.query)))

        with self.captureOnCommitCallbacks(execute=True):
            self._book(self.room, datetime(2025, 3, 1, 10, 0), datetime(2025, 3, 1, 11, 0))

        self.assertNotIn("Meeting room 101", self._names(self.client.get(self.list_url, self.query)))

    def test_uncommitted_change_keeps_cached_result(self) -> None:
        self.client.get(self.list_url, self.query)

        self._book(self.room, datetime(2025, 3, 1, 10, 0), datetime(2025, 3, 1, 11, 0))

        self.assertIn("Meeting room 101", self._names(self.client.get(self.list_url, self.query)))
