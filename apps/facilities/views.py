"""API views for the facility registry."""

from __future__ import annotations

from django.utils import timezone  # type: ignore
from rest_framework import status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.reservations.application import booking_engine
from apps.reservations.domain.exceptions import ReservationValidationError
from apps.reservations.serializers import TimeSlotSerializer
from apps.reservations.services import conflict_index
from apps.users.permissions import IsAdministratorOrReadOnly, is_administrator
from shared.domain.value_objects import TimeRange

from .cache import get_cached_facility_ids
from .filters import FacilityFilter
from .models import Facility, FacilityType
from .serializers import FacilitySerializer, FacilityTypeSerializer, MaintenanceSerializer
from .services import set_maintenance

AVAILABILITY_PARAMS = ("date", "start_time", "end_time")


class FacilityViewSet(viewsets.ModelViewSet):
    """
    Facility search for members, full management for administrators.

    Passing ``date``, ``start_time`` and ``end_time`` narrows the list to
    facilities that are free, active and not under maintenance for that
    window.
    """

    queryset = Facility.objects.select_related("facility_type")
    serializer_class = FacilitySerializer
    permission_classes = [IsAdministratorOrReadOnly]
    filterset_class = FacilityFilter

    def get_queryset(self):  # type: ignore
        queryset = super().get_queryset()
        if not is_administrator(self.request.user):
            queryset = queryset.filter(is_active=True)
        return queryset

    def filter_queryset(self, queryset):  # type: ignore
        queryset = super().filter_queryset(queryset)
        if self.action == "list":
            queryset = self._filter_by_availability(queryset)
        return queryset

    def _filter_by_availability(self, queryset):
        params = self.request.query_params
        if not any(params.get(name) for name in AVAILABILITY_PARAMS):
            return queryset
        try:
            window = TimeRange.on_day(params.get("date"), params.get("start_time"), params.get("end_time"))
        except ValueError as e:
            raise ReservationValidationError(str(e)) from None

        filters = {key: value for key, value in params.items()}
        filters["scope"] = "admin" if is_administrator(self.request.user) else "member"

        def builder():
            busy = conflict_index.find_conflicting_facility_ids(window)
            now = timezone.now()
            return [
                facility.pk
                for facility in queryset
                if facility.pk not in busy and facility.is_active and not facility.is_under_maintenance(now)
            ]

        return queryset.filter(pk__in=get_cached_facility_ids(filters, builder))

    @action(detail=True, methods=["get"], url_path="busy-slots", url_name="busy-slots")
    def busy_slots(self, request, pk=None):  # type: ignore
        day = request.query_params.get("date")
        if not day:
            raise ReservationValidationError("The 'date' query parameter is required")
        facility = self.get_object()
        slots = booking_engine.get_busy_slots(facility.pk, day)
        return Response(
            {
                "facility_id": facility.pk,
                "date": day,
                "busy_slots": TimeSlotSerializer(slots, many=True).data,
            }
        )

    @action(detail=True, methods=["post"])
    def maintenance(self, request, pk=None):  # type: ignore
        facility = self.get_object()
        serializer = MaintenanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        facility = set_maintenance(
            facility,
            serializer.validated_data["maintenance_until"],
            serializer.validated_data.get("maintenance_reason"),
        )
        return Response(FacilitySerializer(facility).data, status=status.HTTP_200_OK)


class FacilityTypeViewSet(viewsets.ModelViewSet):
    """Facility types; listed for everyone, managed by administrators."""

    queryset = FacilityType.objects.all()
    serializer_class = FacilityTypeSerializer
    permission_classes = [IsAdministratorOrReadOnly]
