"""API views for the reservation engine."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsAdministrator, is_administrator

from .application import booking_engine
from .serializers import (
    AvailabilityQuerySerializer,
    ReservationCreateSerializer,
    ReservationDetailSerializer,
    ReservationStatusSerializer,
    ReservationSummarySerializer,
    ReservationUpdateSerializer,
)


class ReservationViewSet(viewsets.ViewSet):
    """
    Reservation requests of the authenticated member.

    Domain errors raised by the engine are rendered by the project
    exception handler as ``{"code", "detail"}``.
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_permissions(self):  # type: ignore
        if self.action in ("change_status", "all_reservations"):
            return [permissions.IsAuthenticated(), IsAdministrator()]
        return super().get_permissions()

    def list(self, request):  # type: ignore
        summaries = booking_engine.list_reservations_for_user(request.user.id)
        return Response(ReservationSummarySerializer(summaries, many=True).data)

    def create(self, request):  # type: ignore
        serializer = ReservationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        detail = booking_engine.create_reservation(
            request.user.id,
            facility_id=data.get("facility_id"),
            date=data["date"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            purpose=data["purpose"],
            attendees=data["attendees"],
            proposal_url=data.get("proposal_url", ""),
        )
        return Response(ReservationDetailSerializer(detail).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):  # type: ignore
        detail = booking_engine.get_reservation(
            int(pk),
            request.user.id,
            caller_is_admin=is_administrator(request.user),
        )
        return Response(ReservationDetailSerializer(detail).data)

    def partial_update(self, request, pk=None):  # type: ignore
        serializer = ReservationUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        detail = booking_engine.update_reservation(int(pk), request.user.id, **serializer.validated_data)
        return Response(ReservationDetailSerializer(detail).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking_engine.cancel_reservation(int(pk), request.user.id)
        return Response({"id": int(pk), "status": "CANCELED"}, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="status", url_name="status")
    def change_status(self, request, pk=None):  # type: ignore
        serializer = ReservationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        detail = booking_engine.set_reservation_status(
            int(pk),
            serializer.validated_data["status"],
            acted_by=request.user.id,
            comment=serializer.validated_data["comment"],
        )
        return Response(ReservationDetailSerializer(detail).data)

    @action(detail=False, methods=["get"], url_path="all", url_name="all")
    def all_reservations(self, request):  # type: ignore
        summaries = booking_engine.list_all_reservations(request.query_params.get("status"))
        return Response(ReservationSummarySerializer(summaries, many=True).data)

    @action(detail=False, methods=["get"])
    def availability(self, request):  # type: ignore
        serializer = AvailabilityQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        available = booking_engine.check_facility_availability(
            data["facility_id"],
            data["date"],
            data["start_time"],
            data["end_time"],
        )
        return Response({"available": available})
