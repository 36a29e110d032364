"""Django persistence for the Reservation aggregate."""

from __future__ import annotations

import logging

from shared.domain.value_objects import TimeRange

from .domain.entities import Reservation, ReservationStatus
from .models import Reservation as ReservationModel
from .models import ReservationAuditLog, ReservationItem

logger = logging.getLogger(__name__)


class DjangoReservationRepository:
    """
    Maps the aggregate onto a reservation header and its single item

    Writes are expected to run inside DjangoUnitOfWork.
    """

    def get_by_id(self, reservation_id: int, *, lock: bool = False) -> Reservation | None:
        headers = ReservationModel.objects.all()
        items = ReservationItem.objects.all()
        if lock:
            headers = headers.select_for_update()
            items = items.select_for_update()

        header = headers.filter(pk=reservation_id).first()
        if header is None:
            return None
        item = items.filter(reservation_id=header.pk).first()
        if item is None:
            logger.error("Reservation %s has no item", header.pk)
            return None
        return self._to_domain(header, item)

    def facility_id_of(self, reservation_id: int) -> int | None:
        """Facility a reservation occupies, read without locking."""
        return (
            ReservationItem.objects.filter(reservation_id=reservation_id)
            .values_list("facility_id", flat=True)
            .first()
        )

    def add(self, reservation: Reservation) -> Reservation:
        header = ReservationModel.objects.create(
            requester_id=reservation.requester_id,
            purpose=reservation.purpose,
            attendees=reservation.attendees,
            status=reservation.status.value,
            proposal_url=reservation.proposal_url,
        )
        item = ReservationItem.objects.create(
            reservation=header,
            facility_id=reservation.facility_id,
            start_datetime=reservation.window.start,
            end_datetime=reservation.window.end,
        )
        reservation.id = header.pk
        reservation.item_id = item.pk
        reservation.created_at = header.created_at
        reservation.updated_at = header.updated_at
        return reservation

    def save(self, reservation: Reservation) -> Reservation:
        header = ReservationModel.objects.get(pk=reservation.id)
        header.purpose = reservation.purpose
        header.attendees = reservation.attendees
        header.status = reservation.status.value
        header.proposal_url = reservation.proposal_url
        header.save(update_fields=["purpose", "attendees", "status", "proposal_url", "updated_at"])

        ReservationItem.objects.filter(pk=reservation.item_id).update(
            facility_id=reservation.facility_id,
            start_datetime=reservation.window.start,
            end_datetime=reservation.window.end,
        )
        reservation.updated_at = header.updated_at
        return reservation

    def record_action(
        self,
        reservation: Reservation,
        action: str,
        *,
        acted_by: int | None = None,
        from_status: ReservationStatus | None = None,
        comment: str = '',
    ) -> ReservationAuditLog:
        return ReservationAuditLog.objects.create(
            reservation_id=reservation.id,
            acted_by_id=acted_by,
            action=action,
            from_status=from_status.value if from_status else '',
            to_status=reservation.status.value,
            comment=comment,
        )

    @staticmethod
    def _to_domain(header: ReservationModel, item: ReservationItem) -> Reservation:
        return Reservation(
            id=header.pk,
            requester_id=header.requester_id,
            purpose=header.purpose,
            attendees=header.attendees,
            window=TimeRange(item.start_datetime, item.end_datetime),
            facility_id=item.facility_id,
            status=ReservationStatus(header.status),
            proposal_url=header.proposal_url,
            item_id=item.pk,
            created_at=header.created_at,
            updated_at=header.updated_at,
        )
