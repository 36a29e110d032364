"""Facility registry services consumed by the reservation engine."""

from __future__ import annotations

import logging
from datetime import datetime

from django.db import transaction  # type: ignore

from .models import Facility

logger = logging.getLogger(__name__)


def get_facility(facility_id: int, *, lock: bool = False) -> Facility | None:
    """
    Return the facility or None when it does not exist.

    With ``lock=True`` the row is read with SELECT ... FOR UPDATE, so the
    caller must already be inside transaction.atomic(). Writers holding the
    lock are serialized per facility.
    """
    queryset = Facility.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    return queryset.filter(pk=facility_id).first()


@transaction.atomic
def set_maintenance(facility: Facility, until: datetime | None, reason: str | None = None) -> Facility:
    """Open a maintenance window, or close it when ``until`` is None."""

    facility = Facility.objects.select_for_update().get(pk=facility.pk)
    facility.maintenance_until = until
    facility.maintenance_reason = (reason or None) if until else None
    facility.save(update_fields=["maintenance_until", "maintenance_reason", "updated_at"])

    if until:
        logger.info("Facility %s under maintenance until %s", facility.pk, until)
    else:
        logger.info("Facility %s maintenance cleared", facility.pk)
    return facility
