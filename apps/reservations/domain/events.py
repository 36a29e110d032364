"""
Reservation Domain Events

Published after the transaction that recorded them commits. The
reservation id travels as ``aggregate_id``.
"""

from dataclasses import dataclass, field
from typing import Tuple

from shared.domain.base import DomainEvent
from shared.domain.value_objects import TimeRange


@dataclass
class ReservationCreated(DomainEvent):
    """
    Event: A member submitted a reservation request (status PENDING)

    Triggers:
    - In-app confirmation for the requester
    - Alert for administrators who review requests
    """
    requester_id: int
    facility_id: int | None
    window: TimeRange


@dataclass
class ReservationUpdated(DomainEvent):
    """Event: The requester edited a PENDING reservation"""
    requester_id: int
    facility_id: int | None
    window: TimeRange
    changed_fields: Tuple[str, ...] = field(default_factory=tuple)


@dataclass
class ReservationStatusChanged(DomainEvent):
    """
    Base event for lifecycle transitions

    acted_by is the administrator or requester who triggered it.
    """
    requester_id: int
    facility_id: int | None
    window: TimeRange
    old_status: str
    new_status: str
    acted_by: int | None = None
    comment: str = ''


@dataclass
class ReservationApproved(ReservationStatusChanged):
    """Event: An administrator approved the request (PENDING -> APPROVED)"""


@dataclass
class ReservationRejected(ReservationStatusChanged):
    """Event: An administrator rejected the request (PENDING -> REJECTED)"""


@dataclass
class ReservationCanceled(ReservationStatusChanged):
    """
    Event: The reservation was canceled

    The slot is free again for new requests.
    """
