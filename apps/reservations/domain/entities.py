"""
Reservation Domain Entities

Core business entities for the reservation domain:
- ReservationStatus: closed set of lifecycle states
- Reservation: aggregate root enforcing the lifecycle guards
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Tuple

from shared.domain.base import Aggregate
from shared.domain.value_objects import TimeRange
from apps.reservations.domain.exceptions import (
    ForbiddenError,
    InvalidStateError,
    InvalidStatusError,
    ReservationValidationError,
)

MIN_PURPOSE_LENGTH = 5


class ReservationStatus(Enum):
    """
    Reservation Status Finite State Machine

    State transitions:
    - PENDING -> APPROVED (administrator approved)
    - PENDING -> REJECTED (administrator rejected)
    - PENDING -> CANCELED (requester or administrator canceled)
    - APPROVED -> CANCELED (requester or administrator canceled)

    REJECTED and CANCELED are final.
    """
    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'
    CANCELED = 'CANCELED'

    @classmethod
    def parse(cls, value) -> 'ReservationStatus':
        """
        Resolve a status string, ignoring case

        Raises InvalidStatusError for anything outside the closed set.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value or '').strip().upper()
        normalized = STATUS_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise InvalidStatusError(f"Unknown reservation status '{value}'") from None

    @property
    def is_active(self) -> bool:
        """Active reservations occupy the schedule"""
        return self in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return not self.is_active

    def can_transition_to(self, other: 'ReservationStatus') -> bool:
        return other in ALLOWED_TRANSITIONS[self]


STATUS_ALIASES = {'CANCELLED': 'CANCELED'}

ACTIVE_STATUSES = frozenset({ReservationStatus.PENDING, ReservationStatus.APPROVED})

ALLOWED_TRANSITIONS = {
    ReservationStatus.PENDING: frozenset({
        ReservationStatus.APPROVED,
        ReservationStatus.REJECTED,
        ReservationStatus.CANCELED,
    }),
    ReservationStatus.APPROVED: frozenset({ReservationStatus.CANCELED}),
    ReservationStatus.REJECTED: frozenset(),
    ReservationStatus.CANCELED: frozenset(),
}


def validate_details(purpose: str, attendees: int, *, min_purpose_length: int = MIN_PURPOSE_LENGTH):
    """Check the free-form part of a reservation request"""
    if len((purpose or '').strip()) < min_purpose_length:
        raise ReservationValidationError(
            f"Purpose must be at least {min_purpose_length} characters long"
        )
    if isinstance(attendees, bool) or not isinstance(attendees, int) or attendees < 1:
        raise ReservationValidationError("Attendees must be a positive integer")


@dataclass(eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    A member's request to use one facility (or none) for one time window.
    The header and its single time-bound item are loaded and saved together.

    Key invariants:
    - Only PENDING reservations can be edited
    - Only the requester may edit or cancel through the member workflow
    - Transitions follow ALLOWED_TRANSITIONS; terminal states are final
    """

    requester_id: int
    purpose: str
    attendees: int
    window: TimeRange
    facility_id: int | None = None
    status: ReservationStatus = ReservationStatus.PENDING
    proposal_url: str = ''

    # Persistence details
    item_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def submit(
        cls,
        requester_id: int,
        window: TimeRange,
        purpose: str,
        attendees: int,
        facility_id: int | None = None,
        proposal_url: str = '',
    ) -> 'Reservation':
        """
        Create a new PENDING reservation

        Events: ReservationCreated
        """
        from apps.reservations.domain.events import ReservationCreated

        reservation = cls(
            requester_id=requester_id,
            purpose=purpose.strip(),
            attendees=attendees,
            window=window,
            facility_id=facility_id,
            proposal_url=proposal_url or '',
        )
        reservation.add_event(ReservationCreated(
            requester_id=requester_id,
            facility_id=facility_id,
            window=window,
        ))
        return reservation

    def is_owned_by(self, user_id: int) -> bool:
        return self.requester_id == user_id

    def ensure_owned_by(self, user_id: int):
        if not self.is_owned_by(user_id):
            raise ForbiddenError(
                f"Reservation {self.id} belongs to another member"
            )

    def ensure_editable(self):
        if self.status != ReservationStatus.PENDING:
            raise InvalidStateError(
                f"Reservation {self.id} is {self.status.value}; "
                f"only PENDING reservations can be edited"
            )

    def edit(
        self,
        *,
        window: TimeRange | None = None,
        purpose: str | None = None,
        attendees: int | None = None,
    ) -> Tuple[str, ...]:
        """
        Apply an owner edit (PENDING -> PENDING)

        Unspecified fields keep their value. Returns the names of the
        fields that actually changed.
        Events: ReservationUpdated
        """
        self.ensure_editable()

        from apps.reservations.domain.events import ReservationUpdated

        changed = []
        if window is not None and window != self.window:
            self.window = window
            changed.append('window')
        if purpose is not None and purpose.strip() != self.purpose:
            self.purpose = purpose.strip()
            changed.append('purpose')
        if attendees is not None and attendees != self.attendees:
            self.attendees = attendees
            changed.append('attendees')

        self.add_event(ReservationUpdated(
            aggregate_id=self.id,
            requester_id=self.requester_id,
            facility_id=self.facility_id,
            window=self.window,
            changed_fields=tuple(changed),
        ))
        return tuple(changed)

    def transition_to(
        self,
        new_status: ReservationStatus,
        *,
        acted_by: int | None = None,
        comment: str = '',
    ):
        """
        Move the reservation along the lifecycle

        Events: ReservationApproved, ReservationRejected or ReservationCanceled
        """
        if self.status.is_terminal:
            raise InvalidStateError(
                f"Reservation {self.id} is {self.status.value} and can no longer change"
            )
        if not self.status.can_transition_to(new_status):
            raise InvalidStateError(
                f"Cannot change reservation {self.id} from "
                f"{self.status.value} to {new_status.value}"
            )

        from apps.reservations.domain import events

        event_class = {
            ReservationStatus.APPROVED: events.ReservationApproved,
            ReservationStatus.REJECTED: events.ReservationRejected,
            ReservationStatus.CANCELED: events.ReservationCanceled,
        }[new_status]

        old_status = self.status
        self.status = new_status

        self.add_event(event_class(
            aggregate_id=self.id,
            requester_id=self.requester_id,
            facility_id=self.facility_id,
            window=self.window,
            old_status=old_status.value,
            new_status=new_status.value,
            acted_by=acted_by,
            comment=comment,
        ))

    def cancel(self, requester_id: int):
        """
        Owner cancellation (PENDING/APPROVED -> CANCELED)

        Only the requester may cancel; a second cancel is an InvalidStateError.
        """
        self.ensure_owned_by(requester_id)
        self.transition_to(ReservationStatus.CANCELED, acted_by=requester_id)

    def __str__(self):
        return f"Reservation {self.id} ({self.status.value})"

    def __repr__(self):
        return (
            f"Reservation(id={self.id}, facility_id={self.facility_id}, "
            f"status={self.status.value}, window={self.window!r})"
        )
