"""
Reservation Domain Errors

Each error carries a stable code and the HTTP status the API adapter
answers with. Messages are meant for direct display.
"""

from shared.domain.exceptions import DomainError


class NotFoundError(DomainError):
    """The referenced user, facility or reservation does not exist"""
    code = 'not_found'
    status_code = 404


class ForbiddenError(DomainError):
    """You are not allowed to change this reservation"""
    code = 'forbidden'
    status_code = 403


class InvalidStateError(DomainError):
    """The reservation cannot be changed in its current status"""
    code = 'invalid_state'
    status_code = 409


class CapacityExceededError(DomainError):
    """Attendee count exceeds facility capacity"""
    code = 'capacity_exceeded'
    status_code = 400


class FacilityUnavailableError(DomainError):
    """Facility is inactive or under maintenance"""
    code = 'facility_unavailable'
    status_code = 400


class SlotConflictError(DomainError):
    """The requested time slot overlaps an existing reservation"""
    code = 'slot_conflict'
    status_code = 409


class InvalidStatusError(DomainError):
    """Unknown reservation status"""
    code = 'invalid_status'
    status_code = 400


class ReservationValidationError(DomainError):
    """Invalid reservation input"""
    code = 'invalid_input'
    status_code = 400
