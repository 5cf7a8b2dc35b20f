"""
Domain-specific exceptions for ranges app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""

from apps.core.exceptions import ServiceError


class RangeServiceError(ServiceError):
    """Base exception for all ranges service errors."""
    default_code = 'RANGE_ERROR'


class RangeValidationError(RangeServiceError):
    """Raised when range fields are invalid (code names the field rule)."""
    default_code = 'VALIDATION_ERROR'


class RangeNotFoundError(RangeServiceError):
    """Raised when a range does not exist in the organization."""
    default_code = 'RANGE_NOT_FOUND'


class RangeExistsError(RangeServiceError):
    """Raised when a range with the same ID already exists."""
    default_code = 'RANGE_EXISTS'


class RangeOverlapError(RangeServiceError):
    """Raised when a new range intersects a non-archived range of the same year."""
    default_code = 'RANGE_OVERLAP'


class ActiveRangeExistsError(RangeServiceError):
    """Raised when activating a range while another one is active for the year."""
    default_code = 'ACTIVE_RANGE_EXISTS'


class InvalidStatusTransitionError(RangeServiceError):
    """Raised when an action is not allowed from the range's current status."""
    default_code = 'INVALID_STATUS_TRANSITION'


class InvalidActionError(RangeServiceError):
    """Raised when a status action is unknown."""
    default_code = 'INVALID_ACTION'


class VersionConflictError(RangeServiceError):
    """Raised when a range was modified by another request."""
    default_code = 'VERSION_CONFLICT'


class RangeAllocationError(RangeServiceError):
    """
    Raised when no receipt number can be allocated.

    ``code`` is one of NO_ACTIVE_RANGE, YEAR_MISMATCH, RANGE_EXHAUSTED,
    RANGE_NOT_ACTIVE, RANGE_DELETED or ALLOCATION_CONFLICT.
    """
    default_code = 'ALLOCATION_ERROR'
