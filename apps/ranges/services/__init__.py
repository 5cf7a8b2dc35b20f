"""Services for receipt ranges and receipt number allocation."""

from .exceptions import (
    RangeServiceError,
    RangeValidationError,
    RangeNotFoundError,
    RangeExistsError,
    RangeOverlapError,
    ActiveRangeExistsError,
    InvalidStatusTransitionError,
    InvalidActionError,
    VersionConflictError,
    RangeAllocationError,
)
from .concurrency import (
    compare_and_swap,
)
from .range_management import (
    RangeAction,
    validate_range_fields,
    create_range,
    get_range,
    list_ranges,
    get_active_range,
    find_overlapping_range,
    transition_range,
    activate_range,
    lock_range,
    unlock_range,
    archive_range,
)
from .allocation import (
    Allocation,
    allocate_receipt_number,
)

__all__ = [
    # Exceptions
    'RangeServiceError',
    'RangeValidationError',
    'RangeNotFoundError',
    'RangeExistsError',
    'RangeOverlapError',
    'ActiveRangeExistsError',
    'InvalidStatusTransitionError',
    'InvalidActionError',
    'VersionConflictError',
    'RangeAllocationError',
    # Concurrency
    'compare_and_swap',
    # Range Management
    'RangeAction',
    'validate_range_fields',
    'create_range',
    'get_range',
    'list_ranges',
    'get_active_range',
    'find_overlapping_range',
    'transition_range',
    'activate_range',
    'lock_range',
    'unlock_range',
    'archive_range',
    # Allocation
    'Allocation',
    'allocate_receipt_number',
]
