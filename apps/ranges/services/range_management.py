"""
Range management service.

Handles creation, lookup and status transitions of receipt ranges.
Every status change is a conditional write on ``version``; losing the race
raises ``VersionConflictError`` and is never retried here.
"""

import logging
from typing import List, Optional

from django.db import transaction, IntegrityError
from django.utils import timezone

from apps.ranges.models import RangeStatus, ReceiptRange
from apps.ranges.numbering import MAX_SEQUENCE, generate_range_id, is_valid_range_id

from .concurrency import compare_and_swap
from .exceptions import (
    ActiveRangeExistsError,
    InvalidActionError,
    InvalidStatusTransitionError,
    RangeExistsError,
    RangeNotFoundError,
    RangeOverlapError,
    RangeValidationError,
    VersionConflictError,
)

logger = logging.getLogger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100
MAX_RANGE_SIZE = 99999


class RangeAction:
    ACTIVATE = 'activate'
    LOCK = 'lock'
    UNLOCK = 'unlock'
    ARCHIVE = 'archive'

    ALL = (ACTIVATE, LOCK, UNLOCK, ARCHIVE)


# action -> (allowed source statuses, target status)
TRANSITIONS = {
    RangeAction.ACTIVATE: ((RangeStatus.DRAFT,), RangeStatus.ACTIVE),
    RangeAction.LOCK: ((RangeStatus.ACTIVE,), RangeStatus.LOCKED),
    RangeAction.UNLOCK: ((RangeStatus.LOCKED,), RangeStatus.ACTIVE),
    RangeAction.ARCHIVE: ((RangeStatus.LOCKED, RangeStatus.EXHAUSTED), RangeStatus.ARCHIVED),
}


def validate_range_fields(
    *,
    alias: Optional[str],
    year: Optional[int],
    start: Optional[int],
    end: Optional[int],
    next_number: Optional[int] = None
) -> None:
    """
    Check range fields, reporting the first failing rule.

    Raises:
        RangeValidationError: With code INVALID_ALIAS, INVALID_YEAR,
            INVALID_START, INVALID_END, RANGE_TOO_LARGE or INVALID_NEXT
    """
    if not alias or not str(alias).strip():
        raise RangeValidationError('Range alias is required', code='INVALID_ALIAS')

    if not year or year < MIN_YEAR or year > MAX_YEAR:
        raise RangeValidationError(
            f'Invalid year (must be between {MIN_YEAR}-{MAX_YEAR})',
            code='INVALID_YEAR',
        )

    if start is None or start < 1:
        raise RangeValidationError('Start must be >= 1', code='INVALID_START')

    if end is None or end < start:
        raise RangeValidationError('End must be >= start', code='INVALID_END')

    if end - start + 1 > MAX_RANGE_SIZE:
        raise RangeValidationError('Range size cannot exceed 99,999', code='RANGE_TOO_LARGE')

    if end > MAX_SEQUENCE:
        raise RangeValidationError(
            f'End must be <= {MAX_SEQUENCE} (receipt numbers have 5 digits)',
            code='INVALID_END',
        )

    if next_number is not None and not (start <= next_number <= end + 1):
        raise RangeValidationError('Next must be between start and end+1', code='INVALID_NEXT')


def get_range(*, org_id: str, range_id: str) -> ReceiptRange:
    """
    Get a range by ID.

    Raises:
        RangeValidationError: If the range ID is malformed
        RangeNotFoundError: If the range doesn't exist
    """
    if not is_valid_range_id(range_id):
        raise RangeValidationError(
            'Invalid range ID format (expected: YYYY-X)',
            code='INVALID_RANGE_ID',
            details={'range_id': range_id},
        )

    try:
        return ReceiptRange.objects.get(org_id=org_id, range_id=range_id)
    except ReceiptRange.DoesNotExist:
        raise RangeNotFoundError(f"Range {range_id} not found", details={'range_id': range_id})


def list_ranges(
    *,
    org_id: str,
    status: Optional[str] = None,
    year: Optional[int] = None
) -> List[ReceiptRange]:
    """
    List ranges of an organization, newest year first, then by alias.

    Args:
        org_id: Organization
        status: Only ranges in this status
        year: Only ranges of this year

    Returns:
        List of ReceiptRange (each exposes ``remaining``)
    """
    queryset = ReceiptRange.objects.filter(org_id=org_id)

    if status:
        queryset = queryset.filter(status=status)

    if year is not None:
        queryset = queryset.filter(year=year)

    return list(queryset.order_by('-year', 'alias'))


def get_active_range(*, org_id: str, year: int) -> Optional[ReceiptRange]:
    return (
        ReceiptRange.objects
        .filter(org_id=org_id, year=year, status=RangeStatus.ACTIVE)
        .first()
    )


def find_overlapping_range(
    *,
    org_id: str,
    year: int,
    start: int,
    end: int,
    exclude_range_id: Optional[str] = None
) -> Optional[ReceiptRange]:
    """First non-archived range of ``year`` whose bounds intersect [start, end]."""
    queryset = (
        ReceiptRange.objects
        .filter(org_id=org_id, year=year, start__lte=end, end__gte=start)
        .exclude(status=RangeStatus.ARCHIVED)
    )
    if exclude_range_id:
        queryset = queryset.exclude(range_id=exclude_range_id)
    return queryset.order_by('start').first()


def _overlap_error(start: int, end: int, overlapping: ReceiptRange) -> RangeOverlapError:
    return RangeOverlapError(
        f"Range {start}-{end} overlaps with existing range "
        f"{overlapping.range_id} ({overlapping.start}-{overlapping.end})",
        details={
            'conflicting_range': {
                'range_id': overlapping.range_id,
                'alias': overlapping.alias,
                'start': overlapping.start,
                'end': overlapping.end,
            },
        },
    )


def create_range(
    *,
    org_id: str,
    alias: str,
    year: int,
    start: int,
    end: int,
    suffix: Optional[str] = None,
    created_by: Optional[str] = None
) -> ReceiptRange:
    """
    Create a new range in draft status.

    Args:
        org_id: Organization
        alias: Human label (e.g. "Book 1")
        year: Receipt year
        start: First number (inclusive)
        end: Last number (inclusive)
        suffix: Range ID suffix, 'A' if omitted
        created_by: Username of the creator, 'system' if omitted

    Returns:
        Created ReceiptRange with ``next_number == start`` and ``version == 1``

    Raises:
        RangeValidationError: If fields or the derived range ID are invalid
        RangeExistsError: If the range ID is already taken
        RangeOverlapError: If [start, end] overlaps a non-archived range of the year
    """
    validate_range_fields(alias=alias, year=year, start=start, end=end)

    range_id = generate_range_id(year, suffix)
    if not is_valid_range_id(range_id):
        raise RangeValidationError(
            'Invalid range ID format (expected: YYYY-X)',
            code='INVALID_RANGE_ID',
            details={'range_id': range_id},
        )

    if ReceiptRange.objects.filter(org_id=org_id, range_id=range_id).exists():
        raise RangeExistsError(f"Range {range_id} already exists", details={'range_id': range_id})

    try:
        with transaction.atomic():
            # Serializes creators against the existing ranges of the year
            list(
                ReceiptRange.objects
                .select_for_update()
                .filter(org_id=org_id, year=year)
                .exclude(status=RangeStatus.ARCHIVED)
                .values_list('pk', flat=True)
            )

            overlapping = find_overlapping_range(org_id=org_id, year=year, start=start, end=end)
            if overlapping:
                raise _overlap_error(start, end, overlapping)

            receipt_range = ReceiptRange.objects.create(
                org_id=org_id,
                range_id=range_id,
                alias=alias.strip(),
                year=year,
                start=start,
                end=end,
                next_number=start,
                status=RangeStatus.DRAFT,
                version=1,
                created_by=created_by or 'system',
            )

            # A concurrent create may have inserted an overlapping range since the check above
            overlapping = find_overlapping_range(
                org_id=org_id, year=year, start=start, end=end, exclude_range_id=range_id
            )
            if overlapping:
                raise _overlap_error(start, end, overlapping)
    except IntegrityError:
        # Lost a creation race on the same range ID
        raise RangeExistsError(f"Range {range_id} already exists", details={'range_id': range_id})

    logger.info("Range created: %s (%s-%s) for org %s", range_id, start, end, org_id)

    return receipt_range


def _active_range_conflict(receipt_range: ReceiptRange, active: ReceiptRange) -> ActiveRangeExistsError:
    return ActiveRangeExistsError(
        f"Cannot activate {receipt_range.range_id}: Range {active.range_id} is already "
        f"active for year {receipt_range.year}. Please lock it first.",
        details={
            'active_range': {
                'range_id': active.range_id,
                'alias': active.alias,
                'start': active.start,
                'end': active.end,
            },
        },
    )


def transition_range(
    *,
    org_id: str,
    range_id: str,
    action: str,
    user: Optional[str] = None
) -> ReceiptRange:
    """
    Move a range to a new status.

    Allowed transitions:
        activate: draft -> active (no other active range in the year)
        lock:     active -> locked (records ``locked_by``/``locked_at``)
        unlock:   locked -> active (cursor kept)
        archive:  locked | exhausted -> archived

    Args:
        org_id: Organization
        range_id: Range to transition
        action: One of 'activate', 'lock', 'unlock', 'archive'
        user: Username performing the action

    Returns:
        The updated ReceiptRange

    Raises:
        InvalidActionError: If the action is unknown
        RangeNotFoundError: If the range doesn't exist
        InvalidStatusTransitionError: If the action isn't allowed from the current status
        ActiveRangeExistsError: If another range is already active for the year
        VersionConflictError: If the range changed since it was read
    """
    if action not in TRANSITIONS:
        raise InvalidActionError(
            f"Invalid action: {action}. Valid actions: {', '.join(RangeAction.ALL)}",
            details={'action': action},
        )

    receipt_range = get_range(org_id=org_id, range_id=range_id)
    allowed_from, new_status = TRANSITIONS[action]

    if receipt_range.status not in allowed_from:
        raise InvalidStatusTransitionError(
            f"Cannot {action} range with status {receipt_range.status}",
            details={'range_id': range_id, 'status': receipt_range.status, 'action': action},
        )

    if new_status == RangeStatus.ACTIVE:
        active = get_active_range(org_id=org_id, year=receipt_range.year)
        if active and active.range_id != range_id:
            raise _active_range_conflict(receipt_range, active)

    changes = {'status': new_status}
    if action == RangeAction.LOCK:
        changes['locked_by'] = user or 'system'
        changes['locked_at'] = timezone.now()

    try:
        with transaction.atomic():
            updated = compare_and_swap(
                org_id=org_id,
                range_id=range_id,
                expected_version=receipt_range.version,
                changes=changes,
            )
    except IntegrityError:
        # Another range became active between the check and the write
        active = get_active_range(org_id=org_id, year=receipt_range.year)
        if active:
            raise _active_range_conflict(receipt_range, active)
        raise VersionConflictError(
            'Range was modified by another request. Please retry.',
            details={'range_id': range_id},
        )

    if not updated:
        logger.warning("Version conflict on %s %s (version %s)", action, range_id, receipt_range.version)
        raise VersionConflictError(
            'Range was modified by another request. Please retry.',
            details={'range_id': range_id, 'expected_version': receipt_range.version},
        )

    logger.info("Range %s status updated: %s -> %s", range_id, receipt_range.status, new_status)

    receipt_range.refresh_from_db()
    return receipt_range


def activate_range(*, org_id: str, range_id: str, user: Optional[str] = None) -> ReceiptRange:
    return transition_range(org_id=org_id, range_id=range_id, action=RangeAction.ACTIVATE, user=user)


def lock_range(*, org_id: str, range_id: str, user: Optional[str] = None) -> ReceiptRange:
    return transition_range(org_id=org_id, range_id=range_id, action=RangeAction.LOCK, user=user)


def unlock_range(*, org_id: str, range_id: str, user: Optional[str] = None) -> ReceiptRange:
    return transition_range(org_id=org_id, range_id=range_id, action=RangeAction.UNLOCK, user=user)


def archive_range(*, org_id: str, range_id: str, user: Optional[str] = None) -> ReceiptRange:
    return transition_range(org_id=org_id, range_id=range_id, action=RangeAction.ARCHIVE, user=user)
