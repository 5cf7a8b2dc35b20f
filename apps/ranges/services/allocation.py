"""
Receipt number allocation.

Numbers are drawn from the single active range of a year with an
optimistic conditional update on (version, next_number). No row locks
are taken; a writer that loses the race re-reads the range and retries
within a bounded budget.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Union

from django.conf import settings

from apps.donors.services.normalization import normalize_date
from apps.ranges.models import RangeStatus, ReceiptRange
from apps.ranges.numbering import format_receipt_no

from .concurrency import compare_and_swap
from .exceptions import RangeAllocationError, RangeValidationError
from .range_management import get_active_range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Allocation:
    receipt_no: str
    range_id: str
    sequence_number: int
    range_remaining: int


def get_retry_budget() -> int:
    return getattr(settings, 'RECEIPT_ALLOCATION_RETRY_BUDGET', 1)


def get_exhausted_range(*, org_id: str, year: int) -> Optional[ReceiptRange]:
    """Most recently exhausted range of ``year``, if any."""
    return (
        ReceiptRange.objects
        .filter(org_id=org_id, year=year, status=RangeStatus.EXHAUSTED)
        .order_by('-updated_at')
        .first()
    )


def _exhausted_error(receipt_range: ReceiptRange) -> RangeAllocationError:
    return RangeAllocationError(
        f"Range {receipt_range.range_id} is exhausted. All numbers "
        f"({receipt_range.start}-{receipt_range.end}) have been used.",
        code='RANGE_EXHAUSTED',
        details={
            'range_id': receipt_range.range_id,
            'start': receipt_range.start,
            'end': receipt_range.end,
            'next': receipt_range.next_number,
        },
    )


def _reload_for_retry(*, org_id: str, range_id: str) -> ReceiptRange:
    """
    Re-read a range after a lost race.

    Raises:
        RangeAllocationError: If the range was deleted, is no longer active,
            or was exhausted by the competing writer
    """
    fresh = ReceiptRange.objects.filter(org_id=org_id, range_id=range_id).first()

    if fresh is None:
        raise RangeAllocationError(
            f"Range {range_id} was deleted during allocation",
            code='RANGE_DELETED',
            details={'range_id': range_id},
        )

    if fresh.is_exhausted or fresh.status == RangeStatus.EXHAUSTED:
        raise RangeAllocationError(
            f"Range {range_id} became exhausted during concurrent allocation",
            code='RANGE_EXHAUSTED',
            details={'range_id': range_id, 'next': fresh.next_number, 'end': fresh.end},
        )

    if fresh.status != RangeStatus.ACTIVE:
        raise RangeAllocationError(
            f"Range {range_id} is no longer active (status: {fresh.status})",
            code='RANGE_NOT_ACTIVE',
            details={'range_id': range_id, 'status': fresh.status},
        )

    return fresh


def allocate_receipt_number(
    *,
    org_id: str,
    year: int,
    donation_date: Union[str, date],
    flexible_mode: bool = False,
    retry_budget: Optional[int] = None
) -> Allocation:
    """
    Allocate the next receipt number from the active range of ``year``.

    The range's cursor is advanced with a conditional update guarded by the
    version and cursor that were read. The allocation that takes the last
    number also marks the range exhausted in the same write.

    Args:
        org_id: Organization
        year: Year of the range to draw from
        donation_date: Date of the donation (ISO string or date)
        flexible_mode: Allow a donation date outside ``year``
        retry_budget: Extra attempts after a lost race; defaults to
            ``RECEIPT_ALLOCATION_RETRY_BUDGET``

    Returns:
        Allocation with the receipt number and the range it came from

    Raises:
        RangeValidationError: If ``donation_date`` is not a valid date
        RangeAllocationError: NO_ACTIVE_RANGE, YEAR_MISMATCH, RANGE_EXHAUSTED,
            RANGE_NOT_ACTIVE, RANGE_DELETED or ALLOCATION_CONFLICT
    """
    if retry_budget is None:
        retry_budget = get_retry_budget()

    donation_iso = normalize_date(donation_date)
    if donation_iso is None:
        raise RangeValidationError(
            f"Invalid donation date: {donation_date}",
            details={'donation_date': str(donation_date)},
        )

    receipt_range = get_active_range(org_id=org_id, year=year)
    if receipt_range is None:
        exhausted = get_exhausted_range(org_id=org_id, year=year)
        if exhausted is not None:
            raise _exhausted_error(exhausted)
        raise RangeAllocationError(
            f"No active range found for year {year}. Please activate a range first.",
            code='NO_ACTIVE_RANGE',
            details={'year': year},
        )

    donation_year = int(donation_iso[:4])
    if donation_year != year:
        if not flexible_mode:
            raise RangeAllocationError(
                f"Year mismatch: Donation date is {donation_iso} (year {donation_year}) "
                f"but active range is for year {year}. Use flexible mode to override.",
                code='YEAR_MISMATCH',
                details={
                    'donation_year': donation_year,
                    'range_year': year,
                    'donation_date': donation_iso,
                    'flexible_mode': False,
                },
            )
        logger.warning(
            "Year mismatch allowed (flexible mode): donation=%s, range=%s",
            donation_year,
            year,
        )

    if receipt_range.is_exhausted:
        raise _exhausted_error(receipt_range)

    attempts = retry_budget + 1
    for attempt in range(attempts):
        current = receipt_range.next_number
        new_next = current + 1
        exhausts = new_next > receipt_range.end

        changes = {'next_number': new_next}
        if exhausts:
            changes['status'] = RangeStatus.EXHAUSTED

        won = compare_and_swap(
            org_id=org_id,
            range_id=receipt_range.range_id,
            expected_version=receipt_range.version,
            expected_next=current,
            changes=changes,
        )

        if won:
            receipt_no = format_receipt_no(receipt_range.year, current)
            logger.info(
                "Allocated %s from range %s (%s/%s)%s",
                receipt_no,
                receipt_range.range_id,
                current,
                receipt_range.end,
                ' - RANGE EXHAUSTED' if exhausts else '',
            )
            return Allocation(
                receipt_no=receipt_no,
                range_id=receipt_range.range_id,
                sequence_number=current,
                range_remaining=receipt_range.end - current,
            )

        logger.warning(
            "Concurrent allocation detected on %s (attempt %s/%s)",
            receipt_range.range_id,
            attempt + 1,
            attempts,
        )

        if attempt + 1 < attempts:
            receipt_range = _reload_for_retry(org_id=org_id, range_id=receipt_range.range_id)

    raise RangeAllocationError(
        'Failed to allocate receipt number due to high concurrency. Please retry.',
        code='ALLOCATION_CONFLICT',
        details={'range_id': receipt_range.range_id, 'attempts': attempts},
    )
