"""Receipt lookup and listing service."""

from datetime import date, timedelta
from typing import Union

from django.db.models import QuerySet

from apps.donors.services.normalization import normalize_date
from apps.receipts.models import Donation

from .exceptions import InvalidDateRangeError, ReceiptNotFoundError

MAX_LISTING_DAYS = 31


def _parse_date(value: Union[str, date], field: str) -> date:
    iso = normalize_date(value)
    if iso is None:
        raise InvalidDateRangeError(
            f"Invalid {field}: {value}. Expected YYYY-MM-DD",
            details={'field': field},
        )
    return date.fromisoformat(iso)


def _receipts(org_id: str) -> QuerySet[Donation]:
    return (
        Donation.objects
        .filter(org_id=org_id)
        .select_related('donor')
        .order_by('-date', '-receipt_no')
    )


def get_receipt(*, org_id: str, receipt_no: str) -> Donation:
    """
    Get a receipt by number.

    Raises:
        ReceiptNotFoundError: If the receipt doesn't exist in the organization
    """
    try:
        return _receipts(org_id).get(receipt_no=receipt_no)
    except Donation.DoesNotExist:
        raise ReceiptNotFoundError(
            f"Receipt {receipt_no} not found",
            details={'receipt_no': receipt_no},
        )


def list_receipts_by_date(*, org_id: str, on_date: Union[str, date]) -> QuerySet[Donation]:
    """Receipts issued for one donation date, highest receipt number first."""
    return _receipts(org_id).filter(date=_parse_date(on_date, 'date'))


def list_receipts_by_date_range(
    *,
    org_id: str,
    start_date: Union[str, date],
    end_date: Union[str, date]
) -> QuerySet[Donation]:
    """
    Receipts between two dates (inclusive), newest first.

    Raises:
        InvalidDateRangeError: If a date is invalid, start is after end,
            or the range spans more than 31 days
    """
    start = _parse_date(start_date, 'start_date')
    end = _parse_date(end_date, 'end_date')

    if start > end:
        raise InvalidDateRangeError(
            'start_date must be before or equal to end_date',
            details={'start_date': start.isoformat(), 'end_date': end.isoformat()},
        )

    if end - start >= timedelta(days=MAX_LISTING_DAYS):
        raise InvalidDateRangeError(
            f'Date range too large (max {MAX_LISTING_DAYS} days)',
            details={'start_date': start.isoformat(), 'end_date': end.isoformat()},
        )

    return _receipts(org_id).filter(date__gte=start, date__lte=end)


def list_receipts_by_donor(*, org_id: str, donor_id: str) -> QuerySet[Donation]:
    return _receipts(org_id).filter(donor__donor_id=donor_id)


def list_receipts_by_range(*, org_id: str, range_id: str) -> QuerySet[Donation]:
    return _receipts(org_id).filter(range_id=range_id)
