"""
Receipt export service.

Generates CSV files in the column layout Tally expects for voucher import.
"""

import csv
import io
import json
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from apps.receipts.models import Donation

from .exceptions import InvalidDateRangeError

ISO_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$')

MAX_EXPORT_DAYS = 365

TALLY_CSV_HEADERS = [
    'Date',
    'Receipt No',
    'Donor Name',
    'Mobile',
    'PAN',
    'Amount',
    'Payment Mode',
    'Payment Ref',
    'Purpose Breakup',
    'Eligible 80G',
    'Narration',
]


@dataclass(frozen=True)
class ExportResult:
    file_name: str
    content: str
    record_count: int
    start_date: str
    end_date: str
    format: str = 'csv'


def _parse_export_date(value: str, field: str) -> date:
    text = str(value or '').strip()
    if ISO_DATE_RE.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
    raise InvalidDateRangeError(
        f"Invalid {field.replace('_', ' ')} format: {value}. Expected yyyy-mm-dd",
        details={'field': field},
    )


def validate_export_range(start_date: str, end_date: str) -> tuple:
    """
    Parse and check the export window.

    Raises:
        InvalidDateRangeError: If a date is malformed, start is after end,
            or the window exceeds one year
    """
    start = _parse_export_date(start_date, 'start_date')
    end = _parse_export_date(end_date, 'end_date')

    if start > end:
        raise InvalidDateRangeError(
            'Start date must be before or equal to end date',
            details={'start_date': start_date, 'end_date': end_date},
        )

    if (end - start).days > MAX_EXPORT_DAYS:
        raise InvalidDateRangeError(
            'Export range cannot exceed 1 year',
            details={'start_date': start_date, 'end_date': end_date},
        )

    return start, end


def format_date_for_tally(value: date) -> str:
    """2025-03-01 -> 01-03-2025"""
    return value.strftime('%d-%m-%Y')


def build_narration(donation: Donation) -> str:
    purposes = ', '.join(donation.breakup.keys())
    return f"Receipt {donation.receipt_no} - {donation.donor_name} - {purposes}"


def receipt_to_row(donation: Donation) -> List[str]:
    return [
        format_date_for_tally(donation.date),
        donation.receipt_no,
        donation.donor_name,
        donation.donor_mobile,
        donation.donor_pan_masked,
        f'{donation.total:.2f}',
        donation.payment_mode,
        donation.payment_ref,
        json.dumps(donation.breakup, separators=(',', ':'), ensure_ascii=False),
        'Yes' if donation.eligible_80g else 'No',
        build_narration(donation),
    ]


def generate_csv(donations: Iterable[Donation]) -> str:
    """
    Render receipts as CSV.

    Fields containing a comma, quote or newline are quoted, with inner
    quotes doubled.
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')

    writer.writerow(TALLY_CSV_HEADERS)
    for donation in donations:
        writer.writerow(receipt_to_row(donation))

    return output.getvalue()


def build_file_name(start_date: str, end_date: str, range_id: Optional[str] = None) -> str:
    """receipts_export_<start>[_to_<end>][_<range>].csv"""
    date_part = start_date if start_date == end_date else f'{start_date}_to_{end_date}'
    range_part = f'_{range_id}' if range_id else ''
    return f'receipts_export_{date_part}{range_part}.csv'


def build_export(
    *,
    org_id: str,
    start_date: str,
    end_date: str,
    range_id: Optional[str] = None
) -> ExportResult:
    """
    Export receipts issued between two dates as a Tally CSV.

    Args:
        org_id: Organization
        start_date: First donation date (yyyy-mm-dd, inclusive)
        end_date: Last donation date (yyyy-mm-dd, inclusive)
        range_id: Only receipts drawn from this range

    Returns:
        ExportResult with the file name and CSV content

    Raises:
        InvalidDateRangeError: If the dates are invalid
    """
    start, end = validate_export_range(start_date, end_date)

    donations = Donation.objects.filter(
        org_id=org_id,
        date__gte=start,
        date__lte=end,
    )
    if range_id:
        donations = donations.filter(range_id=range_id)

    donations = list(donations.order_by('date', 'receipt_no'))

    return ExportResult(
        file_name=build_file_name(start.isoformat(), end.isoformat(), range_id),
        content=generate_csv(donations),
        record_count=len(donations),
        start_date=start.isoformat(),
        end_date=end.isoformat(),
    )
