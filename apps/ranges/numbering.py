"""Receipt number and range ID formats."""

import re
from typing import NamedTuple, Optional

RECEIPT_NO_RE = re.compile(r'^(\d{4})-(\d{5})$')
RANGE_ID_RE = re.compile(r'^20\d{2}-[A-Z0-9]{1,2}$')

SEQUENCE_WIDTH = 5
MAX_SEQUENCE = 10 ** SEQUENCE_WIDTH - 1
DEFAULT_RANGE_SUFFIX = 'A'


class ReceiptNumber(NamedTuple):
    year: int
    sequence: int


def format_receipt_no(year: int, sequence: int) -> str:
    """
    Format a receipt number as ``YYYY-NNNNN``.

    Examples:
        (2025, 71)    -> "2025-00071"
        (2025, 12345) -> "2025-12345"
    """
    return f'{year}-{sequence:0{SEQUENCE_WIDTH}d}'


def parse_receipt_no(receipt_no: str) -> Optional[ReceiptNumber]:
    """Split a receipt number into (year, sequence); ``None`` if malformed."""
    match = RECEIPT_NO_RE.match(receipt_no or '')
    if not match:
        return None
    return ReceiptNumber(year=int(match.group(1)), sequence=int(match.group(2)))


def generate_range_id(year: int, suffix: Optional[str] = None) -> str:
    """2025, 'b' -> '2025-B'"""
    suffix = (suffix or DEFAULT_RANGE_SUFFIX).strip().upper()
    return f'{year}-{suffix}'


def is_valid_range_id(range_id: str) -> bool:
    return bool(RANGE_ID_RE.match(range_id or ''))


def remaining_count(*, next_number: int, end: int) -> int:
    """Numbers still available in a range whose cursor is ``next_number``."""
    if next_number > end:
        return 0
    return end - next_number + 1
