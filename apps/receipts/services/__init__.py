"""Services for donations, receipt listing and export."""

from .exceptions import (
    ReceiptServiceError,
    DonationValidationError,
    ReceiptAllocationError,
    DonationWriteError,
    ReceiptNotFoundError,
    InvalidDateRangeError,
)
from .donation_creation import (
    DonationResult,
    validate_breakup,
    validate_payment,
    resolve_donation_date,
    create_donation,
)
from .receipt_listing import (
    get_receipt,
    list_receipts_by_date,
    list_receipts_by_date_range,
    list_receipts_by_donor,
    list_receipts_by_range,
)
from .receipt_export import (
    ExportResult,
    TALLY_CSV_HEADERS,
    validate_export_range,
    generate_csv,
    build_file_name,
    build_export,
)

__all__ = [
    # Exceptions
    'ReceiptServiceError',
    'DonationValidationError',
    'ReceiptAllocationError',
    'DonationWriteError',
    'ReceiptNotFoundError',
    'InvalidDateRangeError',
    # Donation Creation
    'DonationResult',
    'validate_breakup',
    'validate_payment',
    'resolve_donation_date',
    'create_donation',
    # Listing
    'get_receipt',
    'list_receipts_by_date',
    'list_receipts_by_date_range',
    'list_receipts_by_donor',
    'list_receipts_by_range',
    # Export
    'ExportResult',
    'TALLY_CSV_HEADERS',
    'validate_export_range',
    'generate_csv',
    'build_file_name',
    'build_export',
]
