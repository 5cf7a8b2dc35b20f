"""
Domain-specific exceptions for receipts app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""

from apps.core.exceptions import ServiceError


class ReceiptServiceError(ServiceError):
    """Base exception for all receipts service errors."""
    default_code = 'RECEIPT_ERROR'


class DonationValidationError(ReceiptServiceError):
    """Raised when donation input (breakup, payment, dates) is invalid."""
    default_code = 'VALIDATION_ERROR'


class ReceiptAllocationError(ReceiptServiceError):
    """Raised when no receipt number could be allocated; carries the allocator's code."""
    default_code = 'ALLOCATION_ERROR'


class DonationWriteError(ReceiptServiceError):
    """Raised when the donation transaction could not be committed."""
    default_code = 'TRANSACTION_FAILED'


class ReceiptNotFoundError(ReceiptServiceError):
    """Raised when a receipt does not exist in the organization."""
    default_code = 'RECEIPT_NOT_FOUND'


class InvalidDateRangeError(ReceiptServiceError):
    """Raised when listing or export dates are malformed or span too long."""
    default_code = 'VALIDATION_ERROR'
