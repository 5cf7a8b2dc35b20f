"""
Domain-specific exceptions for donors app.

These exceptions represent business rule violations and should be
caught in views and converted to appropriate HTTP responses.
"""

from apps.core.exceptions import ServiceError


class DonorServiceError(ServiceError):
    """Base exception for all donors service errors."""
    default_code = 'DONOR_ERROR'


class DonorValidationError(DonorServiceError):
    """Raised when donor info is incomplete or malformed."""
    default_code = 'VALIDATION_ERROR'


class DonorNotFoundError(DonorServiceError):
    """Raised when a donor does not exist in the organization."""
    default_code = 'DONOR_NOT_FOUND'
