"""Services for donor identity, normalization and search."""

from .exceptions import (
    DonorServiceError,
    DonorValidationError,
    DonorNotFoundError,
)
from .normalization import (
    normalize_phone,
    normalize_email,
    normalize_pan,
    normalize_name,
    normalize_amount,
    normalize_date,
    normalize_org_id,
    today_iso,
)
from .hashing import (
    hash_value,
    hash_pan,
    hash_email,
    short_hash,
    mask_pan,
    mask_email,
    mask_phone,
    sanitize_for_logs,
)
from .identity_resolution import (
    DonorResolution,
    NormalizedDonorInfo,
    normalize_donor_info,
    validate_donor_info,
    generate_donor_id,
    get_donor_id_by_alias,
    get_donor_profile,
    get_donor,
    resolve_donor,
)
from .donor_search import (
    SearchType,
    DonorSearchResult,
    detect_search_type,
    search_donor_by_identifier,
    search_donors_by_name,
)

__all__ = [
    # Exceptions
    'DonorServiceError',
    'DonorValidationError',
    'DonorNotFoundError',
    # Normalization
    'normalize_phone',
    'normalize_email',
    'normalize_pan',
    'normalize_name',
    'normalize_amount',
    'normalize_date',
    'normalize_org_id',
    'today_iso',
    # Hashing & Masking
    'hash_value',
    'hash_pan',
    'hash_email',
    'short_hash',
    'mask_pan',
    'mask_email',
    'mask_phone',
    'sanitize_for_logs',
    # Identity Resolution
    'DonorResolution',
    'NormalizedDonorInfo',
    'normalize_donor_info',
    'validate_donor_info',
    'generate_donor_id',
    'get_donor_id_by_alias',
    'get_donor_profile',
    'get_donor',
    'resolve_donor',
    # Donor Search
    'SearchType',
    'DonorSearchResult',
    'detect_search_type',
    'search_donor_by_identifier',
    'search_donors_by_name',
]
