"""Donor search by identifier or by name."""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from fuzzywuzzy import fuzz

from apps.donors.models import AliasType, Donor
from apps.receipts.models import Donation

from .exceptions import DonorNotFoundError, DonorValidationError
from .hashing import hash_email, hash_pan, sanitize_for_logs
from .identity_resolution import get_donor, get_donor_id_by_alias
from .normalization import (
    PAN_RE,
    normalize_email,
    normalize_name,
    normalize_pan,
    normalize_phone,
)

logger = logging.getLogger(__name__)


class SearchType:
    PHONE = 'phone'
    PAN = 'pan'
    EMAIL = 'email'
    NAME = 'name'

    IDENTIFIERS = (PHONE, PAN, EMAIL)
    ALL = (PHONE, PAN, EMAIL, NAME)


PHONE_QUERY_RE = re.compile(r'^\+?\d{10,15}$')

RECENT_RECEIPTS_LIMIT = 5
NAME_MATCH_THRESHOLD = 70
NAME_MATCH_LIMIT = 10
NAME_CANDIDATE_LIMIT = 500


@dataclass
class DonorSearchResult:
    donor: Donor
    search_type: str
    recent_receipts: List[Donation] = field(default_factory=list)


def detect_search_type(query: str) -> Optional[str]:
    """
    Guess which identifier a free-form query is.

    Returns:
        'phone', 'pan', 'email' or ``None`` if the query matches none
    """
    compact = re.sub(r'[\s-]', '', query)
    if PHONE_QUERY_RE.match(compact):
        return SearchType.PHONE
    if PAN_RE.match(query.strip().upper()):
        return SearchType.PAN
    if '@' in query:
        return SearchType.EMAIL
    return None


def _alias_key(search_type: str, query: str) -> Tuple[str, str]:
    if search_type == SearchType.PHONE:
        phone = normalize_phone(query)
        if not phone:
            raise DonorValidationError('Invalid phone number format', details={'field': 'query'})
        return AliasType.PHONE, phone

    if search_type == SearchType.PAN:
        pan = normalize_pan(query)
        if not pan:
            raise DonorValidationError('Invalid PAN format', details={'field': 'query'})
        return AliasType.PAN, hash_pan(pan)

    email = normalize_email(query)
    if not email:
        raise DonorValidationError('Invalid email format', details={'field': 'query'})
    return AliasType.EMAIL, hash_email(email)


def get_recent_receipts(*, org_id: str, donor: Donor, limit: int = RECENT_RECEIPTS_LIMIT) -> List[Donation]:
    return list(
        Donation.objects
        .filter(org_id=org_id, donor=donor)
        .order_by('-date', '-receipt_no')[:limit]
    )


def search_donor_by_identifier(
    *,
    org_id: str,
    query: str,
    search_type: Optional[str] = None
) -> DonorSearchResult:
    """
    Find a donor by phone, PAN or email.

    Args:
        org_id: Organization to search in
        query: Phone, PAN or email as typed by the user
        search_type: One of 'phone', 'pan', 'email'; detected if omitted

    Returns:
        DonorSearchResult with the donor and its most recent receipts

    Raises:
        DonorValidationError: If the query is empty or its type can't be detected
        DonorNotFoundError: If no donor has that identifier
    """
    query = (query or '').strip()
    if not query:
        raise DonorValidationError('Search query is required', details={'field': 'query'})

    search_type = (search_type or '').strip().lower() or detect_search_type(query)
    if search_type not in SearchType.IDENTIFIERS:
        raise DonorValidationError(
            'Could not determine search type. Use phone, PAN, or email.',
            details={'field': 'type'},
        )

    alias_type, alias_value = _alias_key(search_type, query)
    donor_id = get_donor_id_by_alias(org_id=org_id, alias_type=alias_type, alias_value=alias_value)

    if donor_id is None:
        logger.info("No donor found for %s search %s", search_type, sanitize_for_logs(query))
        raise DonorNotFoundError('Donor not found', details={'search_type': search_type})

    donor = get_donor(org_id=org_id, donor_id=donor_id)

    return DonorSearchResult(
        donor=donor,
        search_type=search_type,
        recent_receipts=get_recent_receipts(org_id=org_id, donor=donor),
    )


def search_donors_by_name(
    *,
    org_id: str,
    name: str,
    threshold: int = NAME_MATCH_THRESHOLD
) -> List[Tuple[Donor, int]]:
    """
    Rank donors of an organization by name similarity.

    Args:
        org_id: Organization to search in
        name: Name or partial name
        threshold: Minimum similarity score (0-100)

    Returns:
        List of (donor, similarity_score) tuples, best match first
    """
    name_norm = normalize_name(name)
    if not name_norm:
        raise DonorValidationError('Search query is required', details={'field': 'query'})
    name_norm = name_norm.lower()

    candidates = []

    # Most recent donors only
    donors = Donor.objects.filter(org_id=org_id).order_by('-last_donation_date')[:NAME_CANDIDATE_LIMIT]

    for donor in donors:
        donor_name = donor.name.lower()
        if name_norm in donor_name:
            score = 100 if name_norm == donor_name else max(
                fuzz.partial_ratio(name_norm, donor_name), threshold
            )
        else:
            score = fuzz.token_sort_ratio(name_norm, donor_name)

        if score >= threshold:
            candidates.append((donor, score))

    candidates.sort(key=lambda x: x[1], reverse=True)

    return candidates[:NAME_MATCH_LIMIT]
