"""
Donor identity resolution service.

Finds an existing donor through alias lookups (phone, then PAN, then email)
or derives a new, stable donor ID from the strongest identifier available.
Resolution itself never writes: aliases are created together with the first
donation of a new donor (see ``apps.receipts.services.donation_creation``).
"""

import logging
import secrets
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

from apps.donors.models import AliasType, Donor, DonorAlias

from .exceptions import DonorNotFoundError, DonorValidationError
from .hashing import hash_email, hash_pan, short_hash
from .normalization import (
    normalize_email,
    normalize_name,
    normalize_pan,
    normalize_phone,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedDonorInfo:
    """Donor fields after normalization; identifiers are ``None`` if absent."""

    name: Optional[str]
    phone: Optional[str]
    pan: Optional[str]
    email: Optional[str]
    address: dict = field(default_factory=dict)

    @property
    def has_identifier(self) -> bool:
        return bool(self.phone or self.pan or self.email)

    def alias_keys(self) -> List[Tuple[str, str]]:
        """(alias_type, alias_value) pairs in lookup priority order."""
        keys = []
        if self.phone:
            keys.append((AliasType.PHONE, self.phone))
        if self.pan:
            keys.append((AliasType.PAN, hash_pan(self.pan)))
        if self.email:
            keys.append((AliasType.EMAIL, hash_email(self.email)))
        return keys


@dataclass(frozen=True)
class DonorResolution:
    donor_id: str
    is_new: bool
    existing_profile: Optional[Donor] = None


def normalize_donor_info(donor_info: Mapping) -> NormalizedDonorInfo:
    return NormalizedDonorInfo(
        name=normalize_name(donor_info.get('name')),
        phone=normalize_phone(donor_info.get('mobile')),
        pan=normalize_pan(donor_info.get('pan')),
        email=normalize_email(donor_info.get('email')),
        address=dict(donor_info.get('address') or {}),
    )


def validate_donor_info(donor_info: Mapping) -> NormalizedDonorInfo:
    """
    Validate and normalize donor info.

    A field that was provided but does not normalize is reported on its own,
    so the caller can tell "missing" apart from "malformed".

    Raises:
        DonorValidationError: If the name is empty, a provided identifier is
            malformed, or no identifier was provided at all.
    """
    if donor_info is None:
        raise DonorValidationError('Donor information is required')

    normalized = normalize_donor_info(donor_info)

    if not normalized.name:
        raise DonorValidationError('Donor name is required', details={'field': 'name'})

    if donor_info.get('pan') and not normalized.pan:
        raise DonorValidationError(
            'Invalid PAN format. Expected: ABCDE1234F',
            details={'field': 'pan'},
        )

    if donor_info.get('mobile') and not normalized.phone:
        raise DonorValidationError(
            'Invalid phone number. Expected: 10-digit Indian mobile',
            details={'field': 'mobile'},
        )

    if donor_info.get('email') and not normalized.email:
        raise DonorValidationError('Invalid email format', details={'field': 'email'})

    if not normalized.has_identifier:
        raise DonorValidationError(
            'At least one of phone, email, or PAN must be provided',
            details={'fields': ['mobile', 'pan', 'email']},
        )

    return normalized


def generate_donor_id(
    *,
    org_id: str,
    pan: Optional[str] = None,
    phone: Optional[str] = None,
    email: Optional[str] = None
) -> str:
    """
    Derive a stable donor ID from the strongest identifier.

    Priority is PAN, then phone, then email. The seed is scoped by
    organization, so the same PAN yields different IDs in different orgs.
    Without any identifier a random ID is returned.
    """
    pan = normalize_pan(pan)
    phone = normalize_phone(phone)
    email = normalize_email(email)

    if pan:
        seed = f'{org_id}:PAN:{pan}'
    elif phone:
        seed = f'{org_id}:PHONE:{phone}'
    elif email:
        seed = f'{org_id}:EMAIL:{email}'
    else:
        return f'D_{secrets.token_hex(6)}'

    return f'D_{short_hash(seed)}'


def get_donor_id_by_alias(*, org_id: str, alias_type: str, alias_value: str) -> Optional[str]:
    alias = (
        DonorAlias.objects
        .select_related('donor')
        .filter(org_id=org_id, alias_type=alias_type, alias_value=alias_value)
        .first()
    )
    return alias.donor.donor_id if alias else None


def get_donor_profile(*, org_id: str, donor_id: str) -> Optional[Donor]:
    return Donor.objects.filter(org_id=org_id, donor_id=donor_id).first()


def get_donor(*, org_id: str, donor_id: str) -> Donor:
    """
    Get a donor profile by ID.

    Raises:
        DonorNotFoundError: If the donor doesn't exist in the organization
    """
    donor = get_donor_profile(org_id=org_id, donor_id=donor_id)
    if donor is None:
        raise DonorNotFoundError(
            f"Donor {donor_id} not found",
            details={'donor_id': donor_id},
        )
    return donor


def find_donor_by_aliases(*, org_id: str, normalized: NormalizedDonorInfo) -> Optional[str]:
    """Return the donor ID of the first alias hit, in priority order."""
    for alias_type, alias_value in normalized.alias_keys():
        donor_id = get_donor_id_by_alias(
            org_id=org_id,
            alias_type=alias_type,
            alias_value=alias_value,
        )
        if donor_id:
            logger.info("Found existing donor %s by %s alias", donor_id, alias_type)
            return donor_id
    return None


def resolve_donor(*, org_id: str, donor_info: Mapping) -> DonorResolution:
    """
    Resolve donor info to an existing or a new donor ID.

    Args:
        org_id: Organization the donor belongs to
        donor_info: Mapping with ``name`` and any of ``mobile``, ``pan``,
            ``email``, ``address``

    Returns:
        DonorResolution with the donor ID, whether it is new, and the
        existing profile when one was found

    Raises:
        DonorValidationError: If donor info fails validation
    """
    normalized = validate_donor_info(donor_info)

    donor_id = find_donor_by_aliases(org_id=org_id, normalized=normalized)
    if donor_id:
        return DonorResolution(
            donor_id=donor_id,
            is_new=False,
            existing_profile=get_donor_profile(org_id=org_id, donor_id=donor_id),
        )

    new_donor_id = generate_donor_id(
        org_id=org_id,
        pan=normalized.pan,
        phone=normalized.phone,
        email=normalized.email,
    )
    logger.info("Resolved new donor %s", new_donor_id)

    return DonorResolution(donor_id=new_donor_id, is_new=True)
