"""
Donation creation service.

Orchestrates the full flow of issuing a receipt:
1. Validate donor, breakup and payment
2. Resolve the donor (existing or new)
3. Allocate a receipt number from the active range
4. Write donation, donor profile and aliases in one transaction

The receipt number is allocated before the write transaction starts, so a
failed write leaves a gap in the sequence instead of a duplicate.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, Mapping, Optional

from django.db import transaction, DatabaseError
from django.db.models import DateField, F, Value
from django.db.models.functions import Coalesce, Greatest
from django.utils import timezone

from apps.donors.models import Donor, DonorAlias
from apps.donors.services import (
    NormalizedDonorInfo,
    hash_email,
    hash_pan,
    mask_email,
    mask_pan,
    mask_phone,
    normalize_amount,
    normalize_date,
    resolve_donor,
    sanitize_for_logs,
    today_iso,
    validate_donor_info,
)
from apps.ranges.services import RangeAllocationError, allocate_receipt_number
from apps.receipts.models import Donation, PaymentMode

from .exceptions import (
    DonationValidationError,
    DonationWriteError,
    ReceiptAllocationError,
)

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')

# Largest value Donation.total (12 digits, 2 decimal places) can store
MAX_DONATION_TOTAL = Decimal('9999999999.99')


@dataclass(frozen=True)
class DonationResult:
    receipt_no: str
    donor_id: str
    total: Decimal
    created_at: datetime
    range_id: str
    is_new_donor: bool


def validate_breakup(breakup: Optional[Mapping]) -> Dict[str, Decimal]:
    """
    Normalize the purpose -> amount breakup.

    Returns:
        Mapping of trimmed purpose to amount rounded to 2 decimals

    Raises:
        DonationValidationError: If the breakup is empty, a purpose is blank
            or an amount or the total is not a positive number that fits a
            receipt
    """
    if not breakup:
        raise DonationValidationError(
            'At least one donation purpose is required',
            details={'field': 'breakup'},
        )

    amounts = {}
    for purpose, amount in breakup.items():
        purpose_name = str(purpose).strip()
        if not purpose_name:
            raise DonationValidationError('Donation purpose cannot be blank', details={'field': 'breakup'})

        normalized = normalize_amount(amount)
        if normalized is None or normalized <= ZERO:
            raise DonationValidationError(
                f"Invalid amount for {purpose_name}: {amount}",
                details={'field': 'breakup', 'purpose': purpose_name},
            )
        if normalized > MAX_DONATION_TOTAL:
            raise DonationValidationError(
                f"Amount for {purpose_name} exceeds {MAX_DONATION_TOTAL}",
                details={'field': 'breakup', 'purpose': purpose_name},
            )
        amounts[purpose_name] = normalized

    if sum(amounts.values(), ZERO) > MAX_DONATION_TOTAL:
        raise DonationValidationError(
            f"Total donation amount exceeds {MAX_DONATION_TOTAL}",
            details={'field': 'breakup'},
        )

    return amounts


def validate_payment(payment: Optional[Mapping]) -> Dict[str, str]:
    """
    Validate payment info and upper-case the mode.

    Raises:
        DonationValidationError: If the mode is missing or unknown
    """
    if not payment or not payment.get('mode'):
        raise DonationValidationError('Payment mode is required', details={'field': 'payment.mode'})

    mode = str(payment['mode']).strip().upper()
    if mode not in PaymentMode.values:
        raise DonationValidationError(
            f"Invalid payment mode. Must be one of: {', '.join(PaymentMode.values)}",
            details={'field': 'payment.mode'},
        )

    return {
        'mode': mode,
        'ref': str(payment.get('ref') or '').strip(),
        'bank': str(payment.get('bank') or '').strip(),
    }


def resolve_donation_date(value) -> str:
    """Donation date as ISO string; today in the configured time zone if omitted."""
    if not value:
        return today_iso()

    donation_date = normalize_date(value)
    if donation_date is None:
        raise DonationValidationError(
            f"Invalid donation date: {value}. Expected YYYY-MM-DD",
            details={'field': 'date'},
        )
    return donation_date


def _create_donor(
    *,
    org_id: str,
    donor_id: str,
    donor: NormalizedDonorInfo,
    total: Decimal,
    donation_date: date
) -> Donor:
    return Donor.objects.create(
        org_id=org_id,
        donor_id=donor_id,
        name=donor.name,
        mobile_masked=mask_phone(donor.phone) if donor.phone else '',
        email_masked=mask_email(donor.email) if donor.email else '',
        pan_masked=mask_pan(donor.pan) if donor.pan else '',
        address=donor.address,
        pan_hash=hash_pan(donor.pan) if donor.pan else '',
        email_hash=hash_email(donor.email) if donor.email else '',
        phone_e164=donor.phone or '',
        lifetime_total=total,
        last_donation_date=donation_date,
        donation_count=1,
    )


def _update_donor(
    *,
    org_id: str,
    donor_id: str,
    donor: NormalizedDonorInfo,
    total: Decimal,
    donation_date: date
) -> None:
    """Accumulate stats atomically and refresh the primary fields that were provided."""
    changes = {
        'name': donor.name,
        'lifetime_total': F('lifetime_total') + total,
        'donation_count': F('donation_count') + 1,
        'last_donation_date': Greatest(
            Coalesce(F('last_donation_date'), Value(donation_date, output_field=DateField())),
            Value(donation_date, output_field=DateField()),
        ),
        'updated_at': timezone.now(),
    }
    if donor.phone:
        changes['mobile_masked'] = mask_phone(donor.phone)
        changes['phone_e164'] = donor.phone
    if donor.email:
        changes['email_masked'] = mask_email(donor.email)
        changes['email_hash'] = hash_email(donor.email)
    if donor.pan:
        changes['pan_masked'] = mask_pan(donor.pan)
        changes['pan_hash'] = hash_pan(donor.pan)
    if donor.address:
        changes['address'] = donor.address

    updated = Donor.objects.filter(org_id=org_id, donor_id=donor_id).update(**changes)
    if updated != 1:
        raise DonationWriteError(
            f"Donor profile {donor_id} is missing",
            details={'donor_id': donor_id},
        )


def _create_aliases(*, org_id: str, donor: Donor, normalized: NormalizedDonorInfo) -> None:
    DonorAlias.objects.bulk_create([
        DonorAlias(org_id=org_id, alias_type=alias_type, alias_value=alias_value, donor=donor)
        for alias_type, alias_value in normalized.alias_keys()
    ])


def create_donation(
    *,
    org_id: str,
    request: Mapping,
    created_by: Optional[str] = None
) -> DonationResult:
    """
    Create a donation and issue its receipt.

    Args:
        org_id: Organization
        request: Mapping with ``donor`` (name, mobile, email, pan, address),
            ``breakup`` (purpose -> amount), ``payment`` (mode, ref, bank) and
            optional ``date``, ``eligible_80g`` (default True) and
            ``flexible_mode`` (allow a date outside the current year)
        created_by: Username recorded on the donation

    Returns:
        DonationResult with the receipt number, donor ID and total

    Raises:
        DonorValidationError: If donor info is invalid
        DonationValidationError: If breakup, payment or date is invalid
        ReceiptAllocationError: If no receipt number could be allocated
        DonationWriteError: If the transaction failed (the number stays consumed)
    """
    donor_info = request.get('donor') or {}
    normalized = validate_donor_info(donor_info)
    amounts = validate_breakup(request.get('breakup'))
    payment = validate_payment(request.get('payment'))
    donation_date = resolve_donation_date(request.get('date'))

    total = sum(amounts.values(), ZERO)
    if total <= ZERO:
        raise DonationValidationError(
            'Total donation amount must be greater than zero',
            details={'field': 'breakup'},
        )

    resolution = resolve_donor(org_id=org_id, donor_info=donor_info)

    try:
        allocation = allocate_receipt_number(
            org_id=org_id,
            year=timezone.localdate().year,
            donation_date=donation_date,
            flexible_mode=bool(request.get('flexible_mode', False)),
        )
    except RangeAllocationError as e:
        raise ReceiptAllocationError(
            f"Receipt allocation failed: {e.message} ({e.code})",
            code=e.code,
            details=e.details,
        ) from e

    logger.info(
        "Creating donation %s from range %s for donor %s (new: %s) %s",
        allocation.receipt_no,
        allocation.range_id,
        resolution.donor_id,
        resolution.is_new,
        sanitize_for_logs({'mobile': normalized.phone or '', 'email': normalized.email or ''}),
    )

    donation_day = date.fromisoformat(donation_date)
    eligible_80g = request.get('eligible_80g')
    if eligible_80g is None:
        eligible_80g = True

    try:
        with transaction.atomic():
            if resolution.is_new:
                donor = _create_donor(
                    org_id=org_id,
                    donor_id=resolution.donor_id,
                    donor=normalized,
                    total=total,
                    donation_date=donation_day,
                )
                _create_aliases(org_id=org_id, donor=donor, normalized=normalized)
            else:
                _update_donor(
                    org_id=org_id,
                    donor_id=resolution.donor_id,
                    donor=normalized,
                    total=total,
                    donation_date=donation_day,
                )
                donor = Donor.objects.get(org_id=org_id, donor_id=resolution.donor_id)

            donation = Donation.objects.create(
                org_id=org_id,
                receipt_no=allocation.receipt_no,
                range_id=allocation.range_id,
                date=donation_day,
                donor=donor,
                donor_name=normalized.name,
                donor_mobile=normalized.phone or '',
                donor_email=normalized.email or '',
                donor_pan_masked=mask_pan(normalized.pan) if normalized.pan else '',
                donor_address=normalized.address,
                breakup={purpose: str(amount) for purpose, amount in amounts.items()},
                payment_mode=payment['mode'],
                payment_ref=payment['ref'],
                payment_bank=payment['bank'],
                eligible_80g=eligible_80g,
                total=total,
                created_by=created_by or 'system',
            )
    except (DatabaseError, InvalidOperation) as e:
        logger.exception("Failed to create donation %s", allocation.receipt_no)
        raise DonationWriteError(
            f"Failed to create donation {allocation.receipt_no}. Please retry.",
            details={'receipt_no': allocation.receipt_no},
        ) from e

    logger.info("Donation created successfully: %s", allocation.receipt_no)

    return DonationResult(
        receipt_no=donation.receipt_no,
        donor_id=resolution.donor_id,
        total=total,
        created_at=donation.created_at,
        range_id=allocation.range_id,
        is_new_donor=resolution.is_new,
    )
