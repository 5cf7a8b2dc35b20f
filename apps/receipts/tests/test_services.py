"""
Service layer tests for receipts app.

Tests cover:
- Donation validation (breakup, payment, dates)
- Donation creation for new and returning donors
- Allocation failures surfaced as receipt errors
- Failed writes rolling back everything but the consumed number
- Receipt lookup and listing
"""

import pytest
from decimal import Decimal
from unittest.mock import patch
from django.db import DataError

from apps.donors.models import AliasType, Donor, DonorAlias
from apps.donors.services import DonorResolution, DonorValidationError, hash_pan, resolve_donor
from apps.ranges.models import RangeStatus, ReceiptRange
from apps.receipts.models import Donation
from apps.receipts.services import (
    create_donation,
    get_receipt,
    list_receipts_by_date,
    list_receipts_by_date_range,
    list_receipts_by_donor,
    list_receipts_by_range,
    resolve_donation_date,
    validate_breakup,
    validate_payment,
)
from apps.receipts.services.exceptions import (
    DonationValidationError,
    DonationWriteError,
    InvalidDateRangeError,
    ReceiptAllocationError,
    ReceiptNotFoundError,
)
from .conftest import ORG_ID, OTHER_ORG_ID, YEAR, day


# =============================================================================
# Input Validation
# =============================================================================

class TestValidateBreakup:

    def test_amounts_are_rounded(self):
        amounts = validate_breakup({' Annadan ': 100.456, 'Pooja': '250'})

        assert amounts == {'Annadan': Decimal('100.46'), 'Pooja': Decimal('250.00')}

    @pytest.mark.parametrize('breakup', [None, {}])
    def test_empty_breakup(self, breakup):
        with pytest.raises(DonationValidationError) as exc_info:
            validate_breakup(breakup)

        assert exc_info.value.code == 'VALIDATION_ERROR'

    @pytest.mark.parametrize('amount', [0, -5, 'abc', None])
    def test_invalid_amount(self, amount):
        with pytest.raises(DonationValidationError) as exc_info:
            validate_breakup({'Annadan': amount})

        assert exc_info.value.details['purpose'] == 'Annadan'

    def test_blank_purpose(self):
        with pytest.raises(DonationValidationError):
            validate_breakup({'  ': 100})

    @pytest.mark.parametrize('breakup', [
        {'Annadan': '99999999999999'},
        {'Annadan': '1e30'},
        {'Annadan': '6000000000', 'Pooja': '6000000000'},
    ])
    def test_amount_too_large_for_receipt(self, breakup):
        with pytest.raises(DonationValidationError) as exc_info:
            validate_breakup(breakup)

        assert exc_info.value.code == 'VALIDATION_ERROR'

    def test_largest_receipt_total_is_accepted(self):
        amounts = validate_breakup({'Annadan': '9999999999.99'})

        assert amounts == {'Annadan': Decimal('9999999999.99')}


class TestValidatePayment:

    def test_mode_is_case_insensitive(self):
        payment = validate_payment({'mode': 'upi', 'ref': ' UTR123 '})

        assert payment == {'mode': 'UPI', 'ref': 'UTR123', 'bank': ''}

    @pytest.mark.parametrize('payment', [None, {}, {'mode': ''}, {'mode': 'BITCOIN'}])
    def test_invalid_mode(self, payment):
        with pytest.raises(DonationValidationError) as exc_info:
            validate_payment(payment)

        assert exc_info.value.details == {'field': 'payment.mode'}


class TestResolveDonationDate:

    def test_defaults_to_today(self):
        with patch('apps.receipts.services.donation_creation.today_iso', return_value='2025-04-01'):
            assert resolve_donation_date(None) == '2025-04-01'

    def test_invalid_date(self):
        with pytest.raises(DonationValidationError):
            resolve_donation_date('01/04/2025')


# =============================================================================
# Donation Creation
# =============================================================================

@pytest.mark.django_db
class TestCreateDonation:
    """Tests for create_donation()."""

    def test_new_donor(self, active_range, donation_request):
        result = create_donation(
            org_id=ORG_ID,
            request=donation_request(breakup={'Annadan': 500, 'Pooja': 100.5}, date=day(1, 15)),
            created_by='counter1',
        )

        assert result.receipt_no == f'{YEAR}-00001'
        assert result.range_id == f'{YEAR}-A'
        assert result.total == Decimal('600.50')
        assert result.is_new_donor is True
        assert result.donor_id.startswith('D_')

        donation = Donation.objects.get(org_id=ORG_ID, receipt_no=result.receipt_no)
        assert donation.breakup == {'Annadan': '500.00', 'Pooja': '100.50'}
        assert donation.donor_mobile == '+919876543210'
        assert donation.payment_mode == 'CASH'
        assert donation.eligible_80g is True
        assert donation.created_by == 'counter1'

        donor = Donor.objects.get(org_id=ORG_ID, donor_id=result.donor_id)
        assert donor.donation_count == 1
        assert donor.lifetime_total == Decimal('600.50')
        assert donor.mobile_masked == '+91987XXXXX10'
        assert str(donor.last_donation_date) == day(1, 15)
        assert DonorAlias.objects.filter(donor=donor, alias_type=AliasType.PHONE).count() == 1

    def test_returning_donor_accumulates_stats(self, active_range, donation_request):
        """Second donation by PAN plus the same phone lands on the same donor."""
        first = create_donation(org_id=ORG_ID, request=donation_request(date=day(1, 15)))

        second = create_donation(
            org_id=ORG_ID,
            request=donation_request(pan='abcde1234f', breakup={'Gaushala': 1000}, date=day(1, 10)),
        )

        assert second.donor_id == first.donor_id
        assert second.is_new_donor is False
        assert second.receipt_no == f'{YEAR}-00002'

        donor = Donor.objects.get(org_id=ORG_ID, donor_id=first.donor_id)
        assert donor.donation_count == 2
        assert donor.lifetime_total == Decimal('1500.00')
        assert donor.pan_masked == 'ABCDE****F'
        # Older donation date does not move last_donation_date back
        assert str(donor.last_donation_date) == day(1, 15)

    def test_aliases_only_written_for_new_donors(self, active_range, donation_request):
        create_donation(org_id=ORG_ID, request=donation_request())
        create_donation(org_id=ORG_ID, request=donation_request(pan='ABCDE1234F'))

        assert not DonorAlias.objects.filter(
            org_id=ORG_ID, alias_type=AliasType.PAN, alias_value=hash_pan('ABCDE1234F')
        ).exists()

    def test_identity_is_stable_after_write(self, active_range, donation_request):
        request = donation_request(pan='ABCDE1234F')
        before = resolve_donor(org_id=ORG_ID, donor_info=request['donor'])

        result = create_donation(org_id=ORG_ID, request=request)
        after = resolve_donor(org_id=ORG_ID, donor_info=request['donor'])

        assert before.is_new is True
        assert result.donor_id == before.donor_id
        assert after.donor_id == before.donor_id
        assert after.is_new is False

    def test_eligible_80g_can_be_disabled(self, active_range, donation_request):
        result = create_donation(org_id=ORG_ID, request=donation_request(eligible_80g=False))

        assert Donation.objects.get(receipt_no=result.receipt_no).eligible_80g is False

    def test_invalid_donor_writes_nothing(self, active_range, donation_request):
        with pytest.raises(DonorValidationError):
            create_donation(org_id=ORG_ID, request=donation_request(mobile=None))

        active_range.refresh_from_db()
        assert active_range.next_number == 1
        assert not Donation.objects.exists()

    def test_invalid_breakup_consumes_no_number(self, active_range, donation_request):
        with pytest.raises(DonationValidationError):
            create_donation(org_id=ORG_ID, request=donation_request(breakup={'Annadan': 0}))

        active_range.refresh_from_db()
        assert active_range.next_number == 1

    @pytest.mark.parametrize('amount', ['99999999999999', '1e30'])
    def test_oversized_amount_consumes_no_number(self, active_range, donation_request, amount):
        with pytest.raises(DonationValidationError):
            create_donation(org_id=ORG_ID, request=donation_request(breakup={'Annadan': amount}))

        active_range.refresh_from_db()
        assert active_range.next_number == 1
        assert not Donor.objects.exists()

    def test_no_active_range(self, db, donation_request):
        with pytest.raises(ReceiptAllocationError) as exc_info:
            create_donation(org_id=ORG_ID, request=donation_request())

        assert exc_info.value.code == 'NO_ACTIVE_RANGE'
        assert exc_info.value.details == {'year': YEAR}
        assert 'Receipt allocation failed' in exc_info.value.message
        assert not Donor.objects.exists()

    def test_year_mismatch(self, active_range, donation_request):
        request = donation_request(date=f'{YEAR - 1}-12-31')

        with pytest.raises(ReceiptAllocationError) as exc_info:
            create_donation(org_id=ORG_ID, request=request)

        assert exc_info.value.code == 'YEAR_MISMATCH'

    def test_year_mismatch_flexible_mode(self, active_range, donation_request):
        request = donation_request(date=f'{YEAR - 1}-12-31', flexible_mode=True)

        result = create_donation(org_id=ORG_ID, request=request)

        assert result.receipt_no == f'{YEAR}-00001'
        assert str(Donation.objects.get(receipt_no=result.receipt_no).date) == f'{YEAR - 1}-12-31'

    def test_exhausted_range(self, make_range, donation_request):
        make_range(start=1, end=1)
        create_donation(org_id=ORG_ID, request=donation_request())

        with pytest.raises(ReceiptAllocationError) as exc_info:
            create_donation(org_id=ORG_ID, request=donation_request())

        assert exc_info.value.code == 'RANGE_EXHAUSTED'

    def test_org_isolation(self, make_range, donation_request):
        make_range()
        make_range(org_id=OTHER_ORG_ID)

        mine = create_donation(org_id=ORG_ID, request=donation_request())
        theirs = create_donation(org_id=OTHER_ORG_ID, request=donation_request())

        assert mine.receipt_no == theirs.receipt_no == f'{YEAR}-00001'
        assert mine.donor_id != theirs.donor_id
        assert theirs.is_new_donor is True


# =============================================================================
# Failed Writes
# =============================================================================

@pytest.mark.django_db
class TestDonationWriteFailure:
    """A failed write rolls back donor and donation but keeps the number consumed."""

    def test_alias_race_fails_transaction(self, active_range, donation_request):
        create_donation(org_id=ORG_ID, request=donation_request())

        # A concurrent request resolved the same phone before the first write landed
        racing = DonorResolution(donor_id='D_000000000000', is_new=True)
        with patch('apps.receipts.services.donation_creation.resolve_donor', return_value=racing):
            with pytest.raises(DonationWriteError) as exc_info:
                create_donation(org_id=ORG_ID, request=donation_request())

        assert exc_info.value.code == 'TRANSACTION_FAILED'
        assert exc_info.value.details == {'receipt_no': f'{YEAR}-00002'}
        assert not Donor.objects.filter(donor_id='D_000000000000').exists()
        assert not Donation.objects.filter(receipt_no=f'{YEAR}-00002').exists()

        active_range.refresh_from_db()
        assert active_range.next_number == 3

        nxt = create_donation(org_id=ORG_ID, request=donation_request())
        assert nxt.receipt_no == f'{YEAR}-00003'

    def test_database_error_fails_transaction(self, active_range, donation_request):
        with patch.object(Donation.objects, 'create', side_effect=DataError('numeric field overflow')):
            with pytest.raises(DonationWriteError) as exc_info:
                create_donation(org_id=ORG_ID, request=donation_request())

        assert exc_info.value.code == 'TRANSACTION_FAILED'
        assert 'overflow' not in exc_info.value.message
        assert not Donor.objects.exists()

        active_range.refresh_from_db()
        assert active_range.next_number == 2

    def test_missing_donor_profile(self, active_range, donation_request):
        racing = DonorResolution(donor_id='D_ffffffffffff', is_new=False)

        with patch('apps.receipts.services.donation_creation.resolve_donor', return_value=racing):
            with pytest.raises(DonationWriteError):
                create_donation(org_id=ORG_ID, request=donation_request())

        assert not Donation.objects.exists()

    def test_write_failure_is_logged(self, active_range, donation_request, caplog):
        create_donation(org_id=ORG_ID, request=donation_request())
        racing = DonorResolution(donor_id='D_000000000000', is_new=True)

        with patch('apps.receipts.services.donation_creation.resolve_donor', return_value=racing):
            with pytest.raises(DonationWriteError):
                create_donation(org_id=ORG_ID, request=donation_request())

        assert f'Failed to create donation {YEAR}-00002' in caplog.text
        assert '9876543210' not in caplog.text


# =============================================================================
# Lookup & Listing
# =============================================================================

@pytest.fixture
def issued(active_range, donation_request):
    """Five receipts across three days and two donors."""
    results = [
        create_donation(org_id=ORG_ID, request=donation_request(date=day(1, 1))),
        create_donation(org_id=ORG_ID, request=donation_request(date=day(1, 1))),
        create_donation(org_id=ORG_ID, request=donation_request(mobile='9123456780', date=day(1, 20))),
        create_donation(org_id=ORG_ID, request=donation_request(date=day(2, 5))),
        create_donation(org_id=ORG_ID, request=donation_request(mobile='9123456780', date=day(3, 1))),
    ]
    return results


@pytest.mark.django_db
class TestReceiptListing:

    def test_get_receipt(self, issued):
        receipt = get_receipt(org_id=ORG_ID, receipt_no=f'{YEAR}-00003')

        assert receipt.donor.donor_id == issued[2].donor_id

    def test_get_receipt_not_found(self, issued):
        with pytest.raises(ReceiptNotFoundError):
            get_receipt(org_id=OTHER_ORG_ID, receipt_no=f'{YEAR}-00003')

    def test_list_by_date(self, issued):
        receipts = list_receipts_by_date(org_id=ORG_ID, on_date=day(1, 1))

        assert [r.receipt_no for r in receipts] == [f'{YEAR}-00002', f'{YEAR}-00001']

    def test_list_by_date_range(self, issued):
        receipts = list_receipts_by_date_range(org_id=ORG_ID, start_date=day(1, 1), end_date=day(1, 31))

        assert [r.receipt_no for r in receipts] == [f'{YEAR}-00003', f'{YEAR}-00002', f'{YEAR}-00001']

    @pytest.mark.parametrize('start,end', [
        ((2, 1), (1, 1)),
        ((1, 1), (2, 1)),
    ])
    def test_list_by_date_range_invalid(self, db, start, end):
        with pytest.raises(InvalidDateRangeError) as exc_info:
            list_receipts_by_date_range(org_id=ORG_ID, start_date=day(*start), end_date=day(*end))

        assert exc_info.value.code == 'VALIDATION_ERROR'

    def test_list_by_date_range_bad_format(self, db):
        with pytest.raises(InvalidDateRangeError):
            list_receipts_by_date_range(org_id=ORG_ID, start_date='yesterday', end_date=day(1, 1))

    def test_list_by_donor(self, issued):
        receipts = list_receipts_by_donor(org_id=ORG_ID, donor_id=issued[2].donor_id)

        assert [r.receipt_no for r in receipts] == [f'{YEAR}-00005', f'{YEAR}-00003']

    def test_list_by_range(self, issued):
        receipts = list_receipts_by_range(org_id=ORG_ID, range_id=f'{YEAR}-A')

        assert receipts.count() == 5
        assert list_receipts_by_range(org_id=ORG_ID, range_id=f'{YEAR}-B').count() == 0

    def test_range_reflects_issued_numbers(self, issued):
        receipt_range = ReceiptRange.objects.get(org_id=ORG_ID, range_id=f'{YEAR}-A')

        assert receipt_range.next_number == 6
        assert receipt_range.status == RangeStatus.ACTIVE
