"""Tests for normalization and hashing helpers (no database)."""

import pytest
from datetime import date, datetime
from decimal import Decimal

from apps.donors.services import (
    normalize_phone,
    normalize_email,
    normalize_pan,
    normalize_name,
    normalize_amount,
    normalize_date,
    normalize_org_id,
    hash_value,
    short_hash,
    mask_pan,
    mask_email,
    mask_phone,
    sanitize_for_logs,
)


# =============================================================================
# Phone
# =============================================================================

class TestNormalizePhone:

    @pytest.mark.parametrize('raw', [
        '9876543210',
        '+91 98765 43210',
        '09876543210',
        '919876543210',
        '091-9876543210',
        '(+91) 98765-43210',
    ])
    def test_indian_formats_normalize_to_e164(self, raw):
        assert normalize_phone(raw) == '+919876543210'

    @pytest.mark.parametrize('raw', [None, '', '12345', '98765432101234', '19876543210', 'abcdefghij'])
    def test_invalid_numbers_return_none(self, raw):
        assert normalize_phone(raw) is None


# =============================================================================
# Email / PAN / Name / Org
# =============================================================================

class TestNormalizeIdentifiers:

    def test_email_trimmed_and_lowercased(self):
        assert normalize_email('  Devotee@Example.COM ') == 'devotee@example.com'

    @pytest.mark.parametrize('raw', [None, '', 'no-at-sign', 'a@b', 'a b@c.com'])
    def test_invalid_email_returns_none(self, raw):
        assert normalize_email(raw) is None

    def test_pan_uppercased(self):
        assert normalize_pan(' abcde1234f ') == 'ABCDE1234F'

    @pytest.mark.parametrize('raw', [None, '', 'ABCDE12345', 'ABCD1234F', '12345ABCDE'])
    def test_invalid_pan_returns_none(self, raw):
        assert normalize_pan(raw) is None

    def test_name_trimmed(self):
        assert normalize_name('  Sita Devi ') == 'Sita Devi'
        assert normalize_name('   ') is None

    def test_org_id_uppercased(self):
        assert normalize_org_id(' datta-sakharapa ') == 'DATTA-SAKHARAPA'
        assert normalize_org_id('') is None


# =============================================================================
# Amount / Date
# =============================================================================

class TestNormalizeAmount:

    @pytest.mark.parametrize('raw,expected', [
        (100, Decimal('100.00')),
        ('250', Decimal('250.00')),
        (100.456, Decimal('100.46')),
        ('0.005', Decimal('0.01')),
        (Decimal('19.994'), Decimal('19.99')),
        (0, Decimal('0.00')),
    ])
    def test_valid_amounts(self, raw, expected):
        assert normalize_amount(raw) == expected

    @pytest.mark.parametrize('raw', [None, -5, '-1', 'abc', '', True, False, float('nan'), float('inf'), 'Infinity', '1e30'])
    def test_invalid_amounts_return_none(self, raw):
        assert normalize_amount(raw) is None


class TestNormalizeDate:

    def test_accepts_date_datetime_and_strings(self):
        assert normalize_date(date(2025, 3, 1)) == '2025-03-01'
        assert normalize_date(datetime(2025, 3, 1, 10, 30)) == '2025-03-01'
        assert normalize_date('2025-03-01') == '2025-03-01'
        assert normalize_date('2025-03-01T10:30:00Z') == '2025-03-01'

    def test_invalid_dates_return_none(self):
        assert normalize_date(None) is None
        assert normalize_date('01/03/2025') is None
        assert normalize_date('2025-02-30') is None


# =============================================================================
# Hashing & Masking
# =============================================================================

class TestHashing:

    def test_hash_value_is_prefixed_and_deterministic(self):
        hashed = hash_value('ABCDE1234F')
        assert hashed.startswith('h:sha256:')
        assert len(hashed) == len('h:sha256:') + 64
        assert hashed == hash_value('ABCDE1234F')
        assert hashed != hash_value('ABCDE1234G')

    def test_short_hash_is_twelve_hex_chars(self):
        value = short_hash('TEMPLE:PAN:ABCDE1234F')
        assert len(value) == 12
        int(value, 16)
        assert hash_value('TEMPLE:PAN:ABCDE1234F')[len('h:sha256:'):].startswith(value)


class TestMasking:

    def test_mask_pan(self):
        assert mask_pan('ABCDE1234F') == 'ABCDE****F'

    def test_mask_pan_rejects_wrong_length(self):
        with pytest.raises(ValueError, match='Invalid PAN length'):
            mask_pan('ABC')

    def test_mask_email(self):
        assert mask_email('devotee@example.com') == 'd***@example.com'
        assert mask_email('a@example.com') == 'a@example.com'

    def test_mask_phone(self):
        assert mask_phone('+919876543210') == '+91987XXXXX10'
        assert mask_phone('+14155550100') == '+14155550100'

    def test_sanitize_for_logs_masks_nested_values(self):
        data = {
            'name': 'Ramesh',
            'pan': 'ABCDE1234F',
            'mobile': '+919876543210',
            'email': 'ramesh@example.com',
            'note': 'PAN ABCDE1234F, call 9876543210',
            'items': [{'email': 'sita@example.com'}],
        }

        sanitized = sanitize_for_logs(data)

        assert sanitized['name'] == 'Ramesh'
        assert sanitized['pan'] == 'ABCDE****F'
        assert sanitized['mobile'] == '+91987XXXXX10'
        assert sanitized['email'] == 'r***@example.com'
        assert 'ABCDE1234F' not in sanitized['note']
        assert '9876543210' not in sanitized['note']
        assert sanitized['items'][0]['email'] == 's***@example.com'

    def test_sanitize_for_logs_leaves_other_values(self):
        assert sanitize_for_logs(42) == 42
        assert sanitize_for_logs(None) is None
