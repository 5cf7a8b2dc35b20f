"""
Normalization of raw donor input.

All functions are pure: they return the canonical form of a value, or
``None`` when the value is missing or invalid. Callers decide whether a
``None`` means "not provided" or "provided but invalid".
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from django.utils import timezone


COUNTRY_CODE = '91'

E164_PHONE_RE = re.compile(r'^\+91\d{10}$')
EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PAN_RE = re.compile(r'^[A-Z]{5}\d{4}[A-Z]$')

TWO_PLACES = Decimal('0.01')


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize an Indian phone number to E.164.

    Examples:
        "9876543210"      -> "+919876543210"
        "+91 98765 43210" -> "+919876543210"
        "09876543210"     -> "+919876543210"
        "091-9876543210"  -> "+919876543210"
    """
    if not phone:
        return None

    digits = re.sub(r'\D', '', str(phone))

    if len(digits) == 10:
        normalized = f'+{COUNTRY_CODE}{digits}'
    elif len(digits) == 11 and digits.startswith('0'):
        normalized = f'+{COUNTRY_CODE}{digits[1:]}'
    elif len(digits) == 12 and digits.startswith(COUNTRY_CODE):
        normalized = f'+{digits}'
    elif len(digits) == 13 and digits.startswith(f'0{COUNTRY_CODE}'):
        normalized = f'+{COUNTRY_CODE}{digits[3:]}'
    else:
        return None

    if E164_PHONE_RE.match(normalized):
        return normalized
    return None


def normalize_email(email: Optional[str]) -> Optional[str]:
    """Lowercase and trim an email address; ``None`` if malformed."""
    if not email:
        return None

    normalized = str(email).strip().lower()
    if EMAIL_RE.match(normalized):
        return normalized
    return None


def normalize_pan(pan: Optional[str]) -> Optional[str]:
    """Uppercase and trim a PAN (format ABCDE1234F); ``None`` if malformed."""
    if not pan:
        return None

    normalized = str(pan).strip().upper()
    if PAN_RE.match(normalized):
        return normalized
    return None


def normalize_name(name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    trimmed = str(name).strip()
    return trimmed or None


def normalize_org_id(org_id: Optional[str]) -> Optional[str]:
    if not org_id:
        return None
    return str(org_id).strip().upper() or None


def normalize_amount(amount: Union[int, float, str, Decimal, None]) -> Optional[Decimal]:
    """
    Parse an amount and round it half away from zero to 2 decimal places.

    Returns ``None`` for missing, negative or non-numeric input.

    Examples:
        100.456  -> Decimal('100.46')
        "250"    -> Decimal('250.00')
        -5       -> None
        "abc"    -> None
    """
    if amount is None or isinstance(amount, bool):
        return None

    if isinstance(amount, float) and not math.isfinite(amount):
        return None

    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        return None

    if not value.is_finite() or value < 0:
        return None

    try:
        return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context can hold
        return None


def normalize_date(value: Union[str, date, datetime, None]) -> Optional[str]:
    """Return an ISO ``yyyy-mm-dd`` string, or ``None`` if unparseable."""
    if not value:
        return None

    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10]).isoformat()
    except ValueError:
        return None


def today_iso() -> str:
    """Today's date in the configured time zone."""
    return timezone.localdate().isoformat()
