"""
One-way hashing and display masking of donor identifiers.

Hashes are used as alias keys so that raw PAN and email never appear in an
index. Masked values are for storage and display only, never for lookup.
"""

import hashlib
import re
from typing import Any

HASH_PREFIX = 'h:sha256:'
SHORT_HASH_LENGTH = 12

_PAN_PATTERN = re.compile(r'\b[A-Z]{5}\d{4}[A-Z]\b')
_EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')
_E164_PATTERN = re.compile(r'\+91\d{10}')
_LOCAL_PHONE_PATTERN = re.compile(r'\b\d{10}\b')


def _sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode('utf-8')).hexdigest()


def hash_value(value: str) -> str:
    """SHA-256 of ``value`` with the ``h:sha256:`` prefix."""
    return f'{HASH_PREFIX}{_sha256_hex(value)}'


def hash_pan(pan: str) -> str:
    return hash_value(pan)


def hash_email(email: str) -> str:
    return hash_value(email)


def short_hash(value: str) -> str:
    """First 12 hex characters of SHA-256, used for donor IDs."""
    return _sha256_hex(value)[:SHORT_HASH_LENGTH]


def mask_pan(pan: str) -> str:
    """ABCDE1234F -> ABCDE****F"""
    if len(pan) != 10:
        raise ValueError('Invalid PAN length')
    return f'{pan[:5]}****{pan[9:]}'


def mask_email(email: str) -> str:
    """user@example.com -> u***@example.com"""
    local, sep, domain = email.partition('@')
    if not local or not sep or not domain:
        return email
    masked_local = f'{local[0]}***' if len(local) > 1 else local
    return f'{masked_local}@{domain}'


def mask_phone(phone: str) -> str:
    """+919876543210 -> +91987XXXXX10"""
    if not phone.startswith('+91') or len(phone) != 13:
        return phone
    return f'{phone[:3]}{phone[3:6]}XXXXX{phone[11:]}'


def sanitize_for_logs(data: Any) -> Any:
    """
    Mask PAN, email and phone values before they reach a log line.

    Strings are scanned for identifier patterns; dicts have their ``pan``,
    ``email``, ``mobile`` and ``phone`` keys masked; lists and nested dicts
    are sanitized recursively. Other values are returned unchanged.
    """
    if isinstance(data, str):
        sanitized = _PAN_PATTERN.sub('XXXXX****X', data)
        sanitized = _EMAIL_PATTERN.sub('x***@xxx.com', sanitized)
        sanitized = _E164_PATTERN.sub('+91XXXXXXXXXX', sanitized)
        return _LOCAL_PHONE_PATTERN.sub('XXXXXXXXXX', sanitized)

    if isinstance(data, (list, tuple)):
        return [sanitize_for_logs(item) for item in data]

    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            if key == 'pan' and isinstance(value, str):
                sanitized[key] = mask_pan(value) if len(value) == 10 else 'XXXXX****X'
            elif key == 'email' and isinstance(value, str):
                sanitized[key] = mask_email(value)
            elif key in ('mobile', 'phone') and isinstance(value, str):
                sanitized[key] = mask_phone(value)
            else:
                sanitized[key] = sanitize_for_logs(value)
        return sanitized

    return data
