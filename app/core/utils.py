import re
from datetime import datetime, timezone
from typing import Iterable

from app.core.config import settings
from app.core.exceptions import ValidationError

E164_PATTERN = re.compile(r"^\+[0-9]{8,15}$")

def _is_ascii_digits(value: str) -> bool:
    # str.isdigit also accepts non-ASCII decimal digits
    return value.isascii() and value.isdigit()

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def normalize_phone(raw: str, country_code: str, domestic_prefixes: Iterable[str]) -> str:
    """
    Normalize a mobile number to E.164.

    A bare 10-digit domestic number (e.g. ``9812345678``) gets the default
    country code; a number already carrying the country code without ``+``
    is accepted too. Anything else that is not ``+`` and 8-15 digits is
    rejected.
    """
    if raw is None:
        raise ValidationError("Mobile number is required")

    # Drop common formatting characters
    phone = re.sub(r"[\s\-().]", "", str(raw))
    if not phone:
        raise ValidationError("Mobile number is required")

    if not phone.startswith("+"):
        if len(phone) == 10 and _is_ascii_digits(phone) and phone.startswith(tuple(domestic_prefixes)):
            phone = f"+{country_code}{phone}"
        elif _is_ascii_digits(phone) and phone.startswith(country_code) and len(phone) == len(country_code) + 10:
            phone = f"+{phone}"

    if not E164_PATTERN.match(phone):
        raise ValidationError("Invalid mobile number")
    return phone

def normalize_mobile(raw: str) -> str:
    return normalize_phone(raw, settings.DEFAULT_COUNTRY_CODE, settings.DOMESTIC_MOBILE_PREFIXES)
