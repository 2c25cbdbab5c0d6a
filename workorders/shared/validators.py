"""Shared validation utilities"""

import re
from typing import Any, Iterable, Optional

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def is_blank(value: Any) -> bool:
    """True for None, empty strings and whitespace-only strings"""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_fields(data: dict, required: Iterable[str]) -> list[str]:
    """Names of required fields that are absent or blank in ``data``, in declaration order"""
    return [field for field in required if is_blank(data.get(field))]


def validate_time(value: Optional[str]) -> Optional[str]:
    """
    Validate a wall-clock time and normalize it to HH:MM.

    Raises:
        ValueError: If the value is not HH:MM or HH:MM:SS
    """
    if not value:
        return value
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value[:5]


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a phone number and normalize it to + and digits only.

    Raises:
        ValueError: If the number has fewer than 7 or more than 15 digits
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)
    if not 7 <= len(digits) <= 15:
        raise ValueError("Phone number must contain 7 to 15 digits")

    # Russian numbers written with a leading 8 are stored as +7
    if len(digits) == 11 and digits.startswith("8"):
        digits = "7" + digits[1:]
    return f"+{digits}"
