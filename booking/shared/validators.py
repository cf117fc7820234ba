"""Shared validation utilities"""

import re
from typing import Optional


def validate_us_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize US phone number to E.164 format.

    Args:
        phone: Phone number string in various formats

    Returns:
        Normalized phone number in E.164 format (+1XXXXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    digits = re.sub(r"\D", "", phone)

    if digits.startswith("1") and len(digits) == 11:
        digits = digits[1:]

    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits for US numbers")

    return f"+1{digits}"


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to E.164.

    Numbers already carrying a "+" country code are kept (digits only);
    anything else is treated as a US number.

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    if phone.strip().startswith("+"):
        digits = re.sub(r"\D", "", phone)
        if not 8 <= len(digits) <= 15:
            raise ValueError("International phone numbers must have 8 to 15 digits")
        return f"+{digits}"

    return validate_us_phone(phone)
