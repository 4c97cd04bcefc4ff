"""Shared validation utilities"""

import re
from typing import Optional

TIME_LABEL_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Please enter a valid email address")

    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate a contact phone number.

    Customers may be outside the US, so only the digit count is checked; the
    number is stored as typed (whitespace trimmed).
    """
    if not phone:
        return phone

    phone = phone.strip()
    digits = re.sub(r"\D", "", phone)
    if len(digits) < 7 or len(digits) > 15:
        raise ValueError("Please enter a valid phone number")

    return phone


def validate_time_label(value: str) -> str:
    """Validate a 24-hour HH:MM label"""
    value = (value or "").strip()
    if not TIME_LABEL_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value


def require_text(value: Optional[str], message: str) -> str:
    """Strip a required text field, rejecting blanks"""
    if value is None or not value.strip():
        raise ValueError(message)
    return value.strip()
