"""Input validation utilities for resolver arguments."""

from __future__ import annotations

import re
from typing import Any
from typing import Mapping
from typing import Optional

from user_directory.exceptions import ValidationError

# One "@", no whitespace, a dot in the domain. The address is kept as given
# because Cognito may treat usernames as case-sensitive.
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")

# Cognito group names are limited to 128 characters.
MAX_GROUP_NAME_LENGTH = 128


def validate_email(value: str) -> str:
    """Validate an email address.

    Returns:
        The email address, unchanged.

    Raises:
        ValueError: If the email address is invalid.
    """
    if not _EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email address")
    return value


def sanitize_string(
    value: Optional[str],
    max_length: int = 1000,
    strip: bool = True,
) -> Optional[str]:
    """Sanitize a string input.

    Args:
        value: The string to sanitize, or None.
        max_length: Maximum allowed length.
        strip: Whether to strip whitespace.

    Returns:
        The sanitized string, or None if input is None or blank.

    Raises:
        ValueError: If the string exceeds max_length.
    """
    if value is None:
        return None
    if strip:
        value = value.strip()
    if len(value) > max_length:
        raise ValueError(f"Value exceeds maximum length of {max_length}")
    return value if value else None


def require_string(
    arguments: Mapping[str, Any],
    field: str,
    max_length: int = 1000,
) -> str:
    """Return a required, non-blank string argument.

    Raises:
        ValidationError: If the argument is missing, not a string, blank
            or too long.
    """
    raw = arguments.get(field)
    if raw is not None and not isinstance(raw, str):
        raise ValidationError(f"{field} must be a string", field=field)
    try:
        value = sanitize_string(raw, max_length=max_length)
    except ValueError as exc:
        raise ValidationError(f"{field}: {exc}", field=field) from exc
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    return value


def require_email(arguments: Mapping[str, Any], field: str = "email") -> str:
    """Return a required email argument with surrounding whitespace removed."""
    value = require_string(arguments, field, max_length=254)
    try:
        return validate_email(value)
    except ValueError as exc:
        raise ValidationError(str(exc), field=field) from exc


def require_role(arguments: Mapping[str, Any], field: str = "role") -> str:
    """Return a required role (Cognito group name) argument."""
    return require_string(arguments, field, max_length=MAX_GROUP_NAME_LENGTH)
