"""Temporary password generation for newly created Cognito accounts."""

from __future__ import annotations

import secrets
import string

SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

# Printable ASCII without whitespace (codes 33..126).
PRINTABLE = "".join(chr(code) for code in range(33, 127))

TEMP_PASSWORD_LENGTH = 12


def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    """Generate a temporary password.

    The result always contains at least one uppercase letter, one lowercase
    letter, one digit and one symbol. Padding brings the total to exactly
    ``length`` before the shuffle, so no required character is cut off.
    """
    if length < 4:
        raise ValueError("length must be at least 4")

    # Use cryptographically secure random for credentials
    chars = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice(SYMBOLS),
    ]
    chars.extend(secrets.choice(PRINTABLE) for _ in range(length - len(chars)))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
