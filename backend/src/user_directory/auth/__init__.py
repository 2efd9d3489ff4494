"""Caller identity and credential helpers."""

from user_directory.auth.claims import (
    CallerIdentity,
    is_admin,
    require_admin,
)
from user_directory.auth.passwords import generate_temp_password

__all__ = [
    "CallerIdentity",
    "generate_temp_password",
    "is_admin",
    "require_admin",
]
