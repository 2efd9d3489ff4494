"""Utility modules for the user directory."""

from user_directory.utils.logging import (
    configure_logging,
    get_logger,
    mask_email,
    set_request_context,
    clear_request_context,
)
from user_directory.utils.validators import (
    require_email,
    require_role,
    require_string,
)

__all__ = [
    "clear_request_context",
    "configure_logging",
    "get_logger",
    "mask_email",
    "require_email",
    "require_role",
    "require_string",
    "set_request_context",
]
