"""Lambda entrypoint for the user directory resolvers.

AppSync invokes this function directly for the registerUser, listUsers,
updateUserRole and me fields.
"""

from __future__ import annotations

from typing import Any, Mapping

from user_directory.api.users import lambda_handler as _handler


def lambda_handler(event: Mapping[str, Any], context: Any) -> Any:
    return _handler(event, context)
