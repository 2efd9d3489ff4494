"""Process-wide settings read from the Lambda environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping
from typing import Optional

from user_directory.exceptions import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """Configuration shared by the dispatcher and every resolver.

    Attributes:
        user_pool_id: Cognito user pool holding accounts and role groups.
        table_name: DynamoDB table holding user records.
        admin_group: Group whose members may manage users.
        default_role: Role reported for callers without any group claim.
        suppress_invite_email: Skip Cognito's invitation message on create.
        region_name: AWS region for the clients, or None for the default.
    """

    user_pool_id: str
    table_name: str
    admin_group: str = "admin"
    default_role: str = "user"
    suppress_invite_email: bool = False
    region_name: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Raises:
            ConfigurationError: If USER_POOL_ID or TABLE_NAME is missing.
        """
        env = os.environ if environ is None else environ

        user_pool_id = _clean(env.get("USER_POOL_ID")) or _clean(
            env.get("COGNITO_USER_POOL_ID")
        )
        if not user_pool_id:
            raise ConfigurationError("USER_POOL_ID")

        table_name = _clean(env.get("TABLE_NAME"))
        if not table_name:
            raise ConfigurationError("TABLE_NAME")

        return cls(
            user_pool_id=user_pool_id,
            table_name=table_name,
            admin_group=_clean(env.get("ADMIN_GROUP")) or "admin",
            default_role=_clean(env.get("DEFAULT_ROLE")) or "user",
            suppress_invite_email=(
                _clean(env.get("SUPPRESS_INVITE_EMAIL")).lower() in _TRUTHY
            ),
            region_name=(
                _clean(env.get("AWS_REGION"))
                or _clean(env.get("AWS_DEFAULT_REGION"))
                or None
            ),
        )


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()
