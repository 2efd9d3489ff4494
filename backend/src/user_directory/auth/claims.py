"""Caller identity claims and the admin authorization check.

The resolver receives the caller identity already verified by AppSync (or
by an API Gateway Cognito authorizer). Claims are trusted as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from typing import Any
from typing import Mapping
from typing import Optional

from user_directory.exceptions import AuthorizationError

GROUPS_CLAIM = "cognito:groups"


def parse_groups(groups_claim: Any) -> list[str]:
    """Normalize the ``cognito:groups`` claim to a list of group names.

    AppSync delivers a list, API Gateway authorizers a comma-separated
    string. Anything else is treated as no groups.
    """
    if isinstance(groups_claim, str):
        return [g.strip() for g in groups_claim.split(",") if g.strip()]
    if isinstance(groups_claim, (list, tuple)):
        return [str(g) for g in groups_claim]
    return []


@dataclass(frozen=True)
class CallerIdentity:
    """Claims about the caller of the current invocation."""

    sub: str
    name: Optional[str]
    email: Optional[str]
    groups: list[str] = field(default_factory=list)

    @classmethod
    def from_event(cls, identity: Optional[Mapping[str, Any]]) -> "CallerIdentity":
        identity = identity or {}
        claims = identity.get("claims")
        if not isinstance(claims, Mapping):
            claims = {}
        return cls(
            sub=str(identity.get("sub") or claims.get("sub") or ""),
            name=claims.get("name"),
            email=claims.get("email"),
            groups=parse_groups(claims.get(GROUPS_CLAIM)),
        )

    @property
    def primary_group(self) -> Optional[str]:
        return self.groups[0] if self.groups else None


def is_admin(identity: Optional[Mapping[str, Any]], admin_group: str = "admin") -> bool:
    """Return True if the caller's group claim lists the admin group."""
    return admin_group in CallerIdentity.from_event(identity).groups


def require_admin(
    identity: Optional[Mapping[str, Any]],
    admin_group: str = "admin",
    message: str = "Access denied: Admin only",
) -> None:
    """Raise AuthorizationError unless the caller is an admin."""
    if not is_admin(identity, admin_group):
        raise AuthorizationError(message)
