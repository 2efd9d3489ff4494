"""Pydantic schema for user records written to DynamoDB."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict


class UserRecord(BaseModel):
    """User metadata keyed by the Cognito username."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    role: str

    def to_item(self) -> dict[str, str]:
        return self.model_dump()
