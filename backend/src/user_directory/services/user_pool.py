"""Cognito user pool operations used by the user directory.

Each method wraps one Cognito admin API call and translates
``botocore.exceptions.ClientError`` into ``IdentityProviderError``.
"""

from __future__ import annotations

from typing import Any
from typing import Optional

from botocore.exceptions import ClientError

from user_directory.exceptions import ConflictError
from user_directory.exceptions import IdentityProviderError
from user_directory.utils.logging import get_logger
from user_directory.utils.logging import mask_email

logger = get_logger(__name__)


def _error_code(exc: ClientError) -> Optional[str]:
    return exc.response.get("Error", {}).get("Code")


def _provider_error(operation: str, exc: ClientError) -> IdentityProviderError:
    error = exc.response.get("Error", {})
    message = error.get("Message")
    return IdentityProviderError(
        operation,
        code=error.get("Code"),
        message=f"{operation} failed: {message}" if message else None,
    )


class UserPool:
    """Admin operations against a single Cognito user pool."""

    def __init__(self, client: Any, user_pool_id: str):
        self._client = client
        self._user_pool_id = user_pool_id

    def create_user(
        self,
        email: str,
        name: str,
        temporary_password: str,
        suppress_invite: bool = False,
    ) -> None:
        """Create an account with verified email and display name attributes.

        Raises:
            ConflictError: If an account with this username already exists.
            IdentityProviderError: For any other Cognito failure.
        """
        params: dict[str, Any] = {
            "UserPoolId": self._user_pool_id,
            "Username": email,
            "TemporaryPassword": temporary_password,
            "UserAttributes": [
                {"Name": "email", "Value": email},
                {"Name": "email_verified", "Value": "true"},
                {"Name": "name", "Value": name},
            ],
        }
        if suppress_invite:
            params["MessageAction"] = "SUPPRESS"

        try:
            self._client.admin_create_user(**params)
        except ClientError as exc:
            if _error_code(exc) == "UsernameExistsException":
                raise ConflictError(
                    f"User already exists: {mask_email(email)}"
                ) from exc
            raise _provider_error("AdminCreateUser", exc) from exc

        logger.info("User created in Cognito", extra={"user": mask_email(email)})

    def add_user_to_group(self, username: str, group_name: str) -> None:
        try:
            self._client.admin_add_user_to_group(
                UserPoolId=self._user_pool_id,
                Username=username,
                GroupName=group_name,
            )
        except ClientError as exc:
            raise _provider_error("AdminAddUserToGroup", exc) from exc

        logger.info(
            "User added to group",
            extra={"user": mask_email(username), "group": group_name},
        )

    def remove_user_from_group(self, username: str, group_name: str) -> None:
        try:
            self._client.admin_remove_user_from_group(
                UserPoolId=self._user_pool_id,
                Username=username,
                GroupName=group_name,
            )
        except ClientError as exc:
            raise _provider_error("AdminRemoveUserFromGroup", exc) from exc

        logger.info(
            "User removed from group",
            extra={"user": mask_email(username), "group": group_name},
        )

    def get_username(self, username: str) -> str:
        """Return the provider-assigned username for an account.

        Pools configured with email as an alias return a generated
        username (the ``sub``) rather than the email used at creation.
        """
        try:
            response = self._client.admin_get_user(
                UserPoolId=self._user_pool_id,
                Username=username,
            )
        except ClientError as exc:
            raise _provider_error("AdminGetUser", exc) from exc
        return response["Username"]

    def list_groups(self, username: str) -> set[str]:
        """Return the names of the groups the account belongs to."""
        params: dict[str, Any] = {
            "UserPoolId": self._user_pool_id,
            "Username": username,
        }
        groups: set[str] = set()
        while True:
            try:
                response = self._client.admin_list_groups_for_user(**params)
            except ClientError as exc:
                raise _provider_error("AdminListGroupsForUser", exc) from exc

            groups.update(g["GroupName"] for g in response.get("Groups", []))
            next_token = response.get("NextToken")
            if not next_token:
                return groups
            params["NextToken"] = next_token

    def delete_user(self, username: str) -> None:
        try:
            self._client.admin_delete_user(
                UserPoolId=self._user_pool_id,
                Username=username,
            )
        except ClientError as exc:
            raise _provider_error("AdminDeleteUser", exc) from exc

        logger.info("User deleted from Cognito", extra={"user": mask_email(username)})
