"""DynamoDB repository for user records.

This module wraps a boto3 ``Table`` resource. All ``ClientError``s are
translated into ``StoreError`` so that callers never see botocore types.
Reads return items exactly as stored, including attributes written by
other producers.
"""

from __future__ import annotations

from typing import Any
from typing import Optional

from botocore.exceptions import ClientError

from user_directory.exceptions import StoreError
from user_directory.models import UserRecord
from user_directory.utils.logging import get_logger

logger = get_logger(__name__)


def _store_error(operation: str, exc: ClientError) -> StoreError:
    error = exc.response.get("Error", {})
    message = error.get("Message")
    return StoreError(
        operation,
        code=error.get("Code"),
        message=f"{operation} failed: {message}" if message else None,
    )


class UserStore:
    """Repository for user items keyed by ``id``.

    Args:
        table: boto3 DynamoDB ``Table`` resource.
    """

    def __init__(self, table: Any):
        self._table = table

    def put(self, record: UserRecord) -> None:
        """Write a full record, replacing any existing item with the same id."""
        try:
            self._table.put_item(Item=record.to_item())
        except ClientError as exc:
            raise _store_error("PutItem", exc) from exc

        logger.info("User record stored", extra={"user_id": record.id})

    def get(self, user_id: str) -> Optional[dict[str, Any]]:
        """Get an item by id.

        Returns:
            The stored item if found, None otherwise.
        """
        try:
            response = self._table.get_item(Key={"id": user_id})
        except ClientError as exc:
            raise _store_error("GetItem", exc) from exc

        return response.get("Item") or None

    def update_role(self, user_id: str, role: str) -> None:
        """Set the role attribute of an existing item."""
        try:
            self._table.update_item(
                Key={"id": user_id},
                UpdateExpression="SET #r = :r",
                ExpressionAttributeNames={"#r": "role"},
                ExpressionAttributeValues={":r": role},
            )
        except ClientError as exc:
            raise _store_error("UpdateItem", exc) from exc

        logger.info("User role updated", extra={"user_id": user_id, "role": role})

    def scan_all(self) -> list[dict[str, Any]]:
        """Return every item in the table, following scan pages.

        Order is whatever DynamoDB returns.
        """
        items: list[dict[str, Any]] = []
        scan_kwargs: dict[str, Any] = {}
        pages = 0
        while True:
            try:
                response = self._table.scan(**scan_kwargs)
            except ClientError as exc:
                raise _store_error("Scan", exc) from exc

            pages += 1
            items.extend(response.get("Items", []))

            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            scan_kwargs["ExclusiveStartKey"] = last_key

        logger.info(f"Scanned {len(items)} user records", extra={"pages": pages})
        return items
