"""User directory resolvers.

This module serves four GraphQL fields through a single AppSync direct
Lambda resolver. The user pool owns accounts and role groups; the DynamoDB
table holds the display metadata for each account.

Fields handled:
    registerUser(name, email, role)  - admin only
    listUsers                        - admin only
    updateUserRole(userId, role)     - admin only
    me                               - any authenticated caller
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional

from user_directory.auth.claims import CallerIdentity, require_admin
from user_directory.auth.passwords import generate_temp_password
from user_directory.config import Settings
from user_directory.db.user_store import UserStore
from user_directory.exceptions import AppError, AuthenticationError, NotFoundError
from user_directory.models import UserRecord
from user_directory.services.aws_clients import (
    get_cognito_idp_client,
    get_dynamodb_table,
)
from user_directory.services.user_pool import UserPool
from user_directory.utils.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    log_resolver_event,
    mask_email,
    set_request_context,
)
from user_directory.utils.validators import require_email, require_role, require_string

configure_logging()
logger = get_logger(__name__)

UNKNOWN_FIELD_ERROR = "Unknown fieldName"
GENERIC_ERROR = "Internal server error"


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def lambda_handler(event: Mapping[str, Any], context: Any) -> Any:
    """Resolve one GraphQL field."""

    set_request_context(req_id=getattr(context, "aws_request_id", None))
    try:
        try:
            settings = load_settings()
        except AppError as exc:
            logger.error(f"Configuration error: {exc.message}")
            return {"error": exc.message}

        user_pool = UserPool(
            get_cognito_idp_client(settings.region_name),
            settings.user_pool_id,
        )
        user_store = UserStore(
            get_dynamodb_table(settings.table_name, settings.region_name)
        )
        return dispatch(event, settings, user_pool, user_store)
    finally:
        clear_request_context()


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Read settings once per Lambda execution environment."""
    return Settings.from_env()


def dispatch(
    event: Mapping[str, Any],
    settings: Settings,
    user_pool: UserPool,
    user_store: UserStore,
) -> Any:
    """Route an event to the resolver named by ``info.fieldName``.

    Resolver exceptions never escape: they are logged and returned as
    ``{"error": message}``.
    """
    if not isinstance(event, Mapping):
        event = {}
    log_resolver_event(logger, event)

    info = event.get("info")
    field_name = info.get("fieldName") if isinstance(info, Mapping) else None
    arguments = event.get("arguments")
    if not isinstance(arguments, Mapping):
        arguments = {}
    identity = event.get("identity")
    if not isinstance(identity, Mapping):
        identity = None

    resolvers: dict[str, Callable[[], Any]] = {
        "registerUser": lambda: register_user(
            arguments, identity, settings, user_pool, user_store
        ),
        "listUsers": lambda: list_users(identity, settings, user_store),
        "updateUserRole": lambda: update_user_role(
            arguments, identity, settings, user_pool, user_store
        ),
        "me": lambda: me(identity, settings, user_store),
    }

    resolver = resolvers.get(field_name) if isinstance(field_name, str) else None
    if resolver is None:
        logger.warning("Unknown resolver field", extra={"field_name": field_name})
        return {"error": UNKNOWN_FIELD_ERROR}

    set_request_context(field_name=field_name)
    return _safe(resolver, field_name)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


def _safe(resolver: Callable[[], Any], field_name: str) -> Any:
    """Execute *resolver*, converting any exception into an error payload."""
    try:
        return resolver()
    except AppError as exc:
        logger.warning(
            f"{field_name} failed: {exc.message}",
            extra={
                "field_name": field_name,
                "error_type": type(exc).__name__,
                "status_code": exc.status_code,
                "detail": exc.detail,
            },
        )
        return {"error": exc.message or GENERIC_ERROR}
    except Exception as exc:
        logger.exception(f"Unexpected error in {field_name}")
        return {"error": str(exc) or GENERIC_ERROR}


# ---------------------------------------------------------------------------
# Resolvers
# ---------------------------------------------------------------------------


def register_user(
    arguments: Mapping[str, Any],
    identity: Optional[Mapping[str, Any]],
    settings: Settings,
    user_pool: UserPool,
    user_store: UserStore,
) -> bool:
    """Create a Cognito account in the role's group and store its record.

    Steps:
    1. Create the account with a temporary password
    2. Add it to the group named by the role
    3. Read back the provider-assigned username
    4. Store the user record under that username

    If a step after account creation fails, the new account is deleted
    before the error is re-raised.
    """
    require_admin(identity, settings.admin_group, "Access denied: Admin only")

    name = require_string(arguments, "name", max_length=256)
    email = require_email(arguments)
    role = require_role(arguments)

    temp_password = generate_temp_password()
    user_pool.create_user(
        email,
        name,
        temp_password,
        suppress_invite=settings.suppress_invite_email,
    )

    try:
        user_pool.add_user_to_group(email, role)
        user_id = user_pool.get_username(email)
        user_store.put(UserRecord(id=user_id, name=name, email=email, role=role))
    except Exception:
        _rollback_created_user(user_pool, email)
        raise

    logger.info(
        "User registered",
        extra={"user": mask_email(email), "user_id": user_id, "role": role},
    )
    return True


def list_users(
    identity: Optional[Mapping[str, Any]],
    settings: Settings,
    user_store: UserStore,
) -> list[dict[str, Any]]:
    """Return every stored user item as stored."""
    require_admin(identity, settings.admin_group, "Only admins can access this")
    return user_store.scan_all()


def update_user_role(
    arguments: Mapping[str, Any],
    identity: Optional[Mapping[str, Any]],
    settings: Settings,
    user_pool: UserPool,
    user_store: UserStore,
) -> bool:
    """Move a user to a new role group and record the new role.

    The account is removed from its previous group only when the role
    actually changes; the add is always issued. If a later step fails,
    only the group changes made by this call are reverted.
    """
    require_admin(identity, settings.admin_group, "Only admins can update roles")

    user_id = require_string(arguments, "userId")
    role = require_role(arguments)

    item = user_store.get(user_id)
    if item is None:
        raise NotFoundError("User", user_id)

    email = str(item.get("email") or "")
    old_role = str(item.get("role") or "")
    changes = GroupChanges(email=email, old_role=old_role, new_role=role)

    try:
        if old_role != role:
            # Memberships held before the call are never undone
            changes.already_in_new_group = role in user_pool.list_groups(email)

        if old_role and old_role != role:
            user_pool.remove_user_from_group(email, old_role)
            changes.removed_old = True

        user_pool.add_user_to_group(email, role)
        changes.added_new = old_role != role and not changes.already_in_new_group

        user_store.update_role(user_id, role)
    except Exception:
        _restore_groups(user_pool, changes)
        raise

    logger.info(
        "User role changed",
        extra={"user_id": user_id, "old_role": old_role, "role": role},
    )
    return True


def me(
    identity: Optional[Mapping[str, Any]],
    settings: Settings,
    user_store: UserStore,
) -> dict[str, Any]:
    """Return the caller's stored item unchanged, or a profile built from claims.

    The claims-based profile is never persisted.
    """
    caller = CallerIdentity.from_event(identity)
    if not caller.sub:
        raise AuthenticationError()

    item = user_store.get(caller.sub)
    if item is not None:
        return item

    return {
        "id": caller.sub,
        "name": caller.name,
        "email": caller.email,
        "role": caller.primary_group or settings.default_role,
    }


# ---------------------------------------------------------------------------
# Compensation
# ---------------------------------------------------------------------------


@dataclass
class GroupChanges:
    """Group membership changes applied so far by one role update."""

    email: str
    old_role: str
    new_role: str
    already_in_new_group: bool = False
    removed_old: bool = False
    added_new: bool = False


def _rollback_created_user(user_pool: UserPool, email: str) -> None:
    """Delete an account whose registration did not complete."""
    try:
        user_pool.delete_user(email)
        logger.warning(
            "Rolled back partially registered user",
            extra={"user": mask_email(email)},
        )
    except Exception:
        # The original error is re-raised by the caller
        logger.error(
            "Could not roll back partially registered user",
            extra={"user": mask_email(email)},
            exc_info=True,
        )


def _restore_groups(user_pool: UserPool, changes: GroupChanges) -> None:
    """Undo the group changes recorded in *changes*, each step independently."""
    context = {
        "user": mask_email(changes.email),
        "old_role": changes.old_role,
        "role": changes.new_role,
    }

    if changes.removed_old:
        try:
            user_pool.add_user_to_group(changes.email, changes.old_role)
        except Exception:
            logger.error(
                "Could not re-add user to previous group after failed role update",
                extra=context,
                exc_info=True,
            )

    if changes.added_new:
        try:
            user_pool.remove_user_from_group(changes.email, changes.new_role)
        except Exception:
            logger.error(
                "Could not remove user from new group after failed role update",
                extra=context,
                exc_info=True,
            )
