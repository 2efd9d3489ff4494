"""User record persistence."""

from user_directory.db.user_store import UserStore

__all__ = ["UserStore"]
