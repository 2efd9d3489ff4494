"""AWS service gateways."""

from user_directory.services.user_pool import UserPool

__all__ = ["UserPool"]
