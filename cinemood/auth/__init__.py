"""Authentication module."""

from cinemood.auth.dependencies import get_admin_user, get_current_user, get_optional_user
from cinemood.auth.passwords import hash_password, verify_password

__all__ = [
    "get_admin_user",
    "get_current_user",
    "get_optional_user",
    "hash_password",
    "verify_password",
]
