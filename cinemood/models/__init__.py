"""Database models and API schemas."""

from cinemood.models.base import Base
from cinemood.models.user import User

__all__ = [
    "Base",
    "User",
]
