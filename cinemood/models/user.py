"""User model."""

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from cinemood.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Account owning a preference record and a recommendation session."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    # Free-form per-user storage; preferences live under "userPreferences"
    settings: Mapped[dict] = mapped_column(JSON, default=dict)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
