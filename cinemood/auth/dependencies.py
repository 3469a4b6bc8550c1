"""Resolve the logged-in account from the signed session cookie."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from cinemood.config import get_settings
from cinemood.db import get_db
from cinemood.models.user import User


async def get_optional_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """The session's user, or None for anonymous requests."""
    user_id = request.session.get("user_id")
    if user_id is None:
        return None

    user = await db.get(User, user_id)
    if user is None:
        # Account was deleted after the cookie was issued
        request.session.clear()
    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user


async def get_admin_user(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Only accounts listed in ADMIN_EMAILS pass."""
    if user.email.lower() not in get_settings().admin_email_set:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user
