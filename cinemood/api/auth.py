"""Authentication API endpoints (email + password, session cookie)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cinemood.auth import get_current_user, hash_password, verify_password
from cinemood.db import get_db
from cinemood.models.schemas import AuthResponse, UserCreate, UserLogin, UserRead
from cinemood.models.user import User
from cinemood.services.selection import TrackerRegistry, get_tracker_registry

router = APIRouter()
logger = logging.getLogger(__name__)


def _start_session(request: Request, user: User) -> AuthResponse:
    request.session["user_id"] = user.id
    request.session["name"] = user.name
    return AuthResponse(user=UserRead.model_validate(user))


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: UserCreate,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """Create an account and log it in."""
    email = data.email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")

    user = User(
        name=data.name.strip(),
        email=email,
        password_hash=hash_password(data.password),
        settings={},
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already exists")
    await db.refresh(user)

    logger.info(f"New user signed up: {user.id}")
    return _start_session(request, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    data: UserLogin,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    result = await db.execute(select(User).where(User.email == data.email.strip().lower()))
    user = result.scalar_one_or_none()
    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return _start_session(request, user)


@router.post("/logout")
async def logout(
    request: Request,
    registry: Annotated[TrackerRegistry, Depends(get_tracker_registry)],
) -> dict:
    """Clear session and the user's recommendation session."""
    user_id = request.session.get("user_id")
    if user_id:
        registry.drop(user_id)
    request.session.clear()
    return {"success": True}


@router.get("/me", response_model=AuthResponse)
async def get_me(user: Annotated[User, Depends(get_current_user)]) -> AuthResponse:
    """Get current user info."""
    return AuthResponse(user=UserRead.model_validate(user))
