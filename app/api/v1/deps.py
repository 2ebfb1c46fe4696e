# app/api/v1/deps.py
"""
FastAPI dependencies for the v1 API layer.

``get_current_user`` extracts and validates a Bearer JWT from the
Authorization header and returns the authenticated User ORM object.
``require_admin`` additionally restricts mutations to the ``admin`` role.
``owner_scope`` turns the user into the ownership filter used by the
repositories: CA users read everything, everyone else only their own rows.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Depends, HTTPException, Header, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.domain.services.user_auth import decode_access_token
from app.infrastructure.db.models import User
from app.infrastructure.db.repositories.user_repository import UserRepository

logger = logging.getLogger("api.v1.deps")


async def get_current_user(
    authorization: str | None = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate the ``Authorization: Bearer <jwt>`` header and return the
    authenticated :class:`User`.

    Raises HTTP 401 if the token is missing, invalid, expired, or the user
    does not exist.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:]  # strip "Bearer "

    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        logger.debug("JWT decode failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "user_access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
        )

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing subject",
        )

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return user


def owner_scope(user: User) -> uuid.UUID | None:
    """``None`` (no filter) for CA users, otherwise the user's own id."""
    return None if user.role == "ca" else user.id
