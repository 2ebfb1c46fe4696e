# app/api/v1/routes/auth.py
"""User authentication endpoints: register, login, profile."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.domain.services.user_auth import create_access_token, hash_password, verify_password
from app.infrastructure.db.models import User
from app.infrastructure.db.repositories.user_repository import UserRepository

from app.api.v1.deps import get_current_user
from app.api.v1.envelope import ok
from app.api.v1.schemas.auth import LoginRequest, RegisterRequest, TokenResponse, UserProfile

logger = logging.getLogger("api.v1.auth")

router = APIRouter(prefix="/auth", tags=["Auth"])


def _profile(user: User) -> dict:
    return UserProfile(
        id=str(user.id),
        email=user.email,
        name=user.name,
        role=user.role,
        company_name=user.company_name,
        company_gstin=user.company_gstin,
        company_state=user.company_state,
        created_at=user.created_at,
    ).model_dump()


@router.post("/register", response_model=dict, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a user account (``admin`` manages records, ``ca`` reads everything)."""
    repo = UserRepository(db)

    if await repo.get_by_email(body.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    try:
        user = await repo.create(
            email=body.email.lower(),
            password_hash=hash_password(body.password),
            name=body.name.strip(),
            role=body.role,
            company_name=(body.company_name or "").strip() or None,
            company_gstin=(body.company_gstin or "").strip().upper() or None,
            company_state=(body.company_state or "").strip() or None,
        )
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    logger.info("User registered: id=%s role=%s", user.id, user.role)
    return ok(data=_profile(user), message="Registration successful")


@router.post("/login", response_model=dict)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate with email + password and receive a bearer token."""
    user = await UserRepository(db).get_by_email(body.email)

    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token, expires_in = create_access_token(str(user.id), user.role)
    logger.info("User login: id=%s", user.id)

    return ok(data=TokenResponse(access_token=token, expires_in=expires_in).model_dump())


@router.get("/me", response_model=dict)
async def me(user: User = Depends(get_current_user)):
    return ok(data=_profile(user))
