# app/domain/services/user_auth.py
"""
Password hashing and JWT access tokens for billing users.

Usage in routes:
    from app.api.v1.deps import get_current_user

    @router.get("/invoices")
    async def list_invoices(user: User = Depends(get_current_user)):
        ...
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt as _bcrypt
from jose import jwt

from app.config.settings import settings

# ---------------------------------------------------------------------------
# Password hashing (bcrypt — direct, avoids passlib compat issues)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Hash a plain-text password with bcrypt."""
    return _bcrypt.hashpw(plain.encode(), _bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    return _bcrypt.checkpw(plain.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# JWT helpers
# ---------------------------------------------------------------------------

def create_access_token(user_id: str, role: str) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expire_minutes = settings.USER_JWT_ACCESS_EXPIRE_MINUTES
    exp = datetime.now(timezone.utc) + timedelta(minutes=expire_minutes)
    payload = {
        "sub": user_id,
        "role": role,
        "type": "user_access",
        "exp": exp,
    }
    token = jwt.encode(payload, settings.USER_JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expire_minutes * 60


def decode_access_token(token: str) -> dict:
    """Decode and verify a token; raises ``jose.JWTError`` when invalid or expired."""
    return jwt.decode(token, settings.USER_JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
