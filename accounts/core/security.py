"""
JWT access tokens, password hashing (bcrypt) and reset-token generation.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from accounts.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY

# 32 random bytes, url-safe base64 (43 chars)
RESET_TOKEN_BYTES = 32


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """A throwaway hash to verify against when no account matches, so that
    unknown emails cost the same bcrypt work as wrong passwords."""
    return pwd_context.hash(secrets.token_urlsafe(16))


# ── Password reset tokens ───────────────────────────────────────────
def generate_reset_token() -> str:
    """Return an opaque, unguessable token for the password-reset flow."""
    return secrets.token_urlsafe(RESET_TOKEN_BYTES)


# ── JWT tokens ──────────────────────────────────────────────────────
def create_access_token(
    subject: str | Any,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return jwt.encode(
        {"exp": expire, "sub": str(subject), "type": "access"},
        _SECRET,
        algorithm=_ALGORITHM,
    )


def decode_access_token(token: str) -> dict | None:
    """Return payload dict if *access* token is valid, else ``None``."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != "access":
        return None
    return payload
