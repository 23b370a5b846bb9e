"""
FastAPI dependencies — database session, account service and auth guards.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Optional

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.core.config import settings
from accounts.core.policies import has_one_of_roles, parse_roles
from accounts.core.security import decode_access_token
from accounts.db.session import async_session_factory
from accounts.db.store import CredentialStore
from accounts.models.user import User
from accounts.services.user_service import UserService

# auto_error=False so we can fall back to the cookie if the header is missing
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session / service ──────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(CredentialStore(db))


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    access_token: Optional[str] = Cookie(default=None),
    service: UserService = Depends(get_user_service),
) -> User:
    """Decode JWT from Header OR Cookie, look up user."""
    # Priority: Header > Cookie
    final_token = token
    if not final_token and access_token:
        final_token = access_token.removeprefix("Bearer ")

    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not final_token:
        raise credentials_exc

    payload = decode_access_token(final_token)
    if payload is None:
        raise credentials_exc

    user_id: str | None = payload.get("sub")
    if user_id is None or not user_id.isdigit():
        raise credentials_exc

    user = await service.get_user(int(user_id))
    if user is None:
        raise credentials_exc
    return user


def require_roles(roles: str) -> Callable[..., Awaitable[User]]:
    """Build a dependency that admits users holding one of *roles*.

    ``roles`` is comma separated, e.g. ``"admin,manager"``. Unknown names fail
    here, at import time, rather than on each request.
    """
    allowed = parse_roles(roles)

    async def _guard(current_user: User = Depends(get_current_user)) -> User:
        if not has_one_of_roles(current_user, allowed):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient privileges",
            )
        return current_user

    return _guard


require_admin = require_roles("admin")
require_staff = require_roles("admin,manager")
