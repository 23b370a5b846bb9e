"""
Account service — user CRUD, authentication and password-reset tokens.

All account invariants are enforced here; the credential store only persists.
Recoverable failures (email conflict, unknown user, bad credentials) come back
as return values, never as exceptions. Database errors other than unique
constraint violations propagate to the caller untouched.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from math import ceil
from typing import Generic, TypeVar

from sqlalchemy.exc import IntegrityError

from accounts.core.config import settings
from accounts.core.security import (
    dummy_password_hash,
    generate_reset_token,
    get_password_hash,
    verify_password,
)
from accounts.db.store import CredentialStore, SortDirection, SortKey
from accounts.models.password_reset import TokenExpiryReason
from accounts.models.user import Role, User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AccountFailure(str, enum.Enum):
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"


@dataclass
class Paged(Generic[T]):
    data: list[T] = field(default_factory=list)
    total_rows: int = 0
    page_size: int = 0
    current_page: int = 0
    order_by: str = SortKey.id.value
    direction: str = SortDirection.asc.value

    @property
    def total_pages(self) -> int:
        if self.page_size < 1:
            return 0
        return ceil(self.total_rows / self.page_size)


def parse_ordering(order_by: str | None, direction: str | None) -> tuple[SortKey, SortDirection]:
    """Map free-text sort options onto the supported orderings.

    Any unrecognised key or direction falls back to ``id asc``.
    """
    try:
        key = SortKey((order_by or "").strip().lower())
        dirn = SortDirection((direction or "").strip().lower())
    except ValueError:
        return SortKey.id, SortDirection.asc
    return key, dirn


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    def __init__(
        self,
        store: CredentialStore,
        clock: Callable[[], datetime] = _utcnow,
        reset_token_lifetime: timedelta | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.reset_token_lifetime = reset_token_lifetime or timedelta(
            minutes=settings.RESET_TOKEN_EXPIRE_MINUTES
        )

    # ── Queries ─────────────────────────────────────────────────────
    async def get_all_users(self) -> list[User]:
        return await self.store.list_all()

    async def get_users(
        self,
        page: int,
        size: int,
        order_by: str | None = SortKey.id.value,
        direction: str | None = SortDirection.asc.value,
    ) -> Paged[User]:
        """Return one page of users.

        ``page`` is 1-based. A page or size below 1 yields an empty slice;
        ``total_rows`` always counts every user.
        """
        key, dirn = parse_ordering(order_by, direction)
        if page < 1 or size < 1:
            offset, limit = -1, 0
        else:
            offset, limit = (page - 1) * size, size
        data, total = await self.store.list_ordered(key, dirn, offset, limit)
        return Paged(
            data=data,
            total_rows=total,
            page_size=size,
            current_page=page,
            order_by=key.value,
            direction=dirn.value,
        )

    async def get_user(self, user_id: int) -> User | None:
        return await self.store.find_by_id(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        return await self.store.find_by_email(email)

    async def is_email_available(self, email: str, user_id: int | None = None) -> bool:
        """True if *email* is unused, or used only by *user_id*."""
        if user_id is None:
            return await self.store.find_by_email(email) is None
        return await self.store.find_by_email_excluding(email, user_id) is None

    # ── Commands ────────────────────────────────────────────────────
    async def add_user(
        self, name: str, email: str, password: str, role: Role
    ) -> User | AccountFailure:
        if await self.store.find_by_email(email) is not None:
            return AccountFailure.CONFLICT

        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
        )
        try:
            await self.store.insert(user)
            await self.store.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same email
            await self.store.rollback()
            logger.info("Add user rejected by unique constraint: %s", email)
            return AccountFailure.CONFLICT
        logger.info("Created user %d (%s, %s)", user.id, email, role.value)
        return user

    async def update_user(
        self,
        user_id: int,
        name: str,
        email: str,
        password: str,
        role: Role,
    ) -> User | AccountFailure:
        """Overwrite a user's details.

        The supplied password is always re-hashed, so callers must resend the
        current password when they do not mean to change it.
        """
        user = await self.store.find_by_id(user_id)
        if user is None:
            return AccountFailure.NOT_FOUND
        if not await self.is_email_available(email, user_id):
            return AccountFailure.CONFLICT

        old_email = user.email
        user.name = name
        user.email = email
        user.hashed_password = get_password_hash(password)
        user.role = role
        try:
            if old_email != email:
                # Tokens follow the email, so the old address must not keep them
                await self.store.expire_valid_tokens(
                    old_email, self.clock(), TokenExpiryReason.revoked
                )
            await self.store.update(user)
            await self.store.commit()
        except IntegrityError:
            await self.store.rollback()
            logger.info("Update of user %d rejected by unique constraint", user_id)
            return AccountFailure.CONFLICT
        logger.info("Updated user %d", user_id)
        return user

    async def delete_user(self, user_id: int) -> bool:
        """Remove a user and revoke any reset tokens still valid for its email."""
        user = await self.store.find_by_id(user_id)
        if user is None:
            return False
        await self.store.expire_valid_tokens(user.email, self.clock(), TokenExpiryReason.revoked)
        await self.store.delete(user_id)
        await self.store.commit()
        logger.info("Deleted user %d", user_id)
        return True

    # ── Authentication ──────────────────────────────────────────────
    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the user if the credentials match, otherwise ``None``.

        Unknown email and wrong password give the same result, and both pay
        for one bcrypt verification.
        """
        user = await self.store.find_by_email(email)
        if user is None:
            verify_password(password, dummy_password_hash())
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    # ── Password reset ──────────────────────────────────────────────
    async def forgot_password(self, email: str) -> str | None:
        """Issue a fresh reset token for *email*, superseding any valid one."""
        if await self.store.find_by_email(email) is None:
            return None

        now = self.clock()
        token = generate_reset_token()
        try:
            superseded = await self.store.expire_valid_tokens(
                email, now, TokenExpiryReason.superseded
            )
            await self.store.insert_token(email, token, now + self.reset_token_lifetime)
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise
        logger.info("Issued password reset token for %s (superseded %d)", email, superseded)
        return token

    async def reset_password(self, email: str, token: str, password: str) -> User | None:
        """Redeem *token* and set a new password; ``None`` if anything mismatches."""
        user = await self.store.find_by_email(email)
        if user is None:
            return None

        now = self.clock()
        reset = await self.store.find_valid_token(email, token, now)
        if reset is None:
            return None

        await self.store.expire_token(reset, now, TokenExpiryReason.redeemed)
        user.hashed_password = get_password_hash(password)
        await self.store.update(user)
        await self.store.commit()
        logger.info("Password reset completed for user %d", user.id)
        return user

    async def get_valid_password_reset_tokens(self) -> list[str]:
        """Every unexpired token value. Exposes secrets: ops and tests only."""
        return await self.store.list_valid_tokens(self.clock())
