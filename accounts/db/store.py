"""
Credential store — persistence for users and password-reset tokens.

The store performs no validation. Write methods only ``flush``; the caller
owns the transaction and decides when to ``commit``, so several writes can
be applied as one atomic unit.
"""

from __future__ import annotations

import enum
import logging
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.models.password_reset import PasswordResetToken, TokenExpiryReason
from accounts.models.user import User

logger = logging.getLogger(__name__)


class SortKey(str, enum.Enum):
    id = "id"
    name = "name"
    email = "email"


class SortDirection(str, enum.Enum):
    asc = "asc"
    desc = "desc"


_ORDERINGS = {
    (SortKey.id, SortDirection.asc): User.id.asc(),
    (SortKey.id, SortDirection.desc): User.id.desc(),
    (SortKey.name, SortDirection.asc): User.name.asc(),
    (SortKey.name, SortDirection.desc): User.name.desc(),
    (SortKey.email, SortDirection.asc): User.email.asc(),
    (SortKey.email, SortDirection.desc): User.email.desc(),
}


class CredentialStore:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ── Transaction control ─────────────────────────────────────────
    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()

    # ── Users ───────────────────────────────────────────────────────
    async def insert(self, user: User) -> int:
        """Add *user* and flush. Raises ``IntegrityError`` on a duplicate email."""
        self.session.add(user)
        await self.session.flush()
        return user.id

    async def update(self, user: User) -> None:
        self.session.add(user)
        await self.session.flush()

    async def delete(self, user_id: int) -> bool:
        user = await self.find_by_id(user_id)
        if user is None:
            return False
        await self.session.delete(user)
        await self.session.flush()
        return True

    async def find_by_id(self, user_id: int) -> User | None:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_email_excluding(self, email: str, user_id: int) -> User | None:
        """Return a user owning *email* other than *user_id*, if any."""
        result = await self.session.execute(
            select(User).where(User.email == email, User.id != user_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[User]:
        result = await self.session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def list_ordered(
        self,
        sort_key: SortKey,
        direction: SortDirection,
        offset: int,
        limit: int,
    ) -> tuple[list[User], int]:
        """Return one ordered slice of users and the total user count."""
        total = (await self.session.execute(select(func.count(User.id)))).scalar_one()
        if offset < 0 or limit < 1:
            return [], total
        result = await self.session.execute(
            select(User)
            .order_by(_ORDERINGS[(sort_key, direction)])
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    # ── Password reset tokens ───────────────────────────────────────
    async def insert_token(self, email: str, token: str, expiry: datetime) -> PasswordResetToken:
        reset = PasswordResetToken(email=email, token=token, expires_at=expiry)
        self.session.add(reset)
        await self.session.flush()
        return reset

    async def find_valid_token(
        self, email: str, token: str, now: datetime
    ) -> PasswordResetToken | None:
        result = await self.session.execute(
            select(PasswordResetToken).where(
                PasswordResetToken.email == email,
                PasswordResetToken.token == token,
                PasswordResetToken.expires_at > now,
            )
        )
        return result.scalar_one_or_none()

    async def expire_token(
        self, reset: PasswordResetToken, now: datetime, reason: TokenExpiryReason
    ) -> None:
        reset.expires_at = now
        reset.expired_reason = reason
        await self.session.flush()

    async def expire_valid_tokens(
        self,
        email: str,
        now: datetime,
        reason: TokenExpiryReason = TokenExpiryReason.superseded,
    ) -> int:
        """Expire every still-valid token for *email*; return how many were hit."""
        result = await self.session.execute(
            update(PasswordResetToken)
            .where(
                PasswordResetToken.email == email,
                PasswordResetToken.expires_at > now,
            )
            .values(expires_at=now, expired_reason=reason)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def list_valid_tokens(self, now: datetime) -> list[str]:
        result = await self.session.execute(
            select(PasswordResetToken.token)
            .where(PasswordResetToken.expires_at > now)
            .order_by(PasswordResetToken.id)
        )
        return list(result.scalars().all())
