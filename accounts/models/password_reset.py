"""
Password reset token model.

A token is valid while ``expires_at`` lies strictly in the future. Tokens are
never deleted: superseded, redeemed and revoked tokens are expired in place
and kept as history, with ``expired_reason`` recording why. A token is
revoked when its owner is deleted or moves to another email address. A token
that simply timed out keeps ``expired_reason`` NULL.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Index, Integer, String

from accounts.db.base import Base


class TokenExpiryReason(str, enum.Enum):
    superseded = "superseded"
    redeemed = "redeemed"
    # Owner deleted or moved to another email address
    revoked = "revoked"


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"
    __table_args__ = (Index("ix_password_reset_email_expires", "email", "expires_at"),)

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    # References users.email by value, so history survives user deletion
    email: str = Column(String(320), nullable=False, index=True)  # type: ignore[assignment]
    token: str = Column(String(128), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    expires_at: datetime = Column(DateTime(timezone=True), nullable=False)  # type: ignore[assignment]
    expired_reason: TokenExpiryReason | None = Column(  # type: ignore[assignment]
        Enum(TokenExpiryReason, name="token_expiry_reason", native_enum=False, length=20),
        nullable=True,
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<PasswordResetToken(email={self.email}, expires_at={self.expires_at})>"
