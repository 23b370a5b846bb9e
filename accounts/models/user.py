"""
User model — authentication & role-based access control.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Integer, String

from accounts.db.base import Base


class Role(str, enum.Enum):
    """Closed set of roles; every persisted user holds exactly one."""

    guest = "guest"
    manager = "manager"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(200), nullable=False)  # type: ignore[assignment]
    # The unique index is the authoritative guard against duplicate emails
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    hashed_password: str = Column(String(128), nullable=False)  # type: ignore[assignment]
    role: Role = Column(  # type: ignore[assignment]
        Enum(Role, name="user_role", native_enum=False, length=20),
        nullable=False,
        default=Role.guest,
    )
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
