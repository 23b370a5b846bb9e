"""
Centralised application settings loaded from environment / .env file.

Uses pydantic-settings so every value can be overridden via env vars
or the .env file at the project root.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

_INSECURE_SECRET = "CHANGE-ME-TO-A-RANDOM-64-CHAR-HEX-STRING-IN-PRODUCTION"


class Settings(BaseSettings):
    # ── Project ──────────────────────────────────────────────────────
    PROJECT_NAME: str = "Accounts"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"

    # ── Database (async SQLite by default, PostgreSQL via asyncpg) ───
    DATABASE_URL: str = "sqlite+aiosqlite:///./accounts.db"

    # ── JWT ──────────────────────────────────────────────────────────
    SECRET_KEY: str = _INSECURE_SECRET
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    COOKIE_SECURE: bool = False  # Set True in HTTPS production

    # ── Password hashing ─────────────────────────────────────────────
    BCRYPT_ROUNDS: int = 12

    # ── Password reset ───────────────────────────────────────────────
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    # Development only: echo the issued token back in the HTTP response
    RESET_TOKEN_IN_RESPONSE: bool = False

    # ── Rate limiting ────────────────────────────────────────────────
    RATE_LIMIT_ENABLED: bool = True
    LOGIN_RATE_LIMIT: str = "5/minute"

    # ── CORS ─────────────────────────────────────────────────────────
    # Comma separated ("http://a,http://b") or a JSON array
    CORS_ORIGINS: Annotated[list[str], NoDecode] = [
        "http://localhost",
        "http://localhost:8000",
        "http://127.0.0.1",
        "http://127.0.0.1:8000",
    ]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: object) -> list[str]:
        if not isinstance(v, str):
            return v  # type: ignore[return-value]
        if v.lstrip().startswith("["):
            return json.loads(v)
        return [o.strip() for o in v.split(",") if o.strip()]

    # ── Logging ──────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    # ── Bootstrap data ───────────────────────────────────────────────
    FIRST_ADMIN_EMAIL: str = "admin@mail.com"
    FIRST_ADMIN_PASSWORD: str = "admin"
    # Seed manager/guest and dummy accounts on startup (never in production)
    SEED_DEMO_DATA: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


settings = Settings()

if settings.SECRET_KEY == _INSECURE_SECRET:
    logging.getLogger(__name__).warning(
        "You are running with the default INSECURE secret key! "
        "Set SECRET_KEY in your .env file."
    )
