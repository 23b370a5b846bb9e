"""
Accounts service — application entry point.

This is the **only** file that assembles the app.  All business logic
lives in the `services/`, `api/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from accounts.api.v1.api import api_router
from accounts.api.v1.endpoints.auth import limiter
from accounts.core.config import settings
from accounts.core.exceptions import register_exception_handlers
from accounts.db.base import Base
from accounts.db.session import async_session_factory, engine
from accounts.db.store import CredentialStore

# Ensure all models are imported so metadata.create_all can see them
from accounts.models.password_reset import PasswordResetToken  # noqa: F401
from accounts.models.user import Role
from accounts.services.seeder import seed
from accounts.services.user_service import AccountFailure, UserService

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def bootstrap(service: UserService) -> None:
    """Create the first admin account, and demo data when enabled."""
    result = await service.add_user(
        "Administrator",
        settings.FIRST_ADMIN_EMAIL,
        settings.FIRST_ADMIN_PASSWORD,
        Role.admin,
    )
    if result is not AccountFailure.CONFLICT:
        logger.info(
            "Default admin created: %s (password: <redacted>)",
            settings.FIRST_ADMIN_EMAIL,
        )
    if settings.SEED_DEMO_DATA:
        await seed(service)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    async with async_session_factory() as session:
        await bootstrap(UserService(CredentialStore(session)))

    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="User accounts, authentication and password reset",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # slowapi looks the limiter up on app.state
    application.state.limiter = limiter

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=settings.API_V1_PREFIX)
    return application


app = create_app()
