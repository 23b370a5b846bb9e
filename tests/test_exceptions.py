"""Tests for the global error envelope."""

import pytest
from fastapi import FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError, OperationalError

from accounts.core.exceptions import register_exception_handlers


def _failing_app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/integrity")
    async def integrity():
        raise IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed"))

    @app.get("/database")
    async def database():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    @app.get("/crash")
    async def crash():
        raise RuntimeError("secret internals")

    @app.get("/denied")
    async def denied():
        raise HTTPException(401, "Not authenticated", headers={"WWW-Authenticate": "Bearer"})

    return app


@pytest.fixture
async def client():
    transport = ASGITransport(app=_failing_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,status,detail",
    [
        ("/integrity", 409, "Database constraint violation"),
        ("/database", 500, "Internal database error"),
        ("/crash", 500, "Internal server error"),
    ],
)
async def test_errors_are_masked(client: AsyncClient, path, status, detail):
    resp = await client.get(path)
    assert resp.status_code == status
    assert resp.json() == {"detail": detail, "success": False}
    assert "secret" not in resp.text


@pytest.mark.asyncio
async def test_http_exception_keeps_detail_and_headers(client: AsyncClient):
    resp = await client.get("/denied")
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Not authenticated", "success": False}
    assert resp.headers["www-authenticate"] == "Bearer"
