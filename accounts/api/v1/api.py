"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from accounts.api.v1.endpoints import auth, users

api_router = APIRouter()

# Auth (login, logout, password reset)
api_router.include_router(auth.router)

# User management
api_router.include_router(users.router)
