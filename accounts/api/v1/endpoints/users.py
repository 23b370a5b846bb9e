"""
User management endpoints.

- Listing and lookups require the manager or admin role.
- POST / PUT / DELETE require the admin role.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from accounts.api.v1.deps import get_user_service, require_admin, require_staff
from accounts.models.user import User
from accounts.schemas.user import (
    DeleteResponse,
    EmailAvailability,
    PagedUsers,
    UserCreate,
    UserRead,
    UserUpdate,
)
from accounts.services.user_service import AccountFailure, UserService

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)

_FAILURES = {
    AccountFailure.CONFLICT: (409, "Email address is already in use"),
    AccountFailure.NOT_FOUND: (404, "User not found"),
    AccountFailure.INVALID_CREDENTIALS: (401, "Invalid credentials"),
}


def _raise_for(failure: AccountFailure) -> None:
    status_code, detail = _FAILURES[failure]
    raise HTTPException(status_code=status_code, detail=detail)


@router.get("", response_model=PagedUsers)
async def list_users(
    page: int = 1,
    size: int = Query(default=20, le=500),
    order_by: str = "id",
    direction: str = "asc",
    service: UserService = Depends(get_user_service),
    _staff: User = Depends(require_staff),
) -> PagedUsers:
    """Page through users. Unknown sort options fall back to id ascending."""
    paged = await service.get_users(page, size, order_by, direction)
    return PagedUsers.model_validate(paged)


@router.get("/email-available", response_model=EmailAvailability)
async def email_available(
    email: str,
    user_id: int | None = None,
    service: UserService = Depends(get_user_service),
    _staff: User = Depends(require_staff),
) -> EmailAvailability:
    """Check whether an email is free, optionally ignoring the given user."""
    available = await service.is_email_available(email.strip(), user_id)
    return EmailAvailability(email=email, available=available)


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
    _staff: User = Depends(require_staff),
) -> User:
    user = await service.get_user(user_id)
    if user is None:
        _raise_for(AccountFailure.NOT_FOUND)
    return user


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    service: UserService = Depends(get_user_service),
    _admin: User = Depends(require_admin),
) -> User:
    """Create a new user account (admin only)."""
    result = await service.add_user(body.name, body.email, body.password, body.role)
    if isinstance(result, AccountFailure):
        _raise_for(result)
    return result


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    body: UserUpdate,
    service: UserService = Depends(get_user_service),
    _admin: User = Depends(require_admin),
) -> User:
    """Replace a user's details; the supplied password is always re-hashed."""
    result = await service.update_user(user_id, body.name, body.email, body.password, body.role)
    if isinstance(result, AccountFailure):
        _raise_for(result)
    return result


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: int,
    service: UserService = Depends(get_user_service),
    admin: User = Depends(require_admin),
) -> DeleteResponse:
    if not await service.delete_user(user_id):
        _raise_for(AccountFailure.NOT_FOUND)
    logger.info("User %d deleted by admin %d", user_id, admin.id)
    return DeleteResponse(success=True, message=f"User {user_id} deleted")
