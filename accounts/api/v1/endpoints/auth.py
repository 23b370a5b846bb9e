"""
Auth endpoints — login (OAuth2 password flow), logout and password reset.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from slowapi import Limiter
from slowapi.util import get_remote_address

from accounts.api.v1.deps import get_current_user, get_user_service
from accounts.core.config import settings
from accounts.core.security import create_access_token
from accounts.models.user import User
from accounts.schemas.token import (
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LogoutResponse,
    ResetPasswordRequest,
    Token,
)
from accounts.schemas.user import UserRead
from accounts.services.user_service import UserService

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

_FORGOT_MESSAGE = "If the email is registered, a password reset token has been issued"


@router.post("/login", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login_for_access_token(
    request: Request,
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: UserService = Depends(get_user_service),
) -> Token:
    """Authenticate with email/password. Returns the JWT and sets an HttpOnly cookie."""
    user = await service.authenticate(form_data.username.strip(), form_data.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(user.id)
    response.set_cookie(
        key="access_token",
        value=f"Bearer {access_token}",
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    logger.info("User %d logged in", user.id)
    return Token(access_token=access_token)


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    """Clear the auth cookie and end the session."""
    response.delete_cookie("access_token")
    return LogoutResponse(message="Logged out")


@router.get("/me", response_model=UserRead)
async def read_current_user(current_user: User = Depends(get_current_user)) -> User:
    """Return profile of the currently authenticated user."""
    return current_user


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    service: UserService = Depends(get_user_service),
) -> ForgotPasswordResponse:
    """Issue a reset token. The response is identical whether or not the email exists."""
    token = await service.forgot_password(body.email.strip())
    if token is None:
        logger.info("Password reset requested for unknown email")
    if settings.RESET_TOKEN_IN_RESPONSE:
        return ForgotPasswordResponse(message=_FORGOT_MESSAGE, token=token)
    return ForgotPasswordResponse(message=_FORGOT_MESSAGE)


@router.post("/reset-password", response_model=UserRead)
async def reset_password(
    body: ResetPasswordRequest,
    service: UserService = Depends(get_user_service),
) -> User:
    """Redeem a reset token and set a new password."""
    user = await service.reset_password(body.email.strip(), body.token, body.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        )
    return user
