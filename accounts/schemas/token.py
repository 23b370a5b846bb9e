"""Pydantic schemas for JWT tokens and the password-reset flow."""

from __future__ import annotations

from pydantic import BaseModel, model_validator


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LogoutResponse(BaseModel):
    success: bool = True
    message: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ForgotPasswordResponse(BaseModel):
    message: str
    # Only populated when RESET_TOKEN_IN_RESPONSE is enabled
    token: str | None = None


class ResetPasswordRequest(BaseModel):
    email: str
    token: str
    password: str
    password_confirm: str

    @model_validator(mode="after")
    def _passwords_match(self) -> "ResetPasswordRequest":
        if not self.password:
            raise ValueError("Password must not be empty")
        if self.password != self.password_confirm:
            raise ValueError("Confirm password doesn't match")
        return self
