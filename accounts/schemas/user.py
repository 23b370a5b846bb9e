"""Pydantic schemas for User CRUD and paging."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator, model_validator

from accounts.models.user import Role


def _check_email(v: str) -> str:
    v = v.strip()
    if "@" not in v or v.startswith("@") or v.endswith("@"):
        raise ValueError("Invalid email address")
    return v


def _check_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name must not be empty")
    if len(v) > 200:
        raise ValueError("Name must not exceed 200 characters")
    return v


class UserCreate(BaseModel):
    name: str
    email: str
    password: str
    role: Role = Role.guest

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password must not be empty")
        return v


class UserUpdate(BaseModel):
    """Full replacement payload; the password is always re-hashed."""

    name: str
    email: str
    password: str
    password_confirm: str
    role: Role

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _check_email(v)

    @model_validator(mode="after")
    def _passwords_match(self) -> "UserUpdate":
        if self.password != self.password_confirm:
            raise ValueError("Confirm password doesn't match")
        return self


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class PagedUsers(BaseModel):
    data: list[UserRead]
    total_rows: int
    total_pages: int
    page_size: int
    current_page: int
    order_by: str
    direction: str

    model_config = {"from_attributes": True}


class EmailAvailability(BaseModel):
    email: str
    available: bool


class DeleteResponse(BaseModel):
    success: bool
    message: str
