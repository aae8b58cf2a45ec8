"""
User I/O models for API requests and responses.

These schemas never carry the password hash outward; passwords only flow
inward on registration, login and profile updates.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, TypeAdapter, ValidationError, field_validator

from .base import CamelModel

BCRYPT_MAX_BYTES = 72

_email_adapter = TypeAdapter(EmailStr)


def check_password_bytes(value: Optional[str]) -> Optional[str]:
    """bcrypt only uses the first 72 bytes of a password, so longer ones are refused."""
    if value is not None and len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


class UserRead(CamelModel):
    """Public view of an account."""

    id: int
    username: str
    email: str
    is_admin: bool = False


class UserDetail(UserRead):
    """Account view for admin listings, with timestamps."""

    created_at: datetime
    updated_at: datetime


class UserSummary(CamelModel):
    """Reference to the account that owns an order."""

    id: int
    username: str
    email: Optional[str] = None


class UserRegister(CamelModel):
    """Registration payload."""

    username: str = Field(default="", max_length=128)
    email: str = Field(default="", max_length=255)
    password: str = Field(default="", max_length=72)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        # Blank is left to the endpoint, which reports every missing input at once
        if not value.strip():
            return value
        try:
            return _email_adapter.validate_python(value.strip())
        except ValidationError:
            raise ValueError("value is not a valid email address")

    @field_validator("password")
    @classmethod
    def _check_password(cls, value):
        return check_password_bytes(value)


class UserLogin(CamelModel):
    """Login payload."""

    email: str
    password: str = Field(max_length=72)


class ProfileUpdate(CamelModel):
    """Self-service profile update. Omitted fields are left unchanged."""

    username: Optional[str] = Field(default=None, min_length=1, max_length=128)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=1, max_length=72)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value):
        return check_password_bytes(value)


class UserAdminUpdate(CamelModel):
    """Admin update of another account. Omitted fields are left unchanged."""

    username: Optional[str] = Field(default=None, min_length=1, max_length=128)
    email: Optional[EmailStr] = None
    is_admin: Optional[bool] = None
