"""
User entity models.

This module contains the database entity for store accounts. A user is
either a customer or an administrator (``is_admin``); the password is only
ever stored as a bcrypt hash.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field

from ..base import Base, utc_now


class UserBase(Base):
    """Base fields for user entity."""

    username: str = Field(max_length=128, description="Display name")
    email: str = Field(max_length=255, unique=True, index=True, description="Login email, unique")
    is_admin: bool = Field(default=False, description="Whether the user can manage the store")


class User(UserBase, table=True):
    """Entity for store accounts.

    Table: users
    """

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    password: str = Field(max_length=128, description="bcrypt password hash")

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True), index=True)
    updated_at: datetime = Field(
        default_factory=utc_now, sa_type=DateTime(timezone=True), sa_column_kwargs={"onupdate": utc_now}
    )

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, is_admin={self.is_admin})"
