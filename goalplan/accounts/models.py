"""Account contracts — Pydantic v2 models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Account(BaseModel):
    id: str
    username: str
    email: str | None = None
    full_name: str | None = None
    phone: str | None = None
    password_hash: str
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    member_id: str | None = None
    membership_tier: str = "free"
    last_member_sync_at: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def display_name(self) -> str:
        return self.full_name or self.username


class AccountRead(BaseModel):
    """Public view of an account (no credentials or lockout state)."""

    id: str
    username: str
    email: str | None = None
    full_name: str | None = None
    phone: str | None = None
    member_id: str | None = None
    membership_tier: str = "free"
    last_login_at: datetime | None = None
    last_member_sync_at: datetime | None = None
    created_at: datetime


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    password: str = Field(min_length=8, max_length=72)
    email: str | None = Field(default=None, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    full_name: str | None = None


class LoginRequest(BaseModel):
    identifier: str = Field(min_length=1)  # username or email
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account: AccountRead
