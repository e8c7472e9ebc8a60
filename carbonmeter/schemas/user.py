"""
User Pydantic schemas.
Covers registration, login, profile reads/updates, and session responses.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from carbonmeter.models.user import DEFAULT_GOALS, DEFAULT_MONTHLY_TARGET
from carbonmeter.schemas.base import CamelModel
from carbonmeter.utils.dates import ensure_utc


# ── Goals ─────────────────────────────────────────────────────────────────────

class Goals(CamelModel):
    carbon_reduction: float = Field(default=DEFAULT_GOALS["carbon_reduction"], ge=0, le=100)
    transport_reduction: float = Field(default=DEFAULT_GOALS["transport_reduction"], ge=0, le=100)
    renewable_energy: float = Field(default=DEFAULT_GOALS["renewable_energy"], ge=0, le=100)


class GoalsUpdate(CamelModel):
    carbon_reduction: float | None = Field(default=None, ge=0, le=100)
    transport_reduction: float | None = Field(default=None, ge=0, le=100)
    renewable_energy: float | None = Field(default=None, ge=0, le=100)


# ── Create ────────────────────────────────────────────────────────────────────

class RegisterRequest(CamelModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    monthly_target: float = Field(default=DEFAULT_MONTHLY_TARGET, ge=0.1, le=50)


class LoginRequest(CamelModel):
    email: EmailStr


# ── Update ────────────────────────────────────────────────────────────────────

class ProfileUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=2, max_length=100)
    monthly_target: float | None = Field(default=None, ge=0.1, le=50)
    goals: GoalsUpdate | None = None


# ── Read ──────────────────────────────────────────────────────────────────────

class UserRead(CamelModel):
    id: uuid.UUID
    name: str
    email: EmailStr
    monthly_target: float
    goals: Goals
    created_at: datetime
    last_login: datetime | None = None

    @field_validator("created_at", "last_login")
    @classmethod
    def normalize_timestamps(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None


class UserResponse(CamelModel):
    user: UserRead


class AuthResponse(CamelModel):
    user: UserRead
    session_token: str
