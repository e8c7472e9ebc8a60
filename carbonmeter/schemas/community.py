"""
Community Pydantic schemas: posts, comments, likes, challenges, leaderboard.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator, model_validator

from carbonmeter.schemas.activity import ActivityType
from carbonmeter.schemas.base import CamelModel
from carbonmeter.schemas.pagination import Pagination
from carbonmeter.utils.dates import ensure_utc

PostType = Literal["achievement", "tip", "question", "challenge"]
LeaderboardCategory = Literal["overall", "transport", "energy", "food", "shopping"]


class Author(CamelModel):
    """Minimal public profile safe to expose next to community content."""

    id: uuid.UUID
    name: str


# ── Posts ─────────────────────────────────────────────────────────────────────

class PostCreate(CamelModel):
    title: str = Field(min_length=5, max_length=200)
    content: str = Field(min_length=10, max_length=10000)
    type: PostType


class PostRead(CamelModel):
    id: uuid.UUID
    title: str
    content: str
    type: PostType
    likes: int
    comments_count: int
    created_at: datetime
    author: Author | None = None

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class PostResponse(CamelModel):
    post: PostRead


class PostListResponse(CamelModel):
    posts: list[PostRead]
    pagination: Pagination


class LikeToggleResponse(CamelModel):
    liked: bool
    likes: int
    message: str


# ── Comments ──────────────────────────────────────────────────────────────────

class CommentCreate(CamelModel):
    content: str = Field(min_length=1, max_length=5000)


class CommentRead(CamelModel):
    id: uuid.UUID
    post_id: uuid.UUID
    content: str
    created_at: datetime
    author: Author | None = None

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class CommentResponse(CamelModel):
    comment: CommentRead


class CommentListResponse(CamelModel):
    comments: list[CommentRead]


# ── Challenges ────────────────────────────────────────────────────────────────

class ChallengeCreate(CamelModel):
    title: str = Field(min_length=5, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    target_reduction: float = Field(gt=0)
    category: ActivityType | None = None
    start_date: datetime
    end_date: datetime

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode="after")
    def check_window(self) -> "ChallengeCreate":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class ChallengeRead(CamelModel):
    id: uuid.UUID
    title: str
    description: str | None
    target_reduction: float
    category: ActivityType | None
    start_date: datetime
    end_date: datetime
    participant_count: int = 0

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class ChallengeResponse(CamelModel):
    challenge: ChallengeRead


class ChallengeListResponse(CamelModel):
    challenges: list[ChallengeRead]


# ── Leaderboard ───────────────────────────────────────────────────────────────

class LeaderboardEntry(CamelModel):
    rank: int
    user_id: uuid.UUID
    name: str
    total_footprint: float
    activity_count: int


class LeaderboardResponse(CamelModel):
    leaderboard: list[LeaderboardEntry]
    period: str
    category: str
