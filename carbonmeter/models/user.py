"""
User ORM model.
Stores profile data, the monthly carbon target and reduction goals.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Index, Numeric, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carbonmeter.db.base import Base, JSONType

DEFAULT_MONTHLY_TARGET = 4.5

DEFAULT_GOALS: dict[str, float] = {
    "carbon_reduction": 30,
    "transport_reduction": 25,
    "renewable_energy": 80,
}


def _default_goals() -> dict[str, Any]:
    return dict(DEFAULT_GOALS)


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    # Tons CO2e per month
    monthly_target: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False),
        nullable=False,
        default=DEFAULT_MONTHLY_TARGET,
        server_default=str(DEFAULT_MONTHLY_TARGET),
    )
    goals: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=_default_goals,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    activities: Mapped[list["Activity"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "Activity",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    sessions: Mapped[list["UserSession"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    posts: Mapped[list["CommunityPost"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "CommunityPost",
        back_populates="author",
        cascade="all, delete-orphan",
    )
    post_comments: Mapped[list["PostComment"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "PostComment",
        back_populates="author",
        cascade="all, delete-orphan",
    )
    post_likes: Mapped[list["PostLike"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "PostLike",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    challenge_participations: Mapped[list["ChallengeParticipant"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "ChallengeParticipant",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("ix_users_email", "email"),)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
