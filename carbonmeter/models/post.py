"""
CommunityPost and PostLike ORM models.
Posts carry denormalized like/comment counters; PostLike records who liked what.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carbonmeter.db.base import Base

POST_TYPES = ("achievement", "tip", "question", "challenge")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommunityPost(Base):
    __tablename__ = "community_posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(
        Enum(*POST_TYPES, name="post_type_enum"),
        nullable=False,
    )
    likes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    comments_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    author: Mapped["User"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "User",
        back_populates="posts",
    )
    comments: Mapped[list["PostComment"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "PostComment",
        back_populates="post",
        cascade="all, delete-orphan",
    )
    post_likes: Mapped[list["PostLike"]] = relationship(
        "PostLike",
        back_populates="post",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("likes >= 0", name="likes_non_negative"),
        CheckConstraint("comments_count >= 0", name="comments_count_non_negative"),
        Index("ix_community_posts_created_at", "created_at"),
        Index("ix_community_posts_type", "type"),
    )

    def __repr__(self) -> str:
        return f"<CommunityPost id={self.id} type={self.type!r} title={self.title!r}>"


class PostLike(Base):
    __tablename__ = "post_likes"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("community_posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    post: Mapped["CommunityPost"] = relationship("CommunityPost", back_populates="post_likes")
    user: Mapped["User"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "User",
        back_populates="post_likes",
    )

    def __repr__(self) -> str:
        return f"<PostLike post_id={self.post_id} user_id={self.user_id}>"
