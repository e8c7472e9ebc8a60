"""
PostComment ORM model.
Users can comment on community posts.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carbonmeter.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostComment(Base):
    __tablename__ = "post_comments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("community_posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    post: Mapped["CommunityPost"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "CommunityPost",
        back_populates="comments",
    )
    author: Mapped["User"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "User",
        back_populates="post_comments",
    )

    __table_args__ = (
        Index("ix_post_comments_post_id", "post_id"),
        Index("ix_post_comments_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<PostComment id={self.id} post_id={self.post_id}>"
