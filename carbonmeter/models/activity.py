"""
Activity ORM model.
One logged user action with its precomputed CO2-equivalent impact.
Category-specific inputs live in the ``details`` JSON bag, whose shape is
selected by ``type`` and validated at the schema layer.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carbonmeter.db.base import Base, JSONType

ACTIVITY_TYPES = ("transport", "energy", "food", "shopping")
DEFAULT_UNIT = "kg CO₂"
# Largest value the Numeric(10, 2) impact column holds
MAX_IMPACT = 99_999_999.99


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Activity(Base):
    __tablename__ = "activities"

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
    type: Mapped[str] = mapped_column(
        Enum(*ACTIVITY_TYPES, name="activity_type_enum"),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    impact: Mapped[float] = mapped_column(
        Numeric(10, 2, asdecimal=False),
        nullable=False,
    )
    unit: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=DEFAULT_UNIT,
        server_default=DEFAULT_UNIT,
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
    )
    # Client-side default keeps sub-second ordering for "recent" queries
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    user: Mapped["User"] = relationship(  # type: ignore[name-defined]  # noqa: F821
        "User",
        back_populates="activities",
    )

    __table_args__ = (
        CheckConstraint("impact >= 0", name="impact_non_negative"),
        Index("ix_activities_user_id_date", "user_id", "date"),
        Index("ix_activities_user_id_created_at", "user_id", "created_at"),
        Index("ix_activities_user_id_type", "user_id", "type"),
    )

    def __repr__(self) -> str:
        return (
            f"<Activity id={self.id} user_id={self.user_id} "
            f"type={self.type!r} impact={self.impact}>"
        )
