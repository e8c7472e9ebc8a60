"""
Activity CRUD operations.
Every query carries the owner filter, so a foreign id behaves exactly like a
missing one.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carbonmeter.crud.base import CRUDBase
from carbonmeter.models.activity import Activity
from carbonmeter.models.user import User
from carbonmeter.schemas.activity import ActivityCreate, ActivityFilter, ActivityUpdate

RECENT_LIMIT = 10


class CRUDActivity(CRUDBase[Activity, ActivityCreate, ActivityUpdate]):

    async def get_for_user(
        self, db: AsyncSession, *, activity_id: uuid.UUID, user_id: uuid.UUID
    ) -> Activity | None:
        result = await db.execute(
            select(Activity).where(
                Activity.id == activity_id,
                Activity.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def create_activity(
        self,
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        type: str,
        description: str,
        impact: float,
        unit: str,
        date: datetime,
        category: str,
        details: dict[str, Any],
    ) -> Activity:
        activity = Activity(
            user_id=user_id,
            type=type,
            description=description,
            impact=impact,
            unit=unit,
            date=date,
            category=category,
            details=details,
        )
        db.add(activity)
        await db.flush()
        await db.refresh(activity)
        return activity

    async def list_with_filters(
        self,
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        filters: ActivityFilter,
    ) -> tuple[list[Activity], int]:
        """
        Return (activities, total) for one user.
        Ordered by activity date, newest first; ``total`` ignores the
        limit/offset window.
        """
        conditions = [Activity.user_id == user_id]
        if filters.type is not None:
            conditions.append(Activity.type == filters.type)
        if filters.start_date is not None:
            conditions.append(Activity.date >= filters.start_date)
        if filters.end_date is not None:
            conditions.append(Activity.date <= filters.end_date)

        count_query = select(func.count()).select_from(Activity).where(*conditions)
        total_result = await db.execute(count_query)
        total = total_result.scalar_one()

        # id breaks ties so pages never overlap
        query = (
            select(Activity)
            .where(*conditions)
            .order_by(Activity.date.desc(), Activity.id.desc())
            .offset(filters.offset)
        )
        if filters.limit is not None:
            query = query.limit(filters.limit)

        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def list_recent(
        self, db: AsyncSession, *, user_id: uuid.UUID, limit: int = RECENT_LIMIT
    ) -> list[Activity]:
        """Most recently logged activities, by creation time."""
        result = await db.execute(
            select(Activity)
            .where(Activity.user_id == user_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_since(
        self,
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[Activity]:
        """Activities dated inside the inclusive [since, until] window, oldest first."""
        query = select(Activity).where(Activity.user_id == user_id)
        if since is not None:
            query = query.where(Activity.date >= since)
        if until is not None:
            query = query.where(Activity.date <= until)
        result = await db.execute(query.order_by(Activity.date.asc()))
        return list(result.scalars().all())

    async def remove_for_user(
        self, db: AsyncSession, *, activity: Activity
    ) -> None:
        await db.delete(activity)
        await db.flush()

    async def bulk_remove(
        self, db: AsyncSession, *, ids: list[uuid.UUID], user_id: uuid.UUID
    ) -> int:
        """Delete the owned subset of ``ids``; foreign or unknown ids are ignored."""
        if not ids:
            return 0
        result = await db.execute(
            delete(Activity).where(
                Activity.id.in_(ids),
                Activity.user_id == user_id,
            )
        )
        await db.flush()
        return result.rowcount or 0

    async def leaderboard(
        self,
        db: AsyncSession,
        *,
        since: datetime,
        until: datetime,
        activity_type: str | None = None,
        limit: int = 10,
    ) -> list[tuple[uuid.UUID, str, float, int]]:
        """(user_id, name, total impact, activity count) ordered by lowest total first."""
        total = func.coalesce(func.sum(Activity.impact), 0)
        query = (
            select(User.id, User.name, total.label("total"), func.count(Activity.id))
            .join(Activity, Activity.user_id == User.id)
            .where(Activity.date >= since, Activity.date <= until)
            .group_by(User.id, User.name)
            .order_by(total.asc(), User.name, User.id)
            .limit(limit)
        )
        if activity_type is not None:
            query = query.where(Activity.type == activity_type)
        result = await db.execute(query)
        return [
            (row[0], row[1], round(float(row[2] or 0), 2), int(row[3]))
            for row in result.all()
        ]


crud_activity = CRUDActivity(Activity)
