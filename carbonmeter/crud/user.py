"""
User CRUD operations.
Extends CRUDBase with user-specific queries.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carbonmeter.crud.base import CRUDBase
from carbonmeter.models.user import DEFAULT_GOALS, User
from carbonmeter.schemas.user import ProfileUpdate, RegisterRequest


class CRUDUser(CRUDBase[User, RegisterRequest, ProfileUpdate]):

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        db: AsyncSession,
        *,
        name: str,
        email: str,
        monthly_target: float,
        last_login: datetime | None = None,
    ) -> User:
        user = User(
            name=name,
            email=email,
            monthly_target=monthly_target,
            goals=dict(DEFAULT_GOALS),
            last_login=last_login,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    async def touch_last_login(
        self, db: AsyncSession, *, user: User, when: datetime
    ) -> User:
        user.last_login = when
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    async def update_profile(
        self, db: AsyncSession, *, user: User, profile_in: ProfileUpdate
    ) -> User:
        """Apply a profile update. Goal sub-targets are merged, not replaced."""
        update_data = profile_in.model_dump(exclude_unset=True, exclude={"goals"})
        if profile_in.goals is not None:
            goals = {**DEFAULT_GOALS, **(user.goals or {})}
            goals.update(profile_in.goals.model_dump(exclude_none=True))
            # New dict so the JSON column registers as changed
            update_data["goals"] = goals
        return await self.update(db, db_obj=user, obj_in=update_data)


crud_user = CRUDUser(User)
