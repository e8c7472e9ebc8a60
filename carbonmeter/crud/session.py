"""
UserSession CRUD operations.
Sessions are looked up by token hash; the raw token never reaches the DB.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carbonmeter.models.session import UserSession


class CRUDSession:

    async def create_session(
        self,
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        token_hash: str,
        expires_at: datetime,
    ) -> UserSession:
        session = UserSession(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
        )
        db.add(session)
        await db.flush()
        return session

    async def get_by_token_hash(
        self, db: AsyncSession, token_hash: str
    ) -> UserSession | None:
        """Fetch a session with its user eagerly loaded."""
        result = await db.execute(
            select(UserSession)
            .options(selectinload(UserSession.user))
            .where(UserSession.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def remove(self, db: AsyncSession, *, session: UserSession) -> None:
        await db.delete(session)
        await db.flush()

    async def remove_by_token_hash(self, db: AsyncSession, token_hash: str) -> int:
        result = await db.execute(
            delete(UserSession).where(UserSession.token_hash == token_hash)
        )
        await db.flush()
        return result.rowcount or 0

    async def purge_expired(
        self, db: AsyncSession, *, user_id: uuid.UUID, now: datetime
    ) -> int:
        """Delete a user's sessions that expired before ``now``."""
        result = await db.execute(
            delete(UserSession).where(
                UserSession.user_id == user_id,
                UserSession.expires_at <= now,
            )
        )
        await db.flush()
        return result.rowcount or 0


crud_session = CRUDSession()
