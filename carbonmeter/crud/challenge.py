"""
Challenge CRUD operations.
"""
from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carbonmeter.crud.base import CRUDBase
from carbonmeter.models.challenge import Challenge, ChallengeParticipant
from carbonmeter.schemas.community import ChallengeCreate


class CRUDChallenge(CRUDBase[Challenge, ChallengeCreate, ChallengeCreate]):

    async def create_challenge(
        self,
        db: AsyncSession,
        *,
        obj_in: ChallengeCreate,
        created_by: uuid.UUID,
    ) -> Challenge:
        challenge = Challenge(
            title=obj_in.title,
            description=obj_in.description,
            target_reduction=obj_in.target_reduction,
            category=obj_in.category,
            start_date=obj_in.start_date,
            end_date=obj_in.end_date,
            created_by=created_by,
        )
        db.add(challenge)
        await db.flush()
        await db.refresh(challenge)
        return challenge

    async def list_challenges(
        self,
        db: AsyncSession,
        *,
        active_at: datetime | None = None,
    ) -> list[tuple[Challenge, int]]:
        """
        Return (challenge, participant count) pairs, newest first.
        If active_at is given, only challenges whose window contains it.
        """
        participants = (
            select(
                ChallengeParticipant.challenge_id,
                func.count().label("participant_count"),
            )
            .group_by(ChallengeParticipant.challenge_id)
            .subquery()
        )
        query = select(
            Challenge, func.coalesce(participants.c.participant_count, 0)
        ).outerjoin(participants, participants.c.challenge_id == Challenge.id)

        if active_at is not None:
            query = query.where(
                Challenge.start_date <= active_at,
                Challenge.end_date >= active_at,
            )

        result = await db.execute(
            query.order_by(Challenge.created_at.desc(), Challenge.start_date.desc())
        )
        return [(row[0], int(row[1])) for row in result.all()]

    async def get_participant(
        self, db: AsyncSession, *, challenge_id: uuid.UUID, user_id: uuid.UUID
    ) -> ChallengeParticipant | None:
        result = await db.execute(
            select(ChallengeParticipant).where(
                ChallengeParticipant.challenge_id == challenge_id,
                ChallengeParticipant.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_participant(
        self, db: AsyncSession, *, challenge_id: uuid.UUID, user_id: uuid.UUID
    ) -> ChallengeParticipant:
        participant = ChallengeParticipant(
            challenge_id=challenge_id, user_id=user_id, progress=0
        )
        db.add(participant)
        await db.flush()
        return participant


crud_challenge = CRUDChallenge(Challenge)
