"""
Community business logic: posts, likes, comments, challenges, leaderboard.
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from carbonmeter.core.exceptions import BadRequestException, NotFoundException
from carbonmeter.crud.activity import crud_activity
from carbonmeter.crud.challenge import crud_challenge
from carbonmeter.crud.comment import crud_comment
from carbonmeter.crud.post import crud_post
from carbonmeter.models.comment import PostComment
from carbonmeter.models.post import CommunityPost
from carbonmeter.models.user import User
from carbonmeter.schemas.community import (
    ChallengeCreate,
    ChallengeRead,
    LeaderboardEntry,
    LeaderboardResponse,
    LikeToggleResponse,
    PostCreate,
)
from carbonmeter.schemas.pagination import Pagination
from carbonmeter.services.analytics_service import period_start
from carbonmeter.utils.dates import utcnow

logger = logging.getLogger(__name__)

LEADERBOARD_SIZE = 10


class CommunityService:

    # ── Posts ────────────────────────────────────────────────────────────────

    async def list_posts(
        self,
        db: AsyncSession,
        *,
        page: int,
        limit: int,
        post_type: str | None = None,
    ) -> tuple[list[CommunityPost], Pagination]:
        posts, total = await crud_post.list_posts(
            db, post_type=post_type, skip=(page - 1) * limit, limit=limit
        )
        return posts, Pagination(page=page, limit=limit, total=total)

    async def create_post(
        self,
        db: AsyncSession,
        *,
        post_in: PostCreate,
        current_user: User,
    ) -> CommunityPost:
        post = await crud_post.create_post(db, obj_in=post_in, user_id=current_user.id)
        logger.info("Post created: id=%s user_id=%s type=%s", post.id, current_user.id, post.type)
        return await self._get_post(db, post.id)

    async def _get_post(self, db: AsyncSession, post_id: uuid.UUID) -> CommunityPost:
        post = await crud_post.get_with_author(db, post_id)
        if post is None:
            raise NotFoundException("Post", str(post_id))
        return post

    async def toggle_like(
        self,
        db: AsyncSession,
        *,
        post_id: uuid.UUID,
        current_user: User,
    ) -> LikeToggleResponse:
        """Like the post, or take the like back if the user already liked it."""
        post = await self._get_post(db, post_id)
        like = await crud_post.get_like(db, post_id=post.id, user_id=current_user.id)

        if like is None:
            post = await crud_post.add_like(db, post=post, user_id=current_user.id)
            return LikeToggleResponse(liked=True, likes=post.likes, message="Post liked")

        post = await crud_post.remove_like(db, post=post, like=like)
        return LikeToggleResponse(liked=False, likes=post.likes, message="Post unliked")

    # ── Comments ─────────────────────────────────────────────────────────────

    async def list_comments(
        self,
        db: AsyncSession,
        *,
        post_id: uuid.UUID,
        page: int,
        limit: int,
    ) -> list[PostComment]:
        await self._get_post(db, post_id)
        return await crud_comment.list_by_post(
            db, post_id=post_id, skip=(page - 1) * limit, limit=limit
        )

    async def add_comment(
        self,
        db: AsyncSession,
        *,
        post_id: uuid.UUID,
        content: str,
        current_user: User,
    ) -> PostComment:
        post = await self._get_post(db, post_id)
        comment = await crud_comment.create_comment(
            db, content=content, post=post, user_id=current_user.id
        )
        logger.info("Comment added: post_id=%s user_id=%s", post_id, current_user.id)
        loaded = await crud_comment.get_with_author(db, comment.id)
        return loaded if loaded is not None else comment

    # ── Challenges ───────────────────────────────────────────────────────────

    async def list_challenges(
        self, db: AsyncSession, *, status: str = "active"
    ) -> list[ChallengeRead]:
        active_at = utcnow() if status == "active" else None
        rows = await crud_challenge.list_challenges(db, active_at=active_at)
        return [
            ChallengeRead.model_validate(challenge).model_copy(
                update={"participant_count": count}
            )
            for challenge, count in rows
        ]

    async def create_challenge(
        self,
        db: AsyncSession,
        *,
        challenge_in: ChallengeCreate,
        current_user: User,
    ) -> ChallengeRead:
        challenge = await crud_challenge.create_challenge(
            db, obj_in=challenge_in, created_by=current_user.id
        )
        logger.info("Challenge created: id=%s user_id=%s", challenge.id, current_user.id)
        return ChallengeRead.model_validate(challenge)

    async def join_challenge(
        self,
        db: AsyncSession,
        *,
        challenge_id: uuid.UUID,
        current_user: User,
    ) -> None:
        challenge = await crud_challenge.get(db, challenge_id)
        if challenge is None:
            raise NotFoundException("Challenge", str(challenge_id))

        existing = await crud_challenge.get_participant(
            db, challenge_id=challenge.id, user_id=current_user.id
        )
        if existing is not None:
            raise BadRequestException("Already participating in this challenge")

        await crud_challenge.add_participant(
            db, challenge_id=challenge.id, user_id=current_user.id
        )
        logger.info("Challenge joined: id=%s user_id=%s", challenge.id, current_user.id)

    # ── Leaderboard ──────────────────────────────────────────────────────────

    async def leaderboard(
        self,
        db: AsyncSession,
        *,
        period: str = "month",
        category: str = "overall",
    ) -> LeaderboardResponse:
        """Lowest footprint first among users with activity in the period."""
        now = utcnow()
        rows = await crud_activity.leaderboard(
            db,
            since=period_start(period, now),
            until=now,
            activity_type=None if category == "overall" else category,
            limit=LEADERBOARD_SIZE,
        )
        entries = [
            LeaderboardEntry(
                rank=rank,
                user_id=user_id,
                name=name,
                total_footprint=total,
                activity_count=count,
            )
            for rank, (user_id, name, total, count) in enumerate(rows, start=1)
        ]
        return LeaderboardResponse(leaderboard=entries, period=period, category=category)


community_service = CommunityService()
