"""
Post comment CRUD operations.
"""
from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carbonmeter.models.comment import PostComment
from carbonmeter.models.post import CommunityPost


class CRUDComment:

    async def create_comment(
        self,
        db: AsyncSession,
        *,
        content: str,
        post: CommunityPost,
        user_id: uuid.UUID,
    ) -> PostComment:
        comment = PostComment(content=content, post_id=post.id, user_id=user_id)
        db.add(comment)
        post.comments_count = (post.comments_count or 0) + 1
        db.add(post)
        await db.flush()
        await db.refresh(comment)
        return comment

    async def list_by_post(
        self,
        db: AsyncSession,
        *,
        post_id: uuid.UUID,
        skip: int = 0,
        limit: int = 20,
    ) -> list[PostComment]:
        result = await db.execute(
            select(PostComment)
            .options(selectinload(PostComment.author))
            .where(PostComment.post_id == post_id)
            .order_by(PostComment.created_at.asc(), PostComment.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_with_author(
        self, db: AsyncSession, comment_id: uuid.UUID
    ) -> PostComment | None:
        result = await db.execute(
            select(PostComment)
            .options(selectinload(PostComment.author))
            .where(PostComment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


crud_comment = CRUDComment()
