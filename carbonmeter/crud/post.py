"""
Community post and like CRUD operations.
"""
from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carbonmeter.crud.base import CRUDBase
from carbonmeter.models.post import CommunityPost, PostLike
from carbonmeter.schemas.community import PostCreate


class CRUDPost(CRUDBase[CommunityPost, PostCreate, PostCreate]):

    async def get_with_author(
        self, db: AsyncSession, post_id: uuid.UUID
    ) -> CommunityPost | None:
        result = await db.execute(
            select(CommunityPost)
            .options(selectinload(CommunityPost.author))
            .where(CommunityPost.id == post_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_post(
        self,
        db: AsyncSession,
        *,
        obj_in: PostCreate,
        user_id: uuid.UUID,
    ) -> CommunityPost:
        post = CommunityPost(
            user_id=user_id,
            title=obj_in.title,
            content=obj_in.content,
            type=obj_in.type,
            likes=0,
            comments_count=0,
        )
        db.add(post)
        await db.flush()
        await db.refresh(post)
        return post

    async def list_posts(
        self,
        db: AsyncSession,
        *,
        post_type: str | None = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[CommunityPost], int]:
        query = select(CommunityPost).options(selectinload(CommunityPost.author))
        count_query = select(func.count()).select_from(CommunityPost)

        if post_type is not None:
            query = query.where(CommunityPost.type == post_type)
            count_query = count_query.where(CommunityPost.type == post_type)

        total_result = await db.execute(count_query)
        total = total_result.scalar_one()

        result = await db.execute(
            query.order_by(CommunityPost.created_at.desc(), CommunityPost.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def get_like(
        self, db: AsyncSession, *, post_id: uuid.UUID, user_id: uuid.UUID
    ) -> PostLike | None:
        result = await db.execute(
            select(PostLike).where(
                PostLike.post_id == post_id,
                PostLike.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_like(
        self, db: AsyncSession, *, post: CommunityPost, user_id: uuid.UUID
    ) -> CommunityPost:
        db.add(PostLike(post_id=post.id, user_id=user_id))
        post.likes = (post.likes or 0) + 1
        db.add(post)
        await db.flush()
        return post

    async def remove_like(
        self, db: AsyncSession, *, post: CommunityPost, like: PostLike
    ) -> CommunityPost:
        await db.delete(like)
        post.likes = max((post.likes or 0) - 1, 0)
        db.add(post)
        await db.flush()
        return post


crud_post = CRUDPost(CommunityPost)
