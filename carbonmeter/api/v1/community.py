"""
Community routes.
Posts, likes, comments, challenges and the footprint leaderboard.
Reads are public; writes need a session.
"""
from __future__ import annotations

import uuid
from typing import Literal

from fastapi import APIRouter, Query, status

from carbonmeter.core.dependencies import CurrentUser, DBSession
from carbonmeter.schemas.analytics import Period
from carbonmeter.schemas.base import MessageResponse
from carbonmeter.schemas.community import (
    ChallengeCreate,
    ChallengeListResponse,
    ChallengeResponse,
    CommentCreate,
    CommentListResponse,
    CommentRead,
    CommentResponse,
    LeaderboardCategory,
    LeaderboardResponse,
    LikeToggleResponse,
    PostCreate,
    PostListResponse,
    PostRead,
    PostResponse,
    PostType,
)
from carbonmeter.services.community_service import community_service

router = APIRouter(prefix="/community", tags=["Community"])


# ── Posts ─────────────────────────────────────────────────────────────────────

@router.get(
    "/posts",
    response_model=PostListResponse,
    summary="List community posts, newest first",
)
async def list_posts(
    db: DBSession,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    type: PostType | None = Query(default=None),
) -> PostListResponse:
    posts, pagination = await community_service.list_posts(
        db, page=page, limit=limit, post_type=type
    )
    return PostListResponse(
        posts=[PostRead.model_validate(p) for p in posts],
        pagination=pagination,
    )


@router.post(
    "/posts",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a community post",
)
async def create_post(
    post_in: PostCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> PostResponse:
    post = await community_service.create_post(
        db, post_in=post_in, current_user=current_user
    )
    return PostResponse(post=PostRead.model_validate(post))


@router.post(
    "/posts/{post_id}/like",
    response_model=LikeToggleResponse,
    summary="Like or unlike a post",
)
async def toggle_like(
    post_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> LikeToggleResponse:
    return await community_service.toggle_like(
        db, post_id=post_id, current_user=current_user
    )


# ── Comments ──────────────────────────────────────────────────────────────────

@router.get(
    "/posts/{post_id}/comments",
    response_model=CommentListResponse,
    summary="List comments on a post, oldest first",
)
async def list_comments(
    post_id: uuid.UUID,
    db: DBSession,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> CommentListResponse:
    comments = await community_service.list_comments(
        db, post_id=post_id, page=page, limit=limit
    )
    return CommentListResponse(
        comments=[CommentRead.model_validate(c) for c in comments]
    )


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
)
async def add_comment(
    post_id: uuid.UUID,
    comment_in: CommentCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> CommentResponse:
    comment = await community_service.add_comment(
        db, post_id=post_id, content=comment_in.content, current_user=current_user
    )
    return CommentResponse(comment=CommentRead.model_validate(comment))


# ── Challenges ────────────────────────────────────────────────────────────────

@router.get(
    "/challenges",
    response_model=ChallengeListResponse,
    summary="List challenges; active ones by default",
)
async def list_challenges(
    db: DBSession,
    status_filter: Literal["active", "all"] = Query(default="active", alias="status"),
) -> ChallengeListResponse:
    challenges = await community_service.list_challenges(db, status=status_filter)
    return ChallengeListResponse(challenges=challenges)


@router.post(
    "/challenges",
    response_model=ChallengeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a challenge",
)
async def create_challenge(
    challenge_in: ChallengeCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> ChallengeResponse:
    challenge = await community_service.create_challenge(
        db, challenge_in=challenge_in, current_user=current_user
    )
    return ChallengeResponse(challenge=challenge)


@router.post(
    "/challenges/{challenge_id}/join",
    response_model=MessageResponse,
    summary="Join a challenge",
)
async def join_challenge(
    challenge_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> MessageResponse:
    await community_service.join_challenge(
        db, challenge_id=challenge_id, current_user=current_user
    )
    return MessageResponse(message="Successfully joined challenge")


# ── Leaderboard ───────────────────────────────────────────────────────────────

@router.get(
    "/leaderboard",
    response_model=LeaderboardResponse,
    summary="Users with the lowest footprint in the period",
)
async def leaderboard(
    db: DBSession,
    period: Period = Query(default="month"),
    category: LeaderboardCategory = Query(default="overall"),
) -> LeaderboardResponse:
    return await community_service.leaderboard(db, period=period, category=category)
