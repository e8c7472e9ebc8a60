"""
Authentication routes.
POST /auth/register, /auth/login, /auth/logout; GET /auth/user, /auth/me;
PUT /auth/profile
"""
from fastapi import APIRouter, Request, status

from carbonmeter.core.config import settings
from carbonmeter.core.dependencies import BearerToken, CurrentUser, DBSession
from carbonmeter.core.rate_limit import limiter
from carbonmeter.schemas.base import MessageResponse
from carbonmeter.schemas.user import (
    AuthResponse,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserRead,
    UserResponse,
)
from carbonmeter.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user and open a session",
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def register(
    request: Request,
    user_in: RegisterRequest,
    db: DBSession,
) -> AuthResponse:
    user, token = await auth_service.register_user(db, user_in=user_in)
    return AuthResponse(user=UserRead.model_validate(user), session_token=token)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in with an email address and receive a session token",
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: DBSession,
) -> AuthResponse:
    user, token = await auth_service.login(db, login_in=credentials)
    return AuthResponse(user=UserRead.model_validate(user), session_token=token)


@router.get(
    "/user",
    response_model=UserResponse,
    summary="Get the authenticated user's profile",
)
@router.get(
    "/me",
    response_model=UserResponse,
    include_in_schema=False,
)
async def get_user(current_user: CurrentUser) -> UserResponse:
    return UserResponse(user=UserRead.model_validate(current_user))


@router.put(
    "/profile",
    response_model=UserResponse,
    summary="Update name, monthly target or goals",
)
async def update_profile(
    profile_in: ProfileUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> UserResponse:
    user = await auth_service.update_profile(
        db, user=current_user, profile_in=profile_in
    )
    return UserResponse(user=UserRead.model_validate(user))


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="End the current session",
)
async def logout(
    token: BearerToken,
    current_user: CurrentUser,
    db: DBSession,
) -> MessageResponse:
    await auth_service.logout(db, token=token, user=current_user)
    return MessageResponse(message="Logged out successfully")
