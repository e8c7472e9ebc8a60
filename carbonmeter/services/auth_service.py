"""
Authentication service.
Handles registration, email login, session lookup, logout, and profile edits.
Business logic lives here; routes only call these methods.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from carbonmeter.core.exceptions import (
    BadRequestException,
    InvalidSessionException,
    NotFoundException,
)
from carbonmeter.core.security import generate_session_token, hash_token, session_expiry
from carbonmeter.crud.session import crud_session
from carbonmeter.crud.user import crud_user
from carbonmeter.models.user import User
from carbonmeter.schemas.user import LoginRequest, ProfileUpdate, RegisterRequest
from carbonmeter.utils.dates import ensure_utc, utcnow

logger = logging.getLogger(__name__)


class AuthService:

    async def _open_session(self, db: AsyncSession, *, user: User) -> str:
        """Persist a new session for ``user`` and return the raw bearer token."""
        token = generate_session_token()
        await crud_session.create_session(
            db,
            user_id=user.id,
            token_hash=hash_token(token),
            expires_at=session_expiry(),
        )
        return token

    async def register_user(
        self, db: AsyncSession, *, user_in: RegisterRequest
    ) -> tuple[User, str]:
        """
        Register a new user and log them straight in.
        Emails are unique case-insensitively.
        """
        email = user_in.email.lower()
        if await crud_user.exists(db, email=email):
            raise BadRequestException("User already exists")

        user = await crud_user.create_user(
            db,
            name=user_in.name,
            email=email,
            monthly_target=user_in.monthly_target,
            last_login=utcnow(),
        )
        token = await self._open_session(db, user=user)

        logger.info("User registered: id=%s", user.id)
        return user, token

    async def login(
        self, db: AsyncSession, *, login_in: LoginRequest
    ) -> tuple[User, str]:
        """
        Email-only login: issue a fresh session for an existing account.
        The user's expired sessions are purged on the way.
        """
        user = await crud_user.get_by_email(db, login_in.email.lower())
        if user is None:
            raise NotFoundException("User")

        now = utcnow()
        purged = await crud_session.purge_expired(db, user_id=user.id, now=now)
        user = await crud_user.touch_last_login(db, user=user, when=now)
        token = await self._open_session(db, user=user)

        logger.info("User logged in: id=%s purged_sessions=%d", user.id, purged)
        return user, token

    async def authenticate(self, db: AsyncSession, *, token: str) -> User:
        """
        Resolve a bearer token to its user.
        An expired session row is deleted and committed before the 401, so
        the removal survives the request's rollback.
        """
        session = await crud_session.get_by_token_hash(db, hash_token(token))
        if session is None:
            raise InvalidSessionException()

        if ensure_utc(session.expires_at) <= utcnow():
            user_id = session.user_id
            await crud_session.remove(db, session=session)
            await db.commit()
            logger.info("Expired session removed: user_id=%s", user_id)
            raise InvalidSessionException()

        return session.user

    async def logout(self, db: AsyncSession, *, token: str, user: User) -> None:
        """Delete the session behind ``token``."""
        await crud_session.remove_by_token_hash(db, hash_token(token))
        logger.info("User logged out: id=%s", user.id)

    async def update_profile(
        self, db: AsyncSession, *, user: User, profile_in: ProfileUpdate
    ) -> User:
        user = await crud_user.update_profile(db, user=user, profile_in=profile_in)
        logger.info(
            "Profile updated: id=%s fields=%s",
            user.id,
            sorted(profile_in.model_fields_set),
        )
        return user


auth_service = AuthService()
