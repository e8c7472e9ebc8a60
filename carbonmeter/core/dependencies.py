"""
FastAPI dependency injection functions.
Provides get_db, bearer_token, and get_current_user.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from carbonmeter.core.exceptions import UnauthorizedException
from carbonmeter.db.session import get_db
from carbonmeter.models.user import User
from carbonmeter.services.auth_service import auth_service

# Re-export get_db so routes can import from one place
__all__ = ["get_db", "bearer_token", "get_current_user", "DBSession", "CurrentUser", "BearerToken"]

bearer_scheme = HTTPBearer(auto_error=False)


async def bearer_token(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> str:
    """Return the raw token from ``Authorization: Bearer <token>``."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedException("Missing authentication token")
    return credentials.credentials


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    token: Annotated[str, Depends(bearer_token)],
) -> User:
    """
    Resolve the session token to the authenticated User.
    Unknown and expired tokens are both a 401.
    """
    return await auth_service.authenticate(db, token=token)


# Convenience type aliases for route signatures
DBSession = Annotated[AsyncSession, Depends(get_db)]
BearerToken = Annotated[str, Depends(bearer_token)]
CurrentUser = Annotated[User, Depends(get_current_user)]
