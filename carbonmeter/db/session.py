"""
Async SQLAlchemy engine and session factory.
Provides get_db dependency for FastAPI route injection.
"""
from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from carbonmeter.core.config import settings

# ── Engine ────────────────────────────────────────────────────────────────────
_engine_options: dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
if not settings.is_sqlite:
    _engine_options.update(pool_size=10, max_overflow=20, pool_recycle=3600)

engine = create_async_engine(settings.DATABASE_URL, **_engine_options)

# ── Session factory ───────────────────────────────────────────────────────────
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.
    The session is automatically closed after the request completes.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
