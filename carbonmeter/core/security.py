"""
Security utilities: opaque session tokens and HTTP security headers.
Only a SHA-256 digest of each session token is ever persisted.
"""
from __future__ import annotations

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from carbonmeter.core.config import settings


# ── Session tokens ────────────────────────────────────────────────────────────

def generate_session_token() -> str:
    """Return a new URL-safe random bearer token."""
    return secrets.token_urlsafe(settings.SESSION_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Return a SHA-256 hex digest of a token for safe DB storage."""
    return hashlib.sha256(token.encode()).hexdigest()


def session_expiry(now: datetime | None = None) -> datetime:
    """Expiry instant for a session created at ``now``."""
    now = now or datetime.now(timezone.utc)
    return now + timedelta(days=settings.SESSION_EXPIRE_DAYS)


# ── Security headers ──────────────────────────────────────────────────────────

SECURITY_HEADERS: dict[str, str] = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "img-src 'self' data: https:; "
        "object-src 'none'; "
        "frame-ancestors 'none'"
    ),
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach the standard hardening headers to every response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response
