"""
Shared slowapi limiter.
The counter store is chosen by RATE_LIMIT_STORAGE_URI: ``memory://`` for a
single instance, ``redis://...`` or ``memcached://...`` when several
instances must share counters.
"""
from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from carbonmeter.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)
