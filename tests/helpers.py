"""
Request helpers shared by the endpoint tests.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from httpx import AsyncClient


async def register(
    client: AsyncClient, email: str, name: str = "Test User", **extra: Any
) -> dict[str, Any]:
    response = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def days_ago(days: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


async def log_activity(
    client: AsyncClient, headers: dict[str, str], **payload: Any
) -> dict[str, Any]:
    payload.setdefault("date", days_ago(0))
    response = await client.post("/api/activities", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["activity"]
