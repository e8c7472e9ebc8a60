"""
Aggregates all v1 API routers into a single APIRouter.
"""
from __future__ import annotations

from fastapi import APIRouter

from carbonmeter.api.v1 import activities, auth, community, emission_factors

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(activities.router)
api_router.include_router(emission_factors.router)
api_router.include_router(community.router)
