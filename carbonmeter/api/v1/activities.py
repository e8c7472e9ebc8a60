"""
Activity routes.
Ledger CRUD, filtering, bulk delete, analytics, stats and impact estimates.
Fixed paths are declared before /{activity_id} so they are not captured by it.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from carbonmeter.core.dependencies import CurrentUser, DBSession
from carbonmeter.schemas.activity import (
    ActivityCreate,
    ActivityFilter,
    ActivityListResponse,
    ActivityRead,
    ActivityResponse,
    ActivityType,
    ActivityUpdate,
    BulkDeleteRequest,
    BulkDeleteResponse,
    ImpactEstimate,
    ImpactEstimateRequest,
    RecentActivitiesResponse,
)
from carbonmeter.schemas.analytics import ActivityStats, AnalyticsResponse, Period
from carbonmeter.schemas.base import MessageResponse
from carbonmeter.services.activity_service import activity_service
from carbonmeter.services.analytics_service import analytics_service

router = APIRouter(prefix="/activities", tags=["Activities"])


def _activity_filter_params(
    type: ActivityType | None = Query(default=None),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    limit: int | None = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
) -> ActivityFilter:
    return ActivityFilter(
        type=type,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )


@router.get(
    "",
    response_model=ActivityListResponse,
    summary="List the current user's activities",
)
async def list_activities(
    current_user: CurrentUser,
    db: DBSession,
    filters: Annotated[ActivityFilter, Depends(_activity_filter_params)],
) -> ActivityListResponse:
    activities, total = await activity_service.list_activities(
        db, filters=filters, current_user=current_user
    )
    return ActivityListResponse(
        activities=[ActivityRead.model_validate(a) for a in activities],
        total=total,
    )


@router.post(
    "",
    response_model=ActivityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a new activity",
)
async def create_activity(
    activity_in: ActivityCreate,
    current_user: CurrentUser,
    db: DBSession,
) -> ActivityResponse:
    activity = await activity_service.create_activity(
        db, activity_in=activity_in, current_user=current_user
    )
    return ActivityResponse(activity=ActivityRead.model_validate(activity))


@router.delete(
    "",
    response_model=BulkDeleteResponse,
    summary="Delete several activities at once",
)
async def bulk_delete_activities(
    body: BulkDeleteRequest,
    current_user: CurrentUser,
    db: DBSession,
) -> BulkDeleteResponse:
    deleted = await activity_service.bulk_delete(
        db, activity_ids=body.activity_ids, current_user=current_user
    )
    return BulkDeleteResponse(
        message=f"{deleted} activities deleted successfully",
        deleted_count=deleted,
    )


@router.get(
    "/recent",
    response_model=RecentActivitiesResponse,
    summary="The ten most recently logged activities",
)
async def recent_activities(
    current_user: CurrentUser,
    db: DBSession,
) -> RecentActivitiesResponse:
    activities = await activity_service.recent_activities(db, current_user=current_user)
    return RecentActivitiesResponse(
        activities=[ActivityRead.model_validate(a) for a in activities]
    )


@router.get(
    "/analytics",
    response_model=AnalyticsResponse,
    summary="Footprint totals, category breakdown and six-month trend",
)
async def get_analytics(
    current_user: CurrentUser,
    db: DBSession,
    period: Period = Query(default="month"),
) -> AnalyticsResponse:
    return await analytics_service.get_analytics(
        db, period=period, current_user=current_user
    )


@router.get(
    "/stats",
    response_model=ActivityStats,
    summary="Efficiency metrics over the last 30 days",
)
async def get_stats(
    current_user: CurrentUser,
    db: DBSession,
) -> ActivityStats:
    return await analytics_service.get_stats(db, current_user=current_user)


@router.post(
    "/estimate",
    response_model=ImpactEstimate,
    summary="Compute an impact without saving the activity",
)
async def estimate_impact(
    estimate_in: ImpactEstimateRequest,
    current_user: CurrentUser,
) -> ImpactEstimate:
    return activity_service.estimate(estimate_in)


@router.get(
    "/{activity_id}",
    response_model=ActivityResponse,
    summary="Get an activity by ID",
)
async def get_activity(
    activity_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> ActivityResponse:
    activity = await activity_service.get_activity(
        db, activity_id=activity_id, current_user=current_user
    )
    return ActivityResponse(activity=ActivityRead.model_validate(activity))


@router.put(
    "/{activity_id}",
    response_model=ActivityResponse,
    summary="Update an activity",
)
async def update_activity(
    activity_id: uuid.UUID,
    activity_in: ActivityUpdate,
    current_user: CurrentUser,
    db: DBSession,
) -> ActivityResponse:
    activity = await activity_service.update_activity(
        db,
        activity_id=activity_id,
        activity_in=activity_in,
        current_user=current_user,
    )
    return ActivityResponse(activity=ActivityRead.model_validate(activity))


@router.delete(
    "/{activity_id}",
    response_model=MessageResponse,
    summary="Delete an activity",
)
async def delete_activity(
    activity_id: uuid.UUID,
    current_user: CurrentUser,
    db: DBSession,
) -> MessageResponse:
    await activity_service.delete_activity(
        db, activity_id=activity_id, current_user=current_user
    )
    return MessageResponse(message="Activity deleted successfully")
