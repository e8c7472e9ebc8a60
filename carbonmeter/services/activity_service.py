"""
Activity ledger service.
Owns the create/update/delete rules for a user's activities: defaults,
impact computation, and the ownership filter. Routes only call these methods.
"""
from __future__ import annotations

import logging
import math
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from carbonmeter.core.exceptions import NotFoundException, ValidationException
from carbonmeter.crud.activity import crud_activity
from carbonmeter.models.activity import DEFAULT_UNIT, MAX_IMPACT, Activity
from carbonmeter.models.user import User
from carbonmeter.schemas.activity import (
    ActivityCreate,
    ActivityFilter,
    ActivityUpdate,
    ImpactEstimate,
    ImpactEstimateRequest,
    parse_details,
)
from carbonmeter.services.calculator import calculate_impact, default_category, describe

logger = logging.getLogger(__name__)


def _checked_impact(impact: float) -> float:
    """Round an impact and reject values the impact column cannot store."""
    if not math.isfinite(impact) or impact > MAX_IMPACT:
        raise ValidationException.single(
            "impact", f"Impact must not exceed {MAX_IMPACT:,.2f} {DEFAULT_UNIT}"
        )
    return round(impact, 2)


class ActivityService:

    async def create_activity(
        self,
        db: AsyncSession,
        *,
        activity_in: ActivityCreate,
        current_user: User,
    ) -> Activity:
        """
        Record an activity for the current user.
        Missing description, category and impact are derived from the details.
        """
        details = activity_in.details or parse_details(activity_in.type, {})

        impact = activity_in.impact
        if impact is None:
            impact = calculate_impact(activity_in.type, details)

        activity = await crud_activity.create_activity(
            db,
            user_id=current_user.id,
            type=activity_in.type,
            description=activity_in.description or describe(activity_in.type, details),
            impact=_checked_impact(impact),
            unit=activity_in.unit,
            date=activity_in.date,
            category=activity_in.category or default_category(activity_in.type, details),
            details=details.model_dump(),
        )

        logger.info(
            "Activity created: id=%s user_id=%s type=%s impact=%s",
            activity.id,
            current_user.id,
            activity.type,
            activity.impact,
        )
        return activity

    async def get_activity(
        self,
        db: AsyncSession,
        *,
        activity_id: uuid.UUID,
        current_user: User,
    ) -> Activity:
        """Fetch one of the current user's activities; foreign ids are a 404."""
        activity = await crud_activity.get_for_user(
            db, activity_id=activity_id, user_id=current_user.id
        )
        if activity is None:
            raise NotFoundException("Activity", str(activity_id))
        return activity

    async def update_activity(
        self,
        db: AsyncSession,
        *,
        activity_id: uuid.UUID,
        activity_in: ActivityUpdate,
        current_user: User,
    ) -> Activity:
        """
        Partially update an activity.
        The type is immutable. New details replace the stored bag, and the
        impact is recomputed from them unless the caller sends one.
        """
        activity = await self.get_activity(
            db, activity_id=activity_id, current_user=current_user
        )

        if activity_in.type is not None and activity_in.type != activity.type:
            raise ValidationException.single(
                "type", "Activity type cannot be changed after creation"
            )

        update_data = activity_in.model_dump(
            exclude_unset=True, exclude={"type", "details"}
        )
        # Explicit nulls for required columns are ignored
        update_data = {k: v for k, v in update_data.items() if v is not None}

        if "details" in activity_in.model_fields_set and activity_in.details is not None:
            details = parse_details(activity.type, activity_in.details)
            update_data["details"] = details.model_dump()
            if "impact" not in update_data:
                update_data["impact"] = calculate_impact(activity.type, details)

        if "impact" in update_data:
            update_data["impact"] = _checked_impact(update_data["impact"])

        updated = await crud_activity.update(db, db_obj=activity, obj_in=update_data)
        logger.info(
            "Activity updated: id=%s user_id=%s fields=%s",
            activity.id,
            current_user.id,
            sorted(update_data),
        )
        return updated

    async def delete_activity(
        self,
        db: AsyncSession,
        *,
        activity_id: uuid.UUID,
        current_user: User,
    ) -> None:
        activity = await self.get_activity(
            db, activity_id=activity_id, current_user=current_user
        )
        await crud_activity.remove_for_user(db, activity=activity)
        logger.info("Activity deleted: id=%s user_id=%s", activity_id, current_user.id)

    async def bulk_delete(
        self,
        db: AsyncSession,
        *,
        activity_ids: list[uuid.UUID],
        current_user: User,
    ) -> int:
        """Delete the owned subset of ``activity_ids``; returns how many went."""
        deleted = await crud_activity.bulk_remove(
            db, ids=list(dict.fromkeys(activity_ids)), user_id=current_user.id
        )
        logger.info(
            "Activities bulk deleted: user_id=%s requested=%d deleted=%d",
            current_user.id,
            len(activity_ids),
            deleted,
        )
        return deleted

    async def list_activities(
        self,
        db: AsyncSession,
        *,
        filters: ActivityFilter,
        current_user: User,
    ) -> tuple[list[Activity], int]:
        return await crud_activity.list_with_filters(
            db, user_id=current_user.id, filters=filters
        )

    async def recent_activities(
        self, db: AsyncSession, *, current_user: User
    ) -> list[Activity]:
        return await crud_activity.list_recent(db, user_id=current_user.id)

    def estimate(self, estimate_in: ImpactEstimateRequest) -> ImpactEstimate:
        """Run the calculator without persisting anything."""
        details = estimate_in.details or parse_details(estimate_in.type, {})
        return ImpactEstimate(
            impact=_checked_impact(calculate_impact(estimate_in.type, details)),
            unit=DEFAULT_UNIT,
            description=describe(estimate_in.type, details),
            category=default_category(estimate_in.type, details),
        )


activity_service = ActivityService()
