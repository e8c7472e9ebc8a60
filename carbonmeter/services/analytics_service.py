"""
Analytics over a user's activity ledger.
The module-level functions are pure aggregations over loaded activities;
AnalyticsService fetches the rows and shapes the responses.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from carbonmeter.core.exceptions import ValidationException
from carbonmeter.crud.activity import crud_activity
from carbonmeter.models.user import User
from carbonmeter.schemas.analytics import (
    ActivityStats,
    AnalyticsResponse,
    CategoryBucket,
    DailyPoint,
    TrendPoint,
)
from carbonmeter.services.calculator import BUCKET_NAMES
from carbonmeter.utils.dates import ensure_utc, month_start, shift_months, utcnow

logger = logging.getLogger(__name__)

PERIOD_MONTHS: dict[str, int] = {"month": 1, "quarter": 3, "year": 12}
PERIOD_DAYS: dict[str, int] = {"week": 7, "month": 30, "quarter": 90, "year": 365}

BUCKET_COLORS: dict[str, str] = {
    "transport": "#3b82f6",
    "energy": "#10b981",
    "food": "#f59e0b",
    "shopping": "#8b5cf6",
}

TREND_MONTHS = 6
SERIES_DAYS = 30
STATS_WINDOW_DAYS = 30


class ActivityLike(Protocol):
    type: str
    impact: float
    date: datetime


def period_start(period: str, now: datetime | None = None) -> datetime:
    """Start instant of ``period`` counted back from ``now``."""
    now = now or utcnow()
    if period == "week":
        return now - timedelta(days=7)
    if period in PERIOD_MONTHS:
        return shift_months(now, -PERIOD_MONTHS[period])
    raise ValidationException.single(
        "period", "period must be one of week, month, quarter, year"
    )


def total_footprint(activities: Iterable[ActivityLike]) -> float:
    return round(sum(float(a.impact) for a in activities), 2)


def footprint_by_category(activities: Iterable[ActivityLike]) -> list[CategoryBucket]:
    """Per-type buckets in display order; empty buckets are left out."""
    sums = dict.fromkeys(BUCKET_NAMES, 0.0)
    for activity in activities:
        if activity.type in sums:
            sums[activity.type] += float(activity.impact)

    return [
        CategoryBucket(name=BUCKET_NAMES[key], value=round(value, 2), color=BUCKET_COLORS[key])
        for key, value in sums.items()
        if round(value, 2) > 0
    ]


def trend_data(
    activities: Iterable[ActivityLike], now: datetime | None = None
) -> list[TrendPoint]:
    """Six calendar-month totals, oldest first, ending with the current month."""
    now = now or utcnow()
    first = shift_months(month_start(now), -(TREND_MONTHS - 1))
    months = [shift_months(first, offset) for offset in range(TREND_MONTHS)]
    sums = {(m.year, m.month): 0.0 for m in months}

    for activity in activities:
        when = ensure_utc(activity.date)
        key = (when.year, when.month)
        if key in sums:
            sums[key] += float(activity.impact)

    return [
        TrendPoint(name=m.strftime("%b"), value=round(sums[(m.year, m.month)], 2))
        for m in months
    ]


def daily_totals(activities: Iterable[ActivityLike]) -> dict[date, float]:
    totals: dict[date, float] = {}
    for activity in activities:
        day = ensure_utc(activity.date).date()
        totals[day] = totals.get(day, 0.0) + float(activity.impact)
    return totals


def daily_series(
    activities: Iterable[ActivityLike],
    days: int = SERIES_DAYS,
    today: date | None = None,
) -> list[DailyPoint]:
    """Zero-filled per-day totals for the last ``days`` days, oldest first."""
    today = today or utcnow().date()
    totals = daily_totals(activities)
    return [
        DailyPoint(day=day, value=round(totals.get(day, 0.0), 2))
        for day in (today - timedelta(days=offset) for offset in range(days - 1, -1, -1))
    ]


def low_emission_streak(series: list[DailyPoint], budget: float) -> int:
    """Consecutive days, counting back from the newest, at or under ``budget``."""
    streak = 0
    for point in reversed(series):
        if point.value > budget:
            break
        streak += 1
    return streak


def percent(part: float, whole: float) -> float:
    if whole == 0:
        return 0.0
    return round(part / whole * 100, 2)


def activity_stats(
    activities: list[ActivityLike],
    monthly_target_tons: float,
    now: datetime | None = None,
) -> ActivityStats:
    """Efficiency metrics over everything loaded for the trailing two windows."""
    now = now or utcnow()
    window = timedelta(days=STATS_WINDOW_DAYS)
    current_start = now - window
    previous_start = current_start - window

    current = [a for a in activities if ensure_utc(a.date) >= current_start]
    previous = [
        a for a in activities if previous_start <= ensure_utc(a.date) < current_start
    ]
    this_month = [a for a in activities if ensure_utc(a.date) >= month_start(now)]

    series = daily_series(current, today=now.date())
    active_days = [point for point in series if point.value > 0]
    best_day = min(active_days, key=lambda p: p.value) if active_days else None
    worst_day = max(active_days, key=lambda p: p.value) if active_days else None

    monthly_target_kg = float(monthly_target_tons) * 1000
    daily_budget = round(monthly_target_kg / 30, 2)

    current_total = total_footprint(current)
    previous_total = total_footprint(previous)
    month_total = total_footprint(this_month)

    return ActivityStats(
        activity_count=len(current),
        average_impact=round(current_total / len(current), 2) if current else 0.0,
        daily_series=series,
        best_day=best_day,
        worst_day=worst_day,
        low_emission_streak=low_emission_streak(series, daily_budget),
        daily_budget=daily_budget,
        current_period_total=current_total,
        previous_period_total=previous_total,
        improvement=percent(previous_total - current_total, previous_total),
        month_total=month_total,
        target_progress=percent(month_total, monthly_target_kg),
    )


class AnalyticsService:

    async def get_analytics(
        self,
        db: AsyncSession,
        *,
        period: str,
        current_user: User,
    ) -> AnalyticsResponse:
        now = utcnow()
        start = period_start(period, now)
        trend_start = shift_months(month_start(now), -(TREND_MONTHS - 1))

        activities = await crud_activity.list_since(
            db, user_id=current_user.id, since=min(start, trend_start), until=now
        )
        in_period = [a for a in activities if ensure_utc(a.date) >= start]
        total = total_footprint(in_period)

        logger.debug(
            "Analytics computed: user_id=%s period=%s activities=%d",
            current_user.id,
            period,
            len(in_period),
        )
        return AnalyticsResponse(
            period=period,
            total_footprint=total,
            daily_average=round(total / PERIOD_DAYS[period], 2),
            activity_count=len(in_period),
            footprint_by_category=footprint_by_category(in_period),
            trend_data=trend_data(activities, now),
        )

    async def get_stats(
        self, db: AsyncSession, *, current_user: User
    ) -> ActivityStats:
        now = utcnow()
        since = min(
            now - timedelta(days=2 * STATS_WINDOW_DAYS),
            month_start(now),
        )
        activities = await crud_activity.list_since(
            db, user_id=current_user.id, since=since, until=now
        )
        return activity_stats(activities, current_user.monthly_target, now)


analytics_service = AnalyticsService()
