"""
Analytics response schemas.
"""
from __future__ import annotations

from datetime import date
from typing import Literal

from carbonmeter.schemas.base import CamelModel

Period = Literal["week", "month", "quarter", "year"]


class CategoryBucket(CamelModel):
    name: str
    value: float
    color: str


class TrendPoint(CamelModel):
    name: str
    value: float


class AnalyticsResponse(CamelModel):
    period: Period
    total_footprint: float
    daily_average: float
    activity_count: int
    footprint_by_category: list[CategoryBucket]
    trend_data: list[TrendPoint]


class DailyPoint(CamelModel):
    day: date
    value: float


class ActivityStats(CamelModel):
    """Derived efficiency metrics; nothing here is stored."""

    activity_count: int
    average_impact: float
    daily_series: list[DailyPoint]
    best_day: DailyPoint | None
    worst_day: DailyPoint | None
    low_emission_streak: int
    daily_budget: float
    current_period_total: float
    previous_period_total: float
    improvement: float
    month_total: float
    target_progress: float
