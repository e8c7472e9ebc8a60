"""
Analytics tests.
Pure aggregation functions first, then the analytics and stats endpoints.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from carbonmeter.core.exceptions import ValidationException
from carbonmeter.schemas.analytics import DailyPoint
from carbonmeter.services.analytics_service import (
    activity_stats,
    daily_series,
    footprint_by_category,
    low_emission_streak,
    percent,
    period_start,
    total_footprint,
    trend_data,
)
from helpers import days_ago, log_activity

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@dataclass
class Row:
    type: str
    impact: float
    date: datetime


class TestPeriodStart:
    def test_windows(self) -> None:
        assert period_start("week", NOW) == NOW - timedelta(days=7)
        assert period_start("month", NOW) == datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)
        assert period_start("quarter", NOW) == datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
        assert period_start("year", NOW) == datetime(2023, 6, 15, 12, 0, tzinfo=timezone.utc)

    def test_month_end_is_clamped(self) -> None:
        march_end = datetime(2024, 3, 31, tzinfo=timezone.utc)
        assert period_start("month", march_end) == datetime(2024, 2, 29, tzinfo=timezone.utc)

    def test_unknown_period(self) -> None:
        with pytest.raises(ValidationException):
            period_start("decade", NOW)


class TestAggregations:
    rows = [
        Row("transport", 6.0, NOW),
        Row("transport", 1.0, NOW - timedelta(days=1)),
        Row("food", 2.5, NOW - timedelta(days=2)),
        Row("shopping", 0.0, NOW - timedelta(days=3)),
    ]

    def test_total(self) -> None:
        assert total_footprint(self.rows) == 9.5
        assert total_footprint([]) == 0.0

    def test_buckets_skip_empty_categories(self) -> None:
        buckets = footprint_by_category(self.rows)
        assert [(b.name, b.color) for b in buckets] == [
            ("Transportation", "#3b82f6"),
            ("Food", "#f59e0b"),
        ]

    def test_buckets_sum_to_total(self) -> None:
        buckets = footprint_by_category(self.rows)
        assert abs(sum(b.value for b in buckets) - total_footprint(self.rows)) <= 0.01

    def test_no_activities_no_buckets(self) -> None:
        assert footprint_by_category([]) == []

    def test_trend_is_six_months_ending_now(self) -> None:
        rows = [
            Row("food", 1.0, datetime(2024, 1, 20, tzinfo=timezone.utc)),
            Row("food", 2.0, datetime(2024, 6, 1, tzinfo=timezone.utc)),
            Row("food", 3.0, datetime(2024, 6, 14, tzinfo=timezone.utc)),
            # Outside the window
            Row("food", 50.0, datetime(2023, 12, 31, tzinfo=timezone.utc)),
        ]
        trend = trend_data(rows, NOW)
        assert [p.name for p in trend] == ["Jan", "Feb", "Mar", "Apr", "May", "Jun"]
        assert [p.value for p in trend] == [1.0, 0.0, 0.0, 0.0, 0.0, 5.0]

    def test_trend_always_has_six_entries(self) -> None:
        trend = trend_data([], NOW)
        assert len(trend) == 6
        assert all(p.value == 0 for p in trend)

    def test_trend_crosses_year_boundary(self) -> None:
        trend = trend_data([], datetime(2024, 2, 10, tzinfo=timezone.utc))
        assert [p.name for p in trend] == ["Sep", "Oct", "Nov", "Dec", "Jan", "Feb"]


class TestEfficiency:
    def test_daily_series_is_zero_filled(self) -> None:
        today = date(2024, 6, 15)
        rows = [
            Row("food", 2.0, datetime(2024, 6, 15, 8, tzinfo=timezone.utc)),
            Row("food", 1.0, datetime(2024, 6, 15, 20, tzinfo=timezone.utc)),
            Row("food", 4.0, datetime(2024, 6, 13, tzinfo=timezone.utc)),
        ]
        series = daily_series(rows, days=5, today=today)
        assert [p.day for p in series] == [today - timedelta(days=n) for n in range(4, -1, -1)]
        assert [p.value for p in series] == [0.0, 0.0, 4.0, 0.0, 3.0]

    def test_streak_counts_back_from_today(self) -> None:
        series = [
            DailyPoint(day=date(2024, 6, d), value=v)
            for d, v in [(11, 1.0), (12, 500.0), (13, 2.0), (14, 0.0), (15, 149.0)]
        ]
        assert low_emission_streak(series, 150.0) == 3
        assert low_emission_streak(series, 1.0) == 0

    def test_percent_with_zero_denominator(self) -> None:
        assert percent(5, 0) == 0.0
        assert percent(1, 4) == 25.0

    def test_stats(self) -> None:
        rows = [
            Row("transport", 10.0, NOW - timedelta(days=1)),
            Row("food", 2.0, NOW - timedelta(days=2)),
            Row("food", 4.0, NOW - timedelta(days=2, hours=1)),
            # Previous 30-day window
            Row("energy", 32.0, NOW - timedelta(days=40)),
        ]
        stats = activity_stats(rows, monthly_target_tons=0.3, now=NOW)

        assert stats.activity_count == 3
        assert stats.average_impact == round(16.0 / 3, 2)
        assert len(stats.daily_series) == 30
        assert stats.best_day is not None and stats.best_day.value == 6.0
        assert stats.worst_day is not None and stats.worst_day.value == 10.0
        assert stats.daily_budget == 10.0
        # today 0, yesterday 10 (at budget), the day before 6, all earlier days 0
        assert stats.low_emission_streak == 30
        assert stats.current_period_total == 16.0
        assert stats.previous_period_total == 32.0
        assert stats.improvement == 50.0
        assert stats.month_total == 16.0
        assert stats.target_progress == round(16.0 / 300 * 100, 2)

    def test_stats_without_activity(self) -> None:
        stats = activity_stats([], monthly_target_tons=4.5, now=NOW)
        assert stats.activity_count == 0
        assert stats.average_impact == 0.0
        assert stats.best_day is None and stats.worst_day is None
        assert stats.improvement == 0.0
        assert stats.target_progress == 0.0


class TestAnalyticsEndpoint:
    pytestmark = pytest.mark.asyncio

    async def test_single_car_trip(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        await log_activity(
            client,
            auth_headers,
            type="transport",
            details={"distance": 15, "vehicleType": "Car"},
        )
        response = await client.get(
            "/api/activities/analytics", params={"period": "month"}, headers=auth_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "month"
        assert data["totalFootprint"] == 6.0
        assert data["activityCount"] == 1
        assert data["dailyAverage"] == 0.2
        assert data["footprintByCategory"] == [
            {"name": "Transportation", "value": 6.0, "color": "#3b82f6"}
        ]
        assert len(data["trendData"]) == 6
        assert data["trendData"][-1]["value"] == 6.0

    async def test_week_and_year_windows(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        for days, impact in ((1, 1.0), (3, 2.0), (5, 3.0)):
            await log_activity(
                client, auth_headers, type="food", impact=impact, date=days_ago(days)
            )
        # Outside the week, inside the year
        await log_activity(client, auth_headers, type="energy", impact=4.0, date=days_ago(20))

        week = await client.get(
            "/api/activities/analytics", params={"period": "week"}, headers=auth_headers
        )
        year = await client.get(
            "/api/activities/analytics", params={"period": "year"}, headers=auth_headers
        )
        assert week.json()["totalFootprint"] == 6.0
        assert week.json()["activityCount"] == 3
        assert year.json()["totalFootprint"] >= 6.0
        assert year.json()["totalFootprint"] == 10.0

        buckets = year.json()["footprintByCategory"]
        assert abs(sum(b["value"] for b in buckets) - 10.0) <= 0.01

    async def test_default_period_is_month(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        response = await client.get("/api/activities/analytics", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "month"
        assert data["footprintByCategory"] == []
        assert len(data["trendData"]) == 6

    async def test_unknown_period(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        response = await client.get(
            "/api/activities/analytics", params={"period": "decade"}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_stats_endpoint(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        await log_activity(client, auth_headers, type="food", impact=3.0, date=days_ago(1))
        response = await client.get("/api/activities/stats", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["activityCount"] == 1
        assert data["averageImpact"] == 3.0
        assert len(data["dailySeries"]) == 30
        assert data["dailyBudget"] == 150.0
        assert data["bestDay"]["value"] == 3.0
        assert data["lowEmissionStreak"] == 30

    async def test_future_dated_activities_are_not_counted(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        await log_activity(client, auth_headers, type="food", impact=2.0, date=days_ago(0))
        await log_activity(client, auth_headers, type="food", impact=50.0, date=days_ago(-2))

        analytics = await client.get(
            "/api/activities/analytics", params={"period": "week"}, headers=auth_headers
        )
        data = analytics.json()
        assert data["totalFootprint"] == 2.0
        assert data["activityCount"] == 1
        assert sum(p["value"] for p in data["trendData"]) == 2.0

        stats = await client.get("/api/activities/stats", headers=auth_headers)
        assert stats.json()["activityCount"] == 1
        assert stats.json()["monthTotal"] == 2.0

        leaderboard = await client.get(
            "/api/community/leaderboard", params={"period": "week"}
        )
        assert leaderboard.json()["leaderboard"][0]["totalFootprint"] == 2.0
