"""
Community endpoint tests.
Covers: posts, like toggling, comments, challenges, leaderboard.
"""
from __future__ import annotations

import uuid

import pytest
from httpx import AsyncClient

from helpers import days_ago, log_activity

pytestmark = pytest.mark.asyncio


async def create_post(
    client: AsyncClient, headers: dict, title: str = "Biked to work", post_type: str = "achievement"
) -> dict:
    response = await client.post(
        "/api/community/posts",
        json={"title": title, "content": "Twelve miles without a car today.", "type": post_type},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["post"]


def challenge_payload(**overrides) -> dict:
    payload = {
        "title": "Car-free week",
        "description": "Leave the car at home",
        "targetReduction": 20,
        "category": "transport",
        "startDate": days_ago(1),
        "endDate": days_ago(-6),
    }
    payload.update(overrides)
    return payload


class TestPosts:
    async def test_create_post(self, client: AsyncClient, auth_headers: dict) -> None:
        post = await create_post(client, auth_headers)
        assert post["likes"] == 0
        assert post["commentsCount"] == 0
        assert post["author"]["name"] == "Test User"
        assert "email" not in post["author"]

    async def test_create_requires_auth(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/community/posts",
            json={"title": "Hello there", "content": "Some longer content", "type": "tip"},
        )
        assert response.status_code == 401

    async def test_short_title_rejected(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        response = await client.post(
            "/api/community/posts",
            json={"title": "Hi", "content": "Some longer content", "type": "tip"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    async def test_list_posts_is_public_and_paginated(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        for i in range(3):
            await create_post(client, auth_headers, title=f"Tip number {i}", post_type="tip")
        await create_post(client, auth_headers, title="A question here", post_type="question")

        response = await client.get("/api/community/posts", params={"limit": 2})
        assert response.status_code == 200
        data = response.json()
        assert len(data["posts"]) == 2
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 4, "totalPages": 2}

        tips = await client.get("/api/community/posts", params={"type": "tip"})
        assert tips.json()["pagination"]["total"] == 3
        assert all(p["type"] == "tip" for p in tips.json()["posts"])


class TestLikes:
    async def test_like_toggles(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict
    ) -> None:
        post = await create_post(client, auth_headers)
        url = f"/api/community/posts/{post['id']}/like"

        first = await client.post(url, headers=other_headers)
        assert first.status_code == 200
        assert first.json()["liked"] is True
        assert first.json()["likes"] == 1

        mine = await client.post(url, headers=auth_headers)
        assert mine.json()["likes"] == 2

        second = await client.post(url, headers=other_headers)
        assert second.json()["liked"] is False
        assert second.json()["likes"] == 1

    async def test_like_unknown_post(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        response = await client.post(
            f"/api/community/posts/{uuid.uuid4()}/like", headers=auth_headers
        )
        assert response.status_code == 404


class TestComments:
    async def test_add_and_list_comments(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict
    ) -> None:
        post = await create_post(client, auth_headers)
        url = f"/api/community/posts/{post['id']}/comments"

        first = await client.post(url, json={"content": "Nice work!"}, headers=other_headers)
        assert first.status_code == 201
        assert first.json()["comment"]["author"]["name"] == "Other User"
        await client.post(url, json={"content": "Thanks"}, headers=auth_headers)

        listing = await client.get(url)
        assert listing.status_code == 200
        assert [c["content"] for c in listing.json()["comments"]] == ["Nice work!", "Thanks"]

        posts = await client.get("/api/community/posts")
        assert posts.json()["posts"][0]["commentsCount"] == 2

    async def test_empty_comment_rejected(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        post = await create_post(client, auth_headers)
        response = await client.post(
            f"/api/community/posts/{post['id']}/comments",
            json={"content": "   "},
            headers=auth_headers,
        )
        assert response.status_code == 400

    async def test_comments_on_unknown_post(self, client: AsyncClient) -> None:
        response = await client.get(f"/api/community/posts/{uuid.uuid4()}/comments")
        assert response.status_code == 404


class TestChallenges:
    async def test_create_and_join(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict
    ) -> None:
        response = await client.post(
            "/api/community/challenges", json=challenge_payload(), headers=auth_headers
        )
        assert response.status_code == 201
        challenge = response.json()["challenge"]
        assert challenge["participantCount"] == 0

        url = f"/api/community/challenges/{challenge['id']}/join"
        joined = await client.post(url, headers=other_headers)
        assert joined.status_code == 200

        again = await client.post(url, headers=other_headers)
        assert again.status_code == 400

        listing = await client.get("/api/community/challenges")
        assert [c["participantCount"] for c in listing.json()["challenges"]] == [1]

    async def test_end_before_start_rejected(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        response = await client.post(
            "/api/community/challenges",
            json=challenge_payload(startDate=days_ago(0), endDate=days_ago(3)),
            headers=auth_headers,
        )
        assert response.status_code == 400

    async def test_status_filter(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        await client.post(
            "/api/community/challenges", json=challenge_payload(), headers=auth_headers
        )
        await client.post(
            "/api/community/challenges",
            json=challenge_payload(title="Last month's challenge", startDate=days_ago(60), endDate=days_ago(30)),
            headers=auth_headers,
        )

        active = await client.get("/api/community/challenges")
        assert len(active.json()["challenges"]) == 1

        everything = await client.get("/api/community/challenges", params={"status": "all"})
        assert len(everything.json()["challenges"]) == 2

    async def test_join_unknown_challenge(
        self, client: AsyncClient, auth_headers: dict
    ) -> None:
        response = await client.post(
            f"/api/community/challenges/{uuid.uuid4()}/join", headers=auth_headers
        )
        assert response.status_code == 404


class TestLeaderboard:
    async def test_lowest_footprint_first(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict
    ) -> None:
        await log_activity(client, auth_headers, type="food", impact=9.0, date=days_ago(1))
        await log_activity(client, other_headers, type="food", impact=2.0, date=days_ago(1))
        await log_activity(client, other_headers, type="transport", impact=3.0, date=days_ago(2))
        # Outside the month window
        await log_activity(client, auth_headers, type="food", impact=100.0, date=days_ago(90))

        response = await client.get("/api/community/leaderboard")
        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "month"
        assert data["category"] == "overall"
        assert [
            (e["rank"], e["name"], e["totalFootprint"], e["activityCount"])
            for e in data["leaderboard"]
        ] == [(1, "Other User", 5.0, 2), (2, "Test User", 9.0, 1)]

    async def test_category_filter(
        self, client: AsyncClient, auth_headers: dict, other_headers: dict
    ) -> None:
        await log_activity(client, auth_headers, type="food", impact=9.0, date=days_ago(1))
        await log_activity(client, other_headers, type="transport", impact=3.0, date=days_ago(1))

        response = await client.get(
            "/api/community/leaderboard", params={"category": "transport", "period": "week"}
        )
        entries = response.json()["leaderboard"]
        assert [e["name"] for e in entries] == ["Other User"]

    async def test_unknown_category(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/community/leaderboard", params={"category": "gardening"}
        )
        assert response.status_code == 400
