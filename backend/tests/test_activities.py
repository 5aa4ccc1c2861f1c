"""
Tests for activity logging, hours computation and stats crediting.
"""
import pytest
from datetime import datetime, timezone
from fastapi import HTTPException
from httpx import AsyncClient

from app.api.v1.volunteering.activities import compute_hours
from app.models.activity import Activity


class TestComputeHours:

    def test_rounds_half_up_to_one_decimal(self):
        start = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
        # 2h15m = 2.25h
        assert compute_hours(start, datetime(2026, 3, 1, 11, 15, tzinfo=timezone.utc)) == 2.3
        # 1h20m = 1.333h
        assert compute_hours(start, datetime(2026, 3, 1, 10, 20, tzinfo=timezone.utc)) == 1.3

    def test_missing_bound(self):
        assert compute_hours(None, datetime(2026, 3, 1, tzinfo=timezone.utc)) is None

    def test_mixed_naive_and_aware(self):
        start = datetime(2026, 3, 1, 9, 0)
        end = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert compute_hours(start, end) == 3.0

    def test_end_before_start(self):
        with pytest.raises(HTTPException) as exc_info:
            compute_hours(
                datetime(2026, 3, 1, 12, tzinfo=timezone.utc),
                datetime(2026, 3, 1, 9, tzinfo=timezone.utc),
            )
        assert exc_info.value.status_code == 400


class TestActivityEndpoints:

    @pytest.mark.asyncio
    async def test_completed_activity_credits_stats(
        self, client: AsyncClient, volunteer_user, volunteer_headers, test_hub
    ):
        response = await client.post("/api/v1/activities", headers=volunteer_headers, json={
            "type": "volunteer",
            "title": "Blood drive support",
            "hub_id": test_hub.id,
            "start_time": "2026-03-01T09:00:00Z",
            "end_time": "2026-03-01T13:30:00Z",
            "status": "completed",
        })
        assert response.status_code == 201
        assert response.json()["hours"] == 4.5
        assert volunteer_user.total_hours == pytest.approx(4.5)
        assert volunteer_user.activities_completed == 1

    @pytest.mark.asyncio
    async def test_scheduled_activity_credited_on_completion_once(
        self, client: AsyncClient, volunteer_user, volunteer_headers
    ):
        created = await client.post("/api/v1/activities", headers=volunteer_headers, json={
            "type": "training",
            "title": "CPR refresher",
            "start_time": "2026-03-02T09:00:00Z",
            "end_time": "2026-03-02T11:00:00Z",
        })
        activity_id = created.json()["id"]
        assert created.json()["status"] == "scheduled"
        assert volunteer_user.activities_completed == 0

        done = await client.patch(f"/api/v1/activities/{activity_id}", headers=volunteer_headers, json={
            "status": "completed"
        })
        assert done.status_code == 200
        assert volunteer_user.activities_completed == 1
        assert volunteer_user.total_hours == pytest.approx(2.0)

        # Editing a completed activity does not credit again
        await client.patch(f"/api/v1/activities/{activity_id}", headers=volunteer_headers, json={
            "status": "completed", "notes": "Edited"
        })
        assert volunteer_user.activities_completed == 1

    @pytest.mark.asyncio
    async def test_reopened_activity_not_credited_twice(
        self, client: AsyncClient, db_session, volunteer_user, volunteer_headers
    ):
        created = await client.post("/api/v1/activities", headers=volunteer_headers, json={
            "type": "volunteer",
            "title": "Ambulance shift",
            "start_time": "2026-03-03T09:00:00Z",
            "end_time": "2026-03-03T11:00:00Z",
            "status": "completed",
        })
        activity_id = created.json()["id"]
        assert volunteer_user.activities_completed == 1

        reopened = await client.patch(f"/api/v1/activities/{activity_id}", headers=volunteer_headers, json={
            "status": "in_progress"
        })
        assert reopened.json()["status"] == "in_progress"

        again = await client.patch(f"/api/v1/activities/{activity_id}", headers=volunteer_headers, json={
            "status": "completed"
        })
        assert again.json()["status"] == "completed"
        assert volunteer_user.activities_completed == 1
        assert volunteer_user.total_hours == pytest.approx(2.0)

        activity = await db_session.get(Activity, activity_id)
        assert activity.stats_credited is True

    @pytest.mark.asyncio
    async def test_update_recomputes_hours(self, client: AsyncClient, volunteer_headers):
        created = await client.post("/api/v1/activities", headers=volunteer_headers, json={
            "type": "meeting",
            "title": "Planning",
            "start_time": "2026-03-03T09:00:00Z",
            "end_time": "2026-03-03T10:00:00Z",
        })
        activity_id = created.json()["id"]

        updated = await client.patch(f"/api/v1/activities/{activity_id}", headers=volunteer_headers, json={
            "end_time": "2026-03-03T12:00:00Z"
        })
        assert updated.json()["hours"] == 3.0

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(self, client: AsyncClient, volunteer_headers):
        response = await client.post("/api/v1/activities", headers=volunteer_headers, json={
            "type": "volunteer",
            "title": "Backwards",
            "start_time": "2026-03-01T13:00:00Z",
            "end_time": "2026-03-01T09:00:00Z",
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "End time cannot be before start time"

    @pytest.mark.asyncio
    async def test_my_activities_date_range(self, client: AsyncClient, volunteer_headers):
        for day in ("01", "15", "28"):
            await client.post("/api/v1/activities", headers=volunteer_headers, json={
                "type": "volunteer",
                "title": f"Shift {day}",
                "start_time": f"2026-04-{day}T09:00:00Z",
                "end_time": f"2026-04-{day}T10:00:00Z",
            })

        response = await client.get(
            "/api/v1/activities/my?startDate=2026-04-10&endDate=2026-04-28", headers=volunteer_headers
        )
        assert response.status_code == 200
        assert [a["title"] for a in response.json()["items"]] == ["Shift 28", "Shift 15"]

    @pytest.mark.asyncio
    async def test_other_user_cannot_edit(
        self, client: AsyncClient, volunteer_headers, member_headers
    ):
        created = await client.post("/api/v1/activities", headers=volunteer_headers, json={
            "type": "volunteer", "title": "Mine"
        })
        response = await client.patch(
            f"/api/v1/activities/{created.json()['id']}", headers=member_headers, json={"title": "Yours"}
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_reviewer_lists_and_verifies(
        self, client: AsyncClient, volunteer_user, volunteer_headers, evaluator_user, evaluator_headers
    ):
        created = await client.post("/api/v1/activities", headers=volunteer_headers, json={
            "type": "volunteer", "title": "Sandbagging"
        })
        activity_id = created.json()["id"]

        listing = await client.get(f"/api/v1/activities?user={volunteer_user.id}", headers=evaluator_headers)
        assert listing.status_code == 200
        assert listing.json()["items"][0]["user"]["id"] == volunteer_user.id

        verified = await client.patch(
            f"/api/v1/activities/{activity_id}/verify", headers=evaluator_headers, json={"verified": True}
        )
        assert verified.json()["verified"] is True
        assert verified.json()["verified_by_id"] == evaluator_user.id

        forbidden = await client.patch(
            f"/api/v1/activities/{activity_id}/verify", headers=volunteer_headers, json={"verified": True}
        )
        assert forbidden.status_code == 403
