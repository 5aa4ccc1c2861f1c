"""
Tests for core endpoints: me, events, projects, registrations and user administration.
"""
import pytest
from httpx import AsyncClient

from app.models.user import UserRole
from tests.conftest import headers_for


class TestMe:

    @pytest.mark.asyncio
    async def test_me(self, client: AsyncClient, volunteer_user, volunteer_headers):
        response = await client.get("/api/v1/me", headers=volunteer_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == volunteer_user.id
        assert data["stats"]["activities_completed"] == 0
        assert "password_hash" not in data

    @pytest.mark.asyncio
    async def test_me_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/me")
        assert response.status_code == 401


class TestEventsAndProjects:

    @pytest.mark.asyncio
    async def test_create_and_list_events(self, client: AsyncClient, admin_user, admin_headers):
        late = await client.post("/api/v1/events", headers=admin_headers, json={
            "title": "Blood drive",
            "start_at": "2026-12-01T09:00:00Z",
            "end_at": "2026-12-01T17:00:00Z",
        })
        early = await client.post("/api/v1/events", headers=admin_headers, json={
            "title": "Orientation",
            "start_at": "2026-11-01T09:00:00Z",
        })
        undated = await client.post("/api/v1/events", headers=admin_headers, json={"title": "Open day"})
        assert late.status_code == 201
        assert late.json()["created_by_id"] == admin_user.id

        response = await client.get("/api/v1/events")
        assert response.status_code == 200
        titles = [e["title"] for e in response.json()["items"]]
        assert titles == ["Orientation", "Blood drive", "Open day"]
        assert early.status_code == 201 and undated.status_code == 201

    @pytest.mark.asyncio
    async def test_event_end_before_start(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/v1/events", headers=admin_headers, json={
            "title": "Backwards",
            "start_at": "2026-12-01T17:00:00Z",
            "end_at": "2026-12-01T09:00:00Z",
        })
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_create_project(self, client: AsyncClient, volunteer_headers):
        response = await client.post("/api/v1/projects", headers=volunteer_headers, json={
            "name": "Clean water",
            "summary": "Wells for rural schools",
        })
        assert response.status_code == 201
        assert response.json()["status"] == "planning"

        listing = await client.get("/api/v1/projects")
        assert [p["name"] for p in listing.json()["items"]] == ["Clean water"]


class TestRegistrations:

    @pytest.mark.asyncio
    async def test_register_for_event(self, client: AsyncClient, admin_headers, volunteer_headers):
        event = await client.post("/api/v1/events", headers=admin_headers, json={"title": "Drill"})
        event_id = event.json()["id"]

        response = await client.post("/api/v1/register", headers=volunteer_headers, json={
            "type": "event", "ref_id": event_id
        })
        assert response.status_code == 201
        assert response.json()["status"] == "confirmed"

        duplicate = await client.post("/api/v1/register", headers=volunteer_headers, json={
            "type": "event", "ref_id": event_id
        })
        assert duplicate.status_code == 400
        assert duplicate.json()["detail"] == "Already registered"

        mine = await client.get("/api/v1/my/registrations", headers=volunteer_headers)
        assert [r["ref_id"] for r in mine.json()["items"]] == [event_id]

    @pytest.mark.asyncio
    async def test_register_for_full_event(
        self, client: AsyncClient, make_user, admin_headers, volunteer_headers
    ):
        event = await client.post("/api/v1/events", headers=admin_headers, json={
            "title": "Small workshop", "capacity": 1
        })
        event_id = event.json()["id"]
        first = await client.post("/api/v1/register", headers=volunteer_headers, json={
            "type": "event", "ref_id": event_id
        })
        assert first.status_code == 201

        other = await make_user(UserRole.VOLUNTEER)
        second = await client.post("/api/v1/register", headers=headers_for(other), json={
            "type": "event", "ref_id": event_id
        })
        assert second.status_code == 400
        assert second.json()["detail"] == "Event is full"

    @pytest.mark.asyncio
    async def test_register_for_missing_target(self, client: AsyncClient, volunteer_headers):
        response = await client.post("/api/v1/register", headers=volunteer_headers, json={
            "type": "project", "ref_id": "missing"
        })
        assert response.status_code == 404
        assert response.json()["detail"] == "Project not found"


class TestUserAdministration:

    @pytest.mark.asyncio
    async def test_list_users_requires_staff(self, client: AsyncClient, volunteer_headers):
        response = await client.get("/api/v1/users", headers=volunteer_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_users_filters(
        self, client: AsyncClient, coordinator_headers, volunteer_user, member_user
    ):
        response = await client.get("/api/v1/users?role=volunteer", headers=coordinator_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["totalItems"] == 1
        assert data["items"][0]["id"] == volunteer_user.id

        search = await client.get("/api/v1/users?search=meron", headers=coordinator_headers)
        assert [u["id"] for u in search.json()["items"]] == [member_user.id]

    @pytest.mark.asyncio
    async def test_admin_updates_user(
        self, client: AsyncClient, admin_headers, volunteer_user, test_hub
    ):
        response = await client.patch(f"/api/v1/users/{volunteer_user.id}", headers=admin_headers, json={
            "role": "hub_coordinator",
            "verified": True,
            "hub_affiliation_id": test_hub.id,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "hub_coordinator"
        assert data["verified"] is True
        assert data["verified_at"] is not None
        assert data["hub_affiliation_id"] == test_hub.id

    @pytest.mark.asyncio
    async def test_update_user_unknown_hub(self, client: AsyncClient, admin_headers, volunteer_user):
        response = await client.patch(f"/api/v1/users/{volunteer_user.id}", headers=admin_headers, json={
            "hub_affiliation_id": "nohub"
        })
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_user_requires_admin(
        self, client: AsyncClient, coordinator_headers, volunteer_user
    ):
        response = await client.patch(f"/api/v1/users/{volunteer_user.id}", headers=coordinator_headers, json={
            "role": "admin"
        })
        assert response.status_code == 403
