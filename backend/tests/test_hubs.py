"""
Tests for hub registration, administration and volunteer requests.
"""
import pytest
from httpx import AsyncClient

from app.models.user import UserRole
from tests.conftest import headers_for


HUB_PAYLOAD = {
    "name": "Bahir Dar Youth Center",
    "organization_type": "ngo",
    "email": "youth@example.com",
    "phone": "+251582200000",
    "address": {"city": "Bahir Dar", "region": "Amhara"},
    "contact_person": {"name": "Dawit Bekele", "phone": "+251911000111"},
    "capacity": 15,
}

REQUEST_PAYLOAD = {
    "title": "Flood response volunteers",
    "category": "disaster",
    "required_skills": ["first aid", "logistics"],
    "criteria": {"age_min": 18, "languages": ["Amharic"]},
    "number_of_volunteers": 3,
    "priority": "urgent",
}


class TestHubRegistration:

    @pytest.mark.asyncio
    async def test_register_hub_anonymously(self, client: AsyncClient):
        response = await client.post("/api/v1/hubs/register", json=HUB_PAYLOAD)
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["verified"] is False
        assert data["region"] == "Amhara"
        assert data["registered_by_id"] is None

    @pytest.mark.asyncio
    async def test_register_hub_records_registrant(
        self, client: AsyncClient, coordinator_user, coordinator_headers
    ):
        response = await client.post("/api/v1/hubs/register", json=HUB_PAYLOAD, headers=coordinator_headers)
        assert response.status_code == 201
        assert response.json()["registered_by_id"] == coordinator_user.id

    @pytest.mark.asyncio
    async def test_register_hub_duplicate_email(self, client: AsyncClient):
        await client.post("/api/v1/hubs/register", json=HUB_PAYLOAD)
        response = await client.post("/api/v1/hubs/register", json={**HUB_PAYLOAD, "name": "Other"})
        assert response.status_code == 400
        assert response.json()["detail"] == "A hub with this email is already registered"

    @pytest.mark.asyncio
    async def test_register_duplicate_email_racing_the_check(
        self, client: AsyncClient, test_hub, monkeypatch
    ):
        async def email_looks_free(db, email):
            return None

        monkeypatch.setattr("app.api.v1.hubs.ensure_email_available", email_looks_free)
        response = await client.post("/api/v1/hubs/register-with-request", json={
            "hub": {**HUB_PAYLOAD, "email": test_hub.email},
            "request": REQUEST_PAYLOAD,
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "A hub with this email is already registered"

    @pytest.mark.asyncio
    async def test_register_with_request(self, client: AsyncClient):
        response = await client.post("/api/v1/hubs/register-with-request", json={
            "hub": HUB_PAYLOAD,
            "request": REQUEST_PAYLOAD,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Hub registered and volunteer request submitted. Pending admin approval."
        assert data["request"]["hub_id"] == data["hub"]["id"]
        assert data["request"]["status"] == "open"
        # Region falls back to the hub's region
        assert data["request"]["region"] == "Amhara"
        assert data["request"]["hub"]["name"] == HUB_PAYLOAD["name"]


class TestHubListing:

    @pytest.mark.asyncio
    async def test_list_and_filter(self, client: AsyncClient, test_hub):
        await client.post("/api/v1/hubs/register", json=HUB_PAYLOAD)

        everything = await client.get("/api/v1/hubs")
        assert len(everything.json()["items"]) == 2

        approved = await client.get("/api/v1/hubs?status=approved")
        assert [h["id"] for h in approved.json()["items"]] == [test_hub.id]

        amhara = await client.get("/api/v1/hubs?region=Amhara")
        assert [h["name"] for h in amhara.json()["items"]] == [HUB_PAYLOAD["name"]]

        unverified = await client.get("/api/v1/hubs?verified=false")
        assert len(unverified.json()["items"]) == 1

    @pytest.mark.asyncio
    async def test_get_hub(self, client: AsyncClient, test_hub):
        response = await client.get(f"/api/v1/hubs/{test_hub.id}")
        assert response.status_code == 200
        assert response.json()["name"] == test_hub.name

    @pytest.mark.asyncio
    async def test_get_missing_hub(self, client: AsyncClient):
        response = await client.get("/api/v1/hubs/doesnotexist")
        assert response.status_code == 404


class TestHubManagement:

    @pytest.mark.asyncio
    async def test_update_hub_requires_auth(self, client: AsyncClient, test_hub):
        response = await client.patch(f"/api/v1/hubs/{test_hub.id}", json={"capacity": 30})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_hub_forbidden_for_outsider(self, client: AsyncClient, test_hub, volunteer_headers):
        response = await client.patch(f"/api/v1/hubs/{test_hub.id}", headers=volunteer_headers, json={
            "capacity": 30
        })
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_affiliated_coordinator_updates_hub(self, client: AsyncClient, make_user, test_hub):
        coordinator = await make_user(UserRole.HUB_COORDINATOR, hub_affiliation_id=test_hub.id)
        response = await client.patch(f"/api/v1/hubs/{test_hub.id}", headers=headers_for(coordinator), json={
            "capacity": 30,
            "address": {"city": "Hawassa", "region": "Sidama"},
        })
        assert response.status_code == 200
        data = response.json()
        assert data["capacity"] == 30
        assert data["region"] == "Sidama"

    @pytest.mark.asyncio
    async def test_admin_approves_hub(self, client: AsyncClient, admin_headers):
        created = await client.post("/api/v1/hubs/register", json=HUB_PAYLOAD)
        hub_id = created.json()["id"]

        response = await client.patch(f"/api/v1/hubs/{hub_id}/status", headers=admin_headers, json={
            "status": "approved"
        })
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["verified"] is True

        suspended = await client.patch(f"/api/v1/hubs/{hub_id}/status", headers=admin_headers, json={
            "status": "suspended"
        })
        assert suspended.json()["verified"] is False

    @pytest.mark.asyncio
    async def test_status_change_requires_admin(self, client: AsyncClient, test_hub, coordinator_headers):
        response = await client.patch(f"/api/v1/hubs/{test_hub.id}/status", headers=coordinator_headers, json={
            "status": "suspended"
        })
        assert response.status_code == 403


class TestVolunteerRequests:

    @pytest.mark.asyncio
    async def test_pending_hub_accepts_anonymous_request(self, client: AsyncClient):
        created = await client.post("/api/v1/hubs/register", json=HUB_PAYLOAD)
        hub_id = created.json()["id"]

        response = await client.post(f"/api/v1/hubs/{hub_id}/requests", json={
            **REQUEST_PAYLOAD,
            "location": {"city": "Gondar", "region": "Amhara North"},
        })
        assert response.status_code == 201
        data = response.json()
        assert data["region"] == "Amhara North"
        assert data["priority"] == "urgent"
        assert data["criteria"]["languages"] == ["Amharic"]

    @pytest.mark.asyncio
    async def test_approved_hub_requires_manager(self, client: AsyncClient, test_hub, volunteer_headers, admin_headers):
        anonymous = await client.post(f"/api/v1/hubs/{test_hub.id}/requests", json=REQUEST_PAYLOAD)
        assert anonymous.status_code == 401

        outsider = await client.post(
            f"/api/v1/hubs/{test_hub.id}/requests", json=REQUEST_PAYLOAD, headers=volunteer_headers
        )
        assert outsider.status_code == 403

        admin = await client.post(
            f"/api/v1/hubs/{test_hub.id}/requests", json=REQUEST_PAYLOAD, headers=admin_headers
        )
        assert admin.status_code == 201

    @pytest.mark.asyncio
    async def test_list_requests(self, client: AsyncClient, test_request, admin_headers):
        hub_requests = await client.get(f"/api/v1/hubs/{test_request.hub_id}/requests")
        assert [r["id"] for r in hub_requests.json()["items"]] == [test_request.id]

        all_open = await client.get("/api/v1/hubs/requests/all?status=open&region=Addis Ababa")
        items = all_open.json()["items"]
        assert [r["id"] for r in items] == [test_request.id]
        assert items[0]["hub"]["name"] == "Addis Relief Center"

        filled = await client.get("/api/v1/hubs/requests/all?status=filled")
        assert filled.json()["items"] == []
