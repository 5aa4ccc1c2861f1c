"""
Tests for placement applications and status changes.
"""
import pytest
from httpx import AsyncClient

from app.models.hub import Hub, HubStatus, OrganizationType
from app.models.user import UserRole
from app.models.volunteer_request import RequestStatus
from tests.conftest import headers_for


class TestApply:

    @pytest.mark.asyncio
    async def test_apply_against_request(
        self, client: AsyncClient, volunteer_user, volunteer_headers, test_hub, test_request
    ):
        response = await client.post("/api/v1/placement", headers=volunteer_headers, json={
            "hub_id": test_hub.id,
            "request_id": test_request.id,
            "role": "First aider",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert data["volunteer_id"] == volunteer_user.id
        assert data["hub"]["name"] == test_hub.name
        assert data["request"]["title"] == test_request.title
        assert test_request.current_volunteers == 1
        assert test_request.status == RequestStatus.OPEN

    @pytest.mark.asyncio
    async def test_applications_fill_request(
        self, client: AsyncClient, make_user, test_hub, test_request
    ):
        for _ in range(test_request.number_of_volunteers):
            volunteer = await make_user(UserRole.VOLUNTEER)
            response = await client.post("/api/v1/placement", headers=headers_for(volunteer), json={
                "hub_id": test_hub.id,
                "request_id": test_request.id,
            })
            assert response.status_code == 201

        assert test_request.status == RequestStatus.FILLED

        latecomer = await make_user(UserRole.VOLUNTEER)
        response = await client.post("/api/v1/placement", headers=headers_for(latecomer), json={
            "hub_id": test_hub.id,
            "request_id": test_request.id,
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Volunteer request is not open"

    @pytest.mark.asyncio
    async def test_apply_request_from_other_hub(
        self, client: AsyncClient, db_session, volunteer_headers, test_request
    ):
        other = Hub(
            name="Other Hub",
            organization_type=OrganizationType.GOVERNMENT,
            email="other@example.com",
            phone="+251111999999",
            status=HubStatus.APPROVED,
        )
        db_session.add(other)
        await db_session.flush()

        response = await client.post("/api/v1/placement", headers=volunteer_headers, json={
            "hub_id": other.id,
            "request_id": test_request.id,
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Volunteer request belongs to another hub"

    @pytest.mark.asyncio
    async def test_only_volunteers_apply(self, client: AsyncClient, member_headers, test_hub):
        response = await client.post("/api/v1/placement", headers=member_headers, json={
            "hub_id": test_hub.id
        })
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_apply_unknown_hub(self, client: AsyncClient, volunteer_headers):
        response = await client.post("/api/v1/placement", headers=volunteer_headers, json={
            "hub_id": "nohub"
        })
        assert response.status_code == 404


class TestPlacementLifecycle:

    async def _apply(self, client, headers, hub_id) -> str:
        response = await client.post("/api/v1/placement", headers=headers, json={"hub_id": hub_id})
        assert response.status_code == 201
        return response.json()["id"]

    @pytest.mark.asyncio
    async def test_my_and_staff_listing(
        self, client: AsyncClient, volunteer_headers, coordinator_headers, test_hub
    ):
        placement_id = await self._apply(client, volunteer_headers, test_hub.id)

        mine = await client.get("/api/v1/placement/my", headers=volunteer_headers)
        assert [p["id"] for p in mine.json()["items"]] == [placement_id]

        staff = await client.get(f"/api/v1/placement?status=pending&hub={test_hub.id}", headers=coordinator_headers)
        assert staff.status_code == 200
        items = staff.json()["items"]
        assert [p["id"] for p in items] == [placement_id]
        assert items[0]["volunteer"]["email"] == "volunteer@example.com"

        forbidden = await client.get("/api/v1/placement", headers=volunteer_headers)
        assert forbidden.status_code == 403

    @pytest.mark.asyncio
    async def test_affiliated_user_activates_and_completes(
        self, client: AsyncClient, make_user, volunteer_headers, test_hub
    ):
        placement_id = await self._apply(client, volunteer_headers, test_hub.id)
        coordinator = await make_user(UserRole.HUB_COORDINATOR, hub_affiliation_id=test_hub.id)

        active = await client.patch(
            f"/api/v1/placement/{placement_id}/status",
            headers=headers_for(coordinator),
            json={"status": "active"},
        )
        assert active.status_code == 200
        assert active.json()["start_date"] is not None
        assert active.json()["end_date"] is None

        completed = await client.patch(
            f"/api/v1/placement/{placement_id}/status",
            headers=headers_for(coordinator),
            json={"status": "completed", "notes": "Great work"},
        )
        assert completed.json()["status"] == "completed"
        assert completed.json()["end_date"] is not None
        assert completed.json()["notes"] == "Great work"

    @pytest.mark.asyncio
    async def test_unaffiliated_user_cannot_update(
        self, client: AsyncClient, volunteer_headers, coordinator_headers, test_hub
    ):
        placement_id = await self._apply(client, volunteer_headers, test_hub.id)
        response = await client.patch(
            f"/api/v1/placement/{placement_id}/status",
            headers=coordinator_headers,
            json={"status": "approved"},
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_placement(self, client: AsyncClient, admin_headers):
        response = await client.patch(
            "/api/v1/placement/missing/status", headers=admin_headers, json={"status": "approved"}
        )
        assert response.status_code == 404
