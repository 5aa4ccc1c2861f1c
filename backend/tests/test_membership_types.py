"""
Tests for membership type administration.
"""
import pytest
from httpx import AsyncClient

PLAN = {
    "name": "Student Member",
    "description": "Discounted membership for students",
    "amount": "100.00",
    "currency": "etb",
    "duration": 6,
    "duration_type": "month",
    "benefits": ["Newsletter"],
    "order": 2,
}


class TestMembershipTypes:

    @pytest.mark.asyncio
    async def test_create_and_get(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/v1/membership-types", headers=admin_headers, json=PLAN)
        assert response.status_code == 201
        created = response.json()
        assert created["currency"] == "ETB"
        assert created["duration_type"] == "month"
        assert float(created["amount"]) == 100.0

        fetched = await client.get(f"/api/v1/membership-types/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["name"] == "Student Member"

    @pytest.mark.asyncio
    async def test_create_requires_staff(self, client: AsyncClient, member_headers):
        response = await client.post("/api/v1/membership-types", headers=member_headers, json=PLAN)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_listing_order_and_inactive(self, client: AsyncClient, membership_type, admin_headers, member_headers):
        student = await client.post("/api/v1/membership-types", headers=admin_headers, json=PLAN)
        honorary = await client.post("/api/v1/membership-types", headers=admin_headers, json={
            **PLAN, "name": "Honorary", "amount": "0.00", "order": 1, "active": False
        })

        public = await client.get("/api/v1/membership-types")
        assert [t["name"] for t in public.json()["items"]] == ["Annual Member", "Student Member"]

        # admin=true is ignored for non-staff callers
        member_view = await client.get("/api/v1/membership-types?admin=true", headers=member_headers)
        assert len(member_view.json()["items"]) == 2

        admin_view = await client.get("/api/v1/membership-types?admin=true", headers=admin_headers)
        assert [t["id"] for t in admin_view.json()["items"]] == [
            honorary.json()["id"], membership_type.id, student.json()["id"]
        ]

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, membership_type, admin_headers):
        response = await client.put(f"/api/v1/membership-types/{membership_type.id}", headers=admin_headers, json={
            "amount": "650.00", "benefits": ["Newsletter", "Voting rights", "Annual dinner"]
        })
        assert response.status_code == 200
        assert float(response.json()["amount"]) == 650.0
        assert len(response.json()["benefits"]) == 3
        assert response.json()["name"] == "Annual Member"

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, membership_type, admin_headers):
        response = await client.delete(f"/api/v1/membership-types/{membership_type.id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Membership type deleted"

        gone = await client.get(f"/api/v1/membership-types/{membership_type.id}")
        assert gone.status_code == 404
