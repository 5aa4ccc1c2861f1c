"""
Tests for ID card issuance, self-service generation, verification and printing.
"""
import json
import pytest
from datetime import timedelta
from httpx import AsyncClient

from app.models.id_card import IDCard, IDCardType
from app.models.user import UserRole, MembershipStatus
from app.services.id_cards import generate_card_number, card_type_for_role
from tests.conftest import headers_for, now

PHOTO = "https://cdn.example.com/photos/abebe.jpg"


class TestCardNumbers:

    def test_card_number_format(self):
        number = generate_card_number(UserRole.VOLUNTEER, now_ms=1712345678901)
        assert number.startswith("ERCVO45678901")
        assert len(number) == len("ERCVO45678901") + 2

    def test_card_type_for_role(self):
        assert card_type_for_role(UserRole.VOLUNTEER) == IDCardType.VOLUNTEER
        assert card_type_for_role(UserRole.MEMBER) == IDCardType.MEMBER
        assert card_type_for_role(UserRole.HUB_COORDINATOR) == IDCardType.STAFF


class TestAdminIssuance:

    @pytest.mark.asyncio
    async def test_issue_card(self, client: AsyncClient, admin_user, admin_headers, volunteer_user):
        response = await client.post("/api/v1/idcards", headers=admin_headers, json={
            "user_id": volunteer_user.id, "photo": PHOTO
        })
        assert response.status_code == 201
        card = response.json()
        assert card["type"] == "volunteer"
        assert card["status"] == "active"
        assert card["issued_by_id"] == admin_user.id
        assert card["print_count"] == 0
        assert card["card_number"].startswith("ERCVO")
        assert json.loads(card["qr_code"])["user_id"] == volunteer_user.id

        again = await client.post("/api/v1/idcards", headers=admin_headers, json={"user_id": volunteer_user.id})
        assert again.status_code == 400
        assert again.json()["detail"] == "User already has an active ID card"

    @pytest.mark.asyncio
    async def test_issue_to_unknown_user(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/v1/idcards", headers=admin_headers, json={"user_id": "missing"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_issue_requires_admin(self, client: AsyncClient, coordinator_headers, volunteer_user):
        response = await client.post("/api/v1/idcards", headers=coordinator_headers, json={
            "user_id": volunteer_user.id
        })
        assert response.status_code == 403


class TestSelfService:

    @pytest.mark.asyncio
    async def test_volunteer_card_saves_photo(self, client: AsyncClient, volunteer_user, volunteer_headers):
        response = await client.post("/api/v1/idcards/volunteer", headers=volunteer_headers, json={"photo": PHOTO})
        assert response.status_code == 201
        assert response.json()["type"] == "volunteer"
        assert response.json()["photo"] == PHOTO
        assert volunteer_user.photo == PHOTO
        # Profile fields survive the photo update
        assert volunteer_user.profile["skills"] == ["first aid", "driving"]

        mine = await client.get("/api/v1/idcards/my", headers=volunteer_headers)
        assert mine.status_code == 200
        assert mine.json()["id"] == response.json()["id"]

    @pytest.mark.asyncio
    async def test_photo_required(self, client: AsyncClient, volunteer_headers):
        response = await client.post("/api/v1/idcards/volunteer", headers=volunteer_headers, json={})
        assert response.status_code == 400
        assert response.json()["detail"] == "A photo is required to generate an ID card"

    @pytest.mark.asyncio
    async def test_role_restrictions(self, client: AsyncClient, volunteer_headers, member_headers):
        wrong_member = await client.post("/api/v1/idcards/member", headers=volunteer_headers, json={"photo": PHOTO})
        assert wrong_member.status_code == 403
        wrong_volunteer = await client.post("/api/v1/idcards/volunteer", headers=member_headers, json={"photo": PHOTO})
        assert wrong_volunteer.status_code == 403

    @pytest.mark.asyncio
    async def test_member_card_expires_with_membership(self, client: AsyncClient, db_session, make_user):
        expiry = now() + timedelta(days=200)
        member = await make_user(
            UserRole.MEMBER,
            membership_status=MembershipStatus.ACTIVE,
            membership_expiry=expiry,
            profile={"photo": PHOTO},
        )
        response = await client.post("/api/v1/idcards/member", headers=headers_for(member), json={})
        assert response.status_code == 201

        card = await db_session.get(IDCard, response.json()["id"])
        assert card.type == IDCardType.MEMBER
        assert card.expiry_date == expiry
        assert card.photo == PHOTO

    @pytest.mark.asyncio
    async def test_no_active_card(self, client: AsyncClient, member_headers):
        response = await client.get("/api/v1/idcards/my", headers=member_headers)
        assert response.status_code == 404


class TestVerificationAndPrinting:

    async def issue(self, client: AsyncClient, admin_headers: dict, user_id: str) -> dict:
        response = await client.post("/api/v1/idcards", headers=admin_headers, json={
            "user_id": user_id, "photo": PHOTO
        })
        assert response.status_code == 201
        return response.json()

    @pytest.mark.asyncio
    async def test_public_verification(self, client: AsyncClient, admin_headers, volunteer_user):
        card = await self.issue(client, admin_headers, volunteer_user.id)

        response = await client.get(f"/api/v1/idcards/card/{card['card_number']}")
        assert response.status_code == 200
        assert response.json() == {
            "card_number": card["card_number"],
            "type": "volunteer",
            "status": "active",
            "name": "Abebe Kebede",
            "photo": PHOTO,
        }

        missing = await client.get("/api/v1/idcards/card/ERCXX00000000ZZ")
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_print_counts_and_revocation(self, client: AsyncClient, admin_headers, volunteer_user):
        card = await self.issue(client, admin_headers, volunteer_user.id)

        first = await client.post(f"/api/v1/idcards/{card['id']}/print", headers=admin_headers)
        second = await client.post(f"/api/v1/idcards/{card['id']}/print", headers=admin_headers)
        assert first.json()["print_count"] == 1
        assert second.json()["print_count"] == 2
        assert second.json()["last_printed_at"] is not None

        revoked = await client.patch(
            f"/api/v1/idcards/{card['id']}/status", headers=admin_headers, json={"status": "revoked"}
        )
        assert revoked.json()["status"] == "revoked"

        blocked = await client.post(f"/api/v1/idcards/{card['id']}/print", headers=admin_headers)
        assert blocked.status_code == 400
        assert blocked.json()["detail"] == "Only active cards can be printed"

    @pytest.mark.asyncio
    async def test_reactivation_blocked_by_newer_card(self, client: AsyncClient, admin_headers, volunteer_user):
        old = await self.issue(client, admin_headers, volunteer_user.id)
        await client.patch(f"/api/v1/idcards/{old['id']}/status", headers=admin_headers, json={"status": "revoked"})
        await self.issue(client, admin_headers, volunteer_user.id)

        response = await client.patch(
            f"/api/v1/idcards/{old['id']}/status", headers=admin_headers, json={"status": "active"}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_cards(self, client: AsyncClient, admin_headers, volunteer_user, member_user, volunteer_headers):
        await self.issue(client, admin_headers, volunteer_user.id)
        await self.issue(client, admin_headers, member_user.id)

        response = await client.get("/api/v1/idcards", headers=admin_headers)
        assert len(response.json()["items"]) == 2

        forbidden = await client.get("/api/v1/idcards", headers=volunteer_headers)
        assert forbidden.status_code == 403
