"""
Tests for volunteer matching: the scoring rules and the match/approve endpoints.
"""
import pytest
from datetime import date
from httpx import AsyncClient
from sqlalchemy import select

from app.core.config import settings
from app.models.hub import Hub
from app.models.placement import Placement, PlacementStatus
from app.models.user import UserRole, VolunteerStatus, Gender
from app.models.volunteer_request import VolunteerRequest, RequestPriority, RequestStatus
from app.services.matching import birth_date_bounds, passes_profile_filters, score_candidate


def make_request(**fields) -> VolunteerRequest:
    defaults = dict(
        hub_id="hub",
        title="Request",
        required_skills=[],
        criteria={},
        number_of_volunteers=1,
        status=RequestStatus.OPEN,
        priority=RequestPriority.MEDIUM,
    )
    defaults.update(fields)
    return VolunteerRequest(**defaults)


class TestScoring:

    def test_skills_and_experience(self):
        profile = {"skills": ["First Aid", "driving"]}
        score = score_candidate(profile, 50, ["first aid", "logistics"], {})
        # Half the skills (20) plus half the experience cap (10)
        assert score == pytest.approx(30.0)

    def test_experience_is_capped(self):
        assert score_candidate({}, 1000, [], {}) == pytest.approx(20.0)

    def test_qualifications_and_languages_only_count_when_required(self):
        profile = {
            "skills": ["nursing"],
            "qualifications": [{"title": "Certified Nurse"}],
            "languages": [{"language": "Amharic"}, {"language": "English"}],
        }
        without = score_candidate(profile, 0, ["nursing"], {})
        assert without == pytest.approx(40.0)

        with_criteria = score_candidate(
            profile, 0, ["nursing"], {"qualifications": ["nurse"], "languages": ["amharic", "tigrinya"]}
        )
        assert with_criteria == pytest.approx(40.0 + 20.0 + 10.0)

    def test_birth_date_bounds(self):
        today = date(2026, 6, 15)
        on_or_before, after = birth_date_bounds({"age_min": 18, "age_max": 30}, today)
        assert on_or_before == date(2008, 6, 15)
        assert after == date(1995, 6, 15)
        assert birth_date_bounds({}, today) == (None, None)

    def test_profile_filters(self):
        request = make_request(required_skills=["first aid"], criteria={"languages": ["oromo"]})
        assert passes_profile_filters(
            {"skills": ["first aid"], "languages": [{"language": "Afaan Oromo"}]}, request
        )
        assert not passes_profile_filters({"skills": ["cooking"]}, request)
        assert not passes_profile_filters({"skills": ["first aid"], "languages": []}, request)
        assert passes_profile_filters(None, make_request())


class TestMatchEndpoint:

    @pytest.mark.asyncio
    async def test_match_ranks_candidates(
        self, client: AsyncClient, make_user, test_request, coordinator_headers
    ):
        experienced = await make_user(
            UserRole.VOLUNTEER, name="Experienced", total_hours=100,
            profile={"skills": ["first aid"]}
        )
        novice = await make_user(UserRole.VOLUNTEER, name="Novice", profile={"skills": ["first aid"]})
        await make_user(UserRole.VOLUNTEER, name="No skills", profile={"skills": ["cooking"]})
        await make_user(
            UserRole.VOLUNTEER, name="On leave", volunteer_status=VolunteerStatus.ON_LEAVE,
            profile={"skills": ["first aid"]}
        )
        await make_user(UserRole.MEMBER, name="Member", profile={"skills": ["first aid"]})

        response = await client.post(
            f"/api/v1/volunteer-matching/match/{test_request.id}", headers=coordinator_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_matches"] == 2
        assert data["requested"] == 2
        assert [m["id"] for m in data["matches"]] == [experienced.id, novice.id]
        assert data["matches"][0]["match_score"] == 60.0
        assert data["matches"][1]["match_score"] == 40.0

    @pytest.mark.asyncio
    async def test_match_applies_age_and_gender(
        self, client: AsyncClient, make_user, db_session, test_request, coordinator_headers
    ):
        test_request.criteria = {"age_min": 18, "age_max": 35, "gender": "female"}
        test_request.required_skills = []
        await db_session.flush()

        today = date.today()
        match = await make_user(
            UserRole.VOLUNTEER, gender=Gender.FEMALE, date_of_birth=date(today.year - 25, 1, 1)
        )
        await make_user(UserRole.VOLUNTEER, gender=Gender.MALE, date_of_birth=date(today.year - 25, 1, 1))
        await make_user(UserRole.VOLUNTEER, gender=Gender.FEMALE, date_of_birth=date(today.year - 60, 1, 1))
        await make_user(UserRole.VOLUNTEER, gender=Gender.FEMALE, date_of_birth=None)

        response = await client.post(
            f"/api/v1/volunteer-matching/match/{test_request.id}", headers=coordinator_headers
        )
        assert response.status_code == 200
        assert [m["id"] for m in response.json()["matches"]] == [match.id]

    @pytest.mark.asyncio
    async def test_match_returns_requested_plus_buffer(
        self, client: AsyncClient, make_user, test_request, admin_headers
    ):
        limit = test_request.number_of_volunteers + settings.MATCH_RESULT_BUFFER
        for hours in range(limit + 3):
            await make_user(UserRole.VOLUNTEER, total_hours=hours * 10, profile={"skills": ["first aid"]})

        response = await client.post(
            f"/api/v1/volunteer-matching/match/{test_request.id}", headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data["matches"]) == limit
        assert data["total_matches"] == limit + 3
        scores = [m["match_score"] for m in data["matches"]]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.asyncio
    async def test_match_filled_request(self, client: AsyncClient, db_session, test_request, admin_headers):
        test_request.status = RequestStatus.FILLED
        await db_session.flush()

        response = await client.post(
            f"/api/v1/volunteer-matching/match/{test_request.id}", headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Request is already filled"

    @pytest.mark.asyncio
    async def test_match_requires_staff(self, client: AsyncClient, test_request, volunteer_headers):
        response = await client.post(
            f"/api/v1/volunteer-matching/match/{test_request.id}", headers=volunteer_headers
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_match_unknown_request(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/v1/volunteer-matching/match/missing", headers=admin_headers)
        assert response.status_code == 404


class TestApproveEndpoint:

    @pytest.mark.asyncio
    async def test_approve_fills_request(
        self, client: AsyncClient, db_session, make_user, test_request, test_hub,
        admin_user, admin_headers
    ):
        first = await make_user(UserRole.VOLUNTEER)
        second = await make_user(UserRole.VOLUNTEER)

        response = await client.post(
            f"/api/v1/volunteer-matching/approve/{test_request.id}",
            headers=admin_headers,
            json={"volunteer_ids": [first.id, second.id, first.id]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "2 volunteer(s) assigned successfully"
        assert data["request"]["status"] == "filled"
        assert data["request"]["current_volunteers"] == 2
        assert data["request"]["filled_by_id"] == admin_user.id
        assert [v["id"] for v in data["assigned_volunteers"]] == [first.id, second.id]

        result = await db_session.execute(
            select(Placement).where(Placement.request_id == test_request.id)
        )
        placements = result.scalars().all()
        assert {p.volunteer_id for p in placements} == {first.id, second.id}
        assert all(p.status == PlacementStatus.ACTIVE for p in placements)
        assert all(p.role == test_request.title for p in placements)

        hub = await db_session.get(Hub, test_hub.id)
        assert hub.active_volunteers == 2

        again = await client.post(
            f"/api/v1/volunteer-matching/approve/{test_request.id}",
            headers=admin_headers,
            json={"volunteer_ids": [first.id]},
        )
        assert again.status_code == 400
        assert again.json()["detail"] == "Request is already filled"

    @pytest.mark.asyncio
    async def test_approve_rejects_non_volunteers(
        self, client: AsyncClient, test_request, member_user, admin_headers
    ):
        response = await client.post(
            f"/api/v1/volunteer-matching/approve/{test_request.id}",
            headers=admin_headers,
            json={"volunteer_ids": [member_user.id]},
        )
        assert response.status_code == 400
        assert member_user.id in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_approve_requires_ids(self, client: AsyncClient, test_request, admin_headers):
        response = await client.post(
            f"/api/v1/volunteer-matching/approve/{test_request.id}",
            headers=admin_headers,
            json={"volunteer_ids": []},
        )
        assert response.status_code == 422


class TestPendingRequests:

    @pytest.mark.asyncio
    async def test_pending_sorted_by_priority(
        self, client: AsyncClient, db_session, test_hub, coordinator_headers
    ):
        for title, priority in (("low", RequestPriority.LOW), ("urgent", RequestPriority.URGENT),
                                ("medium", RequestPriority.MEDIUM)):
            db_session.add(VolunteerRequest(
                hub_id=test_hub.id,
                title=title,
                number_of_volunteers=1,
                status=RequestStatus.OPEN,
                priority=priority,
            ))
        db_session.add(VolunteerRequest(
            hub_id=test_hub.id,
            title="closed",
            number_of_volunteers=1,
            status=RequestStatus.CLOSED,
            priority=RequestPriority.URGENT,
        ))
        await db_session.flush()

        response = await client.get("/api/v1/volunteer-matching/pending", headers=coordinator_headers)
        assert response.status_code == 200
        assert [r["title"] for r in response.json()["items"]] == ["urgent", "medium", "low"]
