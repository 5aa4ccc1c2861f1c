"""
Volunteer matching.

Candidates are filtered on hard criteria (role, status, age, gender, skills,
qualifications, languages), then ranked by a weighted score:

    skills          40  share of required skills the volunteer has
    experience      20  total logged hours, capped at 100 hours
    qualifications  20  share of required qualifications (when any)
    languages       20  share of required languages (when any)
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole, VolunteerStatus
from app.models.volunteer_request import VolunteerRequest

logger = logging.getLogger(__name__)

SKILL_WEIGHT = 40.0
EXPERIENCE_WEIGHT = 20.0
QUALIFICATION_WEIGHT = 20.0
LANGUAGE_WEIGHT = 20.0
# Hours at which the experience component saturates
EXPERIENCE_HOURS_CAP = 100.0


@dataclass
class ScoredCandidate:
    user: User
    score: float


def _lower(values: Iterable) -> list[str]:
    return [str(v).lower() for v in values if v]


def _qualification_titles(profile: dict) -> list[str]:
    return _lower(q.get("title") for q in profile.get("qualifications") or [] if isinstance(q, dict))


def _language_names(profile: dict) -> list[str]:
    return _lower(l.get("language") for l in profile.get("languages") or [] if isinstance(l, dict))


def _count_substring_matches(required: Iterable[str], available: list[str]) -> int:
    """Count required terms that appear (case-insensitively) inside any available value."""
    return sum(1 for term in _lower(required) if any(term in value for value in available))


def birth_date_bounds(criteria: dict, today: date) -> tuple[Optional[date], Optional[date]]:
    """
    Translate age_min/age_max into date_of_birth bounds.

    Returns (born_on_or_before, born_after); either may be None.
    """
    born_on_or_before = None
    born_after = None
    if criteria.get("age_min") is not None:
        born_on_or_before = today - relativedelta(years=int(criteria["age_min"]))
    if criteria.get("age_max") is not None:
        born_after = today - relativedelta(years=int(criteria["age_max"]) + 1)
    return born_on_or_before, born_after


def candidate_query(request: VolunteerRequest, today: date):
    """SQL side of the filter: role, status, age and gender."""
    criteria = request.criteria or {}
    query = select(User).where(
        User.role == UserRole.VOLUNTEER,
        User.volunteer_status == VolunteerStatus.ACTIVE,
    )

    born_on_or_before, born_after = birth_date_bounds(criteria, today)
    if born_on_or_before is not None:
        query = query.where(User.date_of_birth <= born_on_or_before)
    if born_after is not None:
        query = query.where(User.date_of_birth > born_after)

    gender = criteria.get("gender")
    if gender and gender != "any":
        query = query.where(User.gender == gender)

    return query.order_by(User.created.asc())


def passes_profile_filters(profile: Optional[dict], request: VolunteerRequest) -> bool:
    """Python side of the filter, over the JSON profile."""
    profile = profile or {}
    criteria = request.criteria or {}

    required_skills = request.required_skills or []
    if required_skills:
        skills = set(profile.get("skills") or [])
        if not any(skill in skills for skill in required_skills):
            return False

    required_quals = criteria.get("qualifications") or []
    if required_quals and _count_substring_matches(required_quals, _qualification_titles(profile)) == 0:
        return False

    required_langs = criteria.get("languages") or []
    if required_langs and _count_substring_matches(required_langs, _language_names(profile)) == 0:
        return False

    return True


def score_candidate(
    profile: Optional[dict],
    total_hours: float,
    required_skills: list[str],
    criteria: Optional[dict],
) -> float:
    """Weighted match score in [0, 100]."""
    profile = profile or {}
    criteria = criteria or {}

    skills = _lower(profile.get("skills") or [])
    matched_skills = _count_substring_matches(required_skills or [], skills)
    score = SKILL_WEIGHT * matched_skills / max(1, len(required_skills or []))

    if total_hours:
        score += min(EXPERIENCE_WEIGHT, total_hours / EXPERIENCE_HOURS_CAP * EXPERIENCE_WEIGHT)

    required_quals = criteria.get("qualifications") or []
    if required_quals:
        matched = _count_substring_matches(required_quals, _qualification_titles(profile))
        score += QUALIFICATION_WEIGHT * matched / len(required_quals)

    required_langs = criteria.get("languages") or []
    if required_langs:
        matched = _count_substring_matches(required_langs, _language_names(profile))
        score += LANGUAGE_WEIGHT * matched / len(required_langs)

    return score


def rank_candidates(users: Iterable[User], request: VolunteerRequest) -> list[ScoredCandidate]:
    """Score every user and sort best first; ties keep their input order."""
    scored = [
        ScoredCandidate(
            user=user,
            score=score_candidate(user.profile, user.total_hours or 0, request.required_skills or [], request.criteria),
        )
        for user in users
    ]
    scored.sort(key=lambda c: c.score, reverse=True)
    return scored


async def find_matches(
    db: AsyncSession,
    request: VolunteerRequest,
    buffer: int,
    today: Optional[date] = None,
) -> tuple[list[ScoredCandidate], int]:
    """
    Run the matcher for a request.

    Returns the top number_of_volunteers + buffer candidates and the total
    number of volunteers that passed the filters.
    """
    today = today or date.today()
    result = await db.execute(candidate_query(request, today))
    users = [u for u in result.scalars().all() if passes_profile_filters(u.profile, request)]

    ranked = rank_candidates(users, request)
    limit = request.number_of_volunteers + buffer
    logger.info(
        "Matched request %s: %d candidates passed filters, returning %d",
        request.id, len(users), min(limit, len(ranked))
    )
    return ranked[:limit], len(users)
