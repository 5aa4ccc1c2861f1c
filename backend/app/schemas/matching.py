"""
Pydantic schemas for volunteer matching and approval.
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.schemas.auth import UserStats
from app.schemas.hub import VolunteerRequestResponse
from app.schemas.common import ExpandedUser


class MatchCandidate(BaseModel):
    id: str
    name: str
    email: str
    phone: str = ""
    gender: Optional[str] = None
    profile: Optional[dict] = None
    address: Optional[dict] = None
    stats: UserStats
    match_score: float


class MatchResponse(BaseModel):
    request: VolunteerRequestResponse
    matches: list[MatchCandidate]
    total_matches: int
    requested: int


class ApproveRequest(BaseModel):
    volunteer_ids: list[str] = Field(..., min_length=1)

    @field_validator("volunteer_ids")
    @classmethod
    def dedupe(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class ApproveResponse(BaseModel):
    message: str
    request: VolunteerRequestResponse
    assigned_volunteers: list[ExpandedUser]
