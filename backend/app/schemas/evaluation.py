"""
Pydantic schemas for evaluations.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.evaluation import EvaluationType, EvaluationStatus
from app.schemas.common import ExpandedUser


class Ratings(BaseModel):
    """Each rating is on a 1-5 scale."""
    punctuality: Optional[int] = Field(None, ge=1, le=5)
    teamwork: Optional[int] = Field(None, ge=1, le=5)
    communication: Optional[int] = Field(None, ge=1, le=5)
    problem_solving: Optional[int] = Field(None, ge=1, le=5)
    dedication: Optional[int] = Field(None, ge=1, le=5)
    overall: Optional[int] = Field(None, ge=1, le=5)


class RelatedTo(BaseModel):
    type: Optional[str] = Field(None, pattern="^(activity|training|placement|hub)$")
    ref_id: Optional[str] = None


class EvaluationCreate(BaseModel):
    user_id: str
    type: EvaluationType
    related_to: Optional[RelatedTo] = None
    ratings: Optional[Ratings] = None
    comments: Optional[str] = None
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    recommendations: Optional[str] = None
    status: EvaluationStatus = EvaluationStatus.DRAFT


class EvaluationUpdate(BaseModel):
    ratings: Optional[Ratings] = None
    comments: Optional[str] = None
    strengths: Optional[list[str]] = None
    areas_for_improvement: Optional[list[str]] = None
    recommendations: Optional[str] = None
    status: Optional[EvaluationStatus] = None


class EvaluationResponse(BaseModel):
    id: str
    user_id: str
    evaluator_id: str
    type: EvaluationType
    related_to: Optional[dict] = None
    ratings: Optional[dict] = None
    comments: Optional[str] = None
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list)
    recommendations: Optional[str] = None
    status: EvaluationStatus
    user: Optional[ExpandedUser] = None
    evaluator: Optional[ExpandedUser] = None
    created: datetime
    updated: datetime
