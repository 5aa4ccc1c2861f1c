"""
Pydantic schemas for trainings.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.training import TrainingCategory, TrainingLevel, TrainingStatus
from app.schemas.common import ExpandedUser


class Material(BaseModel):
    url: str
    type: Optional[str] = None
    name: Optional[str] = None


class Certification(BaseModel):
    provided: bool = False
    certificate_name: Optional[str] = None
    # Months
    valid_for: Optional[int] = Field(None, ge=0)


class TrainingCost(BaseModel):
    amount: Optional[float] = Field(None, ge=0)
    currency: str = "ETB"
    free: bool = True


class TrainingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    category: Optional[TrainingCategory] = None
    level: TrainingLevel = TrainingLevel.BEGINNER
    instructor_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    duration: Optional[float] = Field(None, ge=0)
    location: Optional[str] = Field(None, max_length=300)
    max_participants: Optional[int] = Field(None, ge=1)
    materials: list[Material] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    certification: Optional[Certification] = None
    cost: Optional[TrainingCost] = None


class TrainingStatusUpdate(BaseModel):
    status: TrainingStatus


class TrainingResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: Optional[TrainingCategory] = None
    level: TrainingLevel
    instructor_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    duration: Optional[float] = None
    location: Optional[str] = None
    max_participants: Optional[int] = None
    current_participants: int = 0
    status: TrainingStatus
    materials: list[dict] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    certification: Optional[dict] = None
    cost: Optional[dict] = None
    instructor: Optional[ExpandedUser] = None
    created: datetime
    updated: datetime
