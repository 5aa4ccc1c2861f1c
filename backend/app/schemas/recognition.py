"""
Pydantic schemas for recognitions.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.recognition import RecognitionType
from app.schemas.common import ExpandedUser


class RecognitionMetrics(BaseModel):
    hours_volunteered: Optional[float] = None
    activities_completed: Optional[int] = None
    impact_description: Optional[str] = None


class RecognitionCreate(BaseModel):
    user_id: str
    type: RecognitionType
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    issued_date: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    featured: bool = False
    image: Optional[str] = Field(None, max_length=500)
    metrics: Optional[RecognitionMetrics] = None


class RecognitionResponse(BaseModel):
    id: str
    user_id: str
    type: RecognitionType
    title: str
    description: Optional[str] = None
    category: Optional[str] = None
    issued_by_id: Optional[str] = None
    issued_date: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    featured: bool = False
    image: Optional[str] = None
    metrics: Optional[dict] = None
    user: Optional[ExpandedUser] = None
    issued_by: Optional[ExpandedUser] = None
    created: datetime
    updated: datetime
