"""
Pydantic schemas for placements.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.placement import PlacementStatus
from app.schemas.common import ExpandedUser, ExpandedHub


class PlacementCreate(BaseModel):
    """Volunteer application for a placement at a hub."""
    hub_id: str
    request_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    expected_end_date: Optional[datetime] = None
    role: Optional[str] = Field(None, max_length=200)
    responsibilities: list[str] = Field(default_factory=list)
    notes: Optional[str] = None


class PlacementStatusUpdate(BaseModel):
    status: PlacementStatus
    notes: Optional[str] = None


class ExpandedRequest(BaseModel):
    id: str
    title: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class PlacementResponse(BaseModel):
    id: str
    volunteer_id: str
    hub_id: str
    request_id: Optional[str] = None
    status: PlacementStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    expected_end_date: Optional[datetime] = None
    role: Optional[str] = None
    responsibilities: list[str] = Field(default_factory=list)
    supervisor_id: Optional[str] = None
    performance: Optional[dict] = None
    notes: Optional[str] = None
    volunteer: Optional[ExpandedUser] = None
    hub: Optional[ExpandedHub] = None
    request: Optional[ExpandedRequest] = None
    created: datetime
    updated: datetime
