"""
Pydantic schemas for volunteer activities.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.activity import ActivityType, ActivityStatus
from app.schemas.common import ExpandedUser, ExpandedHub


class Attachment(BaseModel):
    url: str
    type: Optional[str] = None
    name: Optional[str] = None


class ActivityCreate(BaseModel):
    type: ActivityType
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=300)
    hub_id: Optional[str] = None
    event_id: Optional[str] = None
    project_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: ActivityStatus = ActivityStatus.SCHEDULED
    notes: Optional[str] = None
    attachments: list[Attachment] = Field(default_factory=list)


class ActivityUpdate(BaseModel):
    type: Optional[ActivityType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=300)
    hub_id: Optional[str] = None
    event_id: Optional[str] = None
    project_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[ActivityStatus] = None
    notes: Optional[str] = None
    attachments: Optional[list[Attachment]] = None


class ActivityVerify(BaseModel):
    verified: bool = True


class ActivityResponse(BaseModel):
    id: str
    user_id: str
    type: ActivityType
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    hub_id: Optional[str] = None
    event_id: Optional[str] = None
    project_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    hours: Optional[float] = None
    status: ActivityStatus
    verified: bool = False
    verified_by_id: Optional[str] = None
    notes: Optional[str] = None
    attachments: list[dict] = Field(default_factory=list)
    user: Optional[ExpandedUser] = None
    hub: Optional[ExpandedHub] = None
    created: datetime
    updated: datetime
