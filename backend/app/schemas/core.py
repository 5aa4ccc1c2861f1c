"""
Pydantic schemas for events, projects and registrations.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.project import ProjectStatus
from app.models.registration import RegistrationType, RegistrationStatus


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    location: Optional[str] = Field(None, max_length=300)
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    capacity: Optional[int] = Field(None, ge=1)


class EventResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    location: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    capacity: Optional[int] = None
    created_by_id: Optional[str] = None
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    summary: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PLANNING
    leads: list[str] = Field(default_factory=list)


class ProjectResponse(BaseModel):
    id: str
    name: str
    summary: Optional[str] = None
    status: ProjectStatus
    leads: list[str] = Field(default_factory=list)
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class RegistrationCreate(BaseModel):
    type: RegistrationType
    ref_id: str


class RegistrationResponse(BaseModel):
    id: str
    user_id: str
    type: RegistrationType
    ref_id: str
    status: RegistrationStatus
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True
