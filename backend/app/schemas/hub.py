"""
Pydantic schemas for hubs and their volunteer requests.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from app.models.hub import HubStatus, OrganizationType
from app.models.user import Gender
from app.models.volunteer_request import RequestCategory, RequestStatus, RequestPriority
from app.schemas.common import ExpandedHub


class Coordinates(BaseModel):
    lat: float
    lng: float


class HubAddress(BaseModel):
    city: Optional[str] = None
    region: Optional[str] = None
    street: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class ContactPerson(BaseModel):
    name: Optional[str] = None
    title: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class HubCreate(BaseModel):
    """Public hub registration."""
    name: str = Field(..., min_length=1, max_length=200)
    organization_type: OrganizationType
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    address: Optional[HubAddress] = None
    contact_person: Optional[ContactPerson] = None
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=500)
    social_media: Optional[dict] = None
    capacity: int = Field(0, ge=0)


class HubUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    organization_type: Optional[OrganizationType] = None
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[HubAddress] = None
    contact_person: Optional[ContactPerson] = None
    description: Optional[str] = None
    website: Optional[str] = Field(None, max_length=500)
    social_media: Optional[dict] = None
    capacity: Optional[int] = Field(None, ge=0)


class HubStatusUpdate(BaseModel):
    status: HubStatus


class HubResponse(BaseModel):
    id: str
    name: str
    organization_type: OrganizationType
    email: str
    phone: str
    address: Optional[dict] = None
    region: Optional[str] = None
    contact_person: Optional[dict] = None
    status: HubStatus
    verified: bool = False
    registration_date: Optional[datetime] = None
    description: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[dict] = None
    capacity: int = 0
    active_volunteers: int = 0
    registered_by_id: Optional[str] = None
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class RequestCriteria(BaseModel):
    """Matching constraints for a volunteer request."""
    age_min: Optional[int] = Field(None, ge=0)
    age_max: Optional[int] = Field(None, ge=0)
    gender: Optional[str] = Field(None, pattern="^(any|male|female|other)$")
    qualifications: list[str] = Field(default_factory=list)
    # Years
    experience: Optional[float] = Field(None, ge=0)
    languages: list[str] = Field(default_factory=list)
    availability: list[str] = Field(default_factory=list)
    custom_criteria: Optional[dict] = None


class RequestLocation(BaseModel):
    city: Optional[str] = None
    region: Optional[str] = None
    address: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class Compensation(BaseModel):
    provided: bool = False
    type: Optional[str] = Field(None, pattern="^(none|stipend|transport|meal|accommodation|mixed)$")
    amount: Optional[float] = Field(None, ge=0)
    currency: str = "ETB"


class VolunteerRequestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    category: Optional[RequestCategory] = None
    required_skills: list[str] = Field(default_factory=list)
    criteria: Optional[RequestCriteria] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[RequestLocation] = None
    number_of_volunteers: int = Field(..., ge=1)
    priority: RequestPriority = RequestPriority.MEDIUM
    compensation: Optional[Compensation] = None


class VolunteerRequestResponse(BaseModel):
    id: str
    hub_id: str
    title: str
    description: Optional[str] = None
    category: Optional[RequestCategory] = None
    required_skills: list[str] = Field(default_factory=list)
    criteria: Optional[dict] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[dict] = None
    region: Optional[str] = None
    number_of_volunteers: int
    current_volunteers: int = 0
    status: RequestStatus
    filled_by_id: Optional[str] = None
    filled_at: Optional[datetime] = None
    priority: RequestPriority
    compensation: Optional[dict] = None
    hub: Optional[ExpandedHub] = None
    created: datetime
    updated: datetime


class HubWithRequestCreate(BaseModel):
    hub: HubCreate
    request: VolunteerRequestCreate


class HubWithRequestResponse(BaseModel):
    hub: HubResponse
    request: VolunteerRequestResponse
    message: str
