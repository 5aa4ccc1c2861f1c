"""
Authentication and user schemas.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, TypeAdapter
from datetime import datetime, date

from app.models.user import UserRole, Gender, MembershipStatus, VolunteerStatus

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(value: str) -> str:
    """Normalise an address the way request bodies with an EmailStr field do."""
    return _email_adapter.validate_python(value)


class Address(BaseModel):
    city: Optional[str] = None
    region: Optional[str] = None
    subcity: Optional[str] = None
    woreda: Optional[str] = None
    kebele: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None


class Identification(BaseModel):
    id_type: Optional[str] = Field(None, pattern="^(national_id|passport|driving_license|other)$")
    id_number: Optional[str] = None


class Qualification(BaseModel):
    title: str
    institution: Optional[str] = None
    year: Optional[int] = None
    certificate: Optional[str] = None


class LanguageSkill(BaseModel):
    language: str
    proficiency: Optional[str] = Field(None, pattern="^(basic|conversational|fluent|native)$")


class EmergencyContact(BaseModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None


class ProfileData(BaseModel):
    """Volunteer profile; skills, qualifications and languages drive matching."""
    photo: Optional[str] = None
    bio: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    qualifications: list[Qualification] = Field(default_factory=list)
    languages: list[LanguageSkill] = Field(default_factory=list)
    emergency_contact: Optional[EmergencyContact] = None


class Preferences(BaseModel):
    language: Optional[str] = None
    notifications: Optional[dict] = None
    availability: list[dict] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    preferred_regions: list[str] = Field(default_factory=list)


class RegisterRequest(BaseModel):
    """User registration request."""
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.VOLUNTEER
    phone: str = Field("", max_length=50)
    alternative_phone: Optional[str] = Field(None, max_length=50)
    membership_type_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[Address] = None
    identification: Optional[Identification] = None
    profile: Optional[ProfileData] = None
    social_media: Optional[dict] = None
    preferences: Optional[Preferences] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserStats(BaseModel):
    total_hours: float = 0
    activities_completed: int = 0
    donations_made: int = 0
    trainings_completed: int = 0
    recognitions_received: int = 0


class UserSummary(BaseModel):
    """Compact user record returned alongside tokens."""
    id: str
    name: str
    email: str
    role: UserRole
    phone: str = ""
    stats: UserStats
    verified: bool = False
    membership_status: MembershipStatus = MembershipStatus.NONE
    membership_expiry: Optional[datetime] = None

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    token: str
    user: UserSummary


class UserResponse(BaseModel):
    """Full user record (never includes the password hash)."""
    id: str
    name: str
    email: str
    role: UserRole
    phone: str = ""
    alternative_phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[dict] = None
    identification: Optional[dict] = None
    profile: Optional[dict] = None
    social_media: Optional[dict] = None
    preferences: Optional[dict] = None
    membership_status: MembershipStatus
    membership_expiry: Optional[datetime] = None
    membership_type_id: Optional[str] = None
    volunteer_status: VolunteerStatus
    stats: UserStats
    verified: bool = False
    verified_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    hub_affiliation_id: Optional[str] = None
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Self-service profile update; role, status and hub affiliation are not editable here."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    alternative_phone: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[Address] = None
    identification: Optional[Identification] = None
    profile: Optional[ProfileData] = None
    social_media: Optional[dict] = None
    preferences: Optional[Preferences] = None


class PasswordChange(BaseModel):
    old_password: str
    new_password: str = Field(..., min_length=6)


class UserAdminUpdate(BaseModel):
    """Admin-only account changes."""
    role: Optional[UserRole] = None
    volunteer_status: Optional[VolunteerStatus] = None
    membership_status: Optional[MembershipStatus] = None
    verified: Optional[bool] = None
    hub_affiliation_id: Optional[str] = None
