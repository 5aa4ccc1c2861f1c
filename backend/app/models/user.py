"""
User model: volunteers, members and staff accounts.
"""
from typing import Optional
from datetime import datetime, date
from enum import Enum
from sqlalchemy import String, Boolean, Integer, Float, Date, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, enum_type


class UserRole(str, Enum):
    """Platform-wide role of an account."""
    VOLUNTEER = "volunteer"
    MEMBER = "member"
    ADMIN = "admin"
    HUB_COORDINATOR = "hub_coordinator"
    EVALUATOR = "evaluator"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    PREFER_NOT_TO_SAY = "prefer_not_to_say"


class MembershipStatus(str, Enum):
    NONE = "none"
    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class VolunteerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"
    SUSPENDED = "suspended"


# Counter columns surfaced together as the user's "stats"
STAT_FIELDS = (
    "total_hours",
    "activities_completed",
    "donations_made",
    "trainings_completed",
    "recognitions_received",
)


class User(BaseModel):
    """User model for authentication, profile and volunteer statistics."""
    __tablename__ = "users"

    # Core auth fields
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        enum_type(UserRole, "userrole"),
        default=UserRole.VOLUNTEER,
        nullable=False,
        index=True
    )

    # Contact
    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    alternative_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Demographics (used by volunteer matching)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)
    gender: Mapped[Optional[Gender]] = mapped_column(enum_type(Gender, "gender"), nullable=True)

    # Document-shaped sections
    # address: city, region, subcity, woreda, kebele, street, postal_code
    address: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # identification: id_type, id_number
    identification: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # profile: photo, bio, skills[], qualifications[], languages[], emergency_contact
    profile: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    social_media: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # preferences: language, notifications, availability, interests, preferred_regions
    preferences: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Membership
    membership_status: Mapped[MembershipStatus] = mapped_column(
        enum_type(MembershipStatus, "membershipstatus"),
        default=MembershipStatus.NONE,
        nullable=False
    )
    membership_expiry: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    membership_type_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("membership_types.id", ondelete="SET NULL"),
        nullable=True
    )

    # Volunteer standing
    volunteer_status: Mapped[VolunteerStatus] = mapped_column(
        enum_type(VolunteerStatus, "volunteerstatus"),
        default=VolunteerStatus.ACTIVE,
        nullable=False,
        index=True
    )

    # Stats
    total_hours: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    activities_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    donations_made: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    trainings_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    recognitions_received: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Verification & activity
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Hub the account works for (coordinators, hub staff)
    hub_affiliation_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("hubs.id", ondelete="SET NULL", use_alter=True),
        nullable=True
    )

    @property
    def stats(self) -> dict:
        return {field: getattr(self, field) or 0 for field in STAT_FIELDS}

    @property
    def photo(self) -> Optional[str]:
        return (self.profile or {}).get("photo")

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"
