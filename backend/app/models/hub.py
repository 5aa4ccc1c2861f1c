"""
Hub model - partner organizations that host volunteers.
"""
from typing import Optional
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, Boolean, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, enum_type, utcnow


class OrganizationType(str, Enum):
    NGO = "ngo"
    GOVERNMENT = "government"
    PRIVATE = "private"
    ACADEMIC = "academic"
    OTHER = "other"


class HubStatus(str, Enum):
    """Approval state of a hub."""
    PENDING = "pending"
    APPROVED = "approved"
    SUSPENDED = "suspended"
    REJECTED = "rejected"


class Hub(BaseModel):
    """
    Hub (partner organization).

    Hubs register publicly and start out pending until an admin approves them.
    """
    __tablename__ = "hubs"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    organization_type: Mapped[OrganizationType] = mapped_column(
        enum_type(OrganizationType, "organizationtype"),
        nullable=False
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)

    # address: city, region, street, coordinates{lat, lng}
    address: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # Copied from address.region so hubs can be filtered and grouped in SQL
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    # contact_person: name, title, email, phone
    contact_person: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    status: Mapped[HubStatus] = mapped_column(
        enum_type(HubStatus, "hubstatus"),
        default=HubStatus.PENDING,
        nullable=False,
        index=True
    )
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    registration_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    social_media: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Max volunteers the hub can host
    capacity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    active_volunteers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    registered_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<Hub {self.name} ({self.status.value})>"
