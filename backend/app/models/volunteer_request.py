"""
VolunteerRequest model - a hub's posting for volunteers.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type

if TYPE_CHECKING:
    from app.models.hub import Hub


class RequestCategory(str, Enum):
    HEALTH = "health"
    EDUCATION = "education"
    DISASTER = "disaster"
    COMMUNITY = "community"
    TECHNOLOGY = "technology"
    OTHER = "other"


class RequestStatus(str, Enum):
    OPEN = "open"
    FILLED = "filled"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class RequestPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Higher rank sorts first
PRIORITY_RANK = {
    RequestPriority.URGENT: 4,
    RequestPriority.HIGH: 3,
    RequestPriority.MEDIUM: 2,
    RequestPriority.LOW: 1,
}


class VolunteerRequest(BaseModel):
    """
    Volunteer request posted by a hub.

    criteria holds the matching constraints: age_min, age_max, gender,
    qualifications[], experience, languages[], availability[], custom_criteria.
    """
    __tablename__ = "volunteer_requests"

    hub_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("hubs.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[RequestCategory]] = mapped_column(
        enum_type(RequestCategory, "requestcategory"),
        nullable=True,
        index=True
    )
    required_skills: Mapped[list] = mapped_column(JSON, default=list)
    criteria: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # location: city, region, address, coordinates{lat, lng}
    location: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    number_of_volunteers: Mapped[int] = mapped_column(Integer, nullable=False)
    current_volunteers: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        enum_type(RequestStatus, "requeststatus"),
        default=RequestStatus.OPEN,
        nullable=False,
        index=True
    )

    # Staff member who approved the matched volunteers
    filled_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    filled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    priority: Mapped[RequestPriority] = mapped_column(
        enum_type(RequestPriority, "requestpriority"),
        default=RequestPriority.MEDIUM,
        nullable=False
    )
    # compensation: provided, type, amount, currency
    compensation: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    # Relationships
    hub: Mapped["Hub"] = relationship("Hub", foreign_keys=[hub_id])

    @property
    def priority_rank(self) -> int:
        return PRIORITY_RANK.get(self.priority, 0)

    def __repr__(self) -> str:
        return f"<VolunteerRequest {self.title} ({self.status.value})>"
