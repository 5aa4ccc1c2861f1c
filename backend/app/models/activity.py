"""
Activity model for volunteer hour tracking.

Activities are the timeline entries a volunteer logs: shifts, trainings,
meetings, events. Completed activities credit the user's hour totals.
"""
from typing import Optional, TYPE_CHECKING
from enum import Enum
from datetime import datetime
from sqlalchemy import String, Text, Boolean, Float, ForeignKey, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.hub import Hub
    from app.models.event import Event
    from app.models.project import Project


class ActivityType(str, Enum):
    """Kind of volunteer activity."""
    VOLUNTEER = "volunteer"
    TRAINING = "training"
    MEETING = "meeting"
    EVENT = "event"
    PLACEMENT = "placement"
    EVALUATION = "evaluation"
    OTHER = "other"


class ActivityStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Activity(BaseModel):
    """Activity logged by a user."""
    __tablename__ = "activities"

    user_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type: Mapped[ActivityType] = mapped_column(
        enum_type(ActivityType, "activitytype"),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)

    # Optional links
    hub_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("hubs.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    event_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("events.id", ondelete="SET NULL"),
        nullable=True
    )
    project_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True
    )

    start_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    status: Mapped[ActivityStatus] = mapped_column(
        enum_type(ActivityStatus, "activitystatus"),
        default=ActivityStatus.SCHEDULED,
        nullable=False,
        index=True
    )
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    # Set once the owner's stats have been credited for this activity
    stats_credited: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    verified_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # attachments: [{url, type, name}]
    attachments: Mapped[list] = mapped_column(JSON, default=list)

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    hub: Mapped[Optional["Hub"]] = relationship("Hub", foreign_keys=[hub_id])
    event: Mapped[Optional["Event"]] = relationship("Event", foreign_keys=[event_id])
    project: Mapped[Optional["Project"]] = relationship("Project", foreign_keys=[project_id])

    def __repr__(self) -> str:
        return f"<Activity {self.type.value}: {self.title}>"
