"""
Placement model - assignment of a volunteer to a hub.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.hub import Hub
    from app.models.volunteer_request import VolunteerRequest


class PlacementStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    COMPLETED = "completed"
    TERMINATED = "terminated"
    DECLINED = "declined"


class Placement(BaseModel):
    """Links a volunteer to a hub, optionally through a volunteer request."""
    __tablename__ = "placements"

    volunteer_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    hub_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("hubs.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    request_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("volunteer_requests.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    status: Mapped[PlacementStatus] = mapped_column(
        enum_type(PlacementStatus, "placementstatus"),
        default=PlacementStatus.PENDING,
        nullable=False,
        index=True
    )

    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    expected_end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    role: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    responsibilities: Mapped[list] = mapped_column(JSON, default=list)
    supervisor_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    # performance: rating, review, last_review_date
    performance: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    volunteer: Mapped["User"] = relationship("User", foreign_keys=[volunteer_id])
    hub: Mapped["Hub"] = relationship("Hub", foreign_keys=[hub_id])
    request: Mapped[Optional["VolunteerRequest"]] = relationship(
        "VolunteerRequest",
        foreign_keys=[request_id]
    )

    def __repr__(self) -> str:
        return f"<Placement {self.volunteer_id} @ {self.hub_id} ({self.status.value})>"
