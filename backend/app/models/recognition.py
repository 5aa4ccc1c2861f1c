"""
Recognition model - awards, badges and featured acknowledgements.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type, utcnow

if TYPE_CHECKING:
    from app.models.user import User


class RecognitionType(str, Enum):
    VOLUNTEER_OF_MONTH = "volunteer_of_month"
    OUTSTANDING_CONTRIBUTION = "outstanding_contribution"
    LONG_SERVICE = "long_service"
    ACHIEVEMENT = "achievement"
    AWARD = "award"
    BADGE = "badge"


class Recognition(BaseModel):
    __tablename__ = "recognitions"

    user_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type: Mapped[RecognitionType] = mapped_column(
        enum_type(RecognitionType, "recognitiontype"),
        nullable=False,
        index=True
    )
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    issued_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    issued_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Shown on the public announcement feed
    featured: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # metrics: hours_volunteered, activities_completed, impact_description
    metrics: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    issued_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[issued_by_id])

    def __repr__(self) -> str:
        return f"<Recognition {self.type.value}: {self.title}>"
