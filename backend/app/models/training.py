"""
Training model - courses volunteers can register for.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, Integer, Float, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type

if TYPE_CHECKING:
    from app.models.user import User


class TrainingCategory(str, Enum):
    FIRST_AID = "first_aid"
    DISASTER_RESPONSE = "disaster_response"
    LEADERSHIP = "leadership"
    TECHNICAL = "technical"
    SOFT_SKILLS = "soft_skills"
    OTHER = "other"


class TrainingLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TrainingStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Training(BaseModel):
    __tablename__ = "trainings"

    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[TrainingCategory]] = mapped_column(
        enum_type(TrainingCategory, "trainingcategory"),
        nullable=True,
        index=True
    )
    level: Mapped[TrainingLevel] = mapped_column(
        enum_type(TrainingLevel, "traininglevel"),
        default=TrainingLevel.BEGINNER,
        nullable=False
    )
    instructor_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    # Hours
    duration: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)

    # None means unlimited
    max_participants: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    current_participants: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    status: Mapped[TrainingStatus] = mapped_column(
        enum_type(TrainingStatus, "trainingstatus"),
        default=TrainingStatus.SCHEDULED,
        nullable=False,
        index=True
    )
    # materials: [{url, type, name}]
    materials: Mapped[list] = mapped_column(JSON, default=list)
    prerequisites: Mapped[list] = mapped_column(JSON, default=list)
    # certification: provided, certificate_name, valid_for (months)
    certification: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # cost: amount, currency, free
    cost: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    instructor: Mapped[Optional["User"]] = relationship("User", foreign_keys=[instructor_id])

    @property
    def is_full(self) -> bool:
        return self.max_participants is not None and self.current_participants >= self.max_participants

    def __repr__(self) -> str:
        return f"<Training {self.title} ({self.status.value})>"
