"""
Evaluation model - reviews of a volunteer's work.
"""
from typing import Optional, TYPE_CHECKING
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type

if TYPE_CHECKING:
    from app.models.user import User


class EvaluationType(str, Enum):
    PERFORMANCE = "performance"
    PLACEMENT = "placement"
    TRAINING = "training"
    VOLUNTEER_REQUEST = "volunteer_request"
    PERIODIC = "periodic"


class EvaluationStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    REVIEWED = "reviewed"


class Evaluation(BaseModel):
    """
    Evaluation of a user by an evaluator.

    ratings keys: punctuality, teamwork, communication, problem_solving,
    dedication, overall (each 1-5).
    """
    __tablename__ = "evaluations"

    user_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    evaluator_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type: Mapped[EvaluationType] = mapped_column(
        enum_type(EvaluationType, "evaluationtype"),
        nullable=False
    )
    # related_to: type (activity, training, placement, hub), ref_id
    related_to: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    ratings: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    strengths: Mapped[list] = mapped_column(JSON, default=list)
    areas_for_improvement: Mapped[list] = mapped_column(JSON, default=list)
    recommendations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[EvaluationStatus] = mapped_column(
        enum_type(EvaluationStatus, "evaluationstatus"),
        default=EvaluationStatus.DRAFT,
        nullable=False
    )

    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    evaluator: Mapped["User"] = relationship("User", foreign_keys=[evaluator_id])

    def __repr__(self) -> str:
        return f"<Evaluation {self.type.value} of {self.user_id}>"
