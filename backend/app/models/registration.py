"""
Registration model - a user's sign-up for an event, project or training.
"""
from enum import Enum
from sqlalchemy import String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, enum_type


class RegistrationType(str, Enum):
    EVENT = "event"
    PROJECT = "project"
    TRAINING = "training"


class RegistrationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Registration(BaseModel):
    """ref_id points at events, projects or trainings depending on type."""
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("user_id", "type", "ref_id", name="uq_registrations_user_type_ref"),
    )

    user_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    type: Mapped[RegistrationType] = mapped_column(
        enum_type(RegistrationType, "registrationtype"),
        nullable=False
    )
    ref_id: Mapped[str] = mapped_column(String(15), nullable=False, index=True)
    status: Mapped[RegistrationStatus] = mapped_column(
        enum_type(RegistrationStatus, "registrationstatus"),
        default=RegistrationStatus.PENDING,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"<Registration {self.user_id} -> {self.type.value}:{self.ref_id}>"
