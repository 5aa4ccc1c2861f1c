"""
Communication model - mass messages sent to users or hubs.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type

if TYPE_CHECKING:
    from app.models.user import User


class CommunicationChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    TELEGRAM = "telegram"
    FACEBOOK = "facebook"
    WHATSAPP = "whatsapp"


class RecipientType(str, Enum):
    ALL = "all"
    VOLUNTEERS = "volunteers"
    MEMBERS = "members"
    HUBS = "hubs"
    CUSTOM = "custom"
    ROLE = "role"


class CommunicationStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"


class Communication(BaseModel):
    """
    Mass communication.

    recipients: type, roles[], user_ids[], hub_ids[]
    """
    __tablename__ = "communications"

    type: Mapped[CommunicationChannel] = mapped_column(
        enum_type(CommunicationChannel, "communicationchannel"),
        nullable=False
    )
    subject: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    recipients: Mapped[dict] = mapped_column(JSON, default=dict)
    status: Mapped[CommunicationStatus] = mapped_column(
        enum_type(CommunicationStatus, "communicationstatus"),
        default=CommunicationStatus.DRAFT,
        nullable=False,
        index=True
    )
    scheduled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    sent_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    failed_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    attachments: Mapped[list] = mapped_column(JSON, default=list)

    created_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[created_by_id])

    def __repr__(self) -> str:
        return f"<Communication {self.type.value} ({self.status.value})>"
