"""
IDCard model - printable identity cards for volunteers, members and staff.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type, utcnow

if TYPE_CHECKING:
    from app.models.user import User


class IDCardType(str, Enum):
    VOLUNTEER = "volunteer"
    MEMBER = "member"
    STAFF = "staff"


class IDCardStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


class IDCard(BaseModel):
    __tablename__ = "id_cards"

    user_id: Mapped[str] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    card_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    type: Mapped[IDCardType] = mapped_column(
        enum_type(IDCardType, "idcardtype"),
        nullable=False
    )
    status: Mapped[IDCardStatus] = mapped_column(
        enum_type(IDCardStatus, "idcardstatus"),
        default=IDCardStatus.ACTIVE,
        nullable=False,
        index=True
    )
    issued_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    expiry_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    issued_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    photo: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # JSON payload encoded into the card's QR code
    qr_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    card_metadata: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    print_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_printed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    issued_by: Mapped[Optional["User"]] = relationship("User", foreign_keys=[issued_by_id])

    def __repr__(self) -> str:
        return f"<IDCard {self.card_number} ({self.status.value})>"
