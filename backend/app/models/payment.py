"""
Payment model for donations, membership fees and other charges.
"""
from typing import Optional, TYPE_CHECKING
from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, Numeric, DateTime, ForeignKey, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import BaseModel, enum_type

if TYPE_CHECKING:
    from app.models.user import User


class PaymentType(str, Enum):
    DONATION = "donation"
    MEMBERSHIP_FEE = "membership_fee"
    EVENT_FEE = "event_fee"
    TRAINING_FEE = "training_fee"
    OTHER = "other"


class PaymentMethod(str, Enum):
    MOBILE_MONEY = "mobile_money"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"
    CASH = "cash"
    OTHER = "other"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class Payment(BaseModel):
    """
    Payment record.

    user_id is empty for anonymous public donations.
    """
    __tablename__ = "payments"

    user_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    type: Mapped[PaymentType] = mapped_column(
        enum_type(PaymentType, "paymenttype"),
        nullable=False,
        index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="ETB", nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(
        enum_type(PaymentMethod, "paymentmethod"),
        nullable=False
    )
    transaction_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    status: Mapped[PaymentStatus] = mapped_column(
        enum_type(PaymentStatus, "paymentstatus"),
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True
    )
    # M-Pesa, Telebirr, CBE, chapa...
    payment_provider: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # "metadata" is reserved on declarative classes
    payment_metadata: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    receipt: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # related_to: type (event, project, hub, training), ref_id
    related_to: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped[Optional["User"]] = relationship("User", foreign_keys=[user_id])

    def __repr__(self) -> str:
        return f"<Payment {self.transaction_id} {self.amount} {self.currency} ({self.status.value})>"
