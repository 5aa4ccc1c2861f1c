"""
MembershipType model - paid membership plans.
"""
from typing import Optional
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, Boolean, Integer, Numeric, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, enum_type


class DurationType(str, Enum):
    MONTH = "month"
    YEAR = "year"


class MembershipType(BaseModel):
    """A plan such as Basic, Premium or Annual; duration counts duration_type units."""
    __tablename__ = "membership_types"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="ETB", nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_type: Mapped[DurationType] = mapped_column(
        enum_type(DurationType, "durationtype"),
        default=DurationType.YEAR,
        nullable=False
    )
    benefits: Mapped[list] = mapped_column(JSON, default=list)
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<MembershipType {self.name} {self.amount} {self.currency}>"
