"""
Pydantic schemas for membership types.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from app.models.membership_type import DurationType


class MembershipTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    currency: str = Field("ETB", min_length=3, max_length=3)
    duration: int = Field(..., ge=1)
    duration_type: DurationType = DurationType.YEAR
    benefits: list[str] = Field(default_factory=list)
    active: bool = True
    order: int = 0


class MembershipTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    duration: Optional[int] = Field(None, ge=1)
    duration_type: Optional[DurationType] = None
    benefits: Optional[list[str]] = None
    active: Optional[bool] = None
    order: Optional[int] = None


class MembershipTypeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    amount: Decimal
    currency: str
    duration: int
    duration_type: DurationType
    benefits: list[str] = Field(default_factory=list)
    active: bool = True
    order: int = 0
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True
