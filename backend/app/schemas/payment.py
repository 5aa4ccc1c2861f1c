"""
Pydantic schemas for payments and gateway checkouts.
"""
from typing import Any, Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, EmailStr, Field

from app.models.payment import PaymentType, PaymentMethod, PaymentStatus
from app.schemas.common import ExpandedUser


class PaymentRelatedTo(BaseModel):
    type: Optional[str] = Field(None, pattern="^(event|project|hub|training)$")
    ref_id: Optional[str] = None


class PaymentCreate(BaseModel):
    """Simulated in-app payment."""
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    type: PaymentType
    method: PaymentMethod
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    description: Optional[str] = None
    related_to: Optional[PaymentRelatedTo] = None


class PaymentStatusUpdate(BaseModel):
    """Manual settlement by an admin."""
    status: PaymentStatus
    failure_reason: Optional[str] = None
    receipt: Optional[str] = Field(None, max_length=500)


class PaymentResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    type: PaymentType
    amount: Decimal
    currency: str
    method: PaymentMethod
    transaction_id: str
    status: PaymentStatus
    payment_provider: Optional[str] = None
    metadata: Optional[dict] = None
    receipt: Optional[str] = None
    description: Optional[str] = None
    related_to: Optional[dict] = None
    processed_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    user: Optional[ExpandedUser] = None
    created: datetime
    updated: datetime


class PaymentInitiatedResponse(BaseModel):
    item: PaymentResponse
    message: str


class PaymentSummary(BaseModel):
    # Sum of completed amounts
    total: Decimal
    count: int


class PaymentListResponse(BaseModel):
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[PaymentResponse]
    summary: PaymentSummary


class DonationCheckout(BaseModel):
    first_name: Optional[str] = Field(None, max_length=100)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=50)
    title: Optional[str] = None
    return_url: Optional[str] = None
    description: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class MembershipCheckout(BaseModel):
    membership_type_id: str
    # Falls back to the membership type's price
    amount: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    email: Optional[EmailStr] = None
    phone_number: Optional[str] = Field(None, max_length=50)


class CheckoutResponse(BaseModel):
    response: Optional[Any] = None
    transaction_id: str
    payment_id: Optional[str] = None
    checkout_url: Optional[str] = None
