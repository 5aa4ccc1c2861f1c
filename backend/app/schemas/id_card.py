"""
Pydantic schemas for ID cards.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel

from app.models.id_card import IDCardType, IDCardStatus
from app.schemas.common import ExpandedUser


class IDCardIssue(BaseModel):
    """Admin issuance for any user."""
    user_id: str
    type: Optional[IDCardType] = None
    expiry_date: Optional[datetime] = None
    photo: Optional[str] = None


class IDCardSelfService(BaseModel):
    photo: Optional[str] = None


class IDCardStatusUpdate(BaseModel):
    status: IDCardStatus


class IDCardResponse(BaseModel):
    id: str
    user_id: str
    card_number: str
    type: IDCardType
    status: IDCardStatus
    issued_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    issued_by_id: Optional[str] = None
    photo: Optional[str] = None
    qr_code: Optional[str] = None
    metadata: Optional[dict] = None
    print_count: int = 0
    last_printed_at: Optional[datetime] = None
    user: Optional[ExpandedUser] = None
    created: datetime
    updated: datetime


class IDCardVerification(BaseModel):
    """Public view of a card; exposes no contact details."""
    card_number: str
    type: IDCardType
    status: IDCardStatus
    name: str
    photo: Optional[str] = None
