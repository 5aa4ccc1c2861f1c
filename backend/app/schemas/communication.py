"""
Pydantic schemas for mass communications.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.communication import CommunicationChannel, CommunicationStatus, RecipientType
from app.models.user import UserRole
from app.schemas.common import ExpandedUser


class Recipients(BaseModel):
    type: RecipientType = RecipientType.ALL
    roles: list[UserRole] = Field(default_factory=list)
    user_ids: list[str] = Field(default_factory=list)
    hub_ids: list[str] = Field(default_factory=list)


class CommunicationAttachment(BaseModel):
    url: str
    type: Optional[str] = None
    name: Optional[str] = None


class CommunicationCreate(BaseModel):
    type: CommunicationChannel
    subject: Optional[str] = Field(None, max_length=300)
    content: str = Field(..., min_length=1)
    recipients: Recipients = Field(default_factory=Recipients)
    scheduled_at: Optional[datetime] = None
    # Store without sending
    draft: bool = False
    attachments: list[CommunicationAttachment] = Field(default_factory=list)


class CommunicationResponse(BaseModel):
    id: str
    type: CommunicationChannel
    subject: Optional[str] = None
    content: str
    recipients: dict
    status: CommunicationStatus
    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    sent_count: int = 0
    failed_count: int = 0
    created_by_id: Optional[str] = None
    attachments: list[dict] = Field(default_factory=list)
    created_by: Optional[ExpandedUser] = None
    created: datetime
    updated: datetime


class CommunicationQueuedResponse(BaseModel):
    item: CommunicationResponse
    message: str
