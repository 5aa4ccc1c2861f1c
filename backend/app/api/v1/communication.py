"""
Mass communication endpoints.
"""
import logging
from datetime import datetime, timezone
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.permissions import require_admin, require_staff
from app.models.base import utcnow, loaded_relation
from app.models.communication import Communication, CommunicationStatus
from app.models.user import User
from app.schemas.common import ItemListResponse, expand_user
from app.schemas.communication import (
    CommunicationCreate, CommunicationResponse, CommunicationQueuedResponse
)
from app.services.communications import CommunicationDispatcher, get_communication_dispatcher

logger = logging.getLogger(__name__)

router = APIRouter()

SENDABLE_STATUSES = (CommunicationStatus.DRAFT, CommunicationStatus.SCHEDULED, CommunicationStatus.FAILED)


def communication_to_response(communication: Communication) -> CommunicationResponse:
    return CommunicationResponse(
        id=communication.id,
        type=communication.type,
        subject=communication.subject,
        content=communication.content,
        recipients=communication.recipients or {},
        status=communication.status,
        scheduled_at=communication.scheduled_at,
        sent_at=communication.sent_at,
        sent_count=communication.sent_count,
        failed_count=communication.failed_count,
        created_by_id=communication.created_by_id,
        attachments=communication.attachments or [],
        created_by=expand_user(loaded_relation(communication, "created_by")),
        created=communication.created,
        updated=communication.updated,
    )


def _is_future(value: datetime, now: datetime) -> bool:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value > now


@router.post("", response_model=CommunicationQueuedResponse, status_code=status.HTTP_201_CREATED)
async def create_communication(
    communication_data: CommunicationCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
    dispatcher: CommunicationDispatcher = Depends(get_communication_dispatcher)
):
    """
    Store a communication and queue it for delivery.

    Drafts and messages scheduled in the future are stored without sending.
    """
    now = utcnow()
    if communication_data.draft:
        initial_status = CommunicationStatus.DRAFT
    elif communication_data.scheduled_at and _is_future(communication_data.scheduled_at, now):
        initial_status = CommunicationStatus.SCHEDULED
    else:
        initial_status = CommunicationStatus.SENDING

    communication = Communication(
        type=communication_data.type,
        subject=communication_data.subject,
        content=communication_data.content,
        recipients=communication_data.recipients.model_dump(mode="json"),
        status=initial_status,
        scheduled_at=communication_data.scheduled_at,
        sent_count=0,
        failed_count=0,
        created_by_id=current_user.id,
        attachments=[a.model_dump() for a in communication_data.attachments],
        created=now,
        updated=now,
    )
    communication.created_by = current_user
    db.add(communication)
    await db.flush()

    if initial_status == CommunicationStatus.SENDING:
        dispatcher.schedule(background_tasks, communication.id)
        message = "Communication queued for sending"
    elif initial_status == CommunicationStatus.SCHEDULED:
        message = "Communication scheduled"
    else:
        message = "Communication saved as draft"
    logger.info("Communication %s created by %s (%s)", communication.id, current_user.id, initial_status.value)

    return CommunicationQueuedResponse(
        item=communication_to_response(communication),
        message=message
    )


@router.get("", response_model=ItemListResponse[CommunicationResponse])
async def list_communications(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    result = await db.execute(
        select(Communication)
        .options(selectinload(Communication.created_by))
        .order_by(Communication.created.desc())
    )
    return ItemListResponse(items=[communication_to_response(c) for c in result.scalars().all()])


@router.post("/{communication_id}/send", response_model=CommunicationQueuedResponse)
async def send_communication(
    communication_id: str,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff),
    dispatcher: CommunicationDispatcher = Depends(get_communication_dispatcher)
):
    """Send a draft or scheduled communication now."""
    result = await db.execute(
        select(Communication)
        .options(selectinload(Communication.created_by))
        .where(Communication.id == communication_id)
    )
    communication = result.scalar_one_or_none()
    if communication is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Communication not found"
        )
    if communication.status == CommunicationStatus.SENT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Communication already sent"
        )
    if communication.status not in SENDABLE_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Communication is already being sent"
        )

    communication.status = CommunicationStatus.SENDING
    communication.updated = utcnow()
    await db.flush()

    dispatcher.schedule(background_tasks, communication.id)

    return CommunicationQueuedResponse(
        item=communication_to_response(communication),
        message="Communication queued for sending"
    )
