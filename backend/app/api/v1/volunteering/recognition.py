"""
Recognition endpoints: awards and badges for volunteers and members.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.deps import get_current_user
from app.core.permissions import require_issuer, ensure_user_exists
from app.models.base import utcnow, loaded_relation
from app.models.recognition import Recognition, RecognitionType
from app.models.user import User
from app.schemas.common import ItemListResponse, expand_user
from app.schemas.recognition import RecognitionCreate, RecognitionResponse
from app.services.stats import increment_user_stats

logger = logging.getLogger(__name__)

router = APIRouter()


def recognition_to_response(recognition: Recognition) -> RecognitionResponse:
    return RecognitionResponse(
        id=recognition.id,
        user_id=recognition.user_id,
        type=recognition.type,
        title=recognition.title,
        description=recognition.description,
        category=recognition.category,
        issued_by_id=recognition.issued_by_id,
        issued_date=recognition.issued_date,
        expires_at=recognition.expires_at,
        featured=recognition.featured,
        image=recognition.image,
        metrics=recognition.metrics,
        user=expand_user(loaded_relation(recognition, "user")),
        issued_by=expand_user(loaded_relation(recognition, "issued_by")),
        created=recognition.created,
        updated=recognition.updated,
    )


@router.get("", response_model=ItemListResponse[RecognitionResponse])
async def list_recognitions(
    featured: Optional[bool] = None,
    type: Optional[RecognitionType] = None,
    db: AsyncSession = Depends(get_db)
):
    query = select(Recognition).options(selectinload(Recognition.user))
    if featured is not None:
        query = query.where(Recognition.featured == featured)
    if type:
        query = query.where(Recognition.type == type)
    query = query.order_by(Recognition.issued_date.desc())

    result = await db.execute(query)
    return ItemListResponse(items=[recognition_to_response(r) for r in result.scalars().all()])


@router.post("", response_model=RecognitionResponse, status_code=status.HTTP_201_CREATED)
async def create_recognition(
    recognition_data: RecognitionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_issuer)
):
    """Issue a recognition and count it on the recipient's stats."""
    recipient = await ensure_user_exists(db, recognition_data.user_id)

    now = utcnow()
    recognition = Recognition(
        user_id=recipient.id,
        type=recognition_data.type,
        title=recognition_data.title,
        description=recognition_data.description,
        category=recognition_data.category,
        issued_by_id=current_user.id,
        issued_date=recognition_data.issued_date or now,
        expires_at=recognition_data.expires_at,
        featured=recognition_data.featured,
        image=recognition_data.image,
        metrics=recognition_data.metrics.model_dump(exclude_none=True) if recognition_data.metrics else None,
        created=now,
        updated=now,
    )
    recognition.user = recipient
    recognition.issued_by = current_user
    db.add(recognition)
    await db.flush()

    await increment_user_stats(db, recipient.id, recognitions_received=1)
    logger.info("Recognition %s issued to user %s", recognition.id, recipient.id)

    return recognition_to_response(recognition)


@router.get("/my", response_model=ItemListResponse[RecognitionResponse])
async def my_recognitions(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(
        select(Recognition)
        .options(selectinload(Recognition.issued_by))
        .where(Recognition.user_id == current_user.id)
        .order_by(Recognition.issued_date.desc())
    )
    return ItemListResponse(items=[recognition_to_response(r) for r in result.scalars().all()])
