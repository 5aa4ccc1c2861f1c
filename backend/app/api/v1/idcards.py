"""
ID card endpoints: issuance, self-service, public verification and printing.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.deps import get_current_user
from app.core.permissions import require_admin, require_role, ensure_user_exists
from app.models.base import utcnow, loaded_relation
from app.models.id_card import IDCard, IDCardStatus, IDCardType
from app.models.user import User, UserRole
from app.schemas.common import ItemListResponse, expand_user
from app.schemas.id_card import (
    IDCardIssue, IDCardSelfService, IDCardStatusUpdate, IDCardResponse, IDCardVerification
)
from app.services.id_cards import get_active_card, issue_card
from app.services.stats import increment

logger = logging.getLogger(__name__)

router = APIRouter()


def card_to_response(card: IDCard, fallback_photo: Optional[str] = None) -> IDCardResponse:
    return IDCardResponse(
        id=card.id,
        user_id=card.user_id,
        card_number=card.card_number,
        type=card.type,
        status=card.status,
        issued_date=card.issued_date,
        expiry_date=card.expiry_date,
        issued_by_id=card.issued_by_id,
        photo=card.photo or fallback_photo,
        qr_code=card.qr_code,
        metadata=card.card_metadata,
        print_count=card.print_count,
        last_printed_at=card.last_printed_at,
        user=expand_user(loaded_relation(card, "user")),
        created=card.created,
        updated=card.updated,
    )


async def ensure_no_active_card(db: AsyncSession, user_id: str) -> None:
    if await get_active_card(db, user_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already has an active ID card"
        )


async def get_card_or_404(db: AsyncSession, card_id: str) -> IDCard:
    result = await db.execute(
        select(IDCard).options(selectinload(IDCard.user)).where(IDCard.id == card_id)
    )
    card = result.scalar_one_or_none()
    if card is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="ID card not found"
        )
    return card


async def self_service_card(
    db: AsyncSession,
    user: User,
    card_data: IDCardSelfService,
    card_type: IDCardType,
) -> IDCard:
    """Issue a card to the caller; a photo is required, from the body or the profile."""
    await ensure_no_active_card(db, user.id)

    photo = card_data.photo or user.photo
    if not photo:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A photo is required to generate an ID card"
        )
    if card_data.photo and not user.photo:
        user.profile = {**(user.profile or {}), "photo": card_data.photo}
        user.updated = utcnow()

    expiry_date = None
    if card_type == IDCardType.MEMBER and user.membership_expiry:
        expiry_date = user.membership_expiry

    card = await issue_card(db, user, card_type=card_type, expiry_date=expiry_date, photo=photo)
    card.user = user
    return card


@router.post("", response_model=IDCardResponse, status_code=status.HTTP_201_CREATED)
async def issue_id_card(
    card_data: IDCardIssue,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Issue a card to any user. Admin only."""
    user = await ensure_user_exists(db, card_data.user_id)
    await ensure_no_active_card(db, user.id)

    card = await issue_card(
        db,
        user,
        issued_by=current_user,
        card_type=card_data.type,
        expiry_date=card_data.expiry_date,
        photo=card_data.photo,
    )
    card.user = user
    return card_to_response(card)


@router.post("/member", response_model=IDCardResponse, status_code=status.HTTP_201_CREATED)
async def generate_member_card(
    card_data: IDCardSelfService,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    require_role(current_user, [UserRole.MEMBER], detail="Only members can generate a member ID card")
    card = await self_service_card(db, current_user, card_data, IDCardType.MEMBER)
    return card_to_response(card)


@router.post("/volunteer", response_model=IDCardResponse, status_code=status.HTTP_201_CREATED)
async def generate_volunteer_card(
    card_data: IDCardSelfService,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    require_role(current_user, [UserRole.VOLUNTEER], detail="Only volunteers can generate a volunteer ID card")
    card = await self_service_card(db, current_user, card_data, IDCardType.VOLUNTEER)
    return card_to_response(card)


@router.get("/my", response_model=IDCardResponse)
async def my_card(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The caller's active card."""
    card = await get_active_card(db, current_user.id)
    if card is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No active ID card"
        )
    return card_to_response(card, fallback_photo=current_user.photo)


@router.get("/card/{card_number}", response_model=IDCardVerification)
async def verify_card(
    card_number: str,
    db: AsyncSession = Depends(get_db)
):
    """Public verification by card number."""
    result = await db.execute(
        select(IDCard).options(selectinload(IDCard.user)).where(IDCard.card_number == card_number)
    )
    card = result.scalar_one_or_none()
    if card is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="ID card not found"
        )
    return IDCardVerification(
        card_number=card.card_number,
        type=card.type,
        status=card.status,
        name=card.user.name,
        photo=card.photo or card.user.photo,
    )


@router.get("", response_model=ItemListResponse[IDCardResponse])
async def list_cards(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    result = await db.execute(
        select(IDCard).options(selectinload(IDCard.user)).order_by(IDCard.created.desc())
    )
    return ItemListResponse(items=[card_to_response(c) for c in result.scalars().all()])


@router.post("/{card_id}/print", response_model=IDCardResponse)
async def print_card(
    card_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Record a print of the card."""
    card = await get_card_or_404(db, card_id)
    if card.status != IDCardStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only active cards can be printed"
        )

    await increment(db, IDCard, card.id, print_count=1)
    card.last_printed_at = utcnow()
    card.updated = card.last_printed_at
    await db.flush()

    return card_to_response(card)


@router.patch("/{card_id}/status", response_model=IDCardResponse)
async def update_card_status(
    card_id: str,
    status_data: IDCardStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Revoke, expire or reactivate a card. Admin only."""
    card = await get_card_or_404(db, card_id)

    if status_data.status == IDCardStatus.ACTIVE and card.status != IDCardStatus.ACTIVE:
        await ensure_no_active_card(db, card.user_id)

    card.status = status_data.status
    card.updated = utcnow()
    await db.flush()
    logger.info("ID card %s set to %s by %s", card.card_number, card.status.value, current_user.id)

    return card_to_response(card)
