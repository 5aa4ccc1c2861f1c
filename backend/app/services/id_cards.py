"""
ID card issuance.
"""
import json
import logging
import random
import string
import time
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.base import utcnow
from app.models.id_card import IDCard, IDCardStatus, IDCardType
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

BASE36 = string.digits + string.ascii_uppercase


def generate_card_number(role: UserRole, now_ms: Optional[int] = None) -> str:
    """Prefix + first two letters of the role + last 8 digits of the ms clock + 2 random chars."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    role_code = role.value[:2].upper()
    suffix = "".join(random.choices(BASE36, k=2))
    return f"{settings.ID_CARD_PREFIX}{role_code}{str(now_ms)[-8:]}{suffix}"


def card_type_for_role(role: UserRole) -> IDCardType:
    if role == UserRole.VOLUNTEER:
        return IDCardType.VOLUNTEER
    if role == UserRole.MEMBER:
        return IDCardType.MEMBER
    return IDCardType.STAFF


def qr_payload(card_number: str, user: User) -> str:
    return json.dumps({
        "card_number": card_number,
        "user_id": user.id,
        "name": user.name,
        "role": user.role.value,
        "verified": bool(user.verified),
    })


def default_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) + timedelta(days=settings.ID_CARD_VALIDITY_DAYS)


async def get_active_card(db: AsyncSession, user_id: str) -> Optional[IDCard]:
    result = await db.execute(
        select(IDCard).where(
            IDCard.user_id == user_id,
            IDCard.status == IDCardStatus.ACTIVE
        )
    )
    return result.scalars().first()


async def issue_card(
    db: AsyncSession,
    user: User,
    issued_by: Optional[User] = None,
    card_type: Optional[IDCardType] = None,
    expiry_date: Optional[datetime] = None,
    photo: Optional[str] = None,
) -> IDCard:
    """Create an active card for user. Callers check for an existing active card first."""
    now = utcnow()
    card_number = generate_card_number(user.role)
    card = IDCard(
        user_id=user.id,
        card_number=card_number,
        type=card_type or card_type_for_role(user.role),
        status=IDCardStatus.ACTIVE,
        issued_date=now,
        expiry_date=expiry_date or default_expiry(now),
        issued_by_id=issued_by.id if issued_by else None,
        photo=photo or user.photo,
        qr_code=qr_payload(card_number, user),
        card_metadata={"role": user.role.value, "self_service": issued_by is None},
        created=now,
        updated=now,
    )
    db.add(card)
    await db.flush()
    logger.info("Issued ID card %s to user %s", card.card_number, user.id)
    return card
