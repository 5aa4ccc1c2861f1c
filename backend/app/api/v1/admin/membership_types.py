"""
Membership type endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.deps import get_current_user_optional
from app.core.permissions import require_staff, has_role, ADMIN_ROLES
from app.models.base import utcnow
from app.models.membership_type import MembershipType
from app.models.user import User
from app.schemas.common import ItemListResponse, MessageResponse
from app.schemas.membership_type import (
    MembershipTypeCreate, MembershipTypeUpdate, MembershipTypeResponse
)

router = APIRouter()


async def get_type_or_404(db: AsyncSession, type_id: str) -> MembershipType:
    result = await db.execute(select(MembershipType).where(MembershipType.id == type_id))
    membership_type = result.scalar_one_or_none()
    if membership_type is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membership type not found"
        )
    return membership_type


@router.get("", response_model=ItemListResponse[MembershipTypeResponse])
async def list_membership_types(
    admin: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional)
):
    """Active membership types; staff passing admin=true also see inactive ones."""
    query = select(MembershipType)
    if not (admin and has_role(current_user, ADMIN_ROLES)):
        query = query.where(MembershipType.active == True)
    query = query.order_by(MembershipType.order.asc(), MembershipType.amount.asc())

    result = await db.execute(query)
    return ItemListResponse(items=[MembershipTypeResponse.model_validate(t) for t in result.scalars().all()])


@router.get("/{type_id}", response_model=MembershipTypeResponse)
async def get_membership_type(
    type_id: str,
    db: AsyncSession = Depends(get_db)
):
    membership_type = await get_type_or_404(db, type_id)
    return MembershipTypeResponse.model_validate(membership_type)


@router.post("", response_model=MembershipTypeResponse, status_code=status.HTTP_201_CREATED)
async def create_membership_type(
    type_data: MembershipTypeCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    now = utcnow()
    membership_type = MembershipType(
        **type_data.model_dump(),
        created=now,
        updated=now,
    )
    membership_type.currency = membership_type.currency.upper()
    db.add(membership_type)
    await db.flush()

    return MembershipTypeResponse.model_validate(membership_type)


@router.put("/{type_id}", response_model=MembershipTypeResponse)
async def update_membership_type(
    type_id: str,
    type_data: MembershipTypeUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    membership_type = await get_type_or_404(db, type_id)

    updates = type_data.model_dump(exclude_unset=True)
    for field, value in updates.items():
        if field == "description" or value is not None:
            setattr(membership_type, field, value)
    if "currency" in updates and updates["currency"]:
        membership_type.currency = updates["currency"].upper()

    membership_type.updated = utcnow()
    await db.flush()

    return MembershipTypeResponse.model_validate(membership_type)


@router.delete("/{type_id}", response_model=MessageResponse)
async def delete_membership_type(
    type_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    membership_type = await get_type_or_404(db, type_id)
    await db.delete(membership_type)
    await db.flush()
    return MessageResponse(message="Membership type deleted")
