"""
Authentication endpoints.

Endpoints:
- POST /api/v1/auth/register - Register new user
- POST /api/v1/auth/login - Login
- POST /api/v1/auth/refresh - Refresh token
- PATCH /api/v1/auth/profile - Update own profile
- POST /api/v1/auth/change-password - Change password

Logout is handled client-side by discarding the token.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.db.base import get_db
from app.core.security import get_password_hash, verify_password, create_user_token
from app.core.deps import get_current_user
from app.models.base import utcnow
from app.models.user import User, UserRole, MembershipStatus
from app.models.membership_type import MembershipType
from app.schemas.auth import (
    RegisterRequest, LoginRequest, TokenResponse, UserSummary, UserResponse,
    ProfileUpdate, PasswordChange
)
from app.schemas.common import MessageResponse
from app.services.membership import activate_membership

logger = logging.getLogger(__name__)

router = APIRouter()

# Profile sections stored as JSON documents
DOCUMENT_FIELDS = ("address", "identification", "profile", "preferences")


def user_to_summary(user: User) -> UserSummary:
    return UserSummary(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        phone=user.phone or "",
        stats=user.stats,
        verified=user.verified,
        membership_status=user.membership_status,
        membership_expiry=user.membership_expiry,
    )


def user_to_response(user: User) -> UserResponse:
    """Convert User model to UserResponse schema."""
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        phone=user.phone or "",
        alternative_phone=user.alternative_phone,
        date_of_birth=user.date_of_birth,
        gender=user.gender,
        address=user.address,
        identification=user.identification,
        profile=user.profile,
        social_media=user.social_media,
        preferences=user.preferences,
        membership_status=user.membership_status,
        membership_expiry=user.membership_expiry,
        membership_type_id=user.membership_type_id,
        volunteer_status=user.volunteer_status,
        stats=user.stats,
        verified=user.verified,
        verified_at=user.verified_at,
        last_login_at=user.last_login_at,
        hub_affiliation_id=user.hub_affiliation_id,
        created=user.created,
        updated=user.updated,
    )


async def ensure_email_unused(db: AsyncSession, email: str) -> None:
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already in use"
        )


@router.post("/register", response_model=TokenResponse)
async def register(
    user_data: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new volunteer, member or staff account.

    Members that pick a membership type start with an active membership.
    """
    if user_data.role == UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Admin accounts cannot be self-registered"
        )

    await ensure_email_unused(db, user_data.email)

    now = utcnow()
    user = User(
        name=user_data.name,
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
        role=user_data.role,
        phone=user_data.phone or "",
        alternative_phone=user_data.alternative_phone,
        date_of_birth=user_data.date_of_birth,
        gender=user_data.gender,
        social_media=user_data.social_media,
        membership_status=MembershipStatus.NONE,
        created=now,
        updated=now,
    )
    for field in DOCUMENT_FIELDS:
        section = getattr(user_data, field)
        if section is not None:
            setattr(user, field, section.model_dump(mode="json"))

    if user_data.role == UserRole.MEMBER and user_data.membership_type_id:
        membership_type = await db.get(MembershipType, user_data.membership_type_id)
        if membership_type is not None:
            activate_membership(user, membership_type, now)

    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already in use"
        )
    logger.info("Registered %s account %s", user.role.value, user.id)

    return TokenResponse(token=create_user_token(user), user=user_to_summary(user))


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Authenticate with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    now = utcnow()
    user.last_login_at = now
    user.updated = now
    await db.flush()

    return TokenResponse(token=create_user_token(user), user=user_to_summary(user))


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    current_user: User = Depends(get_current_user)
):
    """Issue a fresh token for the current user."""
    return TokenResponse(token=create_user_token(current_user), user=user_to_summary(current_user))


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the caller's own profile fields."""
    updates = profile_data.model_dump(exclude_unset=True, mode="json")

    if "name" in updates:
        if not updates["name"]:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Name cannot be empty"
            )
        current_user.name = updates["name"]
    if "phone" in updates:
        current_user.phone = updates["phone"] or ""
    for field in ("alternative_phone", "social_media", "date_of_birth", "gender"):
        if field in updates:
            setattr(current_user, field, getattr(profile_data, field))
    for field in DOCUMENT_FIELDS:
        if field in updates:
            # Reassign so the JSON column is flagged dirty
            setattr(current_user, field, updates[field])

    current_user.updated = utcnow()
    await db.flush()

    return user_to_response(current_user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    password_data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Change the caller's password; the old password must verify."""
    if not verify_password(password_data.old_password, current_user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect"
        )

    current_user.password_hash = get_password_hash(password_data.new_password)
    current_user.updated = utcnow()
    await db.flush()

    return MessageResponse(message="Password changed successfully")
