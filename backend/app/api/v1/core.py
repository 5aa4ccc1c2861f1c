"""
Core endpoints: current user, events, projects, registrations and user administration.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.deps import get_current_user
from app.core.permissions import require_admin, require_staff, ensure_hub_exists
from app.api.v1.auth import user_to_response
from app.api.v1.pagination import paginate
from app.models.base import utcnow
from app.models.event import Event
from app.models.project import Project
from app.models.registration import Registration
from app.models.user import User, UserRole, VolunteerStatus
from app.schemas.auth import UserResponse, UserAdminUpdate
from app.schemas.common import ItemListResponse, PaginatedResponse
from app.schemas.core import (
    EventCreate, EventResponse, ProjectCreate, ProjectResponse,
    RegistrationCreate, RegistrationResponse
)
from app.services.registrations import RegistrationError, get_target, register_user

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Full record of the authenticated user."""
    return user_to_response(current_user)


# Events

@router.get("/events", response_model=ItemListResponse[EventResponse])
async def list_events(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Event).order_by(Event.start_at.asc().nulls_last(), Event.created.asc())
    )
    return ItemListResponse(items=[EventResponse.model_validate(e) for e in result.scalars().all()])


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if event_data.start_at and event_data.end_at and event_data.end_at < event_data.start_at:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Event cannot end before it starts"
        )

    now = utcnow()
    event = Event(
        **event_data.model_dump(),
        created_by_id=current_user.id,
        created=now,
        updated=now,
    )
    db.add(event)
    await db.flush()
    return EventResponse.model_validate(event)


# Projects

@router.get("/projects", response_model=ItemListResponse[ProjectResponse])
async def list_projects(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Project).order_by(Project.created.desc()))
    return ItemListResponse(items=[ProjectResponse.model_validate(p) for p in result.scalars().all()])


@router.post("/projects", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    now = utcnow()
    project = Project(**project_data.model_dump(), created=now, updated=now)
    db.add(project)
    await db.flush()
    return ProjectResponse.model_validate(project)


# Registrations

@router.post("/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_for(
    registration_data: RegistrationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Register the caller for an event, project or training."""
    target = await get_target(db, registration_data.type, registration_data.ref_id)
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{registration_data.type.value.capitalize()} not found"
        )

    try:
        registration = await register_user(db, current_user.id, registration_data.type, target)
    except RegistrationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return RegistrationResponse.model_validate(registration)


@router.get("/my/registrations", response_model=ItemListResponse[RegistrationResponse])
async def my_registrations(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(
        select(Registration)
        .where(Registration.user_id == current_user.id)
        .order_by(Registration.created.desc())
    )
    return ItemListResponse(
        items=[RegistrationResponse.model_validate(r) for r in result.scalars().all()]
    )


# User administration

@router.get("/users", response_model=PaginatedResponse[UserResponse])
async def list_users(
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=500),
    role: Optional[UserRole] = None,
    volunteer_status: Optional[VolunteerStatus] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """List accounts. Admins and hub coordinators only."""
    query = select(User)
    if role:
        query = query.where(User.role == role)
    if volunteer_status:
        query = query.where(User.volunteer_status == volunteer_status)
    if search:
        query = query.where(
            User.name.ilike(f"%{search}%") |
            User.email.ilike(f"%{search}%") |
            User.phone.ilike(f"%{search}%")
        )
    query = query.order_by(User.created.desc())

    users, total_items, total_pages = await paginate(db, query, page, perPage)

    return PaginatedResponse[UserResponse](
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=total_pages,
        items=[user_to_response(u) for u in users]
    )


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserAdminUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Change role, standing, verification or hub affiliation. Admin only."""
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    updates = user_data.model_dump(exclude_unset=True)

    if "hub_affiliation_id" in updates and updates["hub_affiliation_id"]:
        await ensure_hub_exists(db, updates["hub_affiliation_id"])

    now = utcnow()
    for field in ("role", "volunteer_status", "membership_status", "hub_affiliation_id"):
        if field in updates and (updates[field] is not None or field == "hub_affiliation_id"):
            setattr(user, field, updates[field])

    if updates.get("verified") is not None:
        if updates["verified"] and not user.verified:
            user.verified_at = now
        elif not updates["verified"]:
            user.verified_at = None
        user.verified = updates["verified"]

    user.updated = now
    await db.flush()

    return user_to_response(user)
