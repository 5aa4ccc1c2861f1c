"""
Activity endpoints: volunteer hour logging and verification.
"""
import logging
from datetime import datetime, date, time, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.deps import get_current_user
from app.core.permissions import require_reviewer
from app.models.activity import Activity, ActivityType, ActivityStatus
from app.models.base import utcnow, loaded_relation
from app.models.user import User, UserRole
from app.schemas.activity import ActivityCreate, ActivityUpdate, ActivityVerify, ActivityResponse
from app.schemas.common import ItemListResponse, expand_user, expand_hub
from app.services.stats import increment_user_stats

logger = logging.getLogger(__name__)

router = APIRouter()


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def compute_hours(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    """Duration in hours rounded half-up to one decimal. Raises 400 if end precedes start."""
    if start is None or end is None:
        return None
    start, end = _as_utc(start), _as_utc(end)
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="End time cannot be before start time"
        )
    seconds = Decimal(str((end - start).total_seconds()))
    return float((seconds / Decimal(3600)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def activity_to_response(activity: Activity) -> ActivityResponse:
    return ActivityResponse(
        id=activity.id,
        user_id=activity.user_id,
        type=activity.type,
        title=activity.title,
        description=activity.description,
        location=activity.location,
        hub_id=activity.hub_id,
        event_id=activity.event_id,
        project_id=activity.project_id,
        start_time=activity.start_time,
        end_time=activity.end_time,
        hours=activity.hours,
        status=activity.status,
        verified=activity.verified,
        verified_by_id=activity.verified_by_id,
        notes=activity.notes,
        attachments=activity.attachments or [],
        user=expand_user(loaded_relation(activity, "user")),
        hub=expand_hub(loaded_relation(activity, "hub")),
        created=activity.created,
        updated=activity.updated,
    )


async def credit_completion(db: AsyncSession, activity: Activity) -> None:
    """Credit the owner for a completed activity, at most once per activity."""
    if activity.stats_credited:
        return
    activity.stats_credited = True
    await db.flush()
    await increment_user_stats(
        db,
        activity.user_id,
        total_hours=activity.hours or 0,
        activities_completed=1,
    )
    logger.info("Credited %s hours to user %s for activity %s", activity.hours or 0, activity.user_id, activity.id)


@router.post("", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
async def create_activity(
    activity_data: ActivityCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Log an activity for the caller."""
    hours = compute_hours(activity_data.start_time, activity_data.end_time)

    now = utcnow()
    activity = Activity(
        user_id=current_user.id,
        type=activity_data.type,
        title=activity_data.title,
        description=activity_data.description,
        location=activity_data.location,
        hub_id=activity_data.hub_id,
        event_id=activity_data.event_id,
        project_id=activity_data.project_id,
        start_time=activity_data.start_time,
        end_time=activity_data.end_time,
        hours=hours,
        status=activity_data.status,
        verified=False,
        stats_credited=False,
        notes=activity_data.notes,
        attachments=[a.model_dump() for a in activity_data.attachments],
        created=now,
        updated=now,
    )
    db.add(activity)
    await db.flush()

    if activity.status == ActivityStatus.COMPLETED:
        await credit_completion(db, activity)

    return activity_to_response(activity)


@router.get("/my", response_model=ItemListResponse[ActivityResponse])
async def my_activities(
    type: Optional[ActivityType] = None,
    status_filter: Optional[ActivityStatus] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """The caller's activities, newest start first."""
    query = select(Activity).options(selectinload(Activity.hub)).where(Activity.user_id == current_user.id)
    if type:
        query = query.where(Activity.type == type)
    if status_filter:
        query = query.where(Activity.status == status_filter)
    if start_date:
        query = query.where(Activity.start_time >= datetime.combine(start_date, time.min))
    if end_date:
        # Inclusive of the whole end day
        query = query.where(Activity.start_time < datetime.combine(end_date + timedelta(days=1), time.min))
    query = query.order_by(Activity.start_time.desc().nulls_last(), Activity.created.desc())

    result = await db.execute(query)
    return ItemListResponse(items=[activity_to_response(a) for a in result.scalars().all()])


@router.get("", response_model=ItemListResponse[ActivityResponse])
async def list_activities(
    user: Optional[str] = None,
    type: Optional[ActivityType] = None,
    status_filter: Optional[ActivityStatus] = Query(None, alias="status"),
    hub: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_reviewer)
):
    query = select(Activity).options(selectinload(Activity.user), selectinload(Activity.hub))
    if user:
        query = query.where(Activity.user_id == user)
    if type:
        query = query.where(Activity.type == type)
    if status_filter:
        query = query.where(Activity.status == status_filter)
    if hub:
        query = query.where(Activity.hub_id == hub)
    query = query.order_by(Activity.start_time.desc().nulls_last(), Activity.created.desc())

    result = await db.execute(query)
    return ItemListResponse(items=[activity_to_response(a) for a in result.scalars().all()])


async def get_activity_or_404(db: AsyncSession, activity_id: str) -> Activity:
    result = await db.execute(select(Activity).where(Activity.id == activity_id))
    activity = result.scalar_one_or_none()
    if activity is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Activity not found"
        )
    return activity


@router.patch("/{activity_id}", response_model=ActivityResponse)
async def update_activity(
    activity_id: str,
    activity_data: ActivityUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Edit an activity. Its owner or an admin."""
    activity = await get_activity_or_404(db, activity_id)
    if activity.user_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to edit this activity"
        )

    updates = activity_data.model_dump(exclude_unset=True)

    for field in ("type", "title", "status"):
        if updates.get(field) is not None:
            setattr(activity, field, updates[field])
    for field in ("description", "location", "hub_id", "event_id", "project_id",
                  "start_time", "end_time", "notes"):
        if field in updates:
            setattr(activity, field, updates[field])
    if updates.get("attachments") is not None:
        activity.attachments = updates["attachments"]

    if "start_time" in updates or "end_time" in updates:
        activity.hours = compute_hours(activity.start_time, activity.end_time)

    activity.updated = utcnow()
    await db.flush()

    if activity.status == ActivityStatus.COMPLETED:
        await credit_completion(db, activity)

    return activity_to_response(activity)


@router.patch("/{activity_id}/verify", response_model=ActivityResponse)
async def verify_activity(
    activity_id: str,
    verify_data: ActivityVerify,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_reviewer)
):
    activity = await get_activity_or_404(db, activity_id)

    activity.verified = verify_data.verified
    activity.verified_by_id = current_user.id if verify_data.verified else None
    activity.updated = utcnow()
    await db.flush()

    return activity_to_response(activity)
