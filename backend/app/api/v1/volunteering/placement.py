"""
Placement endpoints: volunteer applications and staff decisions.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.deps import get_current_user
from app.core.permissions import require_role, require_staff, ensure_hub_exists
from app.models.base import utcnow, loaded_relation
from app.models.placement import Placement, PlacementStatus
from app.models.user import User, UserRole
from app.models.volunteer_request import VolunteerRequest, RequestStatus
from app.schemas.common import ItemListResponse, expand_user, expand_hub
from app.schemas.placement import (
    PlacementCreate, PlacementStatusUpdate, PlacementResponse, ExpandedRequest
)
from app.services.stats import increment

logger = logging.getLogger(__name__)

router = APIRouter()

EXPANSIONS = (
    selectinload(Placement.volunteer),
    selectinload(Placement.hub),
    selectinload(Placement.request),
)


def placement_to_response(placement: Placement) -> PlacementResponse:
    request = loaded_relation(placement, "request")
    return PlacementResponse(
        id=placement.id,
        volunteer_id=placement.volunteer_id,
        hub_id=placement.hub_id,
        request_id=placement.request_id,
        status=placement.status,
        start_date=placement.start_date,
        end_date=placement.end_date,
        expected_end_date=placement.expected_end_date,
        role=placement.role,
        responsibilities=placement.responsibilities or [],
        supervisor_id=placement.supervisor_id,
        performance=placement.performance,
        notes=placement.notes,
        volunteer=expand_user(loaded_relation(placement, "volunteer")),
        hub=expand_hub(loaded_relation(placement, "hub")),
        request=ExpandedRequest.model_validate(request) if request else None,
        created=placement.created,
        updated=placement.updated,
    )


@router.post("", response_model=PlacementResponse, status_code=status.HTTP_201_CREATED)
async def apply_for_placement(
    placement_data: PlacementCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Apply for a placement at a hub, optionally against an open request."""
    require_role(current_user, [UserRole.VOLUNTEER], detail="Only volunteers can apply for placements")
    hub = await ensure_hub_exists(db, placement_data.hub_id)

    request = None
    if placement_data.request_id:
        request = await db.get(VolunteerRequest, placement_data.request_id)
        if request is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Volunteer request not found"
            )
        if request.status != RequestStatus.OPEN:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Volunteer request is not open"
            )
        if request.hub_id != hub.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Volunteer request belongs to another hub"
            )

    now = utcnow()
    placement = Placement(
        volunteer_id=current_user.id,
        hub_id=hub.id,
        request_id=request.id if request else None,
        status=PlacementStatus.PENDING,
        start_date=placement_data.start_date,
        end_date=placement_data.end_date,
        expected_end_date=placement_data.expected_end_date,
        role=placement_data.role,
        responsibilities=placement_data.responsibilities,
        notes=placement_data.notes,
        created=now,
        updated=now,
    )
    db.add(placement)
    await db.flush()

    if request is not None:
        request = await increment(db, VolunteerRequest, request.id, current_volunteers=1)
        if request.current_volunteers >= request.number_of_volunteers:
            request.status = RequestStatus.FILLED
            request.filled_at = now
            request.updated = now
            await db.flush()
            logger.info("Request %s filled by applications", request.id)

    placement.volunteer = current_user
    placement.hub = hub
    placement.request = request
    return placement_to_response(placement)


@router.get("/my", response_model=ItemListResponse[PlacementResponse])
async def my_placements(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(
        select(Placement)
        .options(selectinload(Placement.hub), selectinload(Placement.request))
        .where(Placement.volunteer_id == current_user.id)
        .order_by(Placement.created.desc())
    )
    return ItemListResponse(items=[placement_to_response(p) for p in result.scalars().all()])


@router.get("", response_model=ItemListResponse[PlacementResponse])
async def list_placements(
    status_filter: Optional[PlacementStatus] = Query(None, alias="status"),
    hub: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    query = select(Placement).options(*EXPANSIONS)
    if status_filter:
        query = query.where(Placement.status == status_filter)
    if hub:
        query = query.where(Placement.hub_id == hub)
    query = query.order_by(Placement.created.desc())

    result = await db.execute(query)
    return ItemListResponse(items=[placement_to_response(p) for p in result.scalars().all()])


@router.patch("/{placement_id}/status", response_model=PlacementResponse)
async def update_placement_status(
    placement_id: str,
    status_data: PlacementStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Change placement status. Admins or users affiliated with the placement's hub."""
    result = await db.execute(
        select(Placement).options(*EXPANSIONS).where(Placement.id == placement_id)
    )
    placement = result.scalar_one_or_none()
    if placement is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Placement not found"
        )

    if current_user.role != UserRole.ADMIN and current_user.hub_affiliation_id != placement.hub_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to update this placement"
        )

    now = utcnow()
    placement.status = status_data.status
    if status_data.notes is not None:
        placement.notes = status_data.notes
    if status_data.status == PlacementStatus.ACTIVE and placement.start_date is None:
        placement.start_date = now
    if status_data.status in (PlacementStatus.COMPLETED, PlacementStatus.TERMINATED) and placement.end_date is None:
        placement.end_date = now
    placement.updated = now
    await db.flush()

    return placement_to_response(placement)
