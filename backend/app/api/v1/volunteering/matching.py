"""
Volunteer matching endpoints: rank candidates for a request and approve assignments.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, case
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.config import settings
from app.core.permissions import require_staff
from app.api.v1.hubs import request_to_response
from app.models.base import utcnow
from app.models.hub import Hub
from app.models.placement import Placement, PlacementStatus
from app.models.user import User, UserRole, VolunteerStatus
from app.models.volunteer_request import VolunteerRequest, RequestStatus, PRIORITY_RANK
from app.schemas.common import ItemListResponse, expand_user
from app.schemas.hub import VolunteerRequestResponse
from app.schemas.matching import MatchCandidate, MatchResponse, ApproveRequest, ApproveResponse
from app.services.matching import find_matches
from app.services.stats import increment

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_request_or_404(db: AsyncSession, request_id: str) -> VolunteerRequest:
    result = await db.execute(
        select(VolunteerRequest)
        .options(selectinload(VolunteerRequest.hub))
        .where(VolunteerRequest.id == request_id)
    )
    request = result.scalar_one_or_none()
    if request is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Volunteer request not found"
        )
    return request


@router.post("/match/{request_id}", response_model=MatchResponse)
async def match_volunteers(
    request_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Rank active volunteers against a request's criteria."""
    request = await get_request_or_404(db, request_id)
    if request.status == RequestStatus.FILLED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request is already filled"
        )

    top, total = await find_matches(db, request, settings.MATCH_RESULT_BUFFER)

    matches = [
        MatchCandidate(
            id=c.user.id,
            name=c.user.name,
            email=c.user.email,
            phone=c.user.phone or "",
            gender=c.user.gender.value if c.user.gender else None,
            profile=c.user.profile,
            address=c.user.address,
            stats=c.user.stats,
            match_score=round(c.score, 2),
        )
        for c in top
    ]

    return MatchResponse(
        request=request_to_response(request),
        matches=matches,
        total_matches=total,
        requested=request.number_of_volunteers,
    )


@router.post("/approve/{request_id}", response_model=ApproveResponse)
async def approve_volunteers(
    request_id: str,
    approval: ApproveRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """
    Assign selected volunteers to a request.

    The request is marked filled and each volunteer gets an active placement.
    """
    request = await get_request_or_404(db, request_id)
    if request.status == RequestStatus.FILLED:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request is already filled"
        )

    result = await db.execute(
        select(User).where(
            User.id.in_(approval.volunteer_ids),
            User.role == UserRole.VOLUNTEER,
            User.volunteer_status == VolunteerStatus.ACTIVE,
        )
    )
    volunteers = {u.id: u for u in result.scalars().all()}
    invalid = [vid for vid in approval.volunteer_ids if vid not in volunteers]
    if invalid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Not active volunteers: {', '.join(invalid)}"
        )

    now = utcnow()
    count = len(approval.volunteer_ids)
    request.status = RequestStatus.FILLED
    request.current_volunteers = count
    request.filled_by_id = current_user.id
    request.filled_at = now
    request.updated = now

    for volunteer_id in approval.volunteer_ids:
        db.add(Placement(
            volunteer_id=volunteer_id,
            hub_id=request.hub_id,
            request_id=request.id,
            status=PlacementStatus.ACTIVE,
            start_date=request.start_date or now,
            end_date=request.end_date,
            role=request.title,
            created=now,
            updated=now,
        ))
    await db.flush()

    await increment(db, Hub, request.hub_id, active_volunteers=count)
    logger.info(
        "Request %s filled with %d volunteers by %s", request.id, count, current_user.id
    )

    return ApproveResponse(
        message=f"{count} volunteer(s) assigned successfully",
        request=request_to_response(request),
        assigned_volunteers=[expand_user(volunteers[vid]) for vid in approval.volunteer_ids],
    )


@router.get("/pending", response_model=ItemListResponse[VolunteerRequestResponse])
async def pending_requests(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Open requests, most urgent first."""
    rank = case(
        *[(VolunteerRequest.priority == priority, value) for priority, value in PRIORITY_RANK.items()],
        else_=0
    )
    result = await db.execute(
        select(VolunteerRequest)
        .options(selectinload(VolunteerRequest.hub))
        .where(VolunteerRequest.status == RequestStatus.OPEN)
        .order_by(rank.desc(), VolunteerRequest.created.desc())
    )
    return ItemListResponse(items=[request_to_response(r) for r in result.scalars().all()])
