"""
Hub endpoints: partner organization registration, approval and volunteer requests.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.deps import get_current_user_optional
from app.core.permissions import require_admin, can_manage_hub
from app.models.base import utcnow, loaded_relation
from app.models.hub import Hub, HubStatus
from app.models.user import User
from app.models.volunteer_request import VolunteerRequest, RequestStatus, RequestCategory
from app.schemas.common import ItemListResponse, expand_hub
from app.schemas.hub import (
    HubCreate, HubUpdate, HubStatusUpdate, HubResponse,
    VolunteerRequestCreate, VolunteerRequestResponse,
    HubWithRequestCreate, HubWithRequestResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()


def request_to_response(request: VolunteerRequest) -> VolunteerRequestResponse:
    """Convert VolunteerRequest model to response, expanding the hub when loaded."""
    return VolunteerRequestResponse(
        id=request.id,
        hub_id=request.hub_id,
        title=request.title,
        description=request.description,
        category=request.category,
        required_skills=request.required_skills or [],
        criteria=request.criteria,
        start_date=request.start_date,
        end_date=request.end_date,
        location=request.location,
        region=request.region,
        number_of_volunteers=request.number_of_volunteers,
        current_volunteers=request.current_volunteers,
        status=request.status,
        filled_by_id=request.filled_by_id,
        filled_at=request.filled_at,
        priority=request.priority,
        compensation=request.compensation,
        hub=expand_hub(loaded_relation(request, "hub")),
        created=request.created,
        updated=request.updated,
    )


async def get_hub_or_404(db: AsyncSession, hub_id: str) -> Hub:
    result = await db.execute(select(Hub).where(Hub.id == hub_id))
    hub = result.scalar_one_or_none()
    if hub is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Hub not found"
        )
    return hub


async def ensure_email_available(db: AsyncSession, email: str) -> None:
    result = await db.execute(select(Hub.id).where(Hub.email == email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A hub with this email is already registered"
        )


async def flush_new_hub(db: AsyncSession, hub: Hub) -> None:
    """Insert the hub; a concurrent registration with the same email loses here."""
    db.add(hub)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A hub with this email is already registered"
        )


def build_hub(hub_data: HubCreate, registered_by: Optional[User]) -> Hub:
    now = utcnow()
    address = hub_data.address.model_dump(mode="json") if hub_data.address else None
    return Hub(
        name=hub_data.name,
        organization_type=hub_data.organization_type,
        email=hub_data.email,
        phone=hub_data.phone,
        address=address,
        region=(address or {}).get("region"),
        contact_person=hub_data.contact_person.model_dump(mode="json") if hub_data.contact_person else None,
        status=HubStatus.PENDING,
        verified=False,
        registration_date=now,
        description=hub_data.description,
        website=hub_data.website,
        social_media=hub_data.social_media,
        capacity=hub_data.capacity,
        active_volunteers=0,
        registered_by_id=registered_by.id if registered_by else None,
        created=now,
        updated=now,
    )


def build_request(hub: Hub, request_data: VolunteerRequestCreate) -> VolunteerRequest:
    now = utcnow()
    location = request_data.location.model_dump(mode="json") if request_data.location else None
    return VolunteerRequest(
        hub=hub,
        hub_id=hub.id,
        title=request_data.title,
        description=request_data.description,
        category=request_data.category,
        required_skills=request_data.required_skills,
        criteria=request_data.criteria.model_dump(mode="json") if request_data.criteria else None,
        start_date=request_data.start_date,
        end_date=request_data.end_date,
        location=location,
        region=(location or {}).get("region") or hub.region,
        number_of_volunteers=request_data.number_of_volunteers,
        current_volunteers=0,
        status=RequestStatus.OPEN,
        priority=request_data.priority,
        compensation=request_data.compensation.model_dump(mode="json") if request_data.compensation else None,
        created=now,
        updated=now,
    )


@router.post("/register", response_model=HubResponse, status_code=status.HTTP_201_CREATED)
async def register_hub(
    hub_data: HubCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional)
):
    """Register a hub. It stays pending until an admin approves it."""
    await ensure_email_available(db, hub_data.email)

    hub = build_hub(hub_data, current_user)
    await flush_new_hub(db, hub)
    logger.info("Hub %s registered (%s)", hub.id, hub.name)

    return HubResponse.model_validate(hub)


@router.post("/register-with-request", response_model=HubWithRequestResponse, status_code=status.HTTP_201_CREATED)
async def register_hub_with_request(
    payload: HubWithRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional)
):
    """Register a hub and its first volunteer request together."""
    await ensure_email_available(db, payload.hub.email)

    hub = build_hub(payload.hub, current_user)
    await flush_new_hub(db, hub)

    request = build_request(hub, payload.request)
    db.add(request)
    await db.flush()
    logger.info("Hub %s registered with request %s", hub.id, request.id)

    return HubWithRequestResponse(
        hub=HubResponse.model_validate(hub),
        request=request_to_response(request),
        message="Hub registered and volunteer request submitted. Pending admin approval."
    )


@router.get("/requests/all", response_model=ItemListResponse[VolunteerRequestResponse])
async def list_all_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    category: Optional[RequestCategory] = None,
    region: Optional[str] = None,
    hub: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Volunteer requests across all hubs."""
    query = select(VolunteerRequest).options(selectinload(VolunteerRequest.hub))
    if status_filter:
        query = query.where(VolunteerRequest.status == status_filter)
    if category:
        query = query.where(VolunteerRequest.category == category)
    if region:
        query = query.where(VolunteerRequest.region == region)
    if hub:
        query = query.where(VolunteerRequest.hub_id == hub)
    query = query.order_by(VolunteerRequest.created.desc())

    result = await db.execute(query)
    return ItemListResponse(items=[request_to_response(r) for r in result.scalars().all()])


@router.get("", response_model=ItemListResponse[HubResponse])
async def list_hubs(
    status_filter: Optional[HubStatus] = Query(None, alias="status"),
    verified: Optional[bool] = None,
    region: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    query = select(Hub)
    if status_filter:
        query = query.where(Hub.status == status_filter)
    if verified is not None:
        query = query.where(Hub.verified == verified)
    if region:
        query = query.where(Hub.region == region)
    query = query.order_by(Hub.created.desc())

    result = await db.execute(query)
    return ItemListResponse(items=[HubResponse.model_validate(h) for h in result.scalars().all()])


@router.get("/{hub_id}", response_model=HubResponse)
async def get_hub(
    hub_id: str,
    db: AsyncSession = Depends(get_db)
):
    hub = await get_hub_or_404(db, hub_id)
    return HubResponse.model_validate(hub)


@router.patch("/{hub_id}", response_model=HubResponse)
async def update_hub(
    hub_id: str,
    hub_data: HubUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional)
):
    """Edit hub details. Admins, the registrant and affiliated coordinators."""
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token"
        )
    hub = await get_hub_or_404(db, hub_id)
    if not can_manage_hub(current_user, hub):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to edit this hub"
        )

    updates = hub_data.model_dump(exclude_unset=True)
    for field in ("name", "organization_type", "phone", "capacity"):
        if updates.get(field) is not None:
            setattr(hub, field, updates[field])
    for field in ("description", "website", "social_media"):
        if field in updates:
            setattr(hub, field, updates[field])
    if "address" in updates:
        hub.address = hub_data.address.model_dump(mode="json") if hub_data.address else None
        hub.region = (hub.address or {}).get("region")
    if "contact_person" in updates:
        hub.contact_person = (
            hub_data.contact_person.model_dump(mode="json") if hub_data.contact_person else None
        )

    hub.updated = utcnow()
    await db.flush()

    return HubResponse.model_validate(hub)


@router.patch("/{hub_id}/status", response_model=HubResponse)
async def update_hub_status(
    hub_id: str,
    status_data: HubStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Approve, suspend or reject a hub. Admin only."""
    hub = await get_hub_or_404(db, hub_id)

    hub.status = status_data.status
    hub.verified = status_data.status == HubStatus.APPROVED
    hub.updated = utcnow()
    await db.flush()
    logger.info("Hub %s status set to %s by %s", hub.id, hub.status.value, current_user.id)

    return HubResponse.model_validate(hub)


@router.post("/{hub_id}/requests", response_model=VolunteerRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_volunteer_request(
    hub_id: str,
    request_data: VolunteerRequestCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional)
):
    """
    Post a volunteer request for a hub.

    Anyone may post while the hub is still pending (the public signup flow);
    afterwards only those who can manage the hub.
    """
    hub = await get_hub_or_404(db, hub_id)

    if hub.status != HubStatus.PENDING:
        if current_user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing token"
            )
        if not can_manage_hub(current_user, hub):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not allowed to post requests for this hub"
            )

    request = build_request(hub, request_data)
    db.add(request)
    await db.flush()
    logger.info("Volunteer request %s created for hub %s", request.id, hub.id)

    return request_to_response(request)


@router.get("/{hub_id}/requests", response_model=ItemListResponse[VolunteerRequestResponse])
async def list_hub_requests(
    hub_id: str,
    db: AsyncSession = Depends(get_db)
):
    await get_hub_or_404(db, hub_id)
    result = await db.execute(
        select(VolunteerRequest)
        .where(VolunteerRequest.hub_id == hub_id)
        .order_by(VolunteerRequest.created.desc())
    )
    return ItemListResponse(items=[request_to_response(r) for r in result.scalars().all()])
