"""
Training endpoints: course catalogue, sign-up and completion.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.deps import get_current_user
from app.core.permissions import require_staff, ensure_user_exists
from app.models.base import utcnow, loaded_relation
from app.models.registration import Registration, RegistrationType, RegistrationStatus
from app.models.training import Training, TrainingCategory, TrainingLevel, TrainingStatus
from app.models.user import User
from app.schemas.common import ItemListResponse, expand_user
from app.schemas.core import RegistrationResponse
from app.schemas.training import TrainingCreate, TrainingStatusUpdate, TrainingResponse
from app.services.registrations import RegistrationError, register_user
from app.services.stats import increment_user_stats

logger = logging.getLogger(__name__)

router = APIRouter()


def training_to_response(training: Training) -> TrainingResponse:
    return TrainingResponse(
        id=training.id,
        title=training.title,
        description=training.description,
        category=training.category,
        level=training.level,
        instructor_id=training.instructor_id,
        start_date=training.start_date,
        end_date=training.end_date,
        duration=training.duration,
        location=training.location,
        max_participants=training.max_participants,
        current_participants=training.current_participants,
        status=training.status,
        materials=training.materials or [],
        prerequisites=training.prerequisites or [],
        certification=training.certification,
        cost=training.cost,
        instructor=expand_user(loaded_relation(training, "instructor")),
        created=training.created,
        updated=training.updated,
    )


async def get_training_or_404(db: AsyncSession, training_id: str) -> Training:
    result = await db.execute(
        select(Training)
        .options(selectinload(Training.instructor))
        .where(Training.id == training_id)
    )
    training = result.scalar_one_or_none()
    if training is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Training not found"
        )
    return training


@router.get("", response_model=ItemListResponse[TrainingResponse])
async def list_trainings(
    status_filter: Optional[TrainingStatus] = Query(None, alias="status"),
    category: Optional[TrainingCategory] = None,
    level: Optional[TrainingLevel] = None,
    db: AsyncSession = Depends(get_db)
):
    query = select(Training).options(selectinload(Training.instructor))
    if status_filter:
        query = query.where(Training.status == status_filter)
    if category:
        query = query.where(Training.category == category)
    if level:
        query = query.where(Training.level == level)
    query = query.order_by(Training.start_date.asc().nulls_last(), Training.created.asc())

    result = await db.execute(query)
    return ItemListResponse(items=[training_to_response(t) for t in result.scalars().all()])


@router.get("/my", response_model=ItemListResponse[TrainingResponse])
async def my_trainings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Trainings the caller is registered for."""
    registered = select(Registration.ref_id).where(
        Registration.user_id == current_user.id,
        Registration.type == RegistrationType.TRAINING,
        Registration.status != RegistrationStatus.CANCELLED,
    )
    result = await db.execute(
        select(Training)
        .options(selectinload(Training.instructor))
        .where(Training.id.in_(registered))
        .order_by(Training.start_date.asc().nulls_last())
    )
    return ItemListResponse(items=[training_to_response(t) for t in result.scalars().all()])


@router.get("/{training_id}", response_model=TrainingResponse)
async def get_training(
    training_id: str,
    db: AsyncSession = Depends(get_db)
):
    training = await get_training_or_404(db, training_id)
    return training_to_response(training)


@router.post("", response_model=TrainingResponse, status_code=status.HTTP_201_CREATED)
async def create_training(
    training_data: TrainingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Schedule a training. The caller is the instructor unless one is named."""
    instructor = current_user
    if training_data.instructor_id and training_data.instructor_id != current_user.id:
        instructor = await ensure_user_exists(db, training_data.instructor_id)

    now = utcnow()
    training = Training(
        title=training_data.title,
        description=training_data.description,
        category=training_data.category,
        level=training_data.level,
        instructor_id=instructor.id,
        start_date=training_data.start_date,
        end_date=training_data.end_date,
        duration=training_data.duration,
        location=training_data.location,
        max_participants=training_data.max_participants,
        current_participants=0,
        status=TrainingStatus.SCHEDULED,
        materials=[m.model_dump() for m in training_data.materials],
        prerequisites=training_data.prerequisites,
        certification=training_data.certification.model_dump() if training_data.certification else None,
        cost=training_data.cost.model_dump() if training_data.cost else None,
        created=now,
        updated=now,
    )
    training.instructor = instructor
    db.add(training)
    await db.flush()

    return training_to_response(training)


@router.post("/{training_id}/register", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register_for_training(
    training_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    training = await get_training_or_404(db, training_id)
    try:
        registration = await register_user(db, current_user.id, RegistrationType.TRAINING, training)
    except RegistrationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return RegistrationResponse.model_validate(registration)


@router.patch("/{training_id}/status", response_model=TrainingResponse)
async def update_training_status(
    training_id: str,
    status_data: TrainingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """
    Change a training's status.

    Completing a training completes its confirmed registrations and credits
    each participant's trainings_completed.
    """
    training = await get_training_or_404(db, training_id)
    previous_status = training.status

    now = utcnow()
    training.status = status_data.status
    training.updated = now
    await db.flush()

    if previous_status != TrainingStatus.COMPLETED and status_data.status == TrainingStatus.COMPLETED:
        result = await db.execute(
            select(Registration).where(
                Registration.type == RegistrationType.TRAINING,
                Registration.ref_id == training.id,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
        )
        registrations = result.scalars().all()
        for registration in registrations:
            registration.status = RegistrationStatus.COMPLETED
            registration.updated = now
        await db.flush()
        for registration in registrations:
            await increment_user_stats(db, registration.user_id, trainings_completed=1)
        logger.info("Training %s completed; credited %d participants", training.id, len(registrations))

    return training_to_response(training)
