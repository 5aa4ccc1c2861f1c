"""
Evaluation endpoints: performance reviews of volunteers.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.deps import get_current_user
from app.core.permissions import require_issuer, has_role, ensure_user_exists, REVIEWER_ROLES
from app.models.base import utcnow, loaded_relation
from app.models.evaluation import Evaluation
from app.models.user import User, UserRole
from app.schemas.common import ItemListResponse, expand_user
from app.schemas.evaluation import EvaluationCreate, EvaluationUpdate, EvaluationResponse

router = APIRouter()


def evaluation_to_response(evaluation: Evaluation) -> EvaluationResponse:
    return EvaluationResponse(
        id=evaluation.id,
        user_id=evaluation.user_id,
        evaluator_id=evaluation.evaluator_id,
        type=evaluation.type,
        related_to=evaluation.related_to,
        ratings=evaluation.ratings,
        comments=evaluation.comments,
        strengths=evaluation.strengths or [],
        areas_for_improvement=evaluation.areas_for_improvement or [],
        recommendations=evaluation.recommendations,
        status=evaluation.status,
        user=expand_user(loaded_relation(evaluation, "user")),
        evaluator=expand_user(loaded_relation(evaluation, "evaluator")),
        created=evaluation.created,
        updated=evaluation.updated,
    )


async def list_for_user(db: AsyncSession, user_id: str) -> list[Evaluation]:
    result = await db.execute(
        select(Evaluation)
        .options(selectinload(Evaluation.evaluator))
        .where(Evaluation.user_id == user_id)
        .order_by(Evaluation.created.desc())
    )
    return list(result.scalars().all())


@router.post("", response_model=EvaluationResponse, status_code=status.HTTP_201_CREATED)
async def create_evaluation(
    evaluation_data: EvaluationCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_issuer)
):
    user = await ensure_user_exists(db, evaluation_data.user_id)

    now = utcnow()
    evaluation = Evaluation(
        user_id=user.id,
        evaluator_id=current_user.id,
        type=evaluation_data.type,
        related_to=evaluation_data.related_to.model_dump(exclude_none=True) if evaluation_data.related_to else None,
        ratings=evaluation_data.ratings.model_dump(exclude_none=True) if evaluation_data.ratings else None,
        comments=evaluation_data.comments,
        strengths=evaluation_data.strengths,
        areas_for_improvement=evaluation_data.areas_for_improvement,
        recommendations=evaluation_data.recommendations,
        status=evaluation_data.status,
        created=now,
        updated=now,
    )
    evaluation.user = user
    evaluation.evaluator = current_user
    db.add(evaluation)
    await db.flush()

    return evaluation_to_response(evaluation)


@router.get("/my", response_model=ItemListResponse[EvaluationResponse])
async def my_evaluations(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    evaluations = await list_for_user(db, current_user.id)
    return ItemListResponse(items=[evaluation_to_response(e) for e in evaluations])


@router.get("/user/{user_id}", response_model=ItemListResponse[EvaluationResponse])
async def user_evaluations(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Evaluations of a user. The user themself, admins and evaluators."""
    if current_user.id != user_id and not has_role(current_user, REVIEWER_ROLES):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view these evaluations"
        )
    evaluations = await list_for_user(db, user_id)
    return ItemListResponse(items=[evaluation_to_response(e) for e in evaluations])


@router.patch("/{evaluation_id}", response_model=EvaluationResponse)
async def update_evaluation(
    evaluation_id: str,
    evaluation_data: EvaluationUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(
        select(Evaluation)
        .options(selectinload(Evaluation.user), selectinload(Evaluation.evaluator))
        .where(Evaluation.id == evaluation_id)
    )
    evaluation = result.scalar_one_or_none()
    if evaluation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Evaluation not found"
        )
    if evaluation.evaluator_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the evaluator or an admin can edit this evaluation"
        )

    updates = evaluation_data.model_dump(exclude_unset=True)
    if "ratings" in updates:
        evaluation.ratings = (
            evaluation_data.ratings.model_dump(exclude_none=True) if evaluation_data.ratings else None
        )
    for field in ("comments", "recommendations"):
        if field in updates:
            setattr(evaluation, field, updates[field])
    for field in ("strengths", "areas_for_improvement", "status"):
        if updates.get(field) is not None:
            setattr(evaluation, field, updates[field])

    evaluation.updated = utcnow()
    await db.flush()

    return evaluation_to_response(evaluation)
