"""
Volunteering API routers.

Provides endpoints for:
- Volunteer matching and approval
- Placements
- Activity and hour tracking
- Trainings
- Evaluations and recognitions
"""
from fastapi import APIRouter

from app.api.v1.volunteering.matching import router as matching_router
from app.api.v1.volunteering.placement import router as placement_router
from app.api.v1.volunteering.activities import router as activities_router
from app.api.v1.volunteering.training import router as training_router
from app.api.v1.volunteering.evaluation import router as evaluation_router
from app.api.v1.volunteering.recognition import router as recognition_router

# Combined volunteering router
volunteering_router = APIRouter()

volunteering_router.include_router(
    matching_router,
    prefix="/volunteer-matching",
    tags=["volunteer-matching"]
)

volunteering_router.include_router(
    placement_router,
    prefix="/placement",
    tags=["placement"]
)

volunteering_router.include_router(
    activities_router,
    prefix="/activities",
    tags=["activities"]
)

volunteering_router.include_router(
    training_router,
    prefix="/training",
    tags=["training"]
)

volunteering_router.include_router(
    evaluation_router,
    prefix="/evaluation",
    tags=["evaluation"]
)

volunteering_router.include_router(
    recognition_router,
    prefix="/recognition",
    tags=["recognition"]
)

__all__ = ["volunteering_router"]
