"""
Volunteer Hub FastAPI Application - Main entry point.

Backend for an NGO volunteer and member management platform:

- Accounts: registration, login, profiles, user administration
- Hubs: partner organization onboarding and volunteer requests
- Volunteering: matching, placements, activities, trainings, evaluations, recognitions
- Payments: simulated in-app payments and gateway checkouts
- Communication: mass messaging
- ID cards: issuance and public verification
- Reports: dashboard and custom reports
- Admin: registration form fields and membership types

All endpoints are available under /api/v1/.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.base import init_db
from app.schemas.common import HealthResponse, ServiceInfoResponse

from app.api.v1 import auth, core, hubs, payments, communication, idcards, reports
from app.api.v1.volunteering import volunteering_router
from app.api.v1.admin import admin_router

logger = logging.getLogger(__name__)

MODULES = [
    "auth", "core", "hubs", "volunteer-matching", "placement", "activities",
    "training", "evaluation", "recognition", "payments", "communication",
    "idcards", "reports", "form-fields", "membership-types",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    setup_logging()
    # Note: In production, use Alembic migrations instead
    await init_db()
    logger.info("%s %s started (%s)", settings.APP_NAME, settings.APP_VERSION, settings.APP_ENV)
    yield
    logger.info("%s shutting down", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
Volunteer Hub - volunteer and member management for humanitarian organizations.

## Modules

- **Accounts**: Registration, login, profiles
- **Hubs**: Partner organizations and their volunteer requests
- **Volunteering**: Matching, placements, activities, trainings, evaluations, recognitions
- **Payments**: In-app payments, donations, membership fees
- **Communication**: Email/SMS/push campaigns
- **ID Cards**: Issuance and verification
- **Reports**: Dashboard and exports
    """,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")


@app.get("/", response_model=ServiceInfoResponse, tags=["health"])
async def service_info():
    return ServiceInfoResponse(
        status="ok",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        modules=MODULES,
    )


# ============================================================================
# V1 API ENDPOINTS
# ============================================================================

# Auth - /api/v1/auth/*
app.include_router(
    auth.router,
    prefix="/api/v1/auth",
    tags=["auth"]
)

# Core - /api/v1/me, /events, /projects, /register, /users
app.include_router(
    core.router,
    prefix="/api/v1",
    tags=["core"]
)

# Hubs - /api/v1/hubs/*
app.include_router(
    hubs.router,
    prefix="/api/v1/hubs",
    tags=["hubs"]
)

# Volunteering module
# Includes: volunteer-matching, placement, activities, training, evaluation, recognition
app.include_router(
    volunteering_router,
    prefix="/api/v1",
)

# Payments - /api/v1/payments/*
app.include_router(
    payments.router,
    prefix="/api/v1/payments",
    tags=["payments"]
)

# Communication - /api/v1/communication/*
app.include_router(
    communication.router,
    prefix="/api/v1/communication",
    tags=["communication"]
)

# ID cards - /api/v1/idcards/*
app.include_router(
    idcards.router,
    prefix="/api/v1/idcards",
    tags=["idcards"]
)

# Reports - /api/v1/reports/*
app.include_router(
    reports.router,
    prefix="/api/v1/reports",
    tags=["reports"]
)

# Admin configuration
# Includes: form-fields, membership-types
app.include_router(
    admin_router,
    prefix="/api/v1",
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)}
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
