"""
Admin configuration API routers.

Provides endpoints for:
- Registration form fields
- Membership types
"""
from fastapi import APIRouter

from app.api.v1.admin.form_fields import router as form_fields_router
from app.api.v1.admin.membership_types import router as membership_types_router

# Combined admin router
admin_router = APIRouter()

admin_router.include_router(
    form_fields_router,
    prefix="/form-fields",
    tags=["form-fields"]
)

admin_router.include_router(
    membership_types_router,
    prefix="/membership-types",
    tags=["membership-types"]
)

__all__ = ["admin_router"]
