"""
Common schemas used across the application.
"""
from typing import Generic, TypeVar, Optional
from pydantic import BaseModel
from datetime import datetime

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated list response (page/perPage/totalItems/totalPages)."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[T]


class ItemListResponse(BaseModel, Generic[T]):
    """Unpaginated list response."""
    items: list[T]


class MessageResponse(BaseModel):
    """Simple message response."""
    message: str


class HealthResponse(BaseModel):
    """Health check response."""
    code: int = 200
    message: str = "API is healthy."


class ServiceInfoResponse(BaseModel):
    status: str = "ok"
    service: str
    version: str
    modules: list[str]


class BaseResponse(BaseModel):
    """Base response with common fields."""
    id: str
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class ExpandedUser(BaseModel):
    """Minimal user info for expansion in responses."""
    id: str
    email: str
    name: str
    role: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True


class ExpandedHub(BaseModel):
    """Minimal hub info for expansion in responses."""
    id: str
    name: str
    region: Optional[str] = None
    address: Optional[dict] = None
    contact_person: Optional[dict] = None

    class Config:
        from_attributes = True


def expand_user(user) -> Optional[ExpandedUser]:
    if user is None:
        return None
    return ExpandedUser(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role.value if hasattr(user.role, "value") else user.role,
        phone=user.phone,
    )


def expand_hub(hub) -> Optional[ExpandedHub]:
    if hub is None:
        return None
    return ExpandedHub.model_validate(hub)
