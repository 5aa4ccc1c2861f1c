"""Role & permission helpers for platform-wide user roles."""
from typing import Iterable, Sequence
from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.deps import get_current_user
from app.models.user import User, UserRole
from app.models.hub import Hub

# Staff who run hubs and the volunteer pipeline
ADMIN_ROLES = (UserRole.ADMIN, UserRole.HUB_COORDINATOR)
# Roles that review volunteer work (activities, evaluations)
REVIEWER_ROLES = (UserRole.ADMIN, UserRole.EVALUATOR)
# Roles that may issue evaluations and recognitions
ISSUER_ROLES = (UserRole.ADMIN, UserRole.EVALUATOR, UserRole.HUB_COORDINATOR)


def has_role(user: User | None, allowed: Sequence[UserRole] | Iterable[UserRole]) -> bool:
    if user is None:
        return False
    return user.role in tuple(allowed)


def require_role(
    user: User,
    allowed: Sequence[UserRole] | Iterable[UserRole],
    detail: str = "Insufficient role",
) -> User:
    """Ensure the user has any role in allowed. Raises 403 otherwise."""
    if not has_role(user, allowed):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
    return user


class RoleChecker:
    """Dependency that authenticates and then enforces a role set."""

    def __init__(self, allowed: Iterable[UserRole], detail: str = "Insufficient role"):
        self.allowed = tuple(allowed)
        self.detail = detail

    async def __call__(self, current_user: User = Depends(get_current_user)) -> User:
        return require_role(current_user, self.allowed, self.detail)


require_admin = RoleChecker([UserRole.ADMIN], detail="Admin only")
require_staff = RoleChecker(ADMIN_ROLES, detail="Admin access required")
require_reviewer = RoleChecker(REVIEWER_ROLES)
require_issuer = RoleChecker(ISSUER_ROLES)


async def ensure_hub_exists(db: AsyncSession, hub_id: str) -> Hub:
    result = await db.execute(select(Hub).where(Hub.id == hub_id))
    hub = result.scalar_one_or_none()
    if hub is None:
        raise HTTPException(status_code=404, detail="Hub not found")
    return hub


async def ensure_user_exists(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def can_manage_hub(user: User | None, hub: Hub) -> bool:
    """Admins, the account that registered the hub, and its affiliated coordinators."""
    if user is None:
        return False
    if user.role == UserRole.ADMIN:
        return True
    if hub.registered_by_id is not None and hub.registered_by_id == user.id:
        return True
    return user.role == UserRole.HUB_COORDINATOR and user.hub_affiliation_id == hub.id
