"""
Membership expiry and activation.
"""
from datetime import datetime
from typing import Optional
from dateutil.relativedelta import relativedelta

from app.models.base import utcnow
from app.models.membership_type import MembershipType, DurationType
from app.models.user import User, MembershipStatus


def compute_membership_expiry(membership_type: MembershipType, start: Optional[datetime] = None) -> datetime:
    """Expiry is start plus duration months or years (calendar arithmetic, month-end clamped)."""
    start = start or utcnow()
    if membership_type.duration_type == DurationType.YEAR:
        return start + relativedelta(years=membership_type.duration)
    return start + relativedelta(months=membership_type.duration)


def activate_membership(user: User, membership_type: MembershipType, start: Optional[datetime] = None) -> None:
    """Mark the user's membership active under the given plan."""
    now = start or utcnow()
    user.membership_type_id = membership_type.id
    user.membership_status = MembershipStatus.ACTIVE
    user.membership_expiry = compute_membership_expiry(membership_type, now)
    user.updated = utcnow()
