"""
Sign-ups for events, projects and trainings.
"""
import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.base import utcnow
from app.models.event import Event
from app.models.project import Project
from app.models.registration import Registration, RegistrationType, RegistrationStatus
from app.models.training import Training
from app.services.stats import increment

logger = logging.getLogger(__name__)

REGISTRATION_TARGETS = {
    RegistrationType.EVENT: Event,
    RegistrationType.PROJECT: Project,
    RegistrationType.TRAINING: Training,
}


class RegistrationError(ValueError):
    """The registration breaks a business rule (duplicate, full)."""


async def get_target(db: AsyncSession, reg_type: RegistrationType, ref_id: str):
    return await db.get(REGISTRATION_TARGETS[reg_type], ref_id)


async def find_registration(
    db: AsyncSession, user_id: str, reg_type: RegistrationType, ref_id: str
) -> Optional[Registration]:
    result = await db.execute(
        select(Registration).where(
            Registration.user_id == user_id,
            Registration.type == reg_type,
            Registration.ref_id == ref_id,
        )
    )
    return result.scalar_one_or_none()


async def register_user(
    db: AsyncSession, user_id: str, reg_type: RegistrationType, target
) -> Registration:
    """
    Create a confirmed registration for target.

    Raises RegistrationError when the user is already registered or the
    training/event is at capacity.
    """
    if await find_registration(db, user_id, reg_type, target.id) is not None:
        raise RegistrationError("Already registered")

    if reg_type == RegistrationType.TRAINING and target.is_full:
        raise RegistrationError("Training is full")

    if reg_type == RegistrationType.EVENT and target.capacity:
        confirmed = await db.execute(
            select(func.count(Registration.id)).where(
                Registration.type == RegistrationType.EVENT,
                Registration.ref_id == target.id,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
        )
        if (confirmed.scalar() or 0) >= target.capacity:
            raise RegistrationError("Event is full")

    now = utcnow()
    registration = Registration(
        user_id=user_id,
        type=reg_type,
        ref_id=target.id,
        status=RegistrationStatus.CONFIRMED,
        created=now,
        updated=now,
    )
    db.add(registration)
    await db.flush()

    if reg_type == RegistrationType.TRAINING:
        await increment(db, Training, target.id, current_participants=1)

    logger.info("User %s registered for %s %s", user_id, reg_type.value, target.id)
    return registration
