"""
Atomic counter updates.

Counters are bumped with a single UPDATE ... SET col = col + n so concurrent
requests never lose an increment.
"""
from typing import Optional, Type
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base
from app.models.user import User, STAT_FIELDS


async def increment(db: AsyncSession, model: Type[Base], row_id: str, **deltas) -> Optional[Base]:
    """
    Add deltas to counter columns of one row and return the refreshed row.

    Returns None when the row does not exist.
    """
    values = {name: getattr(model, name) + delta for name, delta in deltas.items()}
    await db.execute(
        update(model)
        .where(model.id == row_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    row = await db.get(model, row_id)
    if row is not None:
        await db.refresh(row, attribute_names=list(deltas) + ["updated"])
    return row


async def increment_user_stats(db: AsyncSession, user_id: str, **deltas) -> Optional[User]:
    """Bump a user's stats, e.g. increment_user_stats(db, uid, total_hours=1.5, activities_completed=1)."""
    unknown = set(deltas) - set(STAT_FIELDS)
    if unknown:
        raise ValueError(f"Unknown stat fields: {', '.join(sorted(unknown))}")
    return await increment(db, User, user_id, **deltas)
