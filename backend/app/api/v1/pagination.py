"""
Pagination helper for list endpoints (page/perPage format).
"""
from math import ceil
from typing import Any
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(db: AsyncSession, query, page: int, per_page: int, *options: Any) -> tuple[list, int, int]:
    """
    Run query for one page.

    Loader options are applied after counting so they never end up inside the
    count subquery. Returns (rows, total_items, total_pages).
    """
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total_items = total_result.scalar() or 0

    page_query = query.offset((page - 1) * per_page).limit(per_page)
    if options:
        page_query = page_query.options(*options)
    result = await db.execute(page_query)
    rows = list(result.scalars().all())

    total_pages = ceil(total_items / per_page) if total_items > 0 else 1
    return rows, total_items, total_pages
