import math
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import SettingsDep
from .exceptions import ValidationFailed


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def page_params(
    settings: SettingsDep,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
) -> PageParams:
    if limit is not None and limit > settings.MAX_PAGE_SIZE:
        raise ValidationFailed(f"limit must be at most {settings.MAX_PAGE_SIZE}")
    return PageParams(page=page, limit=limit or settings.DEFAULT_PAGE_SIZE)


PageDep = Annotated[PageParams, Depends(page_params)]


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def paginate(db: AsyncSession, stmt, params: PageParams, *options):
    """Run ``stmt`` for one page and return ``(items, total_pages)``.

    The count is taken over the same filtered statement; loader ``options``
    are applied to the page query only.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar_one()

    page_stmt = stmt.options(*options).offset(params.offset).limit(params.limit)
    result = await db.execute(page_stmt)
    items = result.scalars().unique().all()
    return items, total_pages(total, params.limit)
