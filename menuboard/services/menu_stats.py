"""Menu statistics for one restaurant."""

import uuid

from pydantic import BaseModel
from sqlalchemy import case, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from menuboard.core.tenancy import tenant_filter
from menuboard.models.menu_item import MenuCategory, MenuItem


class StatsOverview(BaseModel):
    total_items: int
    available_items: int
    avg_price: float
    categories: list[MenuCategory]


class CategoryBreakdown(BaseModel):
    category: MenuCategory
    count: int
    avg_price: float


class MenuStats(BaseModel):
    overview: StatsOverview
    category_breakdown: list[CategoryBreakdown]


async def compute_menu_stats(session: AsyncSession, tenant_id: uuid.UUID) -> MenuStats:
    """Totals, availability, average price and per-category breakdown.

    The tenant predicate sits in the WHERE clause of both queries, so rows
    from other restaurants are dropped before any grouping happens.
    """
    scope = tenant_filter(MenuItem, tenant_id)

    totals = (await session.execute(
        select(
            func.count(MenuItem.id),
            func.coalesce(func.sum(case((MenuItem.is_available == True, 1), else_=0)), 0),  # noqa: E712
            func.coalesce(func.avg(MenuItem.price), 0.0),
        ).where(scope)
    )).one()

    item_count = func.count(MenuItem.id)
    by_category = await session.execute(
        select(
            MenuItem.category,
            item_count.label("item_count"),
            func.avg(MenuItem.price).label("avg_price"),
        )
        .where(scope)
        .group_by(MenuItem.category)
        .order_by(item_count.desc(), MenuItem.category)
    )
    breakdown = [
        CategoryBreakdown(
            category=row.category,
            count=row.item_count,
            avg_price=round(float(row.avg_price or 0), 2),
        )
        for row in by_category.all()
    ]

    return MenuStats(
        overview=StatsOverview(
            total_items=totals[0],
            available_items=int(totals[1]),
            avg_price=round(float(totals[2]), 2),
            categories=[b.category for b in breakdown],
        ),
        category_breakdown=breakdown,
    )
