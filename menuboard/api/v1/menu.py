"""Menu item endpoints. Every query is scoped to the caller's restaurant."""

import logging
import math
import uuid
from enum import StrEnum

from fastapi import APIRouter, File, Query, UploadFile, status
from sqlalchemy import delete, func, or_
from sqlmodel import select

from menuboard.api.deps import Session, Storage, TenantAuth
from menuboard.core.config import get_settings
from menuboard.core.errors import ValidationFailed
from menuboard.core.tenancy import apply_changes, get_scoped_or_404, tenant_filter, tenant_select
from menuboard.models.base import dump_json, load_json
from menuboard.models.menu_item import (
    CreatorSummary,
    ImageUploaded,
    MenuCategory,
    MenuItem,
    MenuItemCreate,
    MenuItemIngredient,
    MenuItemPage,
    MenuItemRead,
    MenuItemUpdate,
)
from menuboard.models.user import User
from menuboard.services.storage import validate_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/menu", tags=["menu"])

SUGGESTION_LIMIT = 5
SUGGESTION_MIN_CHARS = 2
MAX_PAGE = 1_000_000


class SortField(StrEnum):
    NAME = "name"
    PRICE = "price"
    CATEGORY = "category"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


_SORT_COLUMNS = {
    SortField.NAME: MenuItem.name,
    SortField.PRICE: MenuItem.price,
    SortField.CATEGORY: MenuItem.category,
    SortField.CREATED_AT: MenuItem.created_at,
    SortField.UPDATED_AT: MenuItem.updated_at,
}


# ── Helpers ───────────────────────────────────────────────────


def _to_read(item: MenuItem, creator: CreatorSummary | None = None) -> MenuItemRead:
    return MenuItemRead(
        id=item.id,
        restaurant_id=item.restaurant_id,
        created_by=item.created_by,
        name=item.name,
        description=item.description,
        price=item.price,
        currency=item.currency,
        category=item.category,
        image=item.image,
        ingredients=load_json(item.ingredients, []),
        allergens=load_json(item.allergens, []),
        dietary=load_json(item.dietary, []),
        is_available=item.is_available,
        is_spicy=item.is_spicy,
        spicy_level=item.spicy_level,
        preparation_time=item.preparation_time,
        calories=item.calories,
        creator=creator,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _columns(body: MenuItemCreate) -> dict:
    """Request body → column values. Never contains restaurant_id."""
    data = body.model_dump()
    for field in ("ingredients", "allergens", "dietary"):
        data[field] = dump_json(data[field])
    return data


def _parse_category(category: str | None) -> MenuCategory | None:
    if not category or category == "all":
        return None
    try:
        return MenuCategory(category)
    except ValueError as exc:
        raise ValidationFailed.for_field("category", "Invalid category") from exc


def _text_match(term: str, *columns):
    """Case-insensitive substring match on the columns or on any single ingredient."""
    ingredient_hit = MenuItem.id.in_(  # type: ignore[union-attr]
        select(MenuItemIngredient.menu_item_id).where(
            MenuItemIngredient.name.icontains(term, autoescape=True)  # type: ignore[attr-defined]
        )
    )
    return or_(*(col.icontains(term, autoescape=True) for col in columns), ingredient_hit)


async def _replace_ingredients(session, item: MenuItem, names: list[str]) -> None:
    await session.execute(
        delete(MenuItemIngredient).where(MenuItemIngredient.menu_item_id == item.id)
    )
    session.add_all(MenuItemIngredient(menu_item_id=item.id, name=n) for n in names)


async def _creators(session, items: list[MenuItem]) -> dict[uuid.UUID, CreatorSummary]:
    ids = {i.created_by for i in items}
    if not ids:
        return {}
    result = await session.execute(select(User.id, User.name).where(User.id.in_(ids)))  # type: ignore[union-attr]
    return {uid: CreatorSummary(id=uid, name=name) for uid, name in result.all()}


async def _read_one(session, item: MenuItem) -> MenuItemRead:
    creators = await _creators(session, [item])
    return _to_read(item, creators.get(item.created_by))


# ── Collection endpoints ──────────────────────────────────────


@router.get("", response_model=MenuItemPage)
async def list_menu_items(
    ctx: TenantAuth,
    session: Session,
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=100),
    category: str | None = None,
    search: str | None = Query(None, max_length=100),
    sort_by: SortField = SortField.NAME,
    sort_order: SortOrder = SortOrder.ASC,
) -> MenuItemPage:
    """Paginated listing with optional category filter and text search."""
    stmt = tenant_select(MenuItem, ctx.tenant_id)

    category_filter = _parse_category(category)
    if category_filter is not None:
        stmt = stmt.where(MenuItem.category == category_filter)

    if search and search.strip():
        stmt = stmt.where(
            _text_match(search.strip(), MenuItem.name, MenuItem.description)
        )

    total = (await session.execute(
        select(func.count()).select_from(stmt.subquery())
    )).scalar_one()

    column = _SORT_COLUMNS[sort_by]
    ordering = column.desc() if sort_order == SortOrder.DESC else column.asc()
    stmt = stmt.order_by(ordering, MenuItem.id).offset((page - 1) * limit).limit(limit)

    items = list((await session.execute(stmt)).scalars().all())
    creators = await _creators(session, items)
    return MenuItemPage(
        items=[_to_read(i, creators.get(i.created_by)) for i in items],
        total_items=total,
        total_pages=math.ceil(total / limit),
        current_page=page,
    )


@router.get("/categories", response_model=list[MenuCategory])
async def list_categories(ctx: TenantAuth, session: Session) -> list[MenuCategory]:
    """Distinct categories currently used by this restaurant's menu."""
    stmt = select(MenuItem.category).where(tenant_filter(MenuItem, ctx.tenant_id)).distinct()
    result = await session.execute(stmt)
    return sorted(result.scalars().all())


@router.get("/search/suggestions", response_model=list[str])
async def search_suggestions(
    ctx: TenantAuth,
    session: Session,
    q: str | None = Query(None, max_length=100),
) -> list[str]:
    """Up to five item names matching ``q`` by name or ingredient."""
    term = (q or "").strip()
    if len(term) < SUGGESTION_MIN_CHARS:
        return []

    stmt = (
        select(MenuItem.name)
        .where(
            tenant_filter(MenuItem, ctx.tenant_id),
            _text_match(term, MenuItem.name),
        )
        .order_by(MenuItem.name)
        .limit(SUGGESTION_LIMIT)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


@router.post("", response_model=MenuItemRead, status_code=status.HTTP_201_CREATED)
async def create_menu_item(
    body: MenuItemCreate,
    ctx: TenantAuth,
    session: Session,
) -> MenuItemRead:
    item = MenuItem(
        restaurant_id=ctx.tenant_id,
        created_by=ctx.user_id,
        **_columns(body),
    )
    session.add(item)
    await session.flush()
    await _replace_ingredients(session, item, body.ingredients)
    await session.commit()
    await session.refresh(item)
    logger.info("Created menu item %s for restaurant %s", item.id, ctx.tenant_id)
    return await _read_one(session, item)


# ── Item endpoints ────────────────────────────────────────────


@router.get("/{item_id}", response_model=MenuItemRead)
async def get_menu_item(
    item_id: uuid.UUID,
    ctx: TenantAuth,
    session: Session,
) -> MenuItemRead:
    item = await get_scoped_or_404(session, MenuItem, item_id, ctx.tenant_id, "Menu item")
    return await _read_one(session, item)


@router.put("/{item_id}", response_model=MenuItemRead)
async def update_menu_item(
    item_id: uuid.UUID,
    body: MenuItemUpdate,
    ctx: TenantAuth,
    session: Session,
) -> MenuItemRead:
    """Replace an item's fields. The owning restaurant never changes."""
    item = await get_scoped_or_404(session, MenuItem, item_id, ctx.tenant_id, "Menu item")

    changes = _columns(body)
    if changes["is_available"] is None:
        del changes["is_available"]

    apply_changes(item, changes)
    session.add(item)
    await _replace_ingredients(session, item, body.ingredients)
    await session.commit()
    await session.refresh(item)
    return await _read_one(session, item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(
    item_id: uuid.UUID,
    ctx: TenantAuth,
    session: Session,
) -> None:
    item = await get_scoped_or_404(session, MenuItem, item_id, ctx.tenant_id, "Menu item")
    await session.execute(
        delete(MenuItemIngredient).where(MenuItemIngredient.menu_item_id == item.id)
    )
    await session.delete(item)
    await session.commit()
    logger.info("Deleted menu item %s for restaurant %s", item_id, ctx.tenant_id)


@router.patch("/{item_id}/toggle-availability", response_model=MenuItemRead)
async def toggle_availability(
    item_id: uuid.UUID,
    ctx: TenantAuth,
    session: Session,
) -> MenuItemRead:
    item = await get_scoped_or_404(session, MenuItem, item_id, ctx.tenant_id, "Menu item")
    apply_changes(item, {"is_available": not item.is_available})
    session.add(item)
    await session.commit()
    await session.refresh(item)
    return await _read_one(session, item)


@router.post("/{item_id}/upload-image", response_model=ImageUploaded)
async def upload_menu_item_image(
    item_id: uuid.UUID,
    ctx: TenantAuth,
    session: Session,
    storage: Storage,
    image: UploadFile = File(...),
) -> ImageUploaded:
    """Store a photo for the item. Storage is only touched for an item the caller owns."""
    item = await get_scoped_or_404(session, MenuItem, item_id, ctx.tenant_id, "Menu item")

    content = await image.read()
    validate_image("image", image.filename, content, get_settings().max_upload_bytes)

    url = await storage.save(content, image.filename or "image", folder=f"restaurants/{ctx.tenant_id}/menu")
    apply_changes(item, {"image": url})
    session.add(item)
    await session.commit()
    return ImageUploaded(image_url=url)
