"""Restaurant profile, logo and statistics for the caller's own restaurant."""

import logging

from fastapi import APIRouter, File, UploadFile

from menuboard.api.deps import AdminAuth, Session, Storage, TenantAuth
from menuboard.core.config import get_settings
from menuboard.core.errors import NotFound
from menuboard.core.tenancy import apply_changes
from menuboard.models.base import dump_json, load_json
from menuboard.models.restaurant import (
    Address,
    Contact,
    LogoUploaded,
    OwnerSummary,
    Restaurant,
    RestaurantRead,
    RestaurantSettings,
    RestaurantUpdate,
)
from menuboard.models.user import User
from menuboard.services.menu_stats import MenuStats, compute_menu_stats
from menuboard.services.storage import validate_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/restaurant", tags=["restaurant"])


def _to_read(restaurant: Restaurant, owner: User | None) -> RestaurantRead:
    return RestaurantRead(
        id=restaurant.id,
        owner_id=restaurant.owner_id,
        name=restaurant.name,
        description=restaurant.description,
        address=Address(**load_json(restaurant.address, {})),
        contact=Contact(**load_json(restaurant.contact, {})),
        cuisine=restaurant.cuisine,
        logo=restaurant.logo,
        is_active=restaurant.is_active,
        settings=RestaurantSettings(**load_json(restaurant.settings, {})),
        owner=OwnerSummary.model_validate(owner) if owner is not None else None,
        created_at=restaurant.created_at,
        updated_at=restaurant.updated_at,
    )


async def _load(ctx, session) -> Restaurant:
    # The tenant id *is* the restaurant id, so no extra scoping is needed.
    restaurant = await session.get(Restaurant, ctx.tenant_id)
    if restaurant is None:
        raise NotFound("Restaurant not found")
    return restaurant


# ── Routes ───────────────────────────────────────────────────

@router.get("/profile", response_model=RestaurantRead)
async def get_profile(ctx: TenantAuth, session: Session) -> RestaurantRead:
    restaurant = await _load(ctx, session)
    owner = await session.get(User, restaurant.owner_id)
    return _to_read(restaurant, owner)


@router.put("/profile", response_model=RestaurantRead)
async def update_profile(
    body: RestaurantUpdate,
    ctx: AdminAuth,
    session: Session,
) -> RestaurantRead:
    """Update the profile. Omitted optional sections keep their stored values."""
    restaurant = await _load(ctx, session)

    changes = body.model_dump(exclude_unset=True)
    for section in ("address", "contact", "settings"):
        if section in changes:
            value = changes.pop(section)
            changes[section] = dump_json(value if value is not None else {})
    if changes.get("description") is None:
        changes.pop("description", None)
    if changes.get("cuisine") is None:
        changes.pop("cuisine", None)

    apply_changes(restaurant, changes)
    session.add(restaurant)
    await session.commit()
    await session.refresh(restaurant)
    logger.info("Restaurant %s profile updated by %s", restaurant.id, ctx.user_id)

    owner = await session.get(User, restaurant.owner_id)
    return _to_read(restaurant, owner)


@router.post("/upload-logo", response_model=LogoUploaded)
async def upload_logo(
    ctx: AdminAuth,
    session: Session,
    storage: Storage,
    logo: UploadFile = File(...),
) -> LogoUploaded:
    restaurant = await _load(ctx, session)

    content = await logo.read()
    validate_image("logo", logo.filename, content, get_settings().max_upload_bytes)

    url = await storage.save(content, logo.filename or "logo", folder=f"restaurants/{ctx.tenant_id}")
    apply_changes(restaurant, {"logo": url})
    session.add(restaurant)
    await session.commit()
    return LogoUploaded(logo_url=url)


@router.get("/stats", response_model=MenuStats)
async def get_stats(ctx: TenantAuth, session: Session) -> MenuStats:
    """Menu totals and per-category breakdown for this restaurant only."""
    return await compute_menu_stats(session, ctx.tenant_id)
