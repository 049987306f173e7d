"""V1 API router aggregation."""

from fastapi import APIRouter

from menuboard.api.v1.auth import router as auth_router
from menuboard.api.v1.menu import router as menu_router
from menuboard.api.v1.restaurant import router as restaurant_router
from menuboard.api.v1.users import router as users_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(auth_router)
v1_router.include_router(menu_router)
v1_router.include_router(restaurant_router)
v1_router.include_router(users_router)
