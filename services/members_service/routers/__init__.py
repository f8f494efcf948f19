"""Members service routers package."""

from services.members_service.routers.admin import router as admin_router
from services.members_service.routers.auth import parent_router
from services.members_service.routers.auth import router as auth_router
from services.members_service.routers.kids import admin_router as kids_admin_router
from services.members_service.routers.kids import me_router
from services.members_service.routers.registration import router as registration_router

__all__ = [
    "admin_router",
    "auth_router",
    "kids_admin_router",
    "me_router",
    "parent_router",
    "registration_router",
]
