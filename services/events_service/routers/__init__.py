"""Events service routers package."""

from services.events_service.routers.admin import (
    events_router as admin_events_router,
)
from services.events_service.routers.admin import participation_router, payments_router
from services.events_service.routers.member import router as events_router

__all__ = [
    "admin_events_router",
    "events_router",
    "participation_router",
    "payments_router",
]
