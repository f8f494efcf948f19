"""FastAPI application entrypoint for the Clubhouse gateway.

Both services share one database, so the gateway mounts their routers
in-process under ``/api/v1`` rather than proxying over HTTP.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.events_service import routers as events_routers
from services.members_service import routers as members_routers

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="Clubhouse Gateway",
        version="0.1.0",
        description="Public API for the club: members, kids, events and payments.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    # Members service
    app.include_router(members_routers.auth_router, prefix=API_PREFIX)
    app.include_router(members_routers.parent_router, prefix=API_PREFIX)
    app.include_router(members_routers.me_router, prefix=API_PREFIX)
    app.include_router(members_routers.registration_router, prefix=API_PREFIX)
    app.include_router(members_routers.admin_router, prefix=API_PREFIX)
    app.include_router(members_routers.kids_admin_router, prefix=API_PREFIX)

    # Events service
    app.include_router(events_routers.events_router, prefix=API_PREFIX)
    app.include_router(events_routers.admin_events_router, prefix=API_PREFIX)
    app.include_router(events_routers.payments_router, prefix=API_PREFIX)
    app.include_router(events_routers.participation_router, prefix=API_PREFIX)

    return app


app = create_app()
