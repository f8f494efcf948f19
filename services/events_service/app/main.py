"""FastAPI application for the Events Service."""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.events_service.routers import (
    admin_events_router,
    events_router,
    participation_router,
    payments_router,
)


def create_app() -> FastAPI:
    """Create and configure the Events Service FastAPI app."""
    app = FastAPI(
        title="Clubhouse Events Service",
        version="0.1.0",
        description="Events, attendance, payments and participation requests.",
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "events"}

    app.include_router(events_router)
    app.include_router(admin_events_router)
    app.include_router(payments_router)
    app.include_router(participation_router)

    return app


app = create_app()
