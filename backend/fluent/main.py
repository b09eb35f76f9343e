"""FastAPI application with Fluent request state."""

from fastapi import FastAPI

from backend.fluent.api.routes.health import router as health_router
from backend.fluent.api.routes.metrics import router as metrics_router
from backend.fluent.api.routes.state import router as state_router
from backend.fluent.config import Settings, get_settings
from backend.fluent.db.domains import DomainRepository, SqlDomainRepository
from backend.fluent.db.engine import create_engine_from_settings, create_session_factory
from backend.fluent.middleware.locale import InitStateMiddleware


def create_app(
    settings: Settings | None = None, domains: DomainRepository | None = None
) -> FastAPI:
    """Create the application.

    Args:
        settings: Settings to use (defaults to environment settings)
        domains: Domain repository (defaults to the SQL-backed, cached one)

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    if domains is None:
        engine = create_engine_from_settings(settings)
        domains = SqlDomainRepository(
            create_session_factory(engine), ttl_seconds=settings.domain_cache_ttl_seconds
        )

    app = FastAPI(title="Fluent", version="0.1.0")
    app.add_middleware(InitStateMiddleware, domains=domains, settings=settings)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(state_router, tags=["fluent"])

    return app


app = create_app()
