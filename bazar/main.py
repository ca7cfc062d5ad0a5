"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (health plus the marketplace context)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, rate limiting)
- Logging configuration
- The in-memory session registry

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from bazar.application.marketplace.session import SessionRegistry
from bazar.core.config import settings
from bazar.interfaces.health import router as health_router
from bazar.interfaces.marketplace.router import router as marketplace_router
from bazar.shared.errors.handlers import register_error_handlers
from bazar.shared.logging import configure_logging
from bazar.shared.security.headers import SecurityHeadersMiddleware
from bazar.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: own the session registry."""
    app.state.session_registry = SessionRegistry(
        idle_timeout_seconds=settings.session_idle_timeout_seconds
    )
    logger.info("%s %s started", settings.project_name, settings.version)

    yield

    open_sessions = len(app.state.session_registry)
    if open_sessions:
        logger.info("Shutting down with %d open session(s)", open_sessions)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(marketplace_router, prefix="/api/v1")

    return app


app = create_app()
