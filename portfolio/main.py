"""FastAPI application entry point.

Wiring only: app state, lifespan, exception handlers, middleware, routers.
Settings are loaded inside create_app() so tests can set env (and clear the
get_settings cache) before building an app.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from portfolio.api.v1 import api_router
from portfolio.core.config import get_settings
from portfolio.core.exception_handlers import register_exception_handlers
from portfolio.core.lifespan import create_lifespan, init_app_state
from portfolio.core.limiter import limiter
from portfolio.middleware import RequestIDMiddleware
from portfolio.shared.telemetry.telemetry import configure_telemetry


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    init_app_state(app, settings)

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Last added is outermost: request ids are assigned before CORS runs.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")

    configure_telemetry(app, settings)

    return app


app = create_app()
