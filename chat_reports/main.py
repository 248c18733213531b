"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from chat_reports.config import get_settings
from chat_reports.database import engine, init_db
from chat_reports.routers import health, reports
from chat_reports.services.admission import AdmissionController

# Import middleware
from chat_reports.middleware import (
    BodySizeLimitMiddleware,
    admission_middleware,
    logging_middleware,
    register_exception_handlers,
    security_headers_middleware,
    unhandled_exception_middleware,
)
from chat_reports.utils.logger import configure_logging, get_logger

settings = get_settings()

# Configure logging early
configure_logging(
    log_level=settings.log_level,
    json_logs=settings.log_json or settings.is_production,
)
log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    log.info(
        "starting application",
        environment=settings.environment,
        port=settings.port,
        database_url=settings.masked_database_url(),
    )

    # Rate-limit state lives for the lifetime of the process only
    app.state.admission = AdmissionController.from_settings(settings)
    log.info(
        "admission control enabled",
        window_seconds=settings.rate_limit_window_seconds,
        general_limit=settings.general_rate_limit,
        strict_limit=settings.strict_rate_limit,
        slow_down_after=settings.slow_down_after,
    )

    if settings.create_tables_on_startup:
        await init_db()
        log.info("database initialized")

    yield

    log.info("shutting down application")
    await engine.dispose()
    log.info("database connections closed")


app = FastAPI(
    title="Chat Reports API",
    description="Stores user-submitted reports for the chat application",
    version="1.0.0",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
    openapi_url=None if settings.is_production else "/openapi.json",
    lifespan=lifespan,
)

# Register exception handlers first
register_exception_handlers(app)

# Middleware runs outermost-last-added: security headers -> logging ->
# admission control -> body size limit -> unexpected-error envelope -> routes
app.middleware("http")(unhandled_exception_middleware)
app.add_middleware(
    BodySizeLimitMiddleware,
    route_limits=[
        ("/reports", settings.reports_body_limit),
        ("/health", settings.health_body_limit),
    ],
    default_limit=settings.default_body_limit,
)
app.middleware("http")(admission_middleware)
app.middleware("http")(logging_middleware)
app.middleware("http")(security_headers_middleware)

# Register routers
app.include_router(health.router, tags=["Health"])
app.include_router(reports.router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "chat_reports.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    run()
