from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from asgi_correlation_id import CorrelationIdMiddleware, correlation_id
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from starlette.middleware.base import RequestResponseEndpoint

from src.bikeshop.api.v1.router import api_router
from src.bikeshop.core.config import get_settings
from src.bikeshop.core.db import dispose_engine, get_session
from src.bikeshop.core.exceptions import setup_exception_handlers
from src.bikeshop.core.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from src.bikeshop.core.notifications import NotificationOutbox, SlackNotificationChannel
from src.bikeshop.core.rate_limit import limiter
from src.bikeshop.repositories import IsolatedTransactionContextProvider
from src.bikeshop.services.workflow_definitions import verify_definitions

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    verify_definitions()
    logger.info(f"Starting {settings.app_name}")

    yield

    outbox: NotificationOutbox = app.state.notification_outbox
    logger.info(f"Shutdown initiated, draining {outbox.pending_count} notifications...")
    drained = await outbox.drain(timeout=settings.shutdown_grace_period)
    if not drained:
        logger.warning("Some notifications were dropped during shutdown")

    logger.info("Closing connections...")
    await app.state.notification_channel.aclose()
    await dispose_engine()
    logger.info("Shutdown complete")


OPENAPI_TAGS = [
    {"name": "workflow-steps", "description": "Workflow step tracking for transactions"},
    {"name": "notifications", "description": "Shop Slack notifications"},
]


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Bike shop operations API",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )

    channel = SlackNotificationChannel(settings)
    app.state.notification_channel = channel
    app.state.notification_outbox = NotificationOutbox(
        channel,
        max_attempts=settings.notification_retry_attempts,
        backoff_seconds=settings.notification_retry_backoff_seconds,
        timeout_seconds=settings.notification_timeout_seconds,
    )
    app.state.context_provider = IsolatedTransactionContextProvider()

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    setup_exception_handlers(app)

    app.add_middleware(CorrelationIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "X-User-ID", "X-Request-ID"],
    )

    @app.middleware("http")
    async def logging_context_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Bind request_id to log context for all requests."""
        clear_request_context()
        bind_request_context(correlation_id.get())
        try:
            response = await call_next(request)
            return response
        finally:
            clear_request_context()

    app.include_router(api_router)

    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    @app.get("/health")
    async def health() -> JSONResponse:
        """Health check with database validation."""
        outbox: NotificationOutbox = app.state.notification_outbox
        health_status: dict[str, Any] = {
            "status": "healthy",
            "database": "unknown",
            "notifications": {
                "enabled": settings.slack_notifications_enabled,
                "pending": outbox.pending_count,
            },
        }

        try:
            async with get_session() as session:
                await session.execute(text("SELECT 1"))
            health_status["database"] = "healthy"
        except Exception as e:
            health_status["database"] = f"unhealthy: {str(e)}"
            health_status["status"] = "unhealthy"

        status_code = 200 if health_status["status"] == "healthy" else 503
        return JSONResponse(content=health_status, status_code=status_code)

    return app


app = create_app()
