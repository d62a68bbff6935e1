"""FastAPI application with lifespan management."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from firebase_admin import firestore

from content_gateway.analytics import AnalyticsClient
from content_gateway.api.errors import register_exception_handlers
from content_gateway.api.middleware import RequestLoggingMiddleware
from content_gateway.api.routes.analytics import router as analytics_router
from content_gateway.api.routes.content import router as content_router
from content_gateway.api.routes.documents import router as documents_router
from content_gateway.api.routes.session import auth_router
from content_gateway.api.routes.session import router as session_router
from content_gateway.api.schemas import StatusResponse
from content_gateway.auth.limits import rate_limiter
from content_gateway.auth.rate_limiter import InMemoryRateLimiter
from content_gateway.config import settings
from content_gateway.firebase.admin import init_firebase
from content_gateway.firebase.documents import DocumentStore
from content_gateway.firebase.identity import IdentityService
from content_gateway.http import create_http_client
from content_gateway.logging_config import configure_logging
from content_gateway.squidex.registry import TenantRegistry

logger = structlog.get_logger()

CLEANUP_INTERVAL_SECONDS = 300
BASE_PATH = settings.base_path.rstrip("/")


async def _cleanup_loop(limiter: InMemoryRateLimiter) -> None:
    """Periodic cleanup of expired rate limit entries."""
    while True:
        await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
        try:
            cleaned = await asyncio.to_thread(limiter.cleanup)
            if cleaned:
                logger.debug("rate_limiter_cleanup", keys_removed=cleaned)
        except Exception:
            logger.exception("rate_limiter_cleanup_error")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown.

    Startup:
        - Configure logging, initialize the Firebase Admin SDK.
        - Create the shared outbound HTTP client and the services on top
          of it (identity, Firestore, analytics, Squidex registry).
        - Start rate limiter cleanup task.
    Shutdown:
        - Cancel cleanup task, close the HTTP client.
    """
    configure_logging(
        environment=str(settings.env),
        log_level=settings.log_level,
        service=settings.api_name,
    )

    firebase_app = init_firebase(settings.firebase_frontend_config.project_id)
    http_client = create_http_client(settings.squidex_timeout_seconds)

    app.state.identity_service = IdentityService(
        http_client,
        web_api_key=settings.firebase_web_api_key,
        app=firebase_app,
    )
    app.state.document_store = DocumentStore(firestore.client(firebase_app))
    app.state.analytics_client = AnalyticsClient(
        http_client,
        measurement_id=settings.games_measurement_id,
        api_secret=(
            settings.analytics_secret_key.get_secret_value()
            if settings.analytics_secret_key
            else ""
        ),
    )
    app.state.tenant_registry = TenantRegistry.from_settings(settings, http_client)

    cleanup_task = asyncio.create_task(_cleanup_loop(rate_limiter))

    logger.info(
        "app_started",
        environment=str(settings.env),
        squidex_apps=app.state.tenant_registry.available_tenants(),
    )
    yield

    cleanup_task.cancel()
    await http_client.aclose()
    logger.info("app_stopped")


app = FastAPI(
    title=settings.api_name,
    description="Gateway for Firebase Auth, Firestore, analytics and Squidex",
    version="0.1.0",
    lifespan=lifespan,
    debug=settings.is_dev,
)

app.add_middleware(
    RequestLoggingMiddleware, enabled=settings.enable_request_logging
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)
register_exception_handlers(app)


@app.get(f"{BASE_PATH}/status")
async def status() -> StatusResponse:
    """Liveness probe."""
    return StatusResponse()


app.include_router(session_router, prefix=BASE_PATH)
app.include_router(auth_router, prefix=BASE_PATH)
app.include_router(documents_router, prefix=BASE_PATH)
app.include_router(analytics_router, prefix=BASE_PATH)
app.include_router(content_router, prefix=f"{BASE_PATH}/squidex")
