"""FastAPI application entry point for the eigenwallet site data API."""

import logging
import sys

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings
from errors import register_error_handlers
from services.cache import Cache, DiskCache
from services.liquidity import LiquidityService
from services.releases import ReleaseService

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    cache: Cache | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app. `cache` and `transport` are injectable so tests never touch disk or network."""
    app_settings = app_settings or settings
    if cache is None:
        cache = DiskCache(app_settings.cache_dir, ttl_seconds=app_settings.cache_ttl_seconds)

    app = FastAPI(title="eigenwallet site API", version="1.0.0")

    # One pooled client for every upstream API; the timeout bounds each attempt.
    http_client = httpx.AsyncClient(
        timeout=app_settings.request_timeout_seconds,
        follow_redirects=True,
        transport=transport,
    )
    app.state.settings = app_settings
    app.state.http_client = http_client
    app.state.liquidity = LiquidityService(
        cache,
        http_client,
        retries=app_settings.api_retries,
        backoff_seconds=app_settings.retry_backoff_seconds,
    )
    app.state.releases = ReleaseService(
        cache,
        http_client,
        github_token=app_settings.github_token,
        retries=app_settings.api_retries,
        backoff_seconds=app_settings.retry_backoff_seconds,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if app_settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.downloads import router as downloads_router
    from routes.health import router as health_router
    from routes.market import router as market_router

    app.include_router(health_router)
    app.include_router(downloads_router)
    app.include_router(market_router)

    @app.on_event("startup")
    async def _validate_config() -> None:
        missing = app_settings.validate()
        if missing:
            logger.warning("Missing env vars (GitHub requests are rate-limited): %s", ", ".join(missing))

    @app.on_event("shutdown")
    async def _close_http_client() -> None:
        await http_client.aclose()

    return app


app = create_app()
