"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SiteDataError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class DataUnavailableError(SiteDataError):
    """A remote data source could not be reached or returned unusable data."""

    def __init__(self, source: str):
        super().__init__(f"{source} is temporarily unavailable", status_code=503)
        self.source = source


class UnknownProviderError(SiteDataError):
    def __init__(self, peer_id: str):
        super().__init__(f"Unknown provider: {peer_id}", status_code=404)
        self.peer_id = peer_id


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(SiteDataError)
    async def handle_site_data_error(_request: Request, exc: SiteDataError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
