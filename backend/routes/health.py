"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check — no external calls."""
    settings = request.app.state.settings
    return {"status": "ok", "service": "eigenwallet-site-api", "commit": settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Report configuration gaps and where the cache lives. Still no remote calls."""
    settings = request.app.state.settings
    result = {
        "status": "ok",
        "service": "eigenwallet-site-api",
        "commit": settings.git_sha,
        "cache_dir": settings.cache_dir,
        "cache_ttl_seconds": settings.cache_ttl_seconds,
        "github_auth": "token" if settings.github_token else "anonymous",
    }

    missing = settings.validate()
    if missing:
        result["warnings"] = [f"{var} is not set" for var in missing]

    return result
