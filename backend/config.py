"""Centralized configuration — all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # GitHub releases API. Unauthenticated requests get a much lower rate limit.
        self.github_token: str | None = os.getenv("GITHUB_TOKEN") or None

        # Remote fetch behaviour
        self.api_retries: int = int(os.getenv("API_RETRIES", "3"))
        self.retry_backoff_seconds: float = float(os.getenv("RETRY_BACKOFF_SECONDS", "1.0"))
        self.request_timeout_seconds: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))

        # On-disk cache
        self.cache_dir: str = os.getenv("CACHE_DIR", ".cache")
        self.cache_ttl_seconds: float = float(os.getenv("CACHE_TTL_SECONDS", "600"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of recommended env vars that are not set."""
        recommended = ["GITHUB_TOKEN"]
        return [var for var in recommended if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    mapping = {
        "GITHUB_TOKEN": "github_token",
        "API_RETRIES": "api_retries",
        "CACHE_DIR": "cache_dir",
    }
    return mapping.get(env_var, env_var.lower())
