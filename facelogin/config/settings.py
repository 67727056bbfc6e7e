"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _load_env_file(path: str = ".env") -> None:
    """Populate os.environ from the provided .env file if it exists."""

    env_path = Path(path)
    if not env_path.exists():
        return

    for line in env_path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


@dataclass(frozen=True, slots=True)
class Settings:
    """Centralised service settings based on OS environment variables."""

    environment: str = "dev"
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./data/app.db"
    internal_token: str = ""

    perception_api_key: str = ""
    perception_base_url: str = "https://ai.gateway.lovable.dev/v1"
    perception_model: str = "google/gemini-2.5-flash"
    perception_timeout: float = 30.0

    identity_url: str = ""
    identity_service_key: str = ""
    identity_redirect_url: str = ""
    identity_timeout: float = 15.0

    match_concurrency: int = 4
    verification_timeout: float = 90.0
    rate_limit_window_minutes: int = 60
    rate_limit_max_attempts: int = 5
    min_image_payload_length: int = 100


def _build_settings() -> Settings:
    _load_env_file()

    return Settings(
        environment=os.getenv("ENVIRONMENT", "dev"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./data/app.db"),
        internal_token=os.getenv("INTERNAL_TOKEN", ""),
        perception_api_key=os.getenv("PERCEPTION_API_KEY", ""),
        perception_base_url=os.getenv("PERCEPTION_BASE_URL", "https://ai.gateway.lovable.dev/v1"),
        perception_model=os.getenv("PERCEPTION_MODEL", "google/gemini-2.5-flash"),
        perception_timeout=float(os.getenv("PERCEPTION_TIMEOUT", "30")),
        identity_url=os.getenv("IDENTITY_URL", ""),
        identity_service_key=os.getenv("IDENTITY_SERVICE_KEY", ""),
        identity_redirect_url=os.getenv("IDENTITY_REDIRECT_URL", ""),
        identity_timeout=float(os.getenv("IDENTITY_TIMEOUT", "15")),
        match_concurrency=max(1, int(os.getenv("MATCH_CONCURRENCY", "4"))),
        verification_timeout=float(os.getenv("VERIFICATION_TIMEOUT", "90")),
        rate_limit_window_minutes=int(os.getenv("RATE_LIMIT_WINDOW_MINUTES", "60")),
        rate_limit_max_attempts=int(os.getenv("RATE_LIMIT_MAX_ATTEMPTS", "5")),
        min_image_payload_length=int(os.getenv("MIN_IMAGE_PAYLOAD_LENGTH", "100")),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance to avoid re-reading configuration."""

    return _build_settings()
