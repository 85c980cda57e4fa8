# src/screener_api/config/settings.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""Screener Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated application configuration for the Screener API. This
    module centralizes environment parsing and validation and is safe to import
    from any layer; however, only Adapters/Infrastructure should read process
    environment at runtime. Other layers receive values via DI.

Design:
    - Pydantic v2 BaseSettings; unknown env is ignored so vendor settings can
      share the same ``.env`` file.
    - Explicit field declarations with constrained types and ranges.
    - Environment enumeration for behavior toggles (includes TEST).
    - Singleton accessor ``get_settings()`` with LRU cache.
    - Safe, structured logging (no secrets).
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration for the Screener API."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level.",
        validation_alias="LOG_LEVEL",
    )
    service_name: str = Field(
        default="screener-api",
        description="Service name used in logs and the OpenAPI title.",
        validation_alias="SERVICE_NAME",
    )

    # ---------------------------
    # HTTP surface
    # ---------------------------
    docs_url: str | None = Field(
        default="/docs",
        description="Swagger UI path; empty disables it.",
        validation_alias="DOCS_URL",
    )
    openapi_url: str | None = Field(
        default="/openapi.json",
        description="OpenAPI schema path; empty disables it.",
        validation_alias="OPENAPI_URL",
    )
    cors_allow_origins_raw: str | None = Field(
        default=None,
        description="Raw env for allowed CORS origins (comma-separated).",
        validation_alias="ALLOWED_ORIGINS",
    )
    cors_allow_origins: list[str] = Field(
        default_factory=list,
        description=(
            "Allowed CORS origins. Derived from ALLOWED_ORIGINS. "
            "'*' is only accepted in development/test."
        ),
    )

    # ---------------------------
    # Caching
    # ---------------------------
    cache_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Response cache backend.",
        validation_alias="CACHE_BACKEND",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL used when CACHE_BACKEND=redis.",
        validation_alias="REDIS_URL",
    )
    cache_namespace: str = Field(
        default="screener:v1",
        description="Key prefix for the Redis response cache.",
        validation_alias="CACHE_NAMESPACE",
    )
    response_cache_ttl_s: float = Field(
        default=900.0,
        gt=0,
        le=7 * 24 * 3600,
        description="TTL of cached responses in seconds.",
        validation_alias="RESPONSE_CACHE_TTL_S",
    )
    response_cache_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Entry count above which the in-memory cache sweeps expired entries.",
        validation_alias="RESPONSE_CACHE_MAX_ENTRIES",
    )
    series_cache_max_entries: int = Field(
        default=50,
        ge=1,
        description="Sweep threshold of the in-memory cache used by series views.",
        validation_alias="SERIES_CACHE_MAX_ENTRIES",
    )
    chart_cache_ttl_s: float = Field(
        default=900.0,
        gt=0,
        le=24 * 3600,
        description="TTL of cached price charts in seconds.",
        validation_alias="CHART_CACHE_TTL_S",
    )

    # ---------------------------
    # Fundamentals engine
    # ---------------------------
    default_exchange: str = Field(
        default="NSE",
        pattern=r"^[A-Za-z]{2,10}$",
        description="Exchange prefix applied to bare symbols.",
        validation_alias="DEFAULT_EXCHANGE",
    )
    cascade_tier_timeout_s: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Upper bound for a single fallback tier.",
        validation_alias="CASCADE_TIER_TIMEOUT_S",
    )
    synthetic_fallback_enabled: bool = Field(
        default=True,
        description="Append the synthetic tier to every fallback cascade.",
        validation_alias="SYNTHETIC_FALLBACK_ENABLED",
    )
    snapshot_path: str | None = Field(
        default=None,
        description="Optional JSON file of fundamentals snapshots keyed by symbol.",
        validation_alias="SNAPSHOT_PATH",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _compute_cors(self) -> Settings:
        """Parse ``ALLOWED_ORIGINS`` into a list.

        Raises:
            ValueError: If ``'*'`` is used outside development/test.
        """
        raw = (self.cors_allow_origins_raw or "").strip()
        entries = [e.strip() for e in raw.split(",") if e.strip()]
        if "*" in entries and self.environment not in (
            Environment.DEVELOPMENT,
            Environment.TEST,
        ):
            raise ValueError("'*' CORS origin is only allowed in development/test environments.")
        self.cors_allow_origins = entries
        self.default_exchange = self.default_exchange.upper()
        return self

    @model_validator(mode="after")
    def _validate_environment_side_effects(self) -> Settings:
        """Force ``SCREENER_TEST_MODE=1`` when ``ENVIRONMENT=test``."""
        if self.environment is Environment.TEST and os.getenv("SCREENER_TEST_MODE") != "1":
            os.environ["SCREENER_TEST_MODE"] = "1"
            logger.info("SCREENER_TEST_MODE enabled due to ENVIRONMENT=test")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton ``Settings`` instance.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.error("Invalid configuration", extra={"errors": exc.errors()})
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    logger.info(
        "Settings initialized",
        extra={
            "extra": {
                "environment": settings.environment.value,
                "test_mode": os.getenv("SCREENER_TEST_MODE") == "1",
                "cache_backend": settings.cache_backend,
                "cache_ttl_s": settings.response_cache_ttl_s,
                "cors_count": len(settings.cors_allow_origins),
                "default_exchange": settings.default_exchange,
                "synthetic_fallback": settings.synthetic_fallback_enabled,
                "snapshot_path_set": bool(settings.snapshot_path),
            }
        },
    )
    return settings


__all__ = ["Environment", "Settings", "get_settings"]
