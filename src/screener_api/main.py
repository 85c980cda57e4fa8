# src/screener_api/main.py
# Copyright (c) Stacklion.
# SPDX-License-Identifier: MIT
"""
Application Entry (Adapters Bootstrap)

Synopsis:
    FastAPI bootstrap that wires middleware, exception handlers, the shared
    response caches and all routers. Provides an application factory
    (``create_app``) and a module-level eager app (``app``) for uvicorn and
    tooling.

Design:
    * Bootstrap only (no business logic).
    * Caches are built once per app and stored on ``app.state``; Redis is
      connected in the lifespan only when ``CACHE_BACKEND=redis``.
    * Root JSON logging is configured at import time.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from screener_api.adapters.routers.api_router import router as api_router
from screener_api.config.settings import Settings, get_settings
from screener_api.dependencies.fundamentals import build_caches
from screener_api.infrastructure.caching.redis_client import close_redis, init_redis
from screener_api.infrastructure.http.errors import install_exception_handlers
from screener_api.infrastructure.logging.logger import (
    configure_root_logging,
    get_json_logger,
)
from screener_api.infrastructure.middleware.request_id import RequestIdMiddleware

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
configure_root_logging()
logger = get_json_logger(__name__)


def _service_version() -> str:
    try:
        return version("screener-api")
    except PackageNotFoundError:
        return "0.0.0"


def _stable_operation_id(route: APIRoute) -> str:
    """Deterministic operationId, e.g. ``get__v1_companies_symbol_pe``."""
    methods = ",".join(sorted(route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "")
    return f"{methods.lower()}_{path.lower()}"


# -----------------------------------------------------------------------------
# Lifespan
# -----------------------------------------------------------------------------
@asynccontextmanager
async def runtime_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect and release shared infrastructure."""
    settings: Settings = app.state.settings
    if settings.cache_backend == "redis":
        init_redis(settings)
    try:
        yield
    finally:
        if settings.cache_backend == "redis":
            await close_redis()
        logger.info("service_shutdown", extra={"extra": {"service": settings.service_name}})


# -----------------------------------------------------------------------------
# Middleware & CORS
# -----------------------------------------------------------------------------
def _attach_middlewares(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(RequestIdMiddleware)
    allow_origins = settings.cors_allow_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials="*" not in allow_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-ID", "X-Data-Provenance"],
    )


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Explicit settings; ``get_settings()`` when omitted.

    Returns:
        Fully configured application instance.
    """
    settings = settings or get_settings()
    configure_root_logging(settings.log_level.upper())

    app = FastAPI(
        title="Screener API",
        version=_service_version(),
        description=(
            "Normalized financial statements and derived valuation time-series "
            "for Indian equities."
        ),
        docs_url=settings.docs_url or None,
        openapi_url=settings.openapi_url or None,
        lifespan=runtime_lifespan,
        generate_unique_id_function=_stable_operation_id,
    )
    app.state.settings = settings
    app.state.response_cache, app.state.series_cache = build_caches(settings)

    install_exception_handlers(app)
    _attach_middlewares(app, settings)
    app.include_router(api_router)

    logger.info(
        "service_startup",
        extra={
            "extra": {
                "service": settings.service_name,
                "environment": settings.environment.value,
                "cache_backend": settings.cache_backend,
            }
        },
    )
    return app


app = create_app()
