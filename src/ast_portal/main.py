"""AST Run Portal FastAPI application entry point."""

from __future__ import annotations

import logging

import httpx
from fastapi import FastAPI

from .common.exceptions import register_exception_handlers
from .common.logging import setup_logging
from .common.middleware import register_middleware
from .features.auth.gate import SessionGateMiddleware
from .infra.storage import AzureBlobStorage
from .lifecycles import create_application_lifespan
from .routers import create_api_router
from .settings import Settings, get_settings
from .web.spa import mount_spa

API_PREFIX = "/api"
logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    storage: AzureBlobStorage | None = None,
    http_client: httpx.Client | None = None,
) -> FastAPI:
    """Create and configure the portal application.

    Missing required configuration raises :class:`ConfigError` here, before
    the server accepts a single request.
    """
    # Settings + logging first so everything else uses the configured root logger.
    settings = (settings or get_settings()).require_complete()
    setup_logging(settings)

    lifespan = create_application_lifespan(
        settings=settings,
        storage=storage,
        http_client=http_client,
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=f"{API_PREFIX}/docs" if settings.environment == "development" else None,
        redoc_url=None,
        openapi_url=f"{API_PREFIX}/openapi.json"
        if settings.environment == "development"
        else None,
        debug=False,
        lifespan=lifespan,
    )
    app.state.settings = settings

    register_exception_handlers(app)

    # The gate runs inside the request-context middleware so denials carry a request id.
    app.add_middleware(SessionGateMiddleware)
    register_middleware(app, settings=settings)

    app.include_router(create_api_router(), prefix=API_PREFIX)
    if mount_spa(app, settings.web_dir):
        logger.info("ast_portal.frontend.mounted", extra={"dist_dir": str(settings.web_dir)})

    return app


__all__ = ["API_PREFIX", "create_app"]
