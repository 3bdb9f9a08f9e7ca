"""FastAPI lifespan helpers for the portal."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.routing import Lifespan
from sqlalchemy import text
from sqlalchemy.engine import make_url

from ast_portal.common.logging import log_context
from ast_portal.common.time import utc_now
from ast_portal.db import init_db, shutdown_db
from ast_portal.features.auth.service import SessionGate
from ast_portal.features.blob.service import UploadDispatcher
from ast_portal.features.drafts.service import RunSubmissionService
from ast_portal.features.drafts.store import DraftStore
from ast_portal.features.fabric.client import FabricClient, FabricConfig
from ast_portal.features.fabric.service import JobDispatcher
from ast_portal.infra.storage import AzureBlobConfig, AzureBlobStorage
from ast_portal.settings import Settings

logger = logging.getLogger(__name__)


def build_storage(settings: Settings) -> AzureBlobStorage:
    return AzureBlobStorage(
        AzureBlobConfig(
            connection_string=settings.required("blob_connection_string"),
            container=settings.blob_container,
            request_timeout_seconds=settings.blob_request_timeout_seconds,
        )
    )


def build_session_gate(settings: Settings) -> SessionGate:
    return SessionGate(
        secret=settings.required("auth_password"),
        max_age=settings.session_max_age,
    )


def create_application_lifespan(
    *,
    settings: Settings,
    storage: AzureBlobStorage | None = None,
    http_client: httpx.Client | None = None,
) -> Lifespan[FastAPI]:
    """Return the lifespan handler used by the app factory.

    ``storage`` and ``http_client`` replace the real blob container and the
    outbound HTTP client; tests pass fakes here.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        app.state.started_at = utc_now()
        logger.info(
            "ast_portal.startup",
            extra=log_context(
                environment=settings.environment,
                logging_level=settings.log_level,
                version=settings.app_version,
                container=settings.blob_container,
            ),
        )

        safe_url = make_url(settings.database_url).render_as_string(hide_password=True)
        logger.info("db.init.start", extra={"database_url": safe_url})
        session_factory = init_db(app, settings)

        def _check_db_connection() -> None:
            with session_factory() as session:
                session.execute(text("SELECT 1"))

        try:
            await asyncio.to_thread(_check_db_connection)
        except Exception as exc:
            shutdown_db(app)
            logger.error("db.connection.failed", extra={"database_url": safe_url}, exc_info=True)
            raise RuntimeError(
                "Database is not reachable. Verify AST_DATABASE_URL."
            ) from exc

        blob_storage = storage or build_storage(settings)
        fabric_client = FabricClient(FabricConfig.from_settings(settings), client=http_client)
        upload_dispatcher = UploadDispatcher(storage=blob_storage)
        job_dispatcher = JobDispatcher(client=fabric_client, session_factory=session_factory)

        app.state.storage = blob_storage
        app.state.session_gate = build_session_gate(settings)
        app.state.upload_dispatcher = upload_dispatcher
        app.state.job_dispatcher = job_dispatcher
        app.state.run_submissions = RunSubmissionService(
            store=DraftStore(ttl=settings.draft_ttl),
            uploads=upload_dispatcher,
            jobs=job_dispatcher,
        )

        try:
            yield
        finally:
            fabric_client.close()
            shutdown_db(app)
            logger.info("ast_portal.shutdown")

    return lifespan


__all__ = ["build_session_gate", "build_storage", "create_application_lifespan"]
