"""Service layer for the health module."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.orm import Session

from ast_portal.common.logging import log_context
from ast_portal.common.time import utc_now
from ast_portal.infra.storage import AzureBlobStorage, StorageError
from ast_portal.settings import Settings

from .schemas import HealthCheckResponse, HealthComponentStatus

logger = logging.getLogger(__name__)


class HealthService:
    """Compute health responses for liveness and readiness checks."""

    def __init__(self, *, settings: Settings) -> None:
        self._settings = settings

    def status(self) -> HealthCheckResponse:
        """Liveness: the process is up. Touches no dependency."""
        return HealthCheckResponse(
            status="ok",
            timestamp=utc_now(),
            components=[self._api_component()],
        )

    def readiness(self, *, session: Session, storage: AzureBlobStorage) -> HealthCheckResponse:
        components = [self._api_component()]

        try:
            session.execute(text("SELECT 1"))
        except Exception as exc:
            logger.warning("health.database.unavailable", extra=log_context(error=str(exc)))
            components.append(
                HealthComponentStatus(name="database", status="unavailable", detail=str(exc))
            )
        else:
            components.append(
                HealthComponentStatus(name="database", status="available", detail="connected")
            )

        try:
            storage.check_connection()
        except StorageError as exc:
            logger.warning(
                "health.storage.unavailable",
                extra=log_context(container=self._settings.blob_container, error=str(exc)),
            )
            components.append(
                HealthComponentStatus(name="storage", status="unavailable", detail=str(exc))
            )
        else:
            components.append(
                HealthComponentStatus(
                    name="storage",
                    status="available",
                    detail=self._settings.blob_container,
                )
            )

        healthy = all(component.status == "available" for component in components)
        response = HealthCheckResponse(
            status="ok" if healthy else "error",
            timestamp=utc_now(),
            components=components,
        )
        logger.info(
            "health.readiness.complete",
            extra=log_context(status=response.status, component_count=len(components)),
        )
        return response

    def _api_component(self) -> HealthComponentStatus:
        return HealthComponentStatus(
            name="api",
            status="available",
            detail=f"v{self._settings.app_version}",
        )


__all__ = ["HealthService"]
