"""HTTP client for the Azure AD token endpoint and the Fabric job API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from ast_portal.common.errors import UpstreamError
from ast_portal.common.logging import log_context
from ast_portal.settings import Settings

from .location import JobLocation, parse_job_location
from .parameters import execution_body

logger = logging.getLogger(__name__)

TOKEN_FAILURE = "Failed to authenticate with Azure AD"


@dataclass(frozen=True, slots=True)
class FabricConfig:
    client_id: str
    client_secret: str
    tenant_id: str
    workspace_id: str
    notebook_id: str
    authority_url: str = "https://login.microsoftonline.com"
    api_url: str = "https://api.fabric.microsoft.com"
    scope: str = "https://api.fabric.microsoft.com/.default"
    timeout_seconds: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> FabricConfig:
        return cls(
            client_id=settings.required("azure_client_id"),
            client_secret=settings.required("azure_client_secret"),
            tenant_id=settings.required("azure_tenant_id"),
            workspace_id=settings.required("fabric_workspace_id"),
            notebook_id=settings.required("fabric_notebook_id"),
            authority_url=settings.azure_authority_url,
            api_url=settings.fabric_api_url,
            scope=settings.fabric_scope,
            timeout_seconds=settings.http_timeout_seconds,
        )

    @property
    def token_url(self) -> str:
        return f"{self.authority_url}/{self.tenant_id}/oauth2/v2.0/token"

    @property
    def run_notebook_url(self) -> str:
        return (
            f"{self.api_url}/v1/workspaces/{self.workspace_id}"
            f"/items/{self.notebook_id}/jobs/instances"
        )


@dataclass(frozen=True, slots=True)
class JobSubmission:
    location: JobLocation
    status_code: int
    body: str


class FabricClient:
    """Mint a service-principal token and start one notebook job per call.

    A fresh token is requested for every submission. Nothing is retried.
    """

    def __init__(self, config: FabricConfig, *, client: httpx.Client | None = None) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=config.timeout_seconds)

    @property
    def config(self) -> FabricConfig:
        return self._config

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def acquire_token(self) -> str:
        payload = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "scope": self._config.scope,
            "grant_type": "client_credentials",
        }
        try:
            response = self._client.post(self._config.token_url, data=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "fabric.token.rejected",
                extra=log_context(
                    status_code=exc.response.status_code,
                    body=exc.response.text[:500],
                ),
            )
            raise UpstreamError(TOKEN_FAILURE, upstream_status=exc.response.status_code) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("fabric.token.failed", extra=log_context(error=str(exc)))
            raise UpstreamError(TOKEN_FAILURE) from exc

        token = body.get("access_token") if isinstance(body, dict) else None
        if not isinstance(token, str) or not token.strip():
            logger.error("fabric.token.missing")
            raise UpstreamError(TOKEN_FAILURE)
        return token

    def run_notebook(self, params: Mapping[str, Any]) -> JobSubmission:
        """POST the job request and return the parsed ``Location`` plus raw body."""

        token = self.acquire_token()
        try:
            response = self._client.post(
                self._config.run_notebook_url,
                params={"jobType": "RunNotebook"},
                headers={"Authorization": f"Bearer {token}"},
                json=execution_body(params),
            )
        except httpx.HTTPError as exc:
            logger.error("fabric.submit.unreachable", extra=log_context(error=str(exc)))
            raise UpstreamError("Failed to reach Fabric API") from exc

        if not response.is_success:
            logger.error(
                "fabric.submit.rejected",
                extra=log_context(
                    status_code=response.status_code,
                    body=response.text[:500],
                ),
            )
            raise UpstreamError(
                f"Fabric API request failed: {response.status_code} {response.reason_phrase}",
                upstream_status=response.status_code,
            )

        location = parse_job_location(response.headers.get("location"))
        return JobSubmission(location=location, status_code=response.status_code, body=response.text)


__all__ = ["FabricClient", "FabricConfig", "JobSubmission", "TOKEN_FAILURE"]
