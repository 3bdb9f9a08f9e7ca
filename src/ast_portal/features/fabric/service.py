"""Submit notebook jobs and record the accepted ones."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import anyio.to_thread
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from ast_portal.common.errors import ConflictError, InvalidRequestError, UpstreamError
from ast_portal.common.logging import log_context
from ast_portal.features.runs.repository import RunRepository

from .client import FabricClient, JobSubmission
from .parameters import draft_parameters

if TYPE_CHECKING:
    from ast_portal.features.drafts.schemas import RunDraft
    from ast_portal.infra.storage import StoredBlob

logger = logging.getLogger(__name__)


class JobDispatcher:
    """Start a notebook job for a run and keep a record of where it went."""

    def __init__(
        self,
        *,
        client: FabricClient,
        session_factory: sessionmaker[Session],
    ) -> None:
        self._client = client
        self._session_factory = session_factory

    async def submit(self, params: Mapping[str, Any]) -> JobSubmission:
        """Start the notebook for ``params["runID"]`` and record where it went.

        A run id that is already recorded is refused before any outbound call.
        """
        run_id = params.get("runID")
        if not isinstance(run_id, str) or not run_id:
            raise InvalidRequestError("params.runID is required")
        if await anyio.to_thread.run_sync(self._is_recorded, run_id):
            logger.info("fabric.submit.duplicate_run", extra=log_context(run_id=run_id))
            raise ConflictError(f"Run {run_id} was already submitted")

        logger.info(
            "fabric.submit.start",
            extra=log_context(run_id=run_id, parameter_count=len(params)),
        )
        submission = await anyio.to_thread.run_sync(self._client.run_notebook, params)
        await anyio.to_thread.run_sync(self._record, params, submission)

        logger.info(
            "fabric.submit.success",
            extra=log_context(
                run_id=run_id,
                job_instance_id=submission.location.job_instance_id,
                job_workspace_id=submission.location.job_workspace_id,
            ),
        )
        return submission

    async def submit_draft(self, draft: RunDraft, stored: StoredBlob) -> JobSubmission:
        return await self.submit(draft_parameters(draft, stored.blob_name))

    def _is_recorded(self, run_id: str) -> bool:
        with self._session_factory() as session:
            return RunRepository(session).get(run_id) is not None

    def _record(self, params: Mapping[str, Any], submission: JobSubmission) -> None:
        location = submission.location
        with self._session_factory() as session:
            try:
                RunRepository(session).add(
                    run_id=params["runID"],
                    run_name=_optional_str(params.get("runName")),
                    client=_optional_str(params.get("runClient")),
                    blob_name=_optional_str(params.get("runBlobName")),
                    location=location.location,
                    job_instance_id=location.job_instance_id,
                    job_workspace_id=location.job_workspace_id,
                    parameters=params,
                )
                session.commit()
            except IntegrityError as exc:
                # Another request recorded the same run id while this job was starting.
                session.rollback()
                logger.error(
                    "fabric.submit.record_failed",
                    extra=log_context(
                        run_id=params["runID"],
                        job_instance_id=location.job_instance_id,
                    ),
                )
                raise UpstreamError(
                    f"Fabric job {location.job_instance_id} started, but run "
                    f"{params['runID']} was already recorded and was not saved again"
                ) from exc


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


__all__ = ["JobDispatcher"]
