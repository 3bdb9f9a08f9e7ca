"""Persistence for submitted runs."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from ast_portal.models import RemoteRun


class RunRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(
        self,
        *,
        run_id: str,
        location: str,
        job_instance_id: str,
        job_workspace_id: str,
        parameters: Mapping[str, Any],
        run_name: str | None = None,
        client: str | None = None,
        blob_name: str | None = None,
    ) -> RemoteRun:
        run = RemoteRun(
            run_id=run_id,
            run_name=run_name,
            client=client,
            blob_name=blob_name,
            location=location,
            job_instance_id=job_instance_id,
            job_workspace_id=job_workspace_id,
            parameters_json=json.dumps(dict(parameters), sort_keys=True),
        )
        self._session.add(run)
        self._session.flush()
        return run

    def get(self, run_id: str) -> RemoteRun | None:
        return self._session.get(RemoteRun, run_id)

    def list_recent(self, *, limit: int = 50) -> Sequence[RemoteRun]:
        stmt = (
            select(RemoteRun)
            .order_by(RemoteRun.created_at.desc(), RemoteRun.run_id.desc())
            .limit(limit)
        )
        return self._session.scalars(stmt).all()


__all__ = ["RunRepository"]
