"""Record of a notebook job accepted by the remote job API."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ast_portal.common.time import utc_now

from .base import Base, UTCDateTime


class RemoteRun(Base):
    """One row per successful job submission, keyed by the portal's run id."""

    __tablename__ = "ast_runs"

    run_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    run_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client: Mapped[str | None] = mapped_column(String(255), nullable=True)
    blob_name: Mapped[str | None] = mapped_column(String(512), nullable=True)
    location: Mapped[str] = mapped_column(Text, nullable=False)
    job_instance_id: Mapped[str] = mapped_column(String(128), nullable=False)
    job_workspace_id: Mapped[str] = mapped_column(String(128), nullable=False)
    parameters_json: Mapped[str] = mapped_column("parameters", Text, nullable=False, default="{}")
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utc_now)

    __table_args__ = (Index("ix_ast_runs_created_at", "created_at"),)

    @property
    def parameters(self) -> dict[str, Any]:
        return json.loads(self.parameters_json or "{}")

    @parameters.setter
    def parameters(self, value: dict[str, Any]) -> None:
        self.parameters_json = json.dumps(value, sort_keys=True)


__all__ = ["RemoteRun"]
