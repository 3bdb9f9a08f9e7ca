"""Parse the ``Location`` header of an accepted notebook job."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ast_portal.common.errors import UpstreamError

_JOB_INSTANCE_RE = re.compile(r"/jobs/instances/([^/]+)$")
_WORKSPACE_RE = re.compile(r"/workspaces/([^/]+)/")

MISSING_JOB_INFO = "Invalid response format from Fabric API. Missing required job information."


@dataclass(frozen=True, slots=True)
class JobLocation:
    location: str
    job_instance_id: str
    job_workspace_id: str


def parse_job_location(location: str | None) -> JobLocation:
    """Extract workspace and job instance ids; raise :class:`UpstreamError` if absent."""

    if not location:
        raise UpstreamError(MISSING_JOB_INFO)
    instance = _JOB_INSTANCE_RE.search(location)
    workspace = _WORKSPACE_RE.search(location)
    if instance is None or workspace is None:
        raise UpstreamError(MISSING_JOB_INFO)
    return JobLocation(
        location=location,
        job_instance_id=instance.group(1),
        job_workspace_id=workspace.group(1),
    )


__all__ = ["JobLocation", "MISSING_JOB_INFO", "parse_job_location"]
