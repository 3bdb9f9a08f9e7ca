"""FastAPI dependency providers for services built at startup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from ast_portal.features.auth.service import SessionGate
    from ast_portal.features.blob.service import UploadDispatcher
    from ast_portal.features.drafts.service import RunSubmissionService
    from ast_portal.features.fabric.service import JobDispatcher
    from ast_portal.settings import Settings


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_gate(request: Request) -> SessionGate:
    return request.app.state.session_gate


def get_run_submissions(request: Request) -> RunSubmissionService:
    return request.app.state.run_submissions


def get_upload_dispatcher(request: Request) -> UploadDispatcher:
    return request.app.state.upload_dispatcher


def get_job_dispatcher(request: Request) -> JobDispatcher:
    return request.app.state.job_dispatcher


__all__ = [
    "get_app_settings",
    "get_job_dispatcher",
    "get_run_submissions",
    "get_session_gate",
    "get_upload_dispatcher",
]
