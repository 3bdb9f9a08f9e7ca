"""HTTP interface for creating, reviewing and confirming run drafts."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from fastapi.responses import RedirectResponse

from ast_portal.dependencies import get_app_settings, get_run_submissions
from ast_portal.features.auth.router import cookie_kwargs
from ast_portal.settings import Settings

from .schemas import RunDraftView
from .service import RunSubmissionService

router = APIRouter(prefix="/runs/draft", tags=["runs"])

DASHBOARD_PATH = "/dashboard"


def _draft_key(request: Request, settings: Settings) -> str | None:
    return request.cookies.get(settings.draft_cookie_name)


def _clear_draft_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(settings.draft_cookie_name, **cookie_kwargs(settings))


@router.post(
    "",
    response_model=RunDraftView,
    status_code=status.HTTP_201_CREATED,
    summary="Validate a spreadsheet and hold it as a run draft",
)
async def create_draft(
    response: Response,
    service: Annotated[RunSubmissionService, Depends(get_run_submissions)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    file: Annotated[UploadFile | None, File()] = None,
    run_name: Annotated[str | None, Form(alias="runName")] = None,
    client: Annotated[str | None, Form()] = None,
    description: Annotated[str | None, Form()] = None,
) -> RunDraftView:
    key, entry = await service.create_draft(
        run_name=run_name,
        client=client,
        description=description,
        upload=file,
    )
    response.set_cookie(
        key=settings.draft_cookie_name,
        value=key,
        max_age=int(service.store.ttl.total_seconds()),
        **cookie_kwargs(settings),
    )
    return RunDraftView.from_draft(entry.draft, expires_at=entry.expires_at)


@router.get(
    "",
    response_model=RunDraftView,
    summary="Show the pending draft for review",
)
def read_draft(
    request: Request,
    service: Annotated[RunSubmissionService, Depends(get_run_submissions)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RunDraftView:
    entry = service.review(_draft_key(request, settings))
    return RunDraftView.from_draft(entry.draft, expires_at=entry.expires_at)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Discard the pending draft",
)
def delete_draft(
    request: Request,
    service: Annotated[RunSubmissionService, Depends(get_run_submissions)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> Response:
    service.cancel(_draft_key(request, settings))
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    _clear_draft_cookie(response, settings)
    return response


@router.post(
    "/confirm",
    status_code=status.HTTP_303_SEE_OTHER,
    response_class=RedirectResponse,
    summary="Upload the draft's file, start the job and go to the dashboard",
)
async def confirm_draft(
    request: Request,
    service: Annotated[RunSubmissionService, Depends(get_run_submissions)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RedirectResponse:
    submitted = await service.confirm(_draft_key(request, settings))
    response = RedirectResponse(DASHBOARD_PATH, status_code=status.HTTP_303_SEE_OTHER)
    response.headers["X-Run-ID"] = submitted.draft.id
    _clear_draft_cookie(response, settings)
    return response


__all__ = ["DASHBOARD_PATH", "router"]
