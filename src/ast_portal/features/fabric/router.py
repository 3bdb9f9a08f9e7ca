"""HTTP interface for notebook job submission."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse

from ast_portal.dependencies import get_job_dispatcher

from .schemas import RunNotebookRequest
from .service import JobDispatcher

router = APIRouter(prefix="/fabric", tags=["fabric"])


@router.post(
    "/run-notebook",
    status_code=status.HTTP_200_OK,
    summary="Start the run notebook with the given parameters",
    response_class=JSONResponse,
)
async def run_notebook(
    payload: Annotated[RunNotebookRequest, Body()],
    dispatcher: Annotated[JobDispatcher, Depends(get_job_dispatcher)],
) -> JSONResponse:
    """Return the job API's response text as a JSON string."""

    submission = await dispatcher.submit(payload.params)
    return JSONResponse(content=submission.body, status_code=status.HTTP_200_OK)


__all__ = ["router"]
