"""HTTP interface for the run listing."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ast_portal.db import get_db_read

from .repository import RunRepository
from .schemas import RunListResponse, RunOut

router = APIRouter(prefix="/runs", tags=["runs"])


@router.get(
    "",
    response_model=RunListResponse,
    summary="List submitted runs, newest first",
)
def list_runs(
    session: Annotated[Session, Depends(get_db_read)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> RunListResponse:
    runs = RunRepository(session).list_recent(limit=limit)
    items = [RunOut.model_validate(run) for run in runs]
    return RunListResponse(items=items, count=len(items))


__all__ = ["router"]
