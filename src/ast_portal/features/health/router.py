"""API routes for the health module."""

from __future__ import annotations

from typing import Annotated

import anyio.to_thread
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ast_portal.db import get_db_read
from ast_portal.dependencies import get_app_settings
from ast_portal.settings import Settings

from .schemas import HealthCheckResponse
from .service import HealthService

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Service liveness probe",
    response_model_exclude_none=True,
)
def read_health(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> HealthCheckResponse:
    return HealthService(settings=settings).status()


@router.get(
    "/ready",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Service readiness probe",
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": HealthCheckResponse}},
)
async def read_readiness(
    request: Request,
    settings: Annotated[Settings, Depends(get_app_settings)],
    session: Annotated[Session, Depends(get_db_read)],
):
    """Check the database and the blob container; 503 when either is down."""

    service = HealthService(settings=settings)
    storage = request.app.state.storage
    response = await anyio.to_thread.run_sync(
        lambda: service.readiness(session=session, storage=storage)
    )
    if response.status != "ok":
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(mode="json"),
        )
    return response


__all__ = ["router"]
