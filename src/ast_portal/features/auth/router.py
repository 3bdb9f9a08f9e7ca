"""HTTP interface for authentication endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request, Response, status

from ast_portal.dependencies import get_app_settings, get_session_gate
from ast_portal.settings import Settings

from .schemas import AuthResult, LoginRequest, SessionStatus
from .service import SessionGate

router = APIRouter(prefix="/auth", tags=["auth"])


def cookie_kwargs(settings: Settings) -> dict[str, object]:
    return {
        "httponly": True,
        "secure": settings.secure_cookies,
        "samesite": "lax",
        "path": "/",
    }


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(settings.session_max_age.total_seconds()),
        **cookie_kwargs(settings),
    )


@router.post(
    "/login",
    response_model=AuthResult,
    status_code=status.HTTP_200_OK,
    summary="Exchange the shared password for a session cookie",
)
def login(
    response: Response,
    payload: Annotated[LoginRequest, Body()],
    gate: Annotated[SessionGate, Depends(get_session_gate)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthResult:
    token = gate.authenticate(payload.password)
    _set_session_cookie(response, token, settings)
    return AuthResult(success=True, message="Authentication successful")


@router.post(
    "/logout",
    response_model=AuthResult,
    status_code=status.HTTP_200_OK,
    summary="Clear the session cookie",
)
def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AuthResult:
    response.delete_cookie(
        settings.session_cookie_name,
        **cookie_kwargs(settings),
    )
    return AuthResult(success=True, message="Logged out")


@router.get(
    "/session",
    response_model=SessionStatus,
    summary="Report whether the caller holds a valid session",
)
def read_session(
    request: Request,
    gate: Annotated[SessionGate, Depends(get_session_gate)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SessionStatus:
    token = request.cookies.get(settings.session_cookie_name)
    return SessionStatus(authenticated=gate.verify(token))


__all__ = ["cookie_kwargs", "router"]
