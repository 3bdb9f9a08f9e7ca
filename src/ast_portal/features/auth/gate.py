"""Page gate: every page except the login page needs a session cookie.

The login page, static assets and the whole ``/api`` tree pass through
untouched; anonymous requests for any other page are redirected to ``/``.
"""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from ast_portal.common.logging import log_context

from .service import SessionGate

logger = logging.getLogger(__name__)

LOGIN_PATH = "/"
PUBLIC_PATHS = frozenset({LOGIN_PATH, "/favicon.ico"})
PUBLIC_PREFIXES = ("/api/", "/assets/", "/static/")


def is_public_path(path: str) -> bool:
    return path in PUBLIC_PATHS or path == "/api" or path.startswith(PUBLIC_PREFIXES)


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Redirect anonymous page requests to the login page."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        if is_public_path(path):
            return await call_next(request)

        gate: SessionGate = request.app.state.session_gate
        cookie_name: str = request.app.state.settings.session_cookie_name
        if gate.verify(request.cookies.get(cookie_name)):
            return await call_next(request)

        logger.info("auth.gate.redirect", extra=log_context(path=path, method=request.method))
        return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


__all__ = ["LOGIN_PATH", "PUBLIC_PATHS", "SessionGateMiddleware", "is_public_path"]
