"""Request-id binding, access logging and CORS."""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .logging import bind_request_id, log_context, reset_request_id

if TYPE_CHECKING:
    from ast_portal.settings import Settings

REQUEST_ID_HEADER = "X-Request-ID"
logger = logging.getLogger("ast_portal.request")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id (the caller's ``X-Request-ID`` or a new one)."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.correlation_id = request_id
        token = bind_request_id(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            logger.info(
                "request.complete",
                extra=log_context(
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                ),
            )
        except Exception:
            # The exception handlers log the stack trace.
            logger.error(
                "request.error",
                extra=log_context(method=request.method, path=request.url.path),
            )
            raise
        finally:
            reset_request_id(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def register_middleware(app: FastAPI, *, settings: Settings) -> None:
    """Add CORS (when origins are configured) and request context.

    Starlette runs the last-added middleware first, so call this after
    feature middleware to keep the request id bound around it.
    """
    if settings.server_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.server_cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestContextMiddleware)


__all__ = ["REQUEST_ID_HEADER", "RequestContextMiddleware", "register_middleware"]
