"""Process-wide logging for the portal.

Every record is one console line::

    2026-10-19T09:12:44.120Z INFO  ast_portal.features.blob.service [cid=5f0c] blob.upload.success run_id=... blob_name=...

Messages are dotted event names; context travels in ``extra`` (build it with
:func:`log_context`) and is appended as ``key=value`` pairs. The ``cid`` is
the request id bound by the request-context middleware, ``-`` outside a
request.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ast_portal.settings import Settings

_request_id: ContextVar[str | None] = ContextVar("ast_portal_request_id", default=None)

# Attributes every LogRecord has, plus the ones formatting adds.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
    "color_message",
}

# Chatty libraries that log each outbound request at INFO.
_QUIET_LOGGERS = ("azure", "httpx", "httpcore")


def bind_request_id(request_id: str | None) -> Token[str | None]:
    return _request_id.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id.reset(token)


def current_request_id() -> str | None:
    return _request_id.get()


class LineFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-5s %(name)s [cid=%(cid)s] %(message)s")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=UTC).strftime("%Y-%m-%dT%H:%M:%S")
        return f"{stamp}.{int(record.msecs):03d}Z"

    def format(self, record: logging.LogRecord) -> str:
        record.cid = _request_id.get() or "-"
        line = super().format(record)
        fields = [
            f"{key}={value}"
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key != "cid" and not key.startswith("_")
        ]
        return " ".join([line, *fields]) if fields else line


def setup_logging(settings: Settings) -> None:
    """Send all records, uvicorn's included, through one console handler.

    Safe to call more than once; later calls only change the level.
    """
    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    if any(isinstance(handler.formatter, LineFormatter) for handler in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(LineFormatter())
    root.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_context(**fields: Any) -> dict[str, Any]:
    """``extra`` payload with unset (``None``) fields left out."""

    return {key: value for key, value in fields.items() if value is not None}


__all__ = [
    "LineFormatter",
    "bind_request_id",
    "current_request_id",
    "log_context",
    "reset_request_id",
    "setup_logging",
]
