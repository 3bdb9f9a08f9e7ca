"""Serve the portal pages (login, upload, review, dashboard) from a built bundle."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"


class SpaStaticFiles(StaticFiles):
    """Unknown GET paths (``/dashboard``, ``/review``) get the index page."""

    async def get_response(self, path: str, scope: Scope) -> Response:
        try:
            return await super().get_response(path, scope)
        except StarletteHTTPException as exc:
            if exc.status_code != 404 or scope["method"] not in ("GET", "HEAD"):
                raise
        return await super().get_response(INDEX_FILE, scope)


def mount_spa(app: FastAPI, dist_dir: Path | None) -> bool:
    """Mount ``dist_dir`` at ``/``; skipped unless it holds an index page."""

    if dist_dir is None:
        return False
    if not (dist_dir / INDEX_FILE).is_file():
        logger.warning("web.bundle.missing_index", extra={"dist_dir": str(dist_dir)})
        return False
    app.mount("/", SpaStaticFiles(directory=dist_dir, html=True), name="spa")
    return True


__all__ = ["SpaStaticFiles", "mount_spa"]
