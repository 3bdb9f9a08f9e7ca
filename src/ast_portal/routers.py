"""Assemble the ``/api`` router from the feature routers."""

from __future__ import annotations

from fastapi import APIRouter

from ast_portal.features.auth.router import router as auth_router
from ast_portal.features.blob.router import router as blob_router
from ast_portal.features.drafts.router import router as drafts_router
from ast_portal.features.fabric.router import router as fabric_router
from ast_portal.features.health.router import router as health_router
from ast_portal.features.runs.router import router as runs_router


def create_api_router() -> APIRouter:
    router = APIRouter()
    router.include_router(health_router)
    router.include_router(auth_router)
    router.include_router(blob_router)
    router.include_router(fabric_router)
    router.include_router(drafts_router)
    router.include_router(runs_router)
    return router


__all__ = ["create_api_router"]
