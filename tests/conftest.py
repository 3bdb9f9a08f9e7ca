"""Shared pytest fixtures for portal tests."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from ast_portal.infra.storage import AzureBlobConfig, AzureBlobStorage
from ast_portal.main import create_app
from ast_portal.settings import Settings

from .utils import AZURITE_CONNECTION_STRING, FabricStub, FakeContainer, make_settings


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep developer ``AST_*`` variables out of the tests."""

    for key in list(os.environ):
        if key.upper().startswith("AST_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture()
def calls() -> list[str]:
    """Outbound calls in the order they were made: ``upload``, ``token``, ``job``."""

    return []


@pytest.fixture()
def container(calls: list[str]) -> FakeContainer:
    return FakeContainer(calls)


@pytest.fixture()
def storage(container: FakeContainer) -> AzureBlobStorage:
    blob_storage = AzureBlobStorage(
        AzureBlobConfig(connection_string=AZURITE_CONNECTION_STRING, container="input")
    )
    blob_storage._container_client = container  # type: ignore[assignment]
    return blob_storage


@pytest.fixture()
def fabric(calls: list[str]) -> FabricStub:
    return FabricStub(calls)


@pytest.fixture()
def app(settings: Settings, storage: AzureBlobStorage, fabric: FabricStub) -> FastAPI:
    return create_app(settings, storage=storage, http_client=fabric.client())


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Provide an HTTPX async client bound to the FastAPI app."""

    async with LifespanManager(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            yield client
