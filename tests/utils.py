"""Helpers shared by the portal tests."""

from __future__ import annotations

import io
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import httpx
import openpyxl
import xlwt
from azure.core.exceptions import HttpResponseError

from ast_portal.settings import Settings

PASSWORD = "correct horse battery staple"
WORKSPACE_ID = "ws-7f3c"
NOTEBOOK_ID = "nb-19ab"
JOB_INSTANCE_ID = "job-42d0"
JOB_LOCATION = (
    f"https://api.fabric.microsoft.com/v1/workspaces/{WORKSPACE_ID}"
    f"/items/{NOTEBOOK_ID}/jobs/instances/{JOB_INSTANCE_ID}"
)
XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_TYPE = "application/vnd.ms-excel"

RUN_SHEETS: dict[str, list[list[Any]]] = {
    "lots": [
        ["Lot ID", "Description", "Quantity"],
        ["L-001", "Widget", 10],
        ["L-002", "Gadget", 4],
    ],
    "patents": [
        ["Patent No", "Title"],
        ["US1234567", "Rotary widget"],
        ["US7654321", "Folding gadget"],
        ["EP0001111", "Widget housing"],
    ],
}

# Well-known Azurite development account; parsing it needs no network access.
AZURITE_CONNECTION_STRING = (
    "DefaultEndpointsProtocol=http;AccountName=devstoreaccount1;"
    "AccountKey=Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/"
    "K1SZFPTOtr/KBHBeksoGMGw==;"
    "BlobEndpoint=http://127.0.0.1:10000/devstoreaccount1;"
)


def build_workbook(sheets: Mapping[str, Sequence[Sequence[Any]]]) -> bytes:
    """Return .xlsx bytes with one sheet per entry, rows written in order."""

    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(title=name)
        for row in rows:
            sheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_legacy_workbook(sheets: Mapping[str, Sequence[Sequence[Any]]]) -> bytes:
    """Same as :func:`build_workbook`, written as a BIFF8 .xls file."""

    workbook = xlwt.Workbook()
    for name, rows in sheets.items():
        sheet = workbook.add_sheet(name)
        for row_index, row in enumerate(rows):
            for col_index, value in enumerate(row):
                sheet.write(row_index, col_index, value)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def run_workbook() -> bytes:
    return build_workbook(RUN_SHEETS)


async def login(client: httpx.AsyncClient, password: str = PASSWORD) -> httpx.Response:
    response = await client.post("/api/auth/login", json={"password": password})
    assert response.status_code == 200, response.text
    return response


class FakeBlobClient:
    def __init__(self, container: FakeContainer, name: str) -> None:
        self._container = container
        self.blob_name = name
        self.url = f"http://127.0.0.1:10000/devstoreaccount1/input/{name}"

    def upload_blob(self, data, *, overwrite=False, content_settings=None, timeout=None):
        self._container.calls.append("upload")
        if self._container.fail_with is not None:
            raise self._container.fail_with
        if not overwrite and self.blob_name in self._container.blobs:
            raise HttpResponseError(message="BlobAlreadyExists")
        content_type = content_settings.content_type if content_settings else None
        self._container.blobs[self.blob_name] = (bytes(data), content_type)
        self._container.upload_count += 1
        return {"etag": f'"0x8DC{self._container.upload_count:04d}"'}


class FakeContainer:
    """Stands in for ``ContainerClient``; records uploads in memory."""

    def __init__(self, calls: list[str] | None = None) -> None:
        self.calls = calls if calls is not None else []
        self.blobs: dict[str, tuple[bytes, str | None]] = {}
        self.upload_count = 0
        self.fail_with: Exception | None = None
        self.reachable = True

    def get_blob_client(self, name: str) -> FakeBlobClient:
        return FakeBlobClient(self, name)

    def get_container_properties(self) -> dict[str, str]:
        if not self.reachable:
            raise HttpResponseError(message="ContainerNotFound")
        return {"name": "input"}


class FabricStub:
    """``httpx.MockTransport`` handler for the token endpoint and the job API."""

    def __init__(self, calls: list[str] | None = None) -> None:
        self.calls = calls if calls is not None else []
        self.requests: list[httpx.Request] = []
        self.token_status = 200
        self.token_body: dict[str, Any] = {"access_token": "fabric-token", "expires_in": 3599}
        self.job_status = 202
        self.job_location: str | None = JOB_LOCATION
        self.job_body = ""

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/oauth2/v2.0/token"):
            self.calls.append("token")
            return httpx.Response(self.token_status, json=self.token_body)

        self.calls.append("job")
        headers = {"Location": self.job_location} if self.job_location else {}
        return httpx.Response(self.job_status, headers=headers, text=self.job_body)

    def requests_to(self, suffix: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path.endswith(suffix)]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


def only(items: Iterable[Any]) -> Any:
    (item,) = list(items)
    return item


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    """Complete settings pointing at a throwaway SQLite file."""

    values: dict[str, Any] = {
        "auth_password": PASSWORD,
        "blob_connection_string": AZURITE_CONNECTION_STRING,
        "blob_container": "input",
        "azure_client_id": "client-id",
        "azure_client_secret": "client-secret",
        "azure_tenant_id": "tenant-id",
        "fabric_workspace_id": WORKSPACE_ID,
        "fabric_notebook_id": NOTEBOOK_ID,
        "database_url": f"sqlite:///{tmp_path / 'portal.sqlite'}",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
