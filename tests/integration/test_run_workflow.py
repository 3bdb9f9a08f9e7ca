from __future__ import annotations

import json

import pytest
from httpx import AsyncClient

from ..utils import (
    RUN_SHEETS,
    XLS_TYPE,
    XLSX_TYPE,
    FabricStub,
    FakeContainer,
    build_legacy_workbook,
    build_workbook,
    login,
    run_workbook,
)

pytestmark = pytest.mark.integration


def _form(**overrides: str) -> dict[str, str]:
    data = {"runName": "Q3 sweep", "client": "Acme", "description": ""}
    data.update(overrides)
    return data


async def _create_draft(
    client: AsyncClient,
    /,
    *,
    content: bytes | None = None,
    filename: str = "q3.xlsx",
    content_type: str = XLSX_TYPE,
    **form: str,
):
    files = {"file": (filename, content if content is not None else run_workbook(), content_type)}
    return await client.post("/api/runs/draft", data=_form(**form), files=files)


async def test_create_review_confirm_redirects_to_dashboard(
    async_client: AsyncClient,
    calls: list[str],
    container: FakeContainer,
    fabric: FabricStub,
) -> None:
    await login(async_client)

    created = await _create_draft(async_client)
    assert created.status_code == 201, created.text
    draft = created.json()
    assert "fileAsBase64" not in draft
    assert draft["runName"] == "Q3 sweep"
    assert draft["client"] == "Acme"
    assert draft["description"] == ""
    assert draft["fileType"] == XLSX_TYPE
    assert draft["excelData"] == {
        "lotsHeaders": ["Lot ID", "Description", "Quantity"],
        "patentsHeaders": ["Patent No", "Title"],
        "lotsCount": 2,
        "patentsCount": 3,
    }
    assert draft["totalCount"] == 5
    assert calls == []

    reviewed = await async_client.get("/api/runs/draft")
    assert reviewed.status_code == 200
    assert reviewed.json()["runID"] == draft["runID"]

    confirmed = await async_client.post("/api/runs/draft/confirm")

    assert confirmed.status_code == 303
    assert confirmed.headers["location"] == "/dashboard"
    assert calls == ["upload", "token", "job"]

    run_id = draft["runID"]
    blob_name = f"{run_id}/input-file.xlsx"
    data, content_type = container.blobs[blob_name]
    assert data[:2] == b"PK"
    assert content_type == XLSX_TYPE
    (job_request,) = fabric.requests_to("/jobs/instances")
    sent = json.loads(job_request.content)["executionData"]["parameters"]
    assert sent == {
        "runID": {"value": run_id, "type": "string"},
        "runName": {"value": "Q3 sweep", "type": "string"},
        "runDescription": {"value": "", "type": "string"},
        "runClient": {"value": "Acme", "type": "string"},
        "runFileSize": {"value": draft["fileSize"], "type": "int"},
        "runFileType": {"value": XLSX_TYPE, "type": "string"},
        "runBlobName": {"value": blob_name, "type": "string"},
    }

    runs = (await async_client.get("/api/runs")).json()
    assert [item["runID"] for item in runs["items"]] == [run_id]


async def test_second_confirm_finds_no_draft(async_client: AsyncClient, calls: list[str]) -> None:
    await login(async_client)
    await _create_draft(async_client)
    first = await async_client.post("/api/runs/draft/confirm")
    assert first.status_code == 303

    again = await async_client.post("/api/runs/draft/confirm")

    assert again.status_code == 404
    assert again.json()["detail"] == "No run data found. Please start over."
    assert calls == ["upload", "token", "job"]


async def test_uploaded_bytes_match_the_submitted_file(
    async_client: AsyncClient,
    container: FakeContainer,
) -> None:
    workbook = run_workbook()
    await login(async_client)
    draft = (await _create_draft(async_client, content=workbook)).json()

    await async_client.post("/api/runs/draft/confirm")

    assert container.blobs[f"{draft['runID']}/input-file.xlsx"][0] == workbook
    assert draft["fileSize"] == len(workbook)


async def test_missing_sheet_blocks_the_draft(async_client: AsyncClient) -> None:
    await login(async_client)
    content = build_workbook({"lots": [["Lot ID"], ["L-1"]]})

    response = await _create_draft(async_client, content=content)

    assert response.status_code == 422
    payload = response.json()
    assert payload["detail"] == 'Excel file must contain a "patents" sheet'
    assert payload["errors"][0]["path"] == "file"
    assert (await async_client.get("/api/runs/draft")).status_code == 404


@pytest.mark.parametrize(
    ("overrides", "detail"),
    [
        ({"runName": "  "}, "Run name is required"),
        (
            {"filename": "notes.txt", "content_type": "text/plain"},
            "Please select an Excel file (.xlsx or .xls)",
        ),
    ],
)
async def test_form_validation_errors(
    async_client: AsyncClient,
    overrides: dict[str, str],
    detail: str,
) -> None:
    await login(async_client)

    response = await _create_draft(async_client, **overrides)

    assert response.status_code == 400
    assert response.json()["detail"] == detail


async def test_extension_alone_is_enough(async_client: AsyncClient) -> None:
    await login(async_client)

    response = await _create_draft(async_client, content_type="application/octet-stream")

    assert response.status_code == 201
    assert response.json()["fileType"] == XLSX_TYPE


async def test_legacy_xls_upload_runs_end_to_end(
    async_client: AsyncClient,
    calls: list[str],
    container: FakeContainer,
) -> None:
    workbook = build_legacy_workbook(RUN_SHEETS)
    await login(async_client)

    created = await _create_draft(
        async_client, content=workbook, filename="legacy.xls", content_type=XLS_TYPE
    )

    assert created.status_code == 201, created.text
    draft = created.json()
    assert draft["fileType"] == XLS_TYPE
    assert draft["excelData"]["lotsCount"] == 2
    assert draft["excelData"]["patentsHeaders"] == ["Patent No", "Title"]

    confirmed = await async_client.post("/api/runs/draft/confirm")

    assert confirmed.status_code == 303
    assert calls == ["upload", "token", "job"]
    assert container.blobs[f"{draft['runID']}/input-file.xls"] == (workbook, XLS_TYPE)


async def test_discarded_draft_cannot_be_confirmed(
    async_client: AsyncClient,
    calls: list[str],
) -> None:
    await login(async_client)
    await _create_draft(async_client)

    deleted = await async_client.delete("/api/runs/draft")
    assert deleted.status_code == 204

    response = await async_client.post("/api/runs/draft/confirm")
    assert response.status_code == 404
    assert calls == []


async def test_failed_job_leaves_uploaded_blob(
    async_client: AsyncClient,
    calls: list[str],
    container: FakeContainer,
    fabric: FabricStub,
) -> None:
    fabric.job_status = 500
    await login(async_client)
    draft = (await _create_draft(async_client)).json()

    response = await async_client.post("/api/runs/draft/confirm")

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Fabric API request failed: 500")
    assert calls == ["upload", "token", "job"]
    assert f"{draft['runID']}/input-file.xlsx" in container.blobs
    assert (await async_client.get("/api/runs")).json()["count"] == 0


async def test_blank_client_and_description_are_sent_as_empty_strings(
    async_client: AsyncClient,
    fabric: FabricStub,
) -> None:
    await login(async_client)
    draft = (await _create_draft(async_client, client="", description="  ")).json()

    await async_client.post("/api/runs/draft/confirm")

    (job_request,) = fabric.requests_to("/jobs/instances")
    sent = json.loads(job_request.content)["executionData"]["parameters"]
    assert sent["runClient"] == {"value": "", "type": "string"}
    assert sent["runDescription"] == {"value": "", "type": "string"}
    (run,) = (await async_client.get("/api/runs")).json()["items"]
    assert run["runID"] == draft["runID"]
    assert run["parameters"]["runClient"] == ""
    assert run["parameters"]["runDescription"] == ""
