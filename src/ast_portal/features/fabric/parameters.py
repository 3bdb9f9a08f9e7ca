"""Build the typed parameter map the notebook job API expects."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ast_portal.features.drafts.schemas import RunDraft


def format_parameter(value: Any) -> dict[str, Any]:
    """Tag one value as ``bool``, ``int``, ``float`` or ``string``.

    Numbers with no fractional part count as ``int`` and are sent without a
    fraction (``2.0`` goes out as ``2``). Mappings, sequences and ``None``
    are sent as compact JSON text; anything else as ``str(value)``.
    """
    # bool is an int subclass, so it has to be checked first
    if isinstance(value, bool):
        return {"value": value, "type": "bool"}
    if isinstance(value, int):
        return {"value": value, "type": "int"}
    if isinstance(value, float):
        if value.is_integer():
            return {"value": int(value), "type": "int"}
        return {"value": value, "type": "float"}
    if value is None or isinstance(value, (dict, list, tuple)):
        return {"value": json.dumps(value, separators=(",", ":")), "type": "string"}
    return {"value": str(value), "type": "string"}


def format_parameters(params: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    return {key: format_parameter(value) for key, value in params.items()}


def execution_body(params: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "executionData": {
            "parameters": format_parameters(params),
            "configuration": {"useStarterPool": False},
        }
    }


def draft_parameters(draft: RunDraft, blob_name: str) -> dict[str, Any]:
    """Notebook parameters for a confirmed draft; a blank client or description goes as ``""``."""

    return {
        "runID": draft.id,
        "runName": draft.run_name,
        "runDescription": draft.description,
        "runClient": draft.client,
        "runFileSize": draft.file_size,
        "runFileType": draft.file_type,
        "runBlobName": blob_name,
    }


__all__ = ["draft_parameters", "execution_body", "format_parameter", "format_parameters"]
