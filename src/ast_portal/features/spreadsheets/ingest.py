"""Read an uploaded workbook and summarise its ``lots`` and ``patents`` sheets.

Both Office Open XML (``.xlsx``, read with openpyxl) and legacy BIFF
(``.xls``, read with xlrd) workbooks are accepted; the format is picked from
the file's signature, not its name.

Rows are turned into records the usual spreadsheet-to-JSON way: the first
non-empty row of the sheet names the fields, every later row with at least
one value becomes a record, and a record only carries the fields whose cells
hold a value. Unnamed header cells become ``__EMPTY``, ``__EMPTY_1``, ... and
repeated names get ``_1``, ``_2``, ... suffixes.
"""

from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time
from typing import Any

import openpyxl
import xlrd
from fastapi import UploadFile
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from ast_portal.common.errors import SpreadsheetParseError
from ast_portal.common.logging import log_context

from .schemas import SheetSummary, SpreadsheetSummary

logger = logging.getLogger(__name__)

LOTS_SHEET = "lots"
PATENTS_SHEET = "patents"
REQUIRED_SHEETS: tuple[str, ...] = (LOTS_SHEET, PATENTS_SHEET)
EMPTY_HEADER = "__EMPTY"

# OLE2 compound document header; every BIFF .xls file starts with it.
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

SheetRows = list[tuple[Any, ...]]


def parse_workbook(
    data: bytes,
    required_sheets: Sequence[str] = REQUIRED_SHEETS,
) -> SpreadsheetSummary:
    """Validate the required sheets and summarise the two run sheets.

    Raises :class:`SpreadsheetParseError` when the bytes are not a readable
    workbook or a required sheet is missing. A sheet that exists but holds no
    data rows yields an empty header list and a zero count.
    """
    wanted = list(dict.fromkeys([*required_sheets, LOTS_SHEET, PATENTS_SHEET]))
    if is_legacy_workbook(data):
        sheet_names, rows = _read_xls(data, wanted)
    else:
        sheet_names, rows = _read_xlsx(data, wanted)

    for sheet_name in required_sheets:
        if sheet_name not in sheet_names:
            logger.info(
                "spreadsheet.parse.missing_sheet",
                extra=log_context(sheet=sheet_name, sheets=sheet_names),
            )
            raise SpreadsheetParseError(
                f'Excel file must contain a "{sheet_name}" sheet',
                sheet=sheet_name,
            )

    lots = summarize_sheet(LOTS_SHEET, rows.get(LOTS_SHEET, []))
    patents = summarize_sheet(PATENTS_SHEET, rows.get(PATENTS_SHEET, []))
    summary = SpreadsheetSummary(
        lots_headers=list(lots.headers),
        patents_headers=list(patents.headers),
        lots_count=lots.row_count,
        patents_count=patents.row_count,
    )
    logger.info(
        "spreadsheet.parse.success",
        extra=log_context(lots_count=summary.lots_count, patents_count=summary.patents_count),
    )
    return summary


def is_legacy_workbook(data: bytes) -> bool:
    return data.startswith(OLE2_SIGNATURE)


def _unreadable(data: bytes, workbook_format: str) -> SpreadsheetParseError:
    logger.info(
        "spreadsheet.parse.unreadable",
        extra=log_context(byte_size=len(data), workbook_format=workbook_format),
    )
    return SpreadsheetParseError("Unable to read spreadsheet file")


def _read_xlsx(data: bytes, wanted: Sequence[str]) -> tuple[list[str], dict[str, SheetRows]]:
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
        raise _unreadable(data, "xlsx") from exc

    try:
        sheet_names = list(workbook.sheetnames)
        rows = {
            name: [tuple(row) for row in workbook[name].iter_rows(values_only=True)]
            for name in wanted
            if name in sheet_names
        }
    finally:
        workbook.close()
    return sheet_names, rows


def _read_xls(data: bytes, wanted: Sequence[str]) -> tuple[list[str], dict[str, SheetRows]]:
    try:
        book = xlrd.open_workbook(file_contents=data, on_demand=True)
    except (xlrd.XLRDError, CompDocError, ValueError, IndexError) as exc:
        raise _unreadable(data, "xls") from exc

    try:
        sheet_names = list(book.sheet_names())
        rows: dict[str, SheetRows] = {}
        for name in wanted:
            if name not in sheet_names:
                continue
            sheet = book.sheet_by_name(name)
            rows[name] = [
                tuple(_xls_value(cell, book.datemode) for cell in row) for row in sheet.get_rows()
            ]
    except (xlrd.XLRDError, CompDocError, ValueError, IndexError) as exc:
        raise _unreadable(data, "xls") from exc
    finally:
        book.release_resources()
    return sheet_names, rows


def _xls_value(cell: xlrd.sheet.Cell, datemode: int) -> Any:
    """Map an xlrd cell onto the values openpyxl would produce."""
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "#N/A")
    if cell.ctype == xlrd.XL_CELL_DATE:
        try:
            return xlrd.xldate_as_datetime(cell.value, datemode)
        except xlrd.XLDateError:
            return cell.value
    return cell.value


async def read_upload(
    upload: UploadFile,
    required_sheets: Sequence[str] = REQUIRED_SHEETS,
) -> tuple[bytes, SpreadsheetSummary]:
    """Read ``upload`` fully, then parse it.

    Each call rewinds and reads the upload again; nothing is cached.
    """
    await upload.seek(0)
    data = await upload.read()
    return data, parse_workbook(data, required_sheets)


def summarize_sheet(name: str, rows: Iterable[Sequence[Any]]) -> SheetSummary:
    records = list(sheet_records(rows))
    headers = tuple(records[0].keys()) if records else ()
    return SheetSummary(name=name, headers=headers, row_count=len(records))


def sheet_records(rows: Iterable[Sequence[Any]]) -> Iterable[dict[str, Any]]:
    """Yield one dict per non-blank data row, keyed by the header row."""

    materialized = [tuple(row) for row in rows]
    used = [idx for idx, row in enumerate(materialized) if not _is_blank(row)]
    if not used:
        return

    first_col = min(
        col for idx in used for col, value in enumerate(materialized[idx]) if not _is_empty(value)
    )
    header_row = materialized[used[0]][first_col:]
    width = max(len(materialized[idx]) for idx in used) - first_col
    headers = header_names(header_row, width)

    for idx in used[1:]:
        cells = materialized[idx][first_col:]
        record = {
            headers[col]: value for col, value in enumerate(cells) if not _is_empty(value)
        }
        if record:
            yield record


def header_names(cells: Sequence[Any], width: int) -> list[str]:
    """Name each column, filling blanks and de-duplicating repeats."""

    seen: dict[str, int] = {}
    names: list[str] = []
    for col in range(width):
        value = cells[col] if col < len(cells) else None
        base = EMPTY_HEADER if _is_empty(value) else format_cell(value)
        name = base
        counter = seen.get(base, 0)
        if not counter:
            seen[base] = 1
        else:
            while True:
                name = f"{base}_{counter}"
                counter += 1
                if name not in seen:
                    break
            seen[base] = counter
            seen[name] = 1
        names.append(name)
    return names


def format_cell(value: Any) -> str:
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _is_blank(row: Sequence[Any]) -> bool:
    return all(_is_empty(value) for value in row)


__all__ = [
    "LOTS_SHEET",
    "PATENTS_SHEET",
    "REQUIRED_SHEETS",
    "header_names",
    "is_legacy_workbook",
    "parse_workbook",
    "read_upload",
    "sheet_records",
    "summarize_sheet",
]
