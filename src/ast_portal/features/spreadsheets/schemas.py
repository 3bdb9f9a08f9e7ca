"""Parsed workbook summaries."""

from __future__ import annotations

from pydantic import ConfigDict, Field

from ast_portal.common.schema import BaseSchema


class SheetSummary(BaseSchema):
    """Header names and data-row count for one sheet."""

    model_config = ConfigDict(frozen=True)

    name: str
    headers: tuple[str, ...] = ()
    row_count: int = Field(default=0, ge=0, alias="rowCount")


class SpreadsheetSummary(BaseSchema):
    """What the review step shows about the ``lots`` and ``patents`` sheets."""

    model_config = ConfigDict(frozen=True)

    lots_headers: list[str] = Field(alias="lotsHeaders")
    patents_headers: list[str] = Field(alias="patentsHeaders")
    lots_count: int = Field(ge=0, alias="lotsCount")
    patents_count: int = Field(ge=0, alias="patentsCount")

    @property
    def total_count(self) -> int:
        return self.lots_count + self.patents_count


__all__ = ["SheetSummary", "SpreadsheetSummary"]
