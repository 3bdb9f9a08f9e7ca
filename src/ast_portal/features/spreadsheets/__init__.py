from .ingest import REQUIRED_SHEETS, parse_workbook, read_upload
from .schemas import SpreadsheetSummary

__all__ = ["REQUIRED_SHEETS", "SpreadsheetSummary", "parse_workbook", "read_upload"]
