"""AST Run Portal: upload a workbook, review it, and start a notebook run."""

__version__ = "0.1.0"
