"""
OVSDB result model, query client contract and control socket client.
"""

from .client import QueryClient, Schema, require_rows, run_query
from .result import Cell, Column, ColumnType, Result, Row

__all__ = [
    "Cell",
    "Column",
    "ColumnType",
    "QueryClient",
    "Result",
    "Row",
    "Schema",
    "require_rows",
    "run_query",
]
