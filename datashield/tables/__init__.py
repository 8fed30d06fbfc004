"""
Tables Module - permission-aware spreadsheet data.

Provides the table/cell data model, the permission engine deciding who may
view or edit each cell, and the TableStore that owns all tables.
"""

from .export import table_to_csv, table_to_excel
from .models import (
    Cell,
    CellHistoryEntry,
    CellPermissions,
    CellValue,
    Table,
)
from .permissions import (
    DEFAULT_COLUMN_POLICIES,
    Operation,
    can_edit,
    can_view,
    default_column_permissions,
    evaluate,
)
from .store import TableStore

__all__ = [
    # Store
    "TableStore",
    # Models
    "Cell",
    "CellHistoryEntry",
    "CellPermissions",
    "CellValue",
    "Table",
    # Permission engine
    "Operation",
    "evaluate",
    "can_view",
    "can_edit",
    "default_column_permissions",
    "DEFAULT_COLUMN_POLICIES",
    # Export
    "table_to_csv",
    "table_to_excel",
]
