"""
Tabular export of a table's values.

CSV output quotes any field containing a comma or a quote character and
doubles embedded quotes. Booleans are written as ``true`` and ``false``,
empty cells as empty fields, and rows keep their table order.
"""

import csv
import re
from pathlib import Path
from typing import Union

import pandas as pd

from .models import CellValue, Table

# Characters Excel does not allow in worksheet titles
INVALID_SHEET_CHARS = re.compile(r"[\\/?*\[\]:]")
MAX_SHEET_TITLE = 31


def _frame(table: Table) -> pd.DataFrame:
    return pd.DataFrame(table.values(), columns=table.headers, dtype=object)


def _csv_value(value: CellValue) -> CellValue:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def sheet_title(name: str) -> str:
    """Turn a table name into a valid worksheet title."""
    title = INVALID_SHEET_CHARS.sub("_", name)[:MAX_SHEET_TITLE]
    return title or "Sheet1"


def table_to_csv(table: Table, include_headers: bool = True) -> str:
    """
    Serialize a table as CSV text.

    Args:
        table: Table to serialize
        include_headers: Write the header row first

    Returns:
        CSV text, one line per row
    """
    rows = [[_csv_value(value) for value in row] for row in table.values()]
    df = pd.DataFrame(rows, columns=table.headers, dtype=object)
    return str(
        df.to_csv(
            index=False,
            header=include_headers,
            quoting=csv.QUOTE_MINIMAL,
            lineterminator="\n",
        )
    )


def table_to_excel(
    table: Table, path: Union[str, Path], include_headers: bool = True
) -> Path:
    """
    Write a table to an Excel workbook.

    Args:
        table: Table to write
        path: Output file path
        include_headers: Write the header row first

    Returns:
        Path of the written workbook
    """
    output_path = Path(path)
    _frame(table).to_excel(
        output_path,
        index=False,
        header=include_headers,
        sheet_name=sheet_title(table.name),
        engine="openpyxl",
    )
    return output_path
