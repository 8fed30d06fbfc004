"""
Data model for tables and cells.

A Table owns its rows of Cells exclusively. Cells are created empty and are
only mutated through the TableStore, which enforces the rules below:

* ``history`` is append-only, one entry per successful edit, holding the value
  that was replaced.
* ``confirmed`` is one-way; confirmation fields are stamped together with it.
* ``version`` changes only on table confirmation.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..access_control import Role
from ..data_integrity import calculate_checksum

CellValue = Union[str, int, float, bool, None]

CELL_VALUE_TYPES = (str, int, float, bool, type(None))


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CellHistoryEntry:
    """Previous value of a cell, captured before an edit was applied."""

    value: CellValue
    timestamp: datetime
    user_id: str


class CellPermissions(BaseModel):
    """Per-cell override of the default view/edit policy."""

    model_config = ConfigDict(frozen=True)

    roles: List[Role] = Field(default_factory=list)
    editable: bool = False
    viewable: bool = True

    @field_validator("roles")
    @classmethod
    def deduplicate_roles(cls, v: List[Role]) -> List[Role]:
        return list(dict.fromkeys(v))

    def allows(self, role: Role) -> bool:
        return role in self.roles


@dataclass
class Cell:
    """One grid cell's full state."""

    value: CellValue = None
    confirmed: bool = False
    confirmed_by: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    confirmed_comments: Optional[str] = None
    permissions: Optional[CellPermissions] = None
    history: List[CellHistoryEntry] = field(default_factory=list)


def empty_row(width: int) -> List[Cell]:
    return [Cell() for _ in range(width)]


@dataclass
class Table:
    """A named grid of cells."""

    name: str
    headers: List[str]
    rows: List[List[Cell]] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    confirmed: bool = False
    confirmed_by: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    confirmed_comments: Optional[str] = None
    version: int = 1
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def width(self) -> int:
        return len(self.headers)

    def cell_at(self, row: int, col: int) -> Optional[Cell]:
        """Return the cell at (row, col), or None outside the grid."""
        if row < 0 or col < 0 or row >= len(self.rows):
            return None
        cells = self.rows[row]
        if col >= len(cells):
            return None
        return cells[col]

    def values(self) -> List[List[CellValue]]:
        return [[cell.value for cell in row] for row in self.rows]

    def fingerprint(self) -> str:
        """Checksum over headers and cell values."""
        return calculate_checksum({"headers": self.headers, "rows": self.values()})
