"""
Table store: owner of all tables and of the current selection.

Every structural, selection and cell operation goes through a TableStore.
Each operation runs to completion synchronously; rejected operations leave
the store untouched, tell the user why through the Notifier and return a
falsy result instead of raising.
"""

import functools
import json
import logging
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from ..access_control import Permission, Role, User
from ..audit_trail import AuditAction, AuditLog
from ..config import DataShieldConfig, get_config
from ..exceptions import (
    ForbiddenError,
    InvalidValueError,
    LockedError,
    NotFoundError,
    UnauthenticatedError,
)
from ..notifications import Notifier
from ..session import Session
from .export import table_to_csv
from .models import (
    CELL_VALUE_TYPES,
    Cell,
    CellHistoryEntry,
    CellPermissions,
    CellValue,
    Table,
    empty_row,
    utcnow,
)
from .permissions import can_edit, can_view, default_column_permissions

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def rejects(default: Any = None) -> Callable[[F], F]:
    """
    Recover rejected store operations at the call boundary.

    Unauthenticated and not-found rejections are silent no-ops. Forbidden,
    locked and invalid-value rejections are reported to the user through the
    store's notifier. In every case the operation returns ``default``.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: "TableStore", *args: Any, **kwargs: Any) -> Any:
            try:
                return func(self, *args, **kwargs)
            except (UnauthenticatedError, NotFoundError) as e:
                logger.debug(f"{func.__name__} skipped: {e}")
                return default
            except (ForbiddenError, LockedError, InvalidValueError) as e:
                logger.warning(f"{func.__name__} rejected: {e}")
                self.notifier.error(str(e))
                return default

        return wrapper  # type: ignore[return-value]

    return decorator


class TableStore:
    """Exclusive owner of the table collection and the current selection.

    Example:
        >>> store = TableStore(session)
        >>> table = store.create_table("QC Run 1", ["Batch", "Result"], 2)
        >>> store.update_cell(0, 1, 42)
        True
        >>> store.confirm_cell(0, 1, "Verified against raw data")
        >>> store.update_cell(0, 1, 99)
        False
    """

    def __init__(
        self,
        session: Session,
        audit: Optional[AuditLog] = None,
        notifier: Optional[Notifier] = None,
        config: Optional[DataShieldConfig] = None,
    ):
        self.session = session
        self.audit = audit or session.audit
        self.notifier = notifier or session.notifier
        self.config = config or get_config()
        self._tables: List[Table] = []
        self._current_table_id: Optional[str] = None

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def user(self) -> Optional[User]:
        return self.session.user

    @property
    def tables(self) -> List[Table]:
        return list(self._tables)

    @property
    def current_table(self) -> Optional[Table]:
        if self._current_table_id is None:
            return None
        return self.get_table(self._current_table_id)

    @property
    def producer_role(self) -> Role:
        return Role(self.config.producer_role)

    def get_table(self, table_id: str) -> Optional[Table]:
        return next((t for t in self._tables if t.id == table_id), None)

    def _require_actor(self) -> User:
        user = self.user
        if user is None:
            raise UnauthenticatedError()
        return user

    def _require_table(self) -> Table:
        table = self.current_table
        if table is None:
            raise NotFoundError("No table selected")
        return table

    def _require_cell(self, table: Table, row: int, col: int) -> Cell:
        cell = table.cell_at(row, col)
        if cell is None:
            raise NotFoundError(f"No cell at [{row},{col}] in table {table.name}")
        return cell

    def _require_confirm_permission(self, user: User) -> None:
        if not user.holds(Permission.CONFIRM_DATA):
            raise ForbiddenError("You don't have permission to confirm data")

    def _record(self, action: AuditAction, resource: str, details: str) -> None:
        self.audit.add(self.user, action, resource, details)

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    @rejects()
    def create_table(
        self, name: str, headers: Sequence[str], initial_rows: Optional[int] = None
    ) -> Optional[Table]:
        """
        Create a table and make it the current selection.

        Args:
            name: Display name of the table
            headers: Column names, in order
            initial_rows: Number of empty rows (defaults to config)

        Returns:
            The new table, or None when nobody is signed in
        """
        user = self._require_actor()
        if initial_rows is None:
            initial_rows = self.config.default_initial_rows
        if initial_rows < 0:
            raise ValueError("initial_rows must not be negative")

        headers = list(headers)
        rows = [empty_row(len(headers)) for _ in range(initial_rows)]
        if self.config.seed_column_permissions:
            for row in rows:
                for col, cell in enumerate(row):
                    cell.permissions = default_column_permissions(col)

        table = Table(name=name, headers=headers, rows=rows, created_by=user.id)
        self._tables.append(table)
        self._current_table_id = table.id

        self._record(AuditAction.CREATE, "table", f"Created new table: {name}")
        self.notifier.success(
            f'Table "{name}" created successfully with {initial_rows} empty rows'
        )
        logger.info(f"Table {table.id} ({name}) created by {user.id}")
        return table

    def select_table(self, table_id: str) -> None:
        """Select an existing table; unknown ids are ignored."""
        table = self.get_table(table_id)
        if table is None:
            logger.debug(f"select_table skipped: unknown table {table_id}")
            return
        self._current_table_id = table.id
        self._record(AuditAction.READ, "table", f"Selected table: {table.name}")

    @rejects()
    def add_row(self) -> None:
        """Append one row of empty cells to the current table."""
        table = self._require_table()
        self._require_actor()

        table.rows.append(empty_row(table.width))
        self._record(
            AuditAction.CREATE, "row", f'Added new row to table "{table.name}"'
        )

    @rejects()
    def add_column(self, header: str) -> None:
        """Append a column to the current table, extending every row."""
        table = self._require_table()
        self._require_actor()

        table.headers.append(header)
        for row in table.rows:
            row.append(Cell())

        self._record(
            AuditAction.CREATE,
            "column",
            f'Added new column "{header}" to table "{table.name}"',
        )
        self.notifier.success(f'Column "{header}" added successfully')

    @rejects()
    def confirm_table(self, comments: Optional[str] = None) -> None:
        """Confirm the current table and bump its version."""
        table = self._require_table()
        user = self._require_actor()
        self._require_confirm_permission(user)

        table.confirmed = True
        table.confirmed_by = user.id
        table.confirmed_at = utcnow()
        table.confirmed_comments = comments
        table.version += 1

        self._record(
            AuditAction.CONFIRM,
            "table",
            f'Confirmed table "{table.name}" (version {table.version}, '
            f"fingerprint {table.fingerprint()[:12]})",
        )
        self.notifier.success(
            f"Table confirmed successfully (version {table.version})"
        )
        logger.info(f"Table {table.id} confirmed at version {table.version}")

    # ------------------------------------------------------------------
    # Permissions
    # ------------------------------------------------------------------

    def can_view_cell(self, row: int, col: int) -> bool:
        return can_view(self.user, self.current_table, row, col, self.producer_role)

    def can_edit_cell(self, row: int, col: int) -> bool:
        return can_edit(self.user, self.current_table, row, col, self.producer_role)

    @rejects()
    def set_cell_permissions(
        self, row: int, col: int, permissions: CellPermissions
    ) -> None:
        """Replace a cell's permission record; admins only."""
        table = self._require_table()
        user = self._require_actor()
        if not user.is_admin:
            raise ForbiddenError("Only admins can set cell permissions")
        cell = self._require_cell(table, row, col)

        cell.permissions = permissions

        self._record(
            AuditAction.UPDATE,
            "permissions",
            f'Updated permissions for cell at [{row},{col}] in table "{table.name}"',
        )
        self.notifier.success("Cell permissions updated successfully")

    # ------------------------------------------------------------------
    # Cells
    # ------------------------------------------------------------------

    @rejects(default=False)
    def update_cell(self, row: int, col: int, value: CellValue) -> bool:
        """
        Change a cell's value.

        The previous value is appended to the cell's history before the new
        value is applied. Rows beyond the end of the table are created empty.

        Returns:
            True if the value was changed
        """
        table = self._require_table()
        user = self._require_actor()
        if row < 0 or col < 0 or col >= table.width:
            raise NotFoundError(f"Cell [{row},{col}] is outside table {table.name}")
        if not isinstance(value, CELL_VALUE_TYPES):
            raise InvalidValueError(value)

        if not self.can_edit_cell(row, col):
            raise ForbiddenError("You don't have permission to edit this cell")

        existing = table.cell_at(row, col)
        if existing is not None and existing.confirmed:
            raise LockedError(row, col)

        while len(table.rows) <= row:
            table.rows.append(empty_row(table.width))

        cell = table.rows[row][col]
        previous = cell.value
        details = (
            f'Updated cell at [{row},{col}] in table "{table.name}" '
            f"from {json.dumps(previous)} to {json.dumps(value)}"
        )
        cell.history.append(
            CellHistoryEntry(value=previous, timestamp=utcnow(), user_id=user.id)
        )
        cell.value = value

        self._record(AuditAction.UPDATE, "cell", details)
        return True

    @rejects()
    def confirm_cell(self, row: int, col: int, comments: Optional[str] = None) -> None:
        """Lock a cell against further edits."""
        table = self._require_table()
        user = self._require_actor()
        self._require_confirm_permission(user)
        cell = self._require_cell(table, row, col)
        if cell.confirmed:
            raise LockedError(row, col, "This cell is already confirmed")

        cell.confirmed = True
        cell.confirmed_by = user.id
        cell.confirmed_at = utcnow()
        cell.confirmed_comments = comments

        self._record(
            AuditAction.CONFIRM,
            "cell",
            f'Confirmed cell at [{row},{col}] in table "{table.name}"',
        )
        self.notifier.success("Cell confirmed successfully")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    @rejects()
    def export_table_to_pdf(self, report_title: Optional[str] = None) -> None:
        """Record a PDF export of the current table; no document is produced."""
        table = self._require_table()

        details = f'Exported table "{table.name}" to PDF'
        if report_title:
            details += f" with title: {report_title}"
        self._record(AuditAction.EXPORT, "pdf", details)
        self.notifier.success("PDF export initiated")
        self.notifier.info(
            "PDF rendering is not available; the export has been recorded"
        )

    def export_table_to_csv(
        self, include_headers: Optional[bool] = None, table_id: Optional[str] = None
    ) -> Optional[str]:
        """
        Serialize a table as CSV.

        Args:
            include_headers: Write the header row (defaults to config)
            table_id: Table to export (defaults to the current table)

        Returns:
            CSV text, or None when no table is available
        """
        table = self.get_table(table_id) if table_id else self.current_table
        if table is None:
            self.notifier.error("No table selected for export")
            return None
        if include_headers is None:
            include_headers = self.config.csv_include_headers

        content = table_to_csv(table, include_headers=include_headers)
        self._record(AuditAction.EXPORT, "csv", f'Exported table "{table.name}" to CSV')
        self.notifier.success("CSV export completed")
        return content


__all__ = ["TableStore", "rejects"]
