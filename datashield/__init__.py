"""
DataShield - permission-aware spreadsheet data with an audit trail.

DataShield keeps laboratory and production data in named tables. Every cell
carries its own edit history, an optional permission record and a one-way
confirmation lock; every user action lands in an append-only audit trail.

Key Features
------------
* **Table Store**: create tables, add rows and columns, select the table in use
* **Cell Permissions**: role-based view/edit policy with per-cell overrides
* **Confirmation**: lock reviewed cells and confirm whole tables (versioned)
* **Audit Trail**: append-only, checksummed log with CSV export
* **Export**: CSV and Excel export of table values

Quick Start
-----------
>>> from datashield import AuditLog, IdentityProvider, Session, TableStore
>>>
>>> audit = AuditLog()
>>> session = Session(IdentityProvider(), audit)
>>> session.login("dp@medytox.com", "datashield")
>>> store = TableStore(session)
>>> store.create_table("QC Run 1", ["Batch", "Result"], initial_rows=2)
>>> store.update_cell(0, 1, 42)
True

State lives in memory for the lifetime of the process; nothing is persisted.
"""

__version__ = "1.0.0"

from .access_control import IdentityProvider, Permission, Role, User
from .audit_trail import AuditAction, AuditEntry, AuditLog
from .config import DataShieldConfig, configure, get_config
from .notifications import Notifier
from .session import Session
from .tables import Cell, CellPermissions, Table, TableStore

__all__ = [
    # Identity
    "IdentityProvider",
    "Permission",
    "Role",
    "User",
    "Session",
    # Audit Trail
    "AuditLog",
    "AuditAction",
    "AuditEntry",
    # Tables
    "TableStore",
    "Table",
    "Cell",
    "CellPermissions",
    # Notifications
    "Notifier",
    # Configuration
    "DataShieldConfig",
    "configure",
    "get_config",
]
