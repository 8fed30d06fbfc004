"""
Audit Trail Module.

Provides the append-only audit log that records every user-initiated action,
with checksums for integrity verification and CSV export.
"""

from .export import EXPORT_COLUMNS, export_csv
from .logger import AuditLog
from .models import AuditAction, AuditEntry, AuditQuery

__all__ = [
    "AuditLog",
    "AuditAction",
    "AuditEntry",
    "AuditQuery",
    "EXPORT_COLUMNS",
    "export_csv",
]
