"""Delimited-text export of audit entries."""

from typing import Iterable

import pandas as pd

from .models import AuditEntry

EXPORT_COLUMNS = [
    "ID",
    "User ID",
    "User Name",
    "Role",
    "Action Type",
    "Resource",
    "Details",
    "Timestamp",
    "IP Address",
]


def export_csv(entries: Iterable[AuditEntry]) -> str:
    """
    Serialize audit entries as CSV.

    Args:
        entries: Entries in the order they should appear

    Returns:
        CSV text with a header row and ISO-8601 timestamps
    """
    rows = [
        [
            entry.id,
            entry.user_id,
            entry.user_name,
            entry.user_role,
            entry.action.value,
            entry.resource,
            entry.details,
            entry.timestamp.isoformat(),
            entry.ip_address,
        ]
        for entry in entries
    ]
    df = pd.DataFrame(rows, columns=EXPORT_COLUMNS, dtype=object)
    return str(df.to_csv(index=False, lineterminator="\n"))
