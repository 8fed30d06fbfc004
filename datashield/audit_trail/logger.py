"""
Core audit log implementation.

Provides the AuditLog class, an append-only in-memory record of every
user-initiated action.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Tuple, Union

from ..access_control import User
from ..config import DataShieldConfig, get_config
from .export import export_csv
from .models import AuditAction, AuditEntry, AuditQuery

logger = logging.getLogger(__name__)


class AuditLog:
    """Append-only audit log.

    Entries are never modified or removed once recorded. Each entry carries a
    checksum so tampering with a stored entry can be detected with
    :meth:`verify_integrity`.

    Example:
        >>> audit = AuditLog()
        >>> audit.record("2", "DP Team Member", "data_producer",
        ...              "update", "cell", "Updated cell at [0,1]")
        >>> audit.export_all()
    """

    def __init__(self, config: Optional[DataShieldConfig] = None):
        self.config = config or get_config()
        self._entries: List[AuditEntry] = []

    def record(
        self,
        user_id: str,
        user_name: str,
        user_role: str,
        action: Union[str, AuditAction],
        resource: str,
        details: str,
    ) -> Optional[AuditEntry]:
        """
        Append an audit entry.

        Args:
            user_id: ID of the acting user
            user_name: Display name of the acting user
            user_role: Role of the acting user
            action: Action performed
            resource: Kind of resource affected (table, row, cell, ...)
            details: Human-readable description

        Returns:
            The stored entry, or None when auditing is disabled
        """
        if not self.config.audit_enabled:
            return None

        entry = AuditEntry(
            id=str(uuid.uuid4()),
            user_id=user_id,
            user_name=user_name,
            user_role=user_role,
            action=AuditAction(action),
            resource=resource,
            details=details,
            ip_address=self.config.origin_address,
        )
        entry = entry.model_copy(update={"checksum": entry.calculate_checksum()})
        self._entries.append(entry)

        logger.info(entry.to_log_format())
        return entry

    def add(
        self,
        user: Optional[User],
        action: Union[str, AuditAction],
        resource: str,
        details: str,
    ) -> Optional[AuditEntry]:
        """Record an action for a user; anonymous actions are not recorded."""
        if user is None:
            return None
        actor = user.to_context()
        return self.record(
            actor["id"], actor["name"], actor["role"], action, resource, details
        )

    @property
    def entries(self) -> Tuple[AuditEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def by_user(self, user_id: str) -> List[AuditEntry]:
        return [e for e in self._entries if e.user_id == user_id]

    def by_action(self, action: Union[str, AuditAction]) -> List[AuditEntry]:
        action = AuditAction(action)
        return [e for e in self._entries if e.action == action]

    def by_resource(self, resource: str) -> List[AuditEntry]:
        return [e for e in self._entries if e.resource == resource]

    def search(self, query: AuditQuery) -> List[AuditEntry]:
        """Return entries matching a query, oldest first."""
        results = [e for e in self._entries if query.matches(e)]
        if query.limit is not None:
            results = results[: query.limit]
        return results

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the checksum of every stored entry.

        Returns:
            Counts of checked, valid and invalid entries plus the invalid ids
        """
        invalid = [e.id for e in self._entries if not e.verify_checksum()]
        if invalid:
            logger.error(f"Audit integrity check found {len(invalid)} invalid entries")
        return {
            "total_checked": len(self._entries),
            "valid": len(self._entries) - len(invalid),
            "invalid": len(invalid),
            "invalid_ids": invalid,
        }

    def export_all(self) -> str:
        """Export every entry as CSV text."""
        return export_csv(self._entries)
