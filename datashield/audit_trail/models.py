"""
Data models for audit trail functionality.

These models define the structure of audit entries and the filters used to
search them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..data_integrity import ChecksumProvider, calculate_checksum, canonical_json


class AuditAction(str, Enum):
    """Kinds of user-initiated actions recorded in the audit trail."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"
    EXPORT = "export"
    CONFIRM = "confirm"


class AuditEntry(BaseModel):
    """
    Immutable audit trail entry.

    Each entry captures who did what, to which kind of resource, and when.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier for the audit entry")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp of the action",
    )

    # Who
    user_id: str = Field(..., description="ID of user performing the action")
    user_name: str = Field(..., description="Display name of user")
    user_role: str = Field(..., description="User's role at time of action")

    # What
    action: AuditAction = Field(..., description="Type of action performed")
    resource: str = Field(..., description="Kind of resource affected")
    details: str = Field("", description="Human-readable description")

    # Where
    ip_address: str = Field("127.0.0.1", description="Origin address")

    checksum: Optional[str] = Field(
        None, description="Checksum of the entry for integrity verification"
    )

    def _checksum_payload(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "user_id": self.user_id,
            "user_role": self.user_role,
            "action": self.action.value,
            "resource": self.resource,
            "details": self.details,
        }

    def calculate_checksum(self) -> str:
        """Calculate checksum for the audit entry."""
        return calculate_checksum(self._checksum_payload())

    def verify_checksum(self, expected_checksum: Optional[str] = None) -> bool:
        """
        Verify the integrity of the audit entry.

        Args:
            expected_checksum: Checksum to compare against; defaults to the
                checksum stored on the entry

        Returns:
            True if checksum matches
        """
        expected = expected_checksum if expected_checksum is not None else self.checksum
        if expected is None:
            return False
        return ChecksumProvider().verify(
            canonical_json(self._checksum_payload()), expected
        )

    def to_log_format(self) -> str:
        """Convert to a single-line log string."""
        return (
            f"[{self.timestamp.isoformat()}] USER={self.user_id} "
            f"ROLE={self.user_role} ACTION={self.action.value} "
            f"RESOURCE={self.resource} DETAILS='{self.details}'"
        )


class AuditQuery(BaseModel):
    """Filter for searching the audit trail."""

    actions: Optional[List[AuditAction]] = Field(
        None, description="Filter by action types"
    )
    user_ids: Optional[List[str]] = Field(None, description="Filter by user IDs")
    resources: Optional[List[str]] = Field(None, description="Filter by resource")
    search_text: Optional[str] = Field(
        None, description="Case-insensitive search in user name, resource, details"
    )
    limit: Optional[int] = Field(None, description="Maximum results", gt=0)

    def matches(self, entry: AuditEntry) -> bool:
        if self.actions and entry.action not in self.actions:
            return False
        if self.user_ids and entry.user_id not in self.user_ids:
            return False
        if self.resources and entry.resource not in self.resources:
            return False
        if self.search_text:
            needle = self.search_text.lower()
            return (
                needle in entry.user_name.lower()
                or needle in entry.resource.lower()
                or needle in entry.details.lower()
            )
        return True
