"""
Access control module for DataShield.

This module provides the identity boundary of the application: the closed
set of roles, the named permissions, the signed-in user record and a mock
identity provider that matches credentials against a local user directory.
Credentials are stored as passlib hashes, never in clear text.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from passlib.context import CryptContext
from pydantic import BaseModel, Field, field_validator

from .config import get_config
from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Closed set of user roles."""

    ADMIN = "admin"
    DATA_PRODUCER = "data_producer"
    REVIEWER = "reviewer"
    VIEWER = "viewer"


class Permission(str, Enum):
    """Named permissions carried by a user record."""

    EDIT_ALL = "edit_all"
    VIEW_ALL = "view_all"
    EDIT_DATA = "edit_data"
    CONFIRM_DATA = "confirm_data"
    MANAGE_USERS = "manage_users"


# Permissions granted to each role in the demo directory
ROLE_PERMISSIONS: Dict[Role, List[Permission]] = {
    Role.ADMIN: [
        Permission.EDIT_ALL,
        Permission.VIEW_ALL,
        Permission.CONFIRM_DATA,
        Permission.MANAGE_USERS,
    ],
    Role.DATA_PRODUCER: [
        Permission.EDIT_DATA,
        Permission.VIEW_ALL,
        Permission.CONFIRM_DATA,
    ],
    Role.REVIEWER: [Permission.VIEW_ALL, Permission.CONFIRM_DATA],
    Role.VIEWER: [Permission.VIEW_ALL],
}

DEMO_PASSWORD = "datashield"


@dataclass
class User:
    """Represents an authenticated user."""

    id: str
    name: str
    email: str
    role: Role
    permissions: Set[Permission] = field(default_factory=set)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def holds(self, permission: Union[str, Permission]) -> bool:
        """Check the literal permission set, without the admin override."""
        return Permission(permission) in self.permissions

    def has_permission(self, permission: Union[str, Permission]) -> bool:
        """Check if user has a specific permission; admins have all of them."""
        return self.holds(permission) or self.is_admin

    def to_context(self) -> Dict[str, Any]:
        """Actor fields recorded on audit entries."""
        return {"id": self.id, "name": self.name, "role": self.role.value}


class UserRecord(BaseModel):
    """Directory entry for a user, including the hashed credential."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    role: Role
    permissions: List[Permission] = Field(default_factory=list)
    password_hash: str = Field(..., description="passlib hash of the credential")

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError(f"Invalid email address: {v}")
        return v.strip().lower()

    @field_validator("permissions")
    @classmethod
    def deduplicate_permissions(cls, v: List[Permission]) -> List[Permission]:
        return list(dict.fromkeys(v))

    def to_user(self) -> User:
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            role=self.role,
            permissions=set(self.permissions),
        )


class IdentityProvider:
    """Mock identity provider backed by an in-memory user directory."""

    def __init__(
        self,
        records: Optional[Iterable[UserRecord]] = None,
        scheme: Optional[str] = None,
    ):
        """
        Initialize the identity provider.

        Args:
            records: Directory entries; defaults to one demo user per role
            scheme: passlib scheme for hashing credentials (defaults to config)
        """
        self.crypt_context = CryptContext(
            schemes=[scheme or get_config().password_scheme], deprecated="auto"
        )
        self._records: Dict[str, UserRecord] = {}

        if records is None:
            records = self._demo_records()
        for record in records:
            self.register(record)

    def _demo_records(self) -> List[UserRecord]:
        """Build the demo directory, one user per role."""
        demo = [
            ("1", "Admin User", "admin@medytox.com", Role.ADMIN),
            ("2", "DP Team Member", "dp@medytox.com", Role.DATA_PRODUCER),
            ("3", "QA Team Member", "qa@medytox.com", Role.REVIEWER),
            ("4", "Viewer", "viewer@medytox.com", Role.VIEWER),
        ]
        password_hash = self.hash_password(DEMO_PASSWORD)
        return [
            UserRecord(
                id=user_id,
                name=name,
                email=email,
                role=role,
                permissions=ROLE_PERMISSIONS[role],
                password_hash=password_hash,
            )
            for user_id, name, email, role in demo
        ]

    def hash_password(self, password: str) -> str:
        return str(self.crypt_context.hash(password))

    def register(self, record: UserRecord) -> None:
        """Add or replace a directory entry keyed by email."""
        if record.email in self._records:
            logger.info(f"Replacing directory entry for {record.email}")
        self._records[record.email] = record

    def add_user(
        self,
        id: str,
        name: str,
        email: str,
        role: Union[str, Role],
        password: str,
        permissions: Optional[List[Union[str, Permission]]] = None,
    ) -> User:
        """
        Create a directory entry from clear-text inputs.

        Raises:
            ValueError: If the role or a permission is unknown
        """
        role = Role(role)
        record = UserRecord.model_validate(
            {
                "id": id,
                "name": name,
                "email": email,
                "role": role,
                "permissions": (
                    permissions if permissions is not None else ROLE_PERMISSIONS[role]
                ),
                "password_hash": self.hash_password(password),
            }
        )
        self.register(record)
        return record.to_user()

    def users(self) -> List[User]:
        return [record.to_user() for record in self._records.values()]

    def authenticate(self, identifier: str, credential: str) -> User:
        """
        Match credentials against the directory.

        Args:
            identifier: User email
            credential: Clear-text password

        Returns:
            The authenticated user

        Raises:
            AuthenticationError: If the identifier is unknown or the
                credential does not match
        """
        record = self._records.get(identifier.strip().lower())
        if record is None:
            logger.warning(f"Authentication failed: unknown user {identifier}")
            raise AuthenticationError(identifier)

        if not self.crypt_context.verify(credential, record.password_hash):
            logger.warning(f"Authentication failed: bad credential for {identifier}")
            raise AuthenticationError(identifier)

        return record.to_user()


__all__ = [
    "Role",
    "Permission",
    "ROLE_PERMISSIONS",
    "DEMO_PASSWORD",
    "User",
    "UserRecord",
    "IdentityProvider",
]
