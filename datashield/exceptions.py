"""Exceptions for table store and identity operations."""

from typing import Optional


class DataShieldError(Exception):
    """Base exception for DataShield operations."""

    def __init__(self, message: str, resource: Optional[str] = None):
        self.resource = resource
        super().__init__(message)


class UnauthenticatedError(DataShieldError):
    """Raised when a mutation is attempted without a signed-in user."""

    def __init__(self) -> None:
        super().__init__("No user is signed in")


class NotFoundError(DataShieldError):
    """Raised when no table is selected or the target does not exist."""


class ForbiddenError(DataShieldError):
    """Raised when the actor lacks the role or permission for an operation."""


class LockedError(DataShieldError):
    """Raised when a confirmed cell would be modified."""

    def __init__(
        self,
        row: int,
        col: int,
        message: str = "This cell is confirmed and cannot be edited",
    ):
        self.row = row
        self.col = col
        super().__init__(message, resource=f"[{row},{col}]")


class InvalidValueError(DataShieldError):
    """Raised when a cell value is not text, a number, a boolean or empty."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unsupported cell value of type {type(value).__name__}")


class AuthenticationError(DataShieldError):
    """Raised when credentials cannot be matched to a user."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__("Invalid credentials", resource=identifier)
