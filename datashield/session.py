"""Signed-in session for one user of the application."""

import logging
from typing import Optional

from .access_control import IdentityProvider, User
from .audit_trail import AuditAction, AuditLog
from .exceptions import AuthenticationError
from .notifications import Notifier

logger = logging.getLogger(__name__)


class Session:
    """Holds the currently signed-in user.

    One instance exists per running application; it is passed to the
    components that need the acting user rather than stored globally.
    """

    def __init__(
        self,
        identity: IdentityProvider,
        audit: AuditLog,
        notifier: Optional[Notifier] = None,
    ):
        self.identity = identity
        self.audit = audit
        self.notifier = notifier or Notifier()
        self._user: Optional[User] = None

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def login(self, identifier: str, credential: str) -> bool:
        """
        Sign a user in.

        Returns:
            True if the credentials matched a directory entry
        """
        try:
            user = self.identity.authenticate(identifier, credential)
        except AuthenticationError:
            self.notifier.error("Invalid credentials")
            return False

        self._user = user
        self.audit.add(
            user, AuditAction.LOGIN, "session", f"User {user.email} logged in"
        )
        self.notifier.success(f"Welcome back, {user.name}")
        logger.info(f"User {user.id} signed in as {user.role.value}")
        return True

    def logout(self) -> None:
        if self._user is None:
            return
        user, self._user = self._user, None
        self.audit.add(
            user, AuditAction.LOGOUT, "session", f"User {user.email} logged out"
        )
        self.notifier.info("You have been logged out")
        logger.info(f"User {user.id} signed out")
