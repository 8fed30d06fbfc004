"""Shared fixtures for DataShield tests."""

import pytest

from datashield.access_control import DEMO_PASSWORD, IdentityProvider
from datashield.audit_trail import AuditLog
from datashield.config import DataShieldConfig, set_config
from datashield.notifications import Notifier
from datashield.session import Session
from datashield.tables import TableStore

DEMO_EMAILS = {
    "admin": "admin@medytox.com",
    "data_producer": "dp@medytox.com",
    "reviewer": "qa@medytox.com",
    "viewer": "viewer@medytox.com",
}


@pytest.fixture(autouse=True)
def config():
    """Install a default configuration for every test."""
    config = DataShieldConfig()
    set_config(config)
    yield config
    set_config(None)


@pytest.fixture(scope="session")
def identity():
    """Demo directory; hashing is slow enough to share it across tests."""
    return IdentityProvider(scheme="pbkdf2_sha256")


@pytest.fixture
def audit(config):
    return AuditLog(config)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def session(identity, audit, notifier):
    return Session(identity, audit, notifier)


@pytest.fixture
def store(session, config):
    return TableStore(session, config=config)


@pytest.fixture
def login(session):
    """Sign in as the demo user holding ``role``, replacing any current user."""

    def _login(role):
        session.logout()
        assert session.login(DEMO_EMAILS[role], DEMO_PASSWORD)
        return session.user

    return _login
