"""Pytest configuration for DataShield."""


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line(
        "markers", "invariant: mark test as checking a data-integrity invariant"
    )
