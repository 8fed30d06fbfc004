"""Tests for configuration management."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from datashield.config import (
    ChecksumAlgorithm,
    DataShieldConfig,
    configure,
    get_config,
    set_config,
)


class TestDataShieldConfig:
    """Test configuration model."""

    def test_defaults(self):
        """Test default configuration values."""
        config = DataShieldConfig()

        assert config.application_name == "Medytox DataShield"
        assert config.environment == "development"
        assert config.default_initial_rows == 10
        assert config.seed_column_permissions is True
        assert config.producer_role == "data_producer"
        assert config.audit_enabled is True
        assert config.checksum_algorithm == ChecksumAlgorithm.SHA256
        assert config.password_scheme == "pbkdf2_sha256"

    def test_environment_validation(self):
        """Test environment names are checked and normalized."""
        assert DataShieldConfig(environment="Production").environment == "production"
        with pytest.raises(ValidationError):
            DataShieldConfig(environment="moon")

    def test_timezone_validation(self):
        """Test timezones must be known to pytz."""
        assert DataShieldConfig(timezone="Asia/Seoul").timezone == "Asia/Seoul"
        with pytest.raises(ValidationError):
            DataShieldConfig(timezone="Mars/Olympus_Mons")

    def test_log_level_validation(self):
        """Test log levels are upper-cased and checked."""
        assert DataShieldConfig(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            DataShieldConfig(log_level="chatty")

    def test_producer_role_validation(self):
        """Test the producer role cannot be admin or unknown."""
        assert DataShieldConfig(producer_role="reviewer").producer_role == "reviewer"
        for role in ("admin", "owner"):
            with pytest.raises(ValidationError):
                DataShieldConfig(producer_role=role)

    def test_negative_initial_rows(self):
        """Test initial rows cannot be negative."""
        with pytest.raises(ValidationError):
            DataShieldConfig(default_initial_rows=-1)

    def test_to_dict(self):
        """Test serialization to plain values."""
        data = DataShieldConfig(checksum_algorithm="blake2b").to_dict()
        assert data["checksum_algorithm"] == "blake2b"
        assert data["default_initial_rows"] == 10

    def test_localize(self):
        """Test timestamps convert into the configured timezone."""
        config = DataShieldConfig(timezone="Asia/Seoul")
        stamp = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
        local = config.localize(stamp)

        assert local.hour == 9
        assert local == stamp


class TestFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env(self, monkeypatch):
        """Test typed values are read from the environment."""
        monkeypatch.setenv("DATASHIELD_DEFAULT_INITIAL_ROWS", "3")
        monkeypatch.setenv("DATASHIELD_AUDIT_ENABLED", "false")
        monkeypatch.setenv("DATASHIELD_CHECKSUM_ALGORITHM", "sha512")
        monkeypatch.setenv("DATASHIELD_ENVIRONMENT", "staging")

        config = DataShieldConfig.from_env()
        assert config.default_initial_rows == 3
        assert config.audit_enabled is False
        assert config.checksum_algorithm == ChecksumAlgorithm.SHA512
        assert config.environment == "staging"

    def test_custom_prefix(self, monkeypatch):
        """Test a different prefix."""
        monkeypatch.setenv("LAB_SEED_COLUMN_PERMISSIONS", "0")
        assert DataShieldConfig.from_env("LAB_").seed_column_permissions is False

    def test_invalid_value(self, monkeypatch):
        """Test bad values surface as validation errors."""
        monkeypatch.setenv("DATASHIELD_DEFAULT_INITIAL_ROWS", "many")
        with pytest.raises(ValidationError):
            DataShieldConfig.from_env()


class TestGlobalConfig:
    """Test the process-wide configuration."""

    def test_set_and_get(self):
        """Test installing a configuration."""
        config = DataShieldConfig(application_name="QC Lab")
        set_config(config)
        assert get_config() is config

    def test_reload_from_env(self, monkeypatch):
        """Test clearing the configuration reloads from the environment."""
        monkeypatch.setenv("DATASHIELD_APPLICATION_NAME", "Env Lab")
        set_config(None)
        assert get_config().application_name == "Env Lab"

    def test_configure_updates(self):
        """Test configure keeps unrelated settings."""
        set_config(DataShieldConfig(application_name="QC Lab"))
        config = configure(default_initial_rows=4)

        assert config.application_name == "QC Lab"
        assert config.default_initial_rows == 4
        assert get_config() is config

    def test_configure_rejects_invalid(self):
        """Test configure validates its arguments."""
        with pytest.raises(ValidationError):
            configure(producer_role="admin")
