"""
Configuration module for DataShield.

Provides centralized configuration management for the table store, the
identity provider and the audit trail.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union, get_args, get_origin

import pytz
from pydantic import BaseModel, Field, field_validator


class ChecksumAlgorithm(str, Enum):
    """Supported checksum algorithms for data integrity."""

    SHA256 = "sha256"
    SHA512 = "sha512"
    BLAKE2B = "blake2b"


class DataShieldConfig(BaseModel):
    """Central configuration for DataShield.

    Configuration Sources (in order of precedence):
        1. Programmatic settings (highest priority)
        2. Environment variables (DATASHIELD_ prefix)
        3. Default values (lowest priority)

    Example:
        >>> config = DataShieldConfig(
        ...     application_name="QC Lab",
        ...     default_initial_rows=5,
        ... )

        Loading from environment:

        >>> import os
        >>> os.environ['DATASHIELD_DEFAULT_INITIAL_ROWS'] = '20'
        >>> config = DataShieldConfig.from_env()

    Note:
        The producer role decides who may edit cells that carry no explicit
        permission record. Changing it changes the default edit policy for
        every table.
    """

    # General settings
    application_name: str = Field(
        "Medytox DataShield", description="Name of the application for audit trails"
    )
    environment: str = Field(
        "development", description="Environment (development, staging, production)"
    )
    timezone: str = Field("UTC", description="Timezone used to display timestamps")
    log_level: str = Field("INFO", description="Logging level for the CLI")

    # Table settings
    default_initial_rows: int = Field(
        10, description="Empty rows created with a new table", ge=0
    )
    seed_column_permissions: bool = Field(
        True, description="Assign the rotating column permission pattern"
    )
    producer_role: str = Field(
        "data_producer",
        description="Role allowed to edit cells without a permission record",
    )
    csv_include_headers: bool = Field(
        True, description="Include the header row in CSV exports by default"
    )

    # Audit trail settings
    audit_enabled: bool = Field(True, description="Enable audit trail logging")
    origin_address: str = Field(
        "127.0.0.1", description="Origin address recorded on audit entries"
    )
    checksum_algorithm: ChecksumAlgorithm = Field(
        ChecksumAlgorithm.SHA256, description="Algorithm for data integrity checks"
    )

    # Identity settings
    password_scheme: str = Field(
        "pbkdf2_sha256", description="passlib scheme used to hash credentials"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid."""
        valid_environments = {"development", "staging", "production", "validation"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Environment must be one of: {', '.join(sorted(valid_environments))}"
            )
        return v.lower()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure timezone is known to pytz."""
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("producer_role")
    @classmethod
    def validate_producer_role(cls, v: str) -> str:
        """Producer role must be one of the known non-admin roles."""
        if v not in {"data_producer", "reviewer", "viewer"}:
            raise ValueError(f"Invalid producer role: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in levels:
            raise ValueError(f"Log level must be one of: {', '.join(sorted(levels))}")
        return v.upper()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_env(cls, prefix: str = "DATASHIELD_") -> "DataShieldConfig":
        """
        Load configuration from environment variables.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Configuration instance
        """
        import os

        config_dict: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]

                field_type = field_info.annotation

                # Handle Optional types
                if get_origin(field_type) is Union:
                    args = get_args(field_type)
                    field_type = next(
                        (arg for arg in args if arg is not type(None)), str
                    )

                try:
                    if field_type == bool:
                        config_dict[field_name] = value.lower() in (
                            "true",
                            "1",
                            "yes",
                            "on",
                        )
                    elif field_type == int:
                        config_dict[field_name] = int(value)
                    elif isinstance(field_type, type) and issubclass(field_type, Enum):
                        config_dict[field_name] = field_type(value)
                    else:
                        config_dict[field_name] = value
                except (ValueError, TypeError):
                    # Let model validation report the bad value
                    config_dict[field_name] = value

        return cls.model_validate(config_dict)

    def localize(self, timestamp: datetime) -> datetime:
        """Convert an aware UTC timestamp into the configured timezone."""
        return timestamp.astimezone(pytz.timezone(self.timezone))


# Global configuration instance
_config: Optional[DataShieldConfig] = None


def get_config() -> DataShieldConfig:
    """
    Get the global configuration instance.

    Returns:
        Global configuration
    """
    global _config

    if _config is None:
        try:
            _config = DataShieldConfig.from_env()
        except Exception:
            # Fall back to default configuration
            _config = DataShieldConfig.model_validate({})

    return _config


def set_config(config: Optional[DataShieldConfig]) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration to set, or None to reload from the environment
    """
    global _config
    _config = config


def configure(**kwargs: Any) -> DataShieldConfig:
    """
    Configure DataShield with keyword arguments.

    Args:
        **kwargs: Configuration parameters

    Returns:
        Updated configuration
    """
    global _config

    if _config is None:
        _config = DataShieldConfig(**kwargs)
    else:
        config_dict = _config.to_dict()
        config_dict.update(kwargs)
        _config = DataShieldConfig(**config_dict)

    return _config
