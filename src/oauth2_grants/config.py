"""Settings for the OAuth2 grant engine.

Settings are loaded from an optional JSON/YAML file, environment
variables with the OAUTH2_GRANTS_ prefix (a .env file is honoured) and
CLI overrides, in increasing order of precedence.
"""

from __future__ import annotations

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "OAUTH2_GRANTS_"


class ConfigError(Exception):
    """Raised when configuration validation fails."""


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    """Deployment environments."""

    LOCAL = "local"
    DEV = "dev"
    STAGE = "stage"
    PROD = "prod"


class Settings(BaseModel):
    """Runtime settings for the grant engine and its CLI."""

    app_name: str = Field(default="OAuth2 Grants", description="Application name")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    environment: Environment = Field(
        default=Environment.LOCAL, description="Deployment environment"
    )

    clients_file: str | None = Field(
        default=None, description="Path to the OAuth2 client definitions (JSON or YAML)"
    )
    default_redirect_uri: str | None = Field(
        default=None,
        description="Absolute callback URL used when no inbound request is being served",
    )

    token_encryption_key: SecretStr | None = Field(
        default=None, description="Fernet encryption key for token storage"
    )
    token_store_path: str | None = Field(
        default=None, description="Path for persistent token storage"
    )

    model_config = {
        "extra": "ignore",
        "validate_assignment": True,
    }

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Normalize log level to uppercase."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, v: Any) -> Any:
        """Normalize environment to lowercase."""
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def validate_token_store(self) -> Settings:
        """Require an encryption key for persistent token storage."""
        if self.token_store_path and not self.token_encryption_key:
            msg = "token_encryption_key is required when token_store_path is set"
            raise ValueError(msg)
        return self


_ENV_MAPPING = {
    "app_name": "APP_NAME",
    "log_level": "LOG_LEVEL",
    "environment": "ENVIRONMENT",
    "clients_file": "CLIENTS_FILE",
    "default_redirect_uri": "DEFAULT_REDIRECT_URI",
    "token_encryption_key": "TOKEN_ENCRYPTION_KEY",
    "token_store_path": "TOKEN_STORE_PATH",
}

_SECRET_KEYS = {"token_encryption_key"}


def _load_env_config() -> dict[str, Any]:
    """Collect settings from OAUTH2_GRANTS_* environment variables."""
    config: dict[str, Any] = {}
    for field_name, env_suffix in _ENV_MAPPING.items():
        value = os.environ.get(f"{ENV_PREFIX}{env_suffix}")
        if value is not None:
            config[field_name] = value
    return config


def read_structured_file(path: str | Path) -> Any:
    """Parse a JSON or YAML file.

    Raises:
        ConfigError: If the file is missing, unsupported or malformed
    """
    path = Path(path)
    if not path.exists():
        msg = f"Configuration file not found: {path}"
        raise ConfigError(msg)

    suffix = path.suffix.lower()
    content = path.read_text()

    if suffix == ".json":
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON in {path}: {e}"
            raise ConfigError(msg) from e

    if suffix in (".yaml", ".yml"):
        try:
            import yaml
        except ImportError:
            msg = "PyYAML is required to load YAML configuration files"
            raise ConfigError(msg) from None
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {path}: {e}"
            raise ConfigError(msg) from e

    msg = f"Unsupported configuration file format: {suffix}"
    raise ConfigError(msg)


def _redact_for_log(key: str, value: Any) -> str:
    """Redact sensitive values for logging."""
    if key in _SECRET_KEYS and value:
        return "***"
    return str(value)


def load_config(
    path: str | Path | None = None,
    cli_args: dict[str, Any] | None = None,
) -> Settings:
    """Load and validate settings.

    Precedence (highest to lowest):
    1. CLI arguments
    2. Environment variables
    3. Configuration file
    4. Model defaults

    Args:
        path: Optional path to a settings file
        cli_args: Optional CLI argument overrides

    Returns:
        Validated Settings instance

    Raises:
        ConfigError: If configuration is invalid
    """
    load_dotenv()

    config_dict: dict[str, Any] = {}
    if path:
        logger.debug("Loading configuration from file: %s", path)
        data = read_structured_file(path)
        if not isinstance(data, dict):
            msg = f"Configuration file must contain a mapping: {path}"
            raise ConfigError(msg)
        config_dict.update(data)

    for key, value in _load_env_config().items():
        config_dict[key] = value
        logger.debug("Config %s from environment: %s", key, _redact_for_log(key, value))

    if cli_args:
        for key, value in cli_args.items():
            if value is not None:
                config_dict[key] = value
                logger.debug("Config %s from CLI: %s", key, _redact_for_log(key, value))

    try:
        return Settings(**config_dict)
    except Exception as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e
