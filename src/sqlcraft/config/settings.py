"""
Configuration management for sqlcraft.

Settings are loaded from environment variables (``SQLCRAFT_`` prefix, ``__``
as the nested delimiter), an optional ``.env`` file and an optional YAML
connection list.

Example connection list (``connections.yml``)::

    autoload: default
    connections:
      default:
        dsn: postgresql://localhost:5432/app
        username: app
        password: secret
        options:
          pool_pre_ping: true
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from pydantic import AliasChoices, BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

SETTINGS_ENV_FILE = Path(os.getenv("SQLCRAFT_ENV_FILE", ".env")).expanduser()


class SettingsError(Exception):
    """Raised when the YAML connection list cannot be loaded."""


class ConnectionSettings(BaseModel):
    """Parameters of one named connection."""

    dsn: str = Field(description="SQLAlchemy database URL")
    username: str = Field(default="", description="Overrides the URL user when set")
    password: str = Field(default="", description="Overrides the URL password when set")
    options: Dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments passed to sqlalchemy.create_engine",
    )


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    For example, SQLCRAFT_AUTOLOAD=default makes ``default`` the connection
    opened when no connection was used yet, and
    SQLCRAFT_CONNECTIONS__DEFAULT__DSN=sqlite:///app.db declares it.
    """

    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("SQLCRAFT_LOG_LEVEL", "LOG_LEVEL"),
        description="Logging level",
    )

    connections: Dict[str, ConnectionSettings] = Field(
        default_factory=dict, description="Named connection list"
    )
    connections_file: Optional[str] = Field(
        default=None, description="YAML file holding a connection list"
    )
    autoload: Optional[str] = Field(
        default=None,
        description="Connection id opened when no connection was used yet",
    )

    dialect: Optional[str] = Field(
        default=None,
        description="Dialect preset applied to builders produced by a QueryRegistry",
    )

    @model_validator(mode="after")
    def load_connections_file(self) -> "Settings":
        """
        Merge the YAML connection list under explicitly configured connections.

        Raises:
            SettingsError: If the file is missing, not valid YAML or malformed
        """
        if not self.connections_file:
            return self

        config_path = Path(self.connections_file)
        if not config_path.exists():
            logger.error(
                "configuration.file_not_found", config_path=str(config_path)
            )
            raise SettingsError(f"Connection list file not found: {config_path}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error(
                "configuration.yaml_parse_error",
                config_path=str(config_path),
                error=str(e),
            )
            raise SettingsError(f"Invalid YAML in connection list: {e}") from e

        if not isinstance(raw_config, dict):
            raise SettingsError(
                f"Connection list must be a mapping, got {type(raw_config).__name__}"
            )

        try:
            from_file = {
                connection_id: ConnectionSettings(**parameters)
                for connection_id, parameters in (
                    raw_config.get("connections") or {}
                ).items()
            }
        except (TypeError, ValueError) as e:
            raise SettingsError(f"Invalid connection list: {e}") from e

        from_file.update(self.connections)
        self.connections = from_file

        if self.autoload is None and raw_config.get("autoload"):
            self.autoload = str(raw_config["autoload"])

        logger.info(
            "configuration.connections_loaded",
            config_path=str(config_path),
            connection_ids=sorted(self.connections),
        )
        return self

    model_config = SettingsConfigDict(
        env_prefix="SQLCRAFT_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
