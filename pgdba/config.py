"""
Configuration settings for pgdba.

Uses Pydantic Settings to load environment variables for the database
connection, pool sizing and logging. A ``dba.config.json`` file holding named
connection profiles can override the database fields.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pgdba.errors import ConfigurationError

_MISSING_CONFIG_HELP = (
    "Error getting config file. Are you sure you created a dba.config.json file?\n"
    "It must look like: "
    '{"connection": "local", "connections": {"local": {"host": "localhost", '
    '"port": 5432, "database": "postgres", "username": "postgres", "password": "..."}}}'
)


class ConnectionProfile(BaseModel):
    """One named entry of the ``connections`` map in ``dba.config.json``."""

    host: str = "localhost"
    port: int = 5432
    database: str
    username: str
    password: str = ""
    ssl: bool = False

    model_config = {"frozen": True, "extra": "ignore"}


class ConfigFile(BaseModel):
    connection: str
    connections: Dict[str, ConnectionProfile]


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("postgres", alias="DB_NAME")
    db_sslmode: str = Field("prefer", alias="DB_SSLMODE")

    # Pool
    pool_min_size: int = Field(1, alias="DBA_POOL_MIN_SIZE")
    pool_max_size: int = Field(5, alias="DBA_POOL_MAX_SIZE")
    pool_timeout: float = Field(10.0, alias="DBA_POOL_TIMEOUT")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    config_file: Optional[Path] = Field(None, alias="DBA_CONFIG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def with_profile(self, profile: ConnectionProfile) -> "Settings":
        """Return a copy whose database fields come from ``profile``."""
        return self.model_copy(
            update={
                "db_host": profile.host,
                "db_port": profile.port,
                "db_user": profile.username,
                "db_password": profile.password,
                "db_name": profile.database,
                "db_sslmode": "require" if profile.ssl else "disable",
            }
        )


def load_connection_profile(path: Path, name: Optional[str] = None) -> ConnectionProfile:
    """
    Read ``path`` and return the selected connection profile.

    Parameters
    ----------
    path : Path
        Location of a ``dba.config.json`` file.
    name : str, optional
        Profile to select; defaults to the file's ``connection`` key.

    Raises
    ------
    ConfigurationError
        If the file is missing, is not valid JSON, or names an unknown profile.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        config = ConfigFile.model_validate(raw)
    except (OSError, ValueError, ValidationError) as exc:
        raise ConfigurationError(f"{_MISSING_CONFIG_HELP}\n({exc})") from exc

    selected = name or config.connection
    try:
        return config.connections[selected]
    except KeyError:
        known = ", ".join(sorted(config.connections)) or "none"
        raise ConfigurationError(
            f"Connection profile '{selected}' not found in {path} (available: {known})."
        ) from None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.

    When ``DBA_CONFIG_FILE`` is set, its active profile is applied on top.
    """
    settings = Settings()
    if settings.config_file is not None:
        settings = settings.with_profile(load_connection_profile(settings.config_file))
    return settings


__all__ = [
    "ConnectionProfile",
    "Settings",
    "get_settings",
    "load_connection_profile",
]
