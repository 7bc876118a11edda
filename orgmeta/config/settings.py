"""
Application settings using Pydantic Settings v2.

Environment variables are loaded from .env file and can be overridden
by actual environment variables.

Core functions never read these settings directly. The CLI builds an
AppSettings instance and passes resolved paths down explicitly.
"""

import os
from pathlib import Path
from typing import Annotated

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def find_env_file() -> str:
    """
    Find .env file in current directory or parent directory.

    Returns:
        Path to .env file (current dir, parent dir, or default ".env")
    """
    current = Path.cwd() / ".env"
    parent = Path.cwd().parent / ".env"

    if current.exists():
        return str(current)
    elif parent.exists():
        return str(parent)
    else:
        # Fallback to default (will use environment variables only)
        return ".env"


def _resolve(path: str) -> str:
    # Symlinks are kept so paths compare against the registry as written
    return os.path.abspath(Path(path).expanduser())


class StoreSettings(BaseSettings):
    """Metadata store configuration"""

    db_path: Annotated[
        str,
        Field(
            default="~/.orgmeta/org_files.db",
            description="Path to the SQLite file holding the org_files table",
            validation_alias="ORGMETA_DB_PATH",
        ),
    ]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def db_path_resolved(self) -> str:
        """Absolute path to the SQLite database file."""
        return _resolve(self.db_path)

    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )


class RegistrySettings(BaseSettings):
    """Document ID registry configuration.

    The registry maps document IDs to absolute paths. Paths are stored in
    the index relative to root_dir.
    """

    root_dir: Annotated[
        str,
        Field(
            default="~/org",
            description="Root directory that indexed paths are made relative to",
            validation_alias="ORGMETA_ROOT_DIR",
        ),
    ]
    id_locations_file: Annotated[
        str,
        Field(
            default="~/.emacs.d/.org-id-locations",
            description="Path to the ID -> file registry (org-id-locations format or JSON)",
            validation_alias="ORGMETA_ID_LOCATIONS_FILE",
        ),
    ]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def root_dir_resolved(self) -> str:
        """Absolute path of the document root."""
        return _resolve(self.root_dir)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def id_locations_file_resolved(self) -> str:
        """Absolute path of the registry file."""
        return _resolve(self.id_locations_file)

    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )


class AppSettings(BaseSettings):
    """Main application settings"""

    # Logging
    log_level: Annotated[
        str,
        Field(
            default="info",
            description="Log level: debug, info, warning, error",
            validation_alias="ORGMETA_LOG_LEVEL",
        ),
    ]
    log_format: Annotated[
        str,
        Field(
            default="text",
            description="Log format: json, text",
            validation_alias="ORGMETA_LOG_FORMAT",
        ),
    ]

    # Nested settings
    store: Annotated[
        StoreSettings, Field(default_factory=StoreSettings, description="Metadata store settings")
    ]
    registry: Annotated[
        RegistrySettings,
        Field(default_factory=RegistrySettings, description="Document ID registry settings"),
    ]

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept the usual level names in any case.

        Raises:
            ValueError: If the level is not one loguru understands
        """
        level = str(v).strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"ORGMETA_LOG_LEVEL must be a valid log level. Got: {v}")
        return level

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = str(v).strip().lower()
        if fmt not in {"text", "json"}:
            raise ValueError(f"ORGMETA_LOG_FORMAT must be 'text' or 'json'. Got: {v}")
        return fmt

    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def load_settings() -> AppSettings:
    """Build settings from the current environment."""
    return AppSettings()
