"""Configuration management for the bundle-backup tool."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .errors import ConfigurationError
from .schedule_checker import ScheduleChecker

CONFIG_ENV_VAR = "BUNDLE_BACKUP_CONFIG"
DEFAULT_CONFIG_DIR = "~/.config/bundle-backup"
DEFAULT_CONFIG_PATH = f"{DEFAULT_CONFIG_DIR}/config.yaml"


class AppConfig(BaseModel):
    """Main application configuration."""

    registry_file: str = Field(
        default=f"{DEFAULT_CONFIG_DIR}/projects.json",
        description="Path to the JSON store holding the registered projects",
        validate_default=True,
    )
    default_backup_root: Optional[str] = Field(
        default=None,
        description="Backup root written into a newly created project store",
    )
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: str = Field(
        default="~/.local/state/bundle-backup/bundle_backup.log",
        description="Path to log file",
        validate_default=True,
    )
    schedule: Optional[str] = Field(
        default=None,
        description="Cron-like schedule: 'minute hour day-of-month month day-of-week'",
    )
    bundle_timeout: int = Field(
        default=3600, ge=1, description="Seconds allowed for a single git bundle run"
    )

    @field_validator("registry_file", "log_file")
    @classmethod
    def expand_user(cls, v: str) -> str:
        """Expand ``~`` in path settings."""
        return os.path.expanduser(v)

    @field_validator("default_backup_root")
    @classmethod
    def validate_default_backup_root(cls, v: Optional[str]) -> Optional[str]:
        """Validate the backup root path."""
        if v is None:
            return v
        v = os.path.expanduser(v)
        if not v.startswith("/"):
            raise ValueError("default_backup_root must be an absolute path")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v_upper

    @field_validator("schedule")
    @classmethod
    def validate_schedule(cls, v: Optional[str]) -> Optional[str]:
        """Validate the cron schedule format."""
        if v is None or not v.strip():
            return None

        schedule_parts = v.strip().split()
        if len(schedule_parts) != 5:
            raise ValueError(
                "Schedule must have 5 fields: 'minute hour day-of-month month day-of-week'"
            )

        if not ScheduleChecker.validate_schedule_format(v):
            raise ValueError(f"Invalid cron schedule format: {v!r}")
        return v


def resolve_config_path(config_path: Optional[str] = None) -> tuple[Path, bool]:
    """
    Work out which config file to read.

    Returns:
        Tuple of (path, explicit) where explicit is False only for the
        built-in default location
    """
    if config_path:
        return Path(os.path.expanduser(config_path)), True
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(os.path.expanduser(from_env)), True
    return Path(os.path.expanduser(DEFAULT_CONFIG_PATH)), False


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Load and validate configuration from a YAML file."""
    config_file, explicit = resolve_config_path(config_path)

    if not config_file.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        return AppConfig()

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML format in config file: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {config_file}: {e}") from e

    if config_data is None:
        return AppConfig()
    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Config file {config_file} must contain a mapping")

    try:
        return AppConfig(**config_data)
    except ValueError as e:
        raise ConfigurationError(f"Configuration validation error: {e}") from e
