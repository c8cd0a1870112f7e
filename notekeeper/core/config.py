"""
Configuration Management.

Loads overrides from the environment (and config/.env) and settings from
config/settings/*.yaml. No hardcoded values in code: all configuration
comes from these sources.

Environment (.env or NOTEKEEPER_* variables):
    NOTEKEEPER_DATA_DIR - directory holding the database and preference files

Settings (YAML):
    application.yaml  - App identity
    database.yaml     - Database file, echo, initial population size
    preferences.yaml  - Preference file and sort order key
    notes.yaml        - Random note generation
    logging.yaml      - Logging configuration
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from notekeeper.core.config_schema import (
    ApplicationSchema,
    DatabaseSchema,
    LoggingSchema,
    NotesSchema,
    PreferencesSchema,
)
from notekeeper.core.exceptions import ConfigurationError


def find_project_root() -> Path:
    """Walk up from the working directory to the `.project_root` marker."""
    for candidate in (Path.cwd(), *Path.cwd().parents):
        if (candidate / ".project_root").exists():
            return candidate
    raise RuntimeError("Project root not found. Ensure .project_root file exists.")


def validate_project_root() -> Path:
    """
    Locate the project root or exit with a readable message.

    Entry points call this before touching any configuration.
    """
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def settings_file(filename: str) -> Path:
    return find_project_root() / "config" / "settings" / filename


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Parse one file of config/settings/. An empty file reads as {}."""
    path = settings_file(filename)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


class Settings(BaseSettings):
    """NOTEKEEPER_* environment overrides, also read from config/.env."""

    data_dir: str = "data"

    model_config = SettingsConfigDict(
        env_prefix="NOTEKEEPER_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def _load_validated(schema_cls: type[BaseModel], filename: str) -> Any:
    """Validate one settings file, reporting failures as ConfigurationError."""
    try:
        return schema_cls(**load_yaml_config(filename))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {filename}:\n{e}") from e


class AppConfig:
    """
    Validated contents of config/settings/.

    One attribute per settings file, named after the file. Any invalid file
    fails construction, so a running app never holds partial configuration.
    """

    _sections: dict[str, type[BaseModel]] = {
        "application": ApplicationSchema,
        "database": DatabaseSchema,
        "preferences": PreferencesSchema,
        "notes": NotesSchema,
        "logging": LoggingSchema,
    }

    application: ApplicationSchema
    database: DatabaseSchema
    preferences: PreferencesSchema
    notes: NotesSchema
    logging: LoggingSchema

    def __init__(self) -> None:
        for section, schema_cls in self._sections.items():
            setattr(self, section, _load_validated(schema_cls, f"{section}.yaml"))


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_data_dir() -> Path:
    """
    Resolve the data directory.

    Relative paths are resolved against the project root.
    """
    data_dir = Path(get_settings().data_dir)
    if not data_dir.is_absolute():
        data_dir = find_project_root() / data_dir
    return data_dir


def get_database_path() -> Path:
    """Path of the SQLite database file."""
    return get_data_dir() / get_app_config().database.path


def get_database_url(path: Path | None = None) -> str:
    """
    Construct the async SQLAlchemy URL for the notes database.

    Args:
        path: Database file, defaults to the configured one.

    Returns:
        Database connection URL string.
    """
    db_path = path if path is not None else get_database_path()
    return f"sqlite+aiosqlite:///{db_path}"


def get_preferences_path() -> Path:
    """Path of the YAML preference file."""
    return get_data_dir() / get_app_config().preferences.path
