"""
Schemas for config/settings/*.yaml.

AppConfig validates every settings file against the model of the same name,
so a typo or a bad value stops the app at startup with the offending file
and key in the message.

    application.yaml  -> ApplicationSchema
    database.yaml     -> DatabaseSchema
    preferences.yaml  -> PreferencesSchema
    notes.yaml        -> NotesSchema
    logging.yaml      -> LoggingSchema
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class ApplicationSchema(_Section):
    name: str
    version: str
    description: str
    environment: str


class DatabaseSchema(_Section):
    """SQLite file name inside the data directory, and first-run population."""

    path: str
    echo: bool = False
    seed_count: int = Field(default=10, ge=0)


class PreferencesSchema(_Section):
    path: str
    sort_order_key: str = "sort_order"


class NotesSchema(_Section):
    """Random note generation: share of notes with a due date, and how far ahead."""

    schedule_probability: float = Field(default=0.7, ge=0.0, le=1.0)
    schedule_window_days: int = Field(default=14, ge=1)


class ConsoleHandlerSchema(_Section):
    enabled: bool


class FileHandlerSchema(_Section):
    enabled: bool
    path: str
    max_bytes: int = Field(gt=0)
    backup_count: int = Field(ge=0)


class HandlersSchema(_Section):
    console: ConsoleHandlerSchema
    file: FileHandlerSchema


class LoggingSchema(_Section):
    level: str
    format: Literal["console", "json"]
    handlers: HandlersSchema
