"""
Centralized Logging Configuration.

Every module logs through structlog, routed into stdlib logging so the
console and the optional JSONL file share one pipeline. Settings come from
config/settings/logging.yaml, validated by LoggingSchema.

Each record carries timestamp, level, logger, event, func_name and lineno,
plus a `source` bound by the entry point (cli, shell) or the task queue
(tasks). Extra fields go in `extra={...}` or bound contextvars.

Usage:
    from notekeeper.core.logging import get_logger, setup_logging

    setup_logging()                                   # from logging.yaml
    setup_logging(level="DEBUG", format_type="console")

    logger = get_logger(__name__)
    logger.info("Note generated", extra={"note_id": 12})
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.typing import Processor

from notekeeper.core.config import find_project_root, load_yaml_config
from notekeeper.core.config_schema import FileHandlerSchema, LoggingSchema

VALID_SOURCES = frozenset({
    "cli",
    "shell",
    "store",
    "tasks",
    "internal",
    "unknown",
})
"""Recognized values of the `source` field. Always bound explicitly."""

QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite")

_logging_config: LoggingSchema | None = None


def _load_logging_config() -> LoggingSchema:
    """Read and validate logging.yaml once per process."""
    global _logging_config
    if _logging_config is None:
        _logging_config = LoggingSchema(**load_yaml_config("logging.yaml"))
    return _logging_config


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _formatter(renderer: Processor, processors: list[Processor]) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=processors,
    )


def _file_handler(config: FileHandlerSchema, formatter: logging.Formatter) -> logging.Handler:
    """Rotating JSONL handler; the path is relative to the project root."""
    log_path = find_project_root() / config.path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Arguments left as None take their value from logging.yaml. Calling this
    again replaces the handlers installed by the previous call.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'console' for human-readable output, 'json' otherwise
        enable_console: Log to stderr
        enable_file_logging: Log to the rotating JSONL file

    Raises:
        AttributeError: If level is not a logging level name
    """
    config = _load_logging_config()
    log_level = getattr(logging, (level or config.level).upper())
    console_format = format_type or config.format
    console_enabled = config.handlers.console.enabled if enable_console is None else enable_console
    file_enabled = config.handlers.file.enabled if enable_file_logging is None else enable_file_logging

    processors = _shared_processors()
    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = _formatter(structlog.processors.JSONRenderer(), processors)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if console_enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        if console_format == "console":
            console_handler.setFormatter(
                _formatter(structlog.dev.ConsoleRenderer(colors=True), processors)
            )
        else:
            console_handler.setFormatter(json_formatter)
        root_logger.addHandler(console_handler)

    if file_enabled:
        root_logger.addHandler(_file_handler(config.handlers.file, json_formatter))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message with an explicit source.

    Raises:
        AttributeError: If level is not a valid log level

    Example:
        log_with_source(logger, "store", "info", "Notes deleted", notes=10)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
