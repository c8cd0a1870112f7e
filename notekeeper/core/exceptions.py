"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class DataCorruptionError(ApplicationError):
    """Raised when persisted data cannot be mapped back to a known value."""

    def __init__(
        self,
        message: str = "Persisted data is corrupted",
        key: str | None = None,
        raw_value: str | None = None,
    ) -> None:
        self.key = key
        self.raw_value = raw_value
        super().__init__(message, code="DATA_CORRUPTED")


class WriteFailureError(ApplicationError):
    """Raised when the database rejects a write."""

    def __init__(self, message: str = "Database write failed") -> None:
        super().__init__(message, code="SYS_WRITE_FAILED")


class InvalidCommandError(ApplicationError):
    """Raised for an unrecognized command or enumerated value."""

    def __init__(self, message: str = "Invalid command") -> None:
        super().__init__(message, code="CMD_INVALID")


class ConfigurationError(ApplicationError):
    """Raised when a configuration file is invalid."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="SYS_CONFIG_ERROR")
