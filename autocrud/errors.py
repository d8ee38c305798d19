# File: autocrud/errors.py
"""
AutoCRUD - Exception Hierarchy & Exit Codes
============================================

Every failure the generator can surface derives from ``AutoCrudError`` and
carries the process exit code the CLI should terminate with.

Not every condition is an exception:

    - An artifact that already exists is reported as a *skipped* file
      record, never raised.
    - A column whose suffix matches no media rule is a plain field.
"""

from __future__ import annotations

import logging
from typing import List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("autocrud.errors")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_SCHEMA_NOT_FOUND: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AutoCrudError(Exception):
    """Base exception for all generator errors."""

    exit_code: int = EXIT_INPUT_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message: str = message


class ConfigError(AutoCrudError):
    """Configuration file could not be loaded or failed validation."""

    exit_code = EXIT_INPUT_ERROR


class SchemaNotFound(AutoCrudError):
    """The backing table of a model does not exist in the schema source."""

    exit_code = EXIT_SCHEMA_NOT_FOUND

    def __init__(self, table_name: str, source: Optional[str] = None) -> None:
        self.table_name: str = table_name
        self.source: Optional[str] = source
        super().__init__(f"Table {table_name} does not exist.")


class InvalidModelSpec(AutoCrudError):
    """The model name or column list cannot be turned into artifacts."""

    exit_code = EXIT_VALIDATION_ERROR

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors: List[str] = list(errors or [])


class EmitFailure(AutoCrudError):
    """Base class for I/O faults while materialising an artifact."""

    exit_code = EXIT_EXPORT_ERROR
    verb: str = "Failed to emit"

    def __init__(self, path: str, reason: str) -> None:
        self.path: str = path
        self.reason: str = reason
        super().__init__(f"{self.verb} {path}: {reason}")


class DirectoryCreateFailure(EmitFailure):
    """A parent directory for an artifact could not be created."""

    verb = "Failed to create directory"


class FileWriteFailure(EmitFailure):
    """An artifact file could not be written or appended to."""

    verb = "Failed to write"


__all__: List[str] = [
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_SCHEMA_NOT_FOUND",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
    "AutoCrudError",
    "ConfigError",
    "SchemaNotFound",
    "InvalidModelSpec",
    "EmitFailure",
    "DirectoryCreateFailure",
    "FileWriteFailure",
]

logger.debug("autocrud.errors loaded.")
