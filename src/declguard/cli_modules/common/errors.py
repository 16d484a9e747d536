"""CLI error handling utilities.

This module provides standardized error handling for CLI commands. Library
errors are translated into :class:`CLIError` instances carrying an exit
code and a hint, and :func:`error_boundary` prints them and exits.
"""

from __future__ import annotations

import functools
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, TypeVar

import typer

from declguard.compat.ignore import IgnoreRuleError
from declguard.config import ConfigError, ConfigNotFoundError, ConfigParseError
from declguard.declarations.loader import DeclarationLoadError
from declguard.errors import DeclguardError
from declguard.reporters.base import ReporterError

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================


class ErrorCode(Enum):
    """Standard CLI error codes."""

    # General errors (1-9)
    GENERAL_ERROR = 1
    USAGE_ERROR = 2

    # Compatibility result (3)
    INCOMPATIBLE_CHANGES = 3

    # File errors (10-19)
    FILE_NOT_FOUND = 10
    FILE_NOT_READABLE = 11
    FILE_NOT_WRITABLE = 12
    INVALID_FILE_FORMAT = 13

    # Input errors (20-29)
    DECLARATIONS_INVALID = 20
    IGNORE_RULES_INVALID = 21

    # Configuration errors (30-39)
    CONFIG_NOT_FOUND = 30
    CONFIG_INVALID = 31
    CONFIG_PARSE_ERROR = 32


# =============================================================================
# Exception Classes
# =============================================================================


class CLIError(Exception):
    """Base exception for CLI errors.

    Attributes:
        message: Error message
        code: Error code
        details: Additional error details
        hint: Helpful hint for resolution
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.GENERAL_ERROR,
        details: dict[str, Any] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.hint = hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        return "\n".join(parts)


class MissingFileError(CLIError):
    """Error when an input file is not found."""

    def __init__(self, path: Path | str, description: str = "File", hint: str | None = None) -> None:
        super().__init__(
            message=f"{description} not found: {path}",
            code=ErrorCode.FILE_NOT_FOUND,
            details={"path": str(path)},
            hint=hint or "Check that the file exists and the path is correct.",
        )
        self.path = path


class IncompatibleChangesError(CLIError):
    """Raised when a run found breaking changes that are not ignored."""

    def __init__(self, count: int, flat_out: Path | str | None = None) -> None:
        hint = (
            f"Review {flat_out}; records copied into the ignore file are suppressed on the next run."
            if flat_out
            else "Add reviewed changes to an ignore file passed with --ignore."
        )
        super().__init__(
            message=f"Found {count} incompatible change{'s' if count != 1 else ''}",
            code=ErrorCode.INCOMPATIBLE_CHANGES,
            details={"count": count},
            hint=hint,
        )
        self.count = count


def translate_error(error: Exception) -> CLIError:
    """Map a library error to a CLI error."""
    if isinstance(error, CLIError):
        return error
    if isinstance(error, ReporterError):
        return CLIError(str(error), code=ErrorCode.FILE_NOT_WRITABLE)
    if isinstance(error, DeclguardError) and isinstance(error.__cause__, OSError):
        return CLIError(
            str(error),
            code=ErrorCode.FILE_NOT_READABLE,
            hint="Check that the path is a regular file you are allowed to read.",
        )
    if isinstance(error, (DeclarationLoadError, IgnoreRuleError)) and isinstance(
        error.__cause__, json.JSONDecodeError
    ):
        return CLIError(str(error), code=ErrorCode.INVALID_FILE_FORMAT, hint="The file is not valid JSON.")
    if isinstance(error, DeclarationLoadError):
        return CLIError(
            str(error),
            code=ErrorCode.DECLARATIONS_INVALID,
            details={"path": str(error.path) if error.path else None},
            hint="Declaration files must be the JSON output of the documentation generator.",
        )
    if isinstance(error, IgnoreRuleError):
        return CLIError(
            str(error),
            code=ErrorCode.IGNORE_RULES_INVALID,
            hint="An ignore file is a JSON array of issue records, like the --flat-out output.",
        )
    if isinstance(error, ConfigNotFoundError):
        return CLIError(str(error), code=ErrorCode.CONFIG_NOT_FOUND, hint="Check the --config path.")
    if isinstance(error, ConfigParseError):
        return CLIError(
            str(error),
            code=ErrorCode.CONFIG_PARSE_ERROR,
            hint="Configuration files are YAML, JSON or TOML mappings.",
        )
    if isinstance(error, ConfigError):
        return CLIError(
            str(error),
            code=ErrorCode.CONFIG_INVALID,
            hint="Check the configuration file format and values.",
        )
    return CLIError(str(error))


# =============================================================================
# Decorator
# =============================================================================


F = TypeVar("F", bound=Callable[..., Any])


def error_boundary(func: F) -> F:
    """Simple error boundary decorator.

    Catches all exceptions and converts them to CLI errors.

    Args:
        func: Function to wrap

    Returns:
        Wrapped function
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except (CLIError, DeclguardError) as e:
            error = translate_error(e)
        except Exception as e:
            logger.exception("Unexpected error")
            error = translate_error(e)

        typer.echo(typer.style(f"Error: {error.message}", fg="red"), err=True)
        if error.hint:
            typer.echo(typer.style(f"Hint: {error.hint}", fg="yellow"), err=True)
        raise typer.Exit(error.code.value)

    return wrapper  # type: ignore


# =============================================================================
# Validation Helpers
# =============================================================================


def require_file(path: Path, description: str = "File") -> Path:
    """Require that a file exists.

    Args:
        path: Path to check
        description: Description for error message

    Returns:
        The validated path

    Raises:
        MissingFileError: If file doesn't exist
    """
    if not path.is_file():
        raise MissingFileError(path, description)
    return path
