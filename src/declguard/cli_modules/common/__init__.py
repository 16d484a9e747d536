"""Common CLI infrastructure.

This package provides shared components for CLI commands:
    - options: Reusable CLI options and arguments
    - errors: CLI error handling
"""

from declguard.cli_modules.common.errors import (
    CLIError,
    ErrorCode,
    IncompatibleChangesError,
    MissingFileError,
    error_boundary,
    require_file,
    translate_error,
)
from declguard.cli_modules.common.options import (
    ConfigOpt,
    DeclarationFileArg,
    ExcludeRootOpt,
    VerboseOpt,
)

__all__ = [
    # Errors
    "CLIError",
    "ErrorCode",
    "IncompatibleChangesError",
    "MissingFileError",
    "error_boundary",
    "require_file",
    "translate_error",
    # Options
    "ConfigOpt",
    "DeclarationFileArg",
    "ExcludeRootOpt",
    "VerboseOpt",
]
