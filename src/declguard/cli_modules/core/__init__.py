"""Core CLI commands for declguard.

This package contains the CLI commands:
    - check: Compare two declaration files for breaking changes
    - flatten: List the qualified paths of a declaration file
"""

import typer

from declguard.cli_modules.core.check import check_cmd, run_check
from declguard.cli_modules.core.flatten import flatten_cmd


def register_commands(parent_app: typer.Typer) -> None:
    """Register core commands with the parent app.

    Args:
        parent_app: Parent Typer app to register commands to
    """
    parent_app.command(name="check")(check_cmd)
    parent_app.command(name="flatten")(flatten_cmd)


__all__ = [
    "register_commands",
    "check_cmd",
    "flatten_cmd",
    "run_check",
]
