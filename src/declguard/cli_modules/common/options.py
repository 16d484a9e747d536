"""Reusable CLI options and arguments.

Options shared by several commands, using Typer's Annotated type pattern
for consistency across all commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

# =============================================================================
# Common Arguments
# =============================================================================


# Declaration file argument (existence checked in the command)
DeclarationFileArg = Annotated[
    Path,
    typer.Argument(
        help="Declaration JSON file produced by the documentation generator",
        exists=False,
        file_okay=True,
        dir_okay=False,
    ),
]


# =============================================================================
# Common Options
# =============================================================================


ConfigOpt = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Configuration file (YAML, JSON or TOML)"),
]

ExcludeRootOpt = Annotated[
    bool,
    typer.Option(
        "--exclude-root-node",
        help="Leave the root declaration's name out of qualified paths",
    ),
]

VerboseOpt = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show verbose trace output"),
]
