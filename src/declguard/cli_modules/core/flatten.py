"""Flatten command - List the qualified paths of a declaration file.

This module implements the `declguard flatten` command. Its output shows
the exact paths the checker reports, which is what ignore rules match.
"""

from __future__ import annotations

from typing import Annotated

import typer

from declguard.cli_modules.common.errors import error_boundary, require_file
from declguard.cli_modules.common.options import DeclarationFileArg, ExcludeRootOpt
from declguard.declarations import flatten, load_declarations


@error_boundary
def flatten_cmd(
    file: DeclarationFileArg,
    exclude_root_node: ExcludeRootOpt = False,
    kinds: Annotated[
        bool,
        typer.Option("--kinds", "-k", help="Show the declaration kind next to each path"),
    ] = False,
    addresses: Annotated[
        bool,
        typer.Option("--addresses", "-a", help="Show match addresses (with overload ordinals)"),
    ] = False,
) -> None:
    """Print the qualified path of every declaration in a file.

    Examples:
        declguard flatten api.json
        declguard flatten api.json --exclude-root-node --kinds
    """
    require_file(file, "Declaration file")
    tree = load_declarations(file)

    for flat in flatten(tree, "" if exclude_root_node else None):
        path = flat.address if addresses else flat.qualified_path
        if not path:
            continue
        if kinds:
            typer.echo(f"{path}\t{flat.node.display_kind}")
        else:
            typer.echo(path)
