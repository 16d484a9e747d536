"""Check command - Compare two declaration files.

This module implements the `declguard check` command, the CI gate: it
compares the declarations of the previous release with those of the
current sources and exits non-zero when breaking changes were found that
no ignore rule allows.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from declguard.api import compare_files
from declguard.cli_modules.common.errors import (
    CLIError,
    ErrorCode,
    IncompatibleChangesError,
    error_boundary,
    require_file,
)
from declguard.cli_modules.common.options import ConfigOpt, ExcludeRootOpt, VerboseOpt
from declguard.config import RunConfig, load_run_config
from declguard.logging import configure_logging
from declguard.reporters import CompositeSink, ConsoleReporter, FlatJSONReporter

logger = logging.getLogger(__name__)


def _remove_stale_output(*paths: str | None) -> None:
    for path in paths:
        if path and Path(path).is_file():
            logger.debug("Removing previous output %s", path)
            Path(path).unlink()


def run_check(config: RunConfig) -> int:
    """Run a check for a resolved configuration.

    Returns:
        The number of breaking issues that were not ignored.

    Raises:
        CLIError: If a declaration or ignore file is missing.
    """
    if not config.previous or not config.next:
        raise CLIError(
            "Both the previous and the next declaration files are required",
            code=ErrorCode.USAGE_ERROR,
            hint="Pass --previous and --next, or set them in the configuration file.",
        )

    previous = require_file(Path(config.previous), "Previous declaration file")
    current = require_file(Path(config.next), "Next declaration file")
    ignore = require_file(Path(config.ignore), "Ignore file") if config.ignore else None

    _remove_stale_output(config.out, config.flat_out)

    console = ConsoleReporter(
        verbose=config.verbose,
        map_source_dir=config.map_source_dir,
        color=config.out is None,
    )
    sinks: list = [console]

    flat = None
    if config.flat_out:
        flat = FlatJSONReporter(output_path=config.flat_out)
        sinks.append(flat)

    result = compare_files(
        previous,
        current,
        ignore=ignore,
        exclude_root_node=config.exclude_root_node,
        sink=CompositeSink(sinks),
    )

    if config.out:
        written = console.write(config.out)
        typer.echo(f"Report written to {written}")
    else:
        console.print()

    if flat is not None:
        written = flat.write()
        typer.echo(f"Flat issue list written to {written}")

    return result.breaking_count


@error_boundary
def check_cmd(
    previous: Annotated[
        Optional[Path],
        typer.Option("--previous", "-p", help="Declaration file of the previous release"),
    ] = None,
    next: Annotated[
        Optional[Path],
        typer.Option("--next", "-n", help="Declaration file of the current sources"),
    ] = None,
    config: ConfigOpt = None,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Write the report to this file instead of the console"),
    ] = None,
    flat_out: Annotated[
        Optional[Path],
        typer.Option("--flat-out", "-f", help="Write breaking issues as a flat JSON array"),
    ] = None,
    ignore: Annotated[
        Optional[Path],
        typer.Option("--ignore", "-i", help="JSON file of issues to ignore"),
    ] = None,
    map_source_dir: Annotated[
        Optional[str],
        typer.Option("--map-source-dir", "-m", help="Prefix source file names in the report"),
    ] = None,
    exclude_root_node: ExcludeRootOpt = False,
    verbose: VerboseOpt = False,
) -> None:
    """Check the current declarations for backward-incompatible changes.

    Options given on the command line override values from the
    configuration file and DECLGUARD_* environment variables.

    Examples:
        declguard check -p api-1.0.json -n api.json
        declguard check -p api-1.0.json -n api.json -i ignore.json -f issues.json
        declguard check -c declguard.yaml --verbose
    """
    overrides = {
        "previous": str(previous) if previous else None,
        "next": str(next) if next else None,
        "out": str(out) if out else None,
        "flat_out": str(flat_out) if flat_out else None,
        "ignore": str(ignore) if ignore else None,
        "map_source_dir": map_source_dir,
        "exclude_root_node": True if exclude_root_node else None,
        "verbose": True if verbose else None,
    }
    run_config = load_run_config(config_path=config, overrides=overrides)
    configure_logging(
        level="DEBUG" if run_config.verbose else run_config.log_level,
        format=run_config.log_format,
    )

    breaking = run_check(run_config)
    if breaking:
        raise IncompatibleChangesError(breaking, run_config.flat_out)
