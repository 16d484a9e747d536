"""Command-line interface for declguard."""

from typing import Annotated, Optional

import typer

from declguard import __version__
from declguard.cli_modules import core

app = typer.Typer(
    name="declguard",
    help="Detect backward-incompatible changes between two versions of a library's declarations",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"declguard {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit",
        ),
    ] = None,
) -> None:
    """Declaration compatibility checker."""


core.register_commands(app)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
