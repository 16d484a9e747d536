"""CLI modules for declguard.

    - common: Shared infrastructure (options, errors)
    - core: The ``check`` and ``flatten`` commands

Usage:
    from declguard.cli_modules import core

    app = typer.Typer()
    core.register_commands(app)
"""
