"""Issue reporters.

Reporters are issue sinks: the checker hands them every reported issue and
verbose trace line, and they render the run for people (console) or for
tools (flat JSON, which doubles as an ignore file).

Example:
    from declguard.reporters import ConsoleReporter, FlatJSONReporter, CompositeSink

    console = ConsoleReporter(verbose=True)
    flat = FlatJSONReporter(output_path="issues.json")
    checker.check(old_nodes, new_nodes, sink=CompositeSink([console, flat]))

    console.print()
    flat.write()
"""

from declguard.reporters.base import (
    CollectingSink,
    CompositeSink,
    IssueReporter,
    RenderError,
    ReporterConfig,
    ReporterError,
    WriteError,
)
from declguard.reporters.console_reporter import ConsoleReporter, ConsoleReporterConfig
from declguard.reporters.json_reporter import FlatJSONReporter, FlatJSONReporterConfig

__all__ = [
    # Base
    "CollectingSink",
    "CompositeSink",
    "IssueReporter",
    "RenderError",
    "ReporterConfig",
    "ReporterError",
    "WriteError",
    # Console
    "ConsoleReporter",
    "ConsoleReporterConfig",
    # JSON
    "FlatJSONReporter",
    "FlatJSONReporterConfig",
]
