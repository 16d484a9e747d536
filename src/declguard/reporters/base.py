"""Base classes for issue reporters.

Reporters are the issue sinks of a compatibility run. They receive issues
and verbose trace lines while the checker runs, keep a count of breaking
issues, and render what they received to a human-readable or
machine-readable format.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Generic, Iterable, TypeVar

from declguard.compat.issues import CheckSummary, Issue
from declguard.errors import DeclguardError


# =============================================================================
# Exceptions
# =============================================================================


class ReporterError(DeclguardError):
    """Base exception for all reporter-related errors."""

    pass


class RenderError(ReporterError):
    """Raised when rendering a report fails."""

    pass


class WriteError(ReporterError):
    """Raised when writing a report to file fails."""

    pass


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class ReporterConfig:
    """Base configuration for all reporters.

    Attributes:
        output_path: Optional path to write the report to.
        title: Title for the report.
        verbose: Whether to keep verbose trace lines.
        include_informational: Whether to include non-breaking issues.
        map_source_dir: Directory prefixed to source file names.
    """

    output_path: str | Path | None = None
    title: str = "Declaration Compatibility Report"
    verbose: bool = False
    include_informational: bool = True
    map_source_dir: str | None = None

    def get_output_path(self) -> Path | None:
        """Get the output path as a Path object."""
        if self.output_path is None:
            return None
        return Path(self.output_path)


ConfigT = TypeVar("ConfigT", bound=ReporterConfig)


# =============================================================================
# Simple Sinks
# =============================================================================


class CollectingSink:
    """Issue sink that keeps everything it receives in memory."""

    def __init__(self) -> None:
        self.issues: list[Issue] = []
        self.lines: list[str] = []

    def issue(self, issue: Issue) -> None:
        self.issues.append(issue)

    def verbose(self, line: str) -> None:
        self.lines.append(line)

    @property
    def count_of_issues(self) -> int:
        return sum(1 for issue in self.issues if issue.breaking)


class CompositeSink:
    """Issue sink that forwards to several sinks in order."""

    def __init__(self, sinks: Iterable[Any]) -> None:
        self._sinks = list(sinks)

    def issue(self, issue: Issue) -> None:
        for sink in self._sinks:
            sink.issue(issue)

    def verbose(self, line: str) -> None:
        for sink in self._sinks:
            sink.verbose(line)


# =============================================================================
# Abstract Base Reporter
# =============================================================================


class IssueReporter(ABC, Generic[ConfigT]):
    """Abstract base class for reporters.

    A reporter is an issue sink: pass it to the checker, then render or
    write what it collected.

    Example:
        >>> reporter = ConsoleReporter(verbose=True)
        >>> checker.check(old_nodes, new_nodes, sink=reporter)
        >>> print(reporter.render())
    """

    name: str = "base"
    file_extension: str = ".txt"

    def __init__(self, config: ConfigT | None = None, **kwargs: Any) -> None:
        """Initialize the reporter with optional configuration.

        Args:
            config: Reporter configuration. If None, uses default configuration.
            **kwargs: Additional configuration options to override.
        """
        self._config = config or self._default_config()

        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)

        self._issues: list[Issue] = []
        self._traces: list[str] = []

    @classmethod
    @abstractmethod
    def _default_config(cls) -> ConfigT:
        """Create default configuration for this reporter type."""
        pass

    @property
    def config(self) -> ConfigT:
        return self._config

    # -------------------------------------------------------------------------
    # Sink interface
    # -------------------------------------------------------------------------

    def issue(self, issue: Issue) -> None:
        """Accept one reported issue."""
        self._issues.append(issue)

    def verbose(self, line: str) -> None:
        """Accept one verbose trace line; kept only in verbose mode."""
        if self._config.verbose:
            self._traces.append(line)

    @property
    def issues(self) -> list[Issue]:
        return list(self._issues)

    @property
    def traces(self) -> list[str]:
        return list(self._traces)

    @property
    def count_of_issues(self) -> int:
        """Number of breaking issues received so far."""
        return sum(1 for issue in self._issues if issue.breaking)

    def visible_issues(self) -> list[Issue]:
        """Issues this reporter renders, according to its configuration."""
        if self._config.include_informational:
            return list(self._issues)
        return [issue for issue in self._issues if issue.breaking]

    def summary(self) -> CheckSummary:
        return CheckSummary.from_issues(self._issues)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    @abstractmethod
    def render(self) -> str:
        """Render everything received so far.

        Raises:
            RenderError: If rendering fails.
        """
        pass

    def write(self, path: str | Path | None = None) -> Path:
        """Write the rendered report to a file.

        Args:
            path: Optional path to write to. Uses config.output_path if not specified.

        Returns:
            The path where the report was written.

        Raises:
            WriteError: If no path is specified or writing fails.
        """
        output_path = Path(path) if path else self._config.get_output_path()

        if output_path is None:
            raise WriteError(
                "No output path specified. Either pass a path argument "
                "or set output_path in the reporter configuration."
            )

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            content = self.render()
            output_path.write_text(content, encoding="utf-8")
            return output_path

        except OSError as e:
            raise WriteError(f"Failed to write report to {output_path}: {e}") from e

    def source_of(self, issue: Issue) -> str | None:
        """Render the first source location of an issue, if known."""
        if not issue.sources:
            return None
        return issue.sources[0].render(self._config.map_source_dir)
