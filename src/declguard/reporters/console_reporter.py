"""Console/Terminal format reporter.

This module provides a reporter that renders compatibility issues for
humans using Rich for formatting. When written to a file the output is
plain text.
"""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from declguard.compat.issues import Issue, IssueCategory
from declguard.reporters.base import IssueReporter, RenderError, ReporterConfig


@dataclass
class ConsoleReporterConfig(ReporterConfig):
    """Configuration for console reporter.

    Attributes:
        color: Whether to use colors in output.
        width: Maximum width of output (None for auto).
        show_header: Whether to show the report header.
        show_summary: Whether to show the summary section.
        compact: One line per issue instead of a table.
        category_colors: Color mapping for issue categories.
    """

    color: bool = True
    width: int | None = None
    show_header: bool = True
    show_summary: bool = True
    compact: bool = False
    category_colors: dict[str, str] | None = None

    def get_category_color(self, category: IssueCategory) -> str:
        default_colors = {
            IssueCategory.REMOVED.value: "bold red",
            IssueCategory.TYPE_NARROWED.value: "red",
            IssueCategory.VISIBILITY_REDUCED.value: "red",
            IssueCategory.REQUIRED_ADDED.value: "red",
            IssueCategory.SIGNATURE_CHANGED.value: "yellow",
            IssueCategory.ADDED.value: "green",
        }

        colors = self.category_colors or default_colors
        return colors.get(category.value, "white")


class ConsoleReporter(IssueReporter[ConsoleReporterConfig]):
    """Console format reporter for compatibility issues.

    Example:
        >>> reporter = ConsoleReporter(color=True)
        >>> checker.check(old_nodes, new_nodes, sink=reporter)
        >>> reporter.print()
    """

    name = "console"
    file_extension = ".txt"

    @classmethod
    def _default_config(cls) -> ConsoleReporterConfig:
        return ConsoleReporterConfig()

    def _create_console(self, capture: bool = True) -> Console:
        return Console(
            force_terminal=False if capture or not self._config.color else None,
            no_color=not self._config.color,
            width=self._config.width or (120 if capture else None),
            record=capture,
            file=StringIO() if capture else None,
        )

    def _render_header(self, console: Console) -> None:
        passed = self.count_of_issues == 0
        status_style = "green" if passed else "red"
        status_text = "COMPATIBLE" if passed else "BREAKING CHANGES FOUND"

        header_text = Text()
        header_text.append(f"{self._config.title}\n", style="bold")
        header_text.append("Status: ", style="dim")
        header_text.append(status_text, style=f"bold {status_style}")

        console.print(Panel(header_text, border_style="blue"))

    def _render_summary(self, console: Console) -> None:
        summary = self.summary()

        table = Table(title="Summary", show_header=False, box=None)
        table.add_column("Metric", style="dim")
        table.add_column("Value", style="bold")

        table.add_row("Total Issues", f"{summary.total_issues:,}")
        table.add_row("Breaking Issues", f"{summary.breaking_issues:,}")
        for category, count in sorted(summary.by_category.items()):
            table.add_row(f"  {category}", f"{count:,}")

        console.print()
        console.print(table)

    def _location(self, issue: Issue) -> str:
        source = self.source_of(issue)
        return f"{source} " if source else ""

    def _render_issues_table(self, console: Console) -> None:
        issues = self.visible_issues()

        if not issues:
            console.print()
            console.print("[green]✓ No compatibility issues found[/green]")
            return

        table = Table(title="Issues", show_header=True, header_style="bold")
        table.add_column("Path", style="cyan")
        table.add_column("Category")
        table.add_column("Change")
        table.add_column("Message")
        if any(issue.sources for issue in issues):
            table.add_column("Source", style="dim")
            with_source = True
        else:
            with_source = False

        for issue in issues:
            style = self._config.get_category_color(issue.category)
            change = f"{issue.old_value or '-'} → {issue.new_value or '-'}"
            row = [
                escape(issue.path or "<root>"),
                f"[{style}]{issue.category.value}[/{style}]",
                escape(change),
                escape(issue.message or "-"),
            ]
            if with_source:
                row.append(escape(self.source_of(issue) or "-"))
            table.add_row(*row)

        console.print()
        console.print(table)

    def _render_compact(self, console: Console) -> None:
        for issue in self.visible_issues():
            style = self._config.get_category_color(issue.category)
            marker = "✗" if issue.breaking else "+"
            console.print(
                f"[{style}]{marker}[/{style}] {escape(self._location(issue))}"
                f"[bold]{escape(issue.path)}[/bold]: {issue.category.value}"
                + (f" - {escape(issue.message)}" if issue.message else ""),
                highlight=False,
            )

    def _render_traces(self, console: Console) -> None:
        if not self._traces:
            return
        console.print()
        console.print("[dim]Verbose output:[/dim]")
        for line in self._traces:
            console.print(f"[dim]  {escape(line)}[/dim]", highlight=False)

    def _render_all(self, console: Console) -> None:
        if self._config.compact:
            self._render_compact(console)
        else:
            if self._config.show_header:
                self._render_header(console)
            if self._config.show_summary:
                self._render_summary(console)
            self._render_issues_table(console)

        self._render_traces(console)
        console.print()

    def render(self) -> str:
        """Render collected issues as plain text.

        Raises:
            RenderError: If rendering fails.
        """
        try:
            console = self._create_console(capture=True)
            self._render_all(console)
            return console.export_text(clear=True)
        except Exception as e:
            raise RenderError(f"Failed to render console output: {e}") from e

    def print(self) -> None:
        """Print collected issues directly to the terminal."""
        self._render_all(self._create_console(capture=False))
