"""Flat JSON reporter.

This module provides a reporter that writes issues as a JSON array of flat
issue records. The output uses the same shape as ignore files, so a report
can be reviewed and committed as the ignore list of the next release.
No external dependencies required.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from declguard.reporters.base import IssueReporter, RenderError, ReporterConfig


@dataclass
class FlatJSONReporterConfig(ReporterConfig):
    """Configuration for the flat JSON reporter.

    Attributes:
        indent: Number of spaces for indentation (None for compact).
        ensure_ascii: Whether to escape non-ASCII characters.
        include_sources: Whether to add a ``source`` field to each record.
    """

    include_informational: bool = False
    indent: int | None = 2
    ensure_ascii: bool = False
    include_sources: bool = False


class FlatJSONReporter(IssueReporter[FlatJSONReporterConfig]):
    """Flat JSON reporter.

    By default only breaking issues are written.

    Example:
        >>> reporter = FlatJSONReporter(output_path="issues.json")
        >>> checker.check(old_nodes, new_nodes, sink=reporter)
        >>> reporter.write()
    """

    name = "json"
    file_extension = ".json"

    @classmethod
    def _default_config(cls) -> FlatJSONReporterConfig:
        return FlatJSONReporterConfig()

    def records(self) -> list[dict[str, Any]]:
        """Build the issue records to serialize."""
        records = []
        for issue in self.visible_issues():
            record = issue.to_record()
            if self._config.include_sources:
                record["source"] = self.source_of(issue)
            records.append(record)
        return records

    def render(self) -> str:
        """Render issues as a JSON array.

        Raises:
            RenderError: If rendering fails.
        """
        try:
            return json.dumps(
                self.records(),
                indent=self._config.indent,
                ensure_ascii=self._config.ensure_ascii,
            )
        except (TypeError, ValueError) as e:
            raise RenderError(f"Failed to render JSON: {e}") from e
