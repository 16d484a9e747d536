"""Protocol definitions for compatibility checking.

This module defines the interface the checker uses to hand its findings
to whatever reports them.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from declguard.compat.issues import Issue


@runtime_checkable
class IssueSink(Protocol):
    """Protocol for receivers of detected issues."""

    @abstractmethod
    def issue(self, issue: "Issue") -> None:
        """Accept one reported issue.

        Args:
            issue: Issue that was not suppressed by an ignore rule.
        """
        ...

    @abstractmethod
    def verbose(self, line: str) -> None:
        """Accept one verbose trace line.

        Args:
            line: Free-text diagnostic (non-breaking change, suppressed
                issue, node counts).
        """
        ...
