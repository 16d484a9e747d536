"""Compatibility issue data structures.

This module defines the types for representing detected differences
between two declaration surfaces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from declguard.declarations.nodes import SourceLocation


class IssueCategory(str, Enum):
    """Categories of detected differences."""

    REMOVED = "Removed"
    TYPE_NARROWED = "TypeNarrowed"
    VISIBILITY_REDUCED = "VisibilityReduced"
    REQUIRED_ADDED = "RequiredAdded"
    SIGNATURE_CHANGED = "SignatureChanged"
    ADDED = "Added"  # Informational

    @classmethod
    def from_string(cls, value: str) -> "IssueCategory":
        """Look up a category by value or member name, case-insensitively."""
        lowered = value.strip().lower()
        for category in cls:
            if lowered in (category.value.lower(), category.name.lower()):
                return category
        raise ValueError(f"Unknown issue category: {value!r}")


@dataclass(frozen=True)
class Issue:
    """A single detected difference.

    Attributes:
        path: Qualified path of the affected declaration.
        category: What kind of difference this is.
        old_value: Rendered value in the previous version.
        new_value: Rendered value in the current version.
        message: Human-readable description.
        breaking: Whether the difference breaks existing consumers.
        kind: Declaration kind tag, for reports.
        sources: Source locations of the affected declaration.
    """

    path: str
    category: IssueCategory
    old_value: str | None = None
    new_value: str | None = None
    message: str = ""
    breaking: bool = True
    kind: str = ""
    sources: tuple[SourceLocation, ...] = field(default=(), compare=False)

    def to_record(self) -> dict[str, Any]:
        """Convert to the flat issue record.

        The record shape is the same one ignore files use, so a list of
        records can be saved and fed back as ignore rules.
        """
        return {
            "path": self.path,
            "category": self.category.value,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "message": self.message,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary with every attribute."""
        return {
            **self.to_record(),
            "breaking": self.breaking,
            "kind": self.kind,
            "sources": [
                {"fileName": source.file_name, "line": source.line}
                for source in self.sources
            ],
        }

    @classmethod
    def from_record(cls, data: dict[str, Any]) -> "Issue":
        """Create from a flat issue record."""
        category = IssueCategory.from_string(str(data["category"]))
        return cls(
            path=str(data["path"]),
            category=category,
            old_value=data.get("oldValue", data.get("old_value")),
            new_value=data.get("newValue", data.get("new_value")),
            message=data.get("message", ""),
            breaking=data.get("breaking", category is not IssueCategory.ADDED),
        )

    def describe(self) -> str:
        """Describe the issue on one line."""
        text = f"{self.path}: {self.category.value}"
        if self.message:
            text = f"{text} - {self.message}"
        return text


@dataclass
class CheckSummary:
    """Summary of a compatibility check.

    Attributes:
        total_issues: Number of reported issues, informational included.
        breaking_issues: Number of reported breaking issues.
        suppressed_issues: Number of issues matched by ignore rules.
        added: Number of added declarations.
        by_category: Reported issues per category.
        old_nodes: Declarations in the previous version.
        new_nodes: Declarations in the current version.
    """

    total_issues: int = 0
    breaking_issues: int = 0
    suppressed_issues: int = 0
    added: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    old_nodes: int = 0
    new_nodes: int = 0

    @classmethod
    def from_issues(
        cls,
        issues: list[Issue],
        suppressed: list[Issue] | None = None,
        old_nodes: int = 0,
        new_nodes: int = 0,
    ) -> "CheckSummary":
        """Create summary from lists of issues."""
        summary = cls(
            total_issues=len(issues),
            suppressed_issues=len(suppressed or []),
            old_nodes=old_nodes,
            new_nodes=new_nodes,
        )

        for issue in issues:
            if issue.breaking:
                summary.breaking_issues += 1
            if issue.category is IssueCategory.ADDED:
                summary.added += 1

            category = issue.category.value
            summary.by_category[category] = summary.by_category.get(category, 0) + 1

        return summary

    @property
    def is_compatible(self) -> bool:
        return self.breaking_issues == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_issues": self.total_issues,
            "breaking_issues": self.breaking_issues,
            "suppressed_issues": self.suppressed_issues,
            "added": self.added,
            "by_category": dict(self.by_category),
            "old_nodes": self.old_nodes,
            "new_nodes": self.new_nodes,
            "is_compatible": self.is_compatible,
        }
