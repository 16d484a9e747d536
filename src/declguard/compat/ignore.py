"""Ignore rules.

An ignore rule is an allow-listed issue record. Its ``path`` is a pattern
over qualified paths:

- ``*`` as a whole segment matches exactly one segment.
- ``**`` as a whole segment matches one or more segments.
- Inside a segment, ``*``, ``?`` and ``[...]`` are glob wildcards.

``category``, ``oldValue`` and ``newValue`` must match exactly when the rule
sets them. Fields the rule leaves out (or sets to null) match anything.

Example:
    rules = parse_ignore_rules([
        {"path": "Widget.size", "category": "RequiredAdded"},
        {"path": "internal.**"},
    ])
    matcher = IgnoreRuleMatcher(rules)
    matcher.is_suppressed(issue)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any, Iterable

from declguard.compat.issues import Issue, IssueCategory
from declguard.declarations.flatten import PATH_SEPARATOR
from declguard.errors import DeclguardError

logger = logging.getLogger(__name__)

SINGLE_SEGMENT = "*"
MULTI_SEGMENT = "**"


class IgnoreRuleError(DeclguardError):
    """Raised when ignore rules cannot be read or parsed."""

    pass


@dataclass(frozen=True)
class IgnoreRule:
    """One allow-listed issue.

    Attributes:
        path: Qualified path pattern.
        category: Category the issue must have, or None for any.
        old_value: Old value the issue must have, or None for any.
        new_value: New value the issue must have, or None for any.
    """

    path: str
    category: IssueCategory | None = None
    old_value: str | None = None
    new_value: str | None = None

    @property
    def segments(self) -> tuple[str, ...]:
        return split_path(self.path)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IgnoreRule":
        """Create a rule from an ignore record.

        Accepts both the issue-record keys (``oldValue``) and snake_case.

        Raises:
            IgnoreRuleError: If the record has no path or an unknown category.
        """
        if "path" not in data or data["path"] is None:
            raise IgnoreRuleError(f"Ignore rule has no path: {data!r}")

        category = data.get("category")
        try:
            parsed_category = IssueCategory.from_string(str(category)) if category else None
        except ValueError as e:
            raise IgnoreRuleError(str(e)) from e

        old_value = data.get("oldValue", data.get("old_value"))
        new_value = data.get("newValue", data.get("new_value"))
        return cls(
            path=str(data["path"]),
            category=parsed_category,
            old_value=None if old_value is None else str(old_value),
            new_value=None if new_value is None else str(new_value),
        )

    def to_dict(self) -> dict[str, Any]:
        record: dict[str, Any] = {"path": self.path}
        if self.category is not None:
            record["category"] = self.category.value
        if self.old_value is not None:
            record["oldValue"] = self.old_value
        if self.new_value is not None:
            record["newValue"] = self.new_value
        return record

    def matches(self, issue: Issue) -> bool:
        """Check whether this rule covers an issue."""
        if self.category is not None and self.category is not issue.category:
            return False
        if self.old_value is not None and self.old_value != issue.old_value:
            return False
        if self.new_value is not None and self.new_value != issue.new_value:
            return False
        return match_path(self.segments, split_path(issue.path))


def split_path(path: str) -> tuple[str, ...]:
    if not path:
        return ()
    return tuple(path.split(PATH_SEPARATOR))


def match_path(pattern: tuple[str, ...], segments: tuple[str, ...]) -> bool:
    """Match path segments against pattern segments.

    Args:
        pattern: Pattern segments, possibly containing ``*`` and ``**``.
        segments: Segments of a qualified path.

    Returns:
        True if the whole path matches the whole pattern.
    """
    # reachable[j] is True when pattern[:i] can consume segments[:j]
    reachable = [False] * (len(segments) + 1)
    reachable[0] = True
    for part in pattern:
        following = [False] * (len(segments) + 1)
        if part == MULTI_SEGMENT:
            for j in range(len(segments)):
                if reachable[j]:
                    for k in range(j + 1, len(segments) + 1):
                        following[k] = True
        else:
            for j in range(len(segments)):
                if reachable[j] and (
                    part in (SINGLE_SEGMENT, segments[j]) or fnmatchcase(segments[j], part)
                ):
                    following[j + 1] = True
        reachable = following
    return reachable[len(segments)]


class IgnoreRuleMatcher:
    """Decides whether detected issues are suppressed by ignore rules.

    Example:
        matcher = IgnoreRuleMatcher([IgnoreRule(path="Widget.**")])
        if matcher.is_suppressed(issue):
            ...
    """

    def __init__(self, rules: Iterable[IgnoreRule] | None = None) -> None:
        self._rules: tuple[IgnoreRule, ...] = tuple(rules or ())

    @property
    def rules(self) -> tuple[IgnoreRule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def match(self, issue: Issue) -> IgnoreRule | None:
        """Return the first rule covering an issue, or None."""
        for rule in self._rules:
            if rule.matches(issue):
                return rule
        return None

    def is_suppressed(self, issue: Issue) -> bool:
        return self.match(issue) is not None


def is_suppressed(issue: Issue, rules: Iterable[IgnoreRule]) -> bool:
    """Check an issue against a rule set."""
    return IgnoreRuleMatcher(rules).is_suppressed(issue)


def parse_ignore_rules(data: Any) -> list[IgnoreRule]:
    """Parse decoded ignore records.

    Args:
        data: A list of ignore records.

    Returns:
        Parsed rules in file order.

    Raises:
        IgnoreRuleError: If the data is not a list of objects.
    """
    if not isinstance(data, list):
        raise IgnoreRuleError(
            f"Ignore rules must be a JSON array, got {type(data).__name__}"
        )

    rules: list[IgnoreRule] = []
    for position, record in enumerate(data):
        if not isinstance(record, dict):
            raise IgnoreRuleError(f"Ignore rule #{position} is not an object: {record!r}")
        rules.append(IgnoreRule.from_dict(record))
    return rules


def load_ignore_rules(path: str | Path) -> list[IgnoreRule]:
    """Read ignore rules from a JSON file.

    Raises:
        IgnoreRuleError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise IgnoreRuleError(f"Cannot read ignore file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise IgnoreRuleError(f"Invalid JSON in ignore file {path}: {e}") from e

    rules = parse_ignore_rules(data)
    logger.debug("Loaded %d ignore rules from %s", len(rules), path)
    return rules
