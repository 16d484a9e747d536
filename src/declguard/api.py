"""High-level entry points.

These wrap loading, flattening, ignore rules and the checker into single
calls for scripts and tests.

Example:
    >>> from declguard import compare_files
    >>> result = compare_files("api/1.0.json", "api/next.json", ignore="ignore.json")
    >>> result.is_compatible
    True
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

from declguard.compat.checker import CheckerConfig, CheckResult, CompatibilityChecker
from declguard.compat.ignore import IgnoreRule, IgnoreRuleMatcher, load_ignore_rules, parse_ignore_rules
from declguard.compat.protocols import IssueSink
from declguard.declarations.loader import load_declarations, parse_declarations
from declguard.declarations.nodes import DeclarationNode

logger = logging.getLogger(__name__)


def _as_tree(value: DeclarationNode | dict[str, Any]) -> DeclarationNode:
    if isinstance(value, DeclarationNode):
        return value
    return parse_declarations(value)


def _as_matcher(rules: Iterable[IgnoreRule] | list[dict[str, Any]] | None) -> IgnoreRuleMatcher:
    if rules is None:
        return IgnoreRuleMatcher()
    rules = list(rules)
    if rules and isinstance(rules[0], dict):
        return IgnoreRuleMatcher(parse_ignore_rules(rules))
    return IgnoreRuleMatcher(rules)


def compare(
    previous: DeclarationNode | dict[str, Any],
    current: DeclarationNode | dict[str, Any],
    ignore_rules: Iterable[IgnoreRule] | list[dict[str, Any]] | None = None,
    exclude_root_node: bool = False,
    sink: IssueSink | None = None,
    config: CheckerConfig | None = None,
) -> CheckResult:
    """Compare two declaration trees.

    Args:
        previous: Declarations of the previous release, as a tree or raw record.
        current: Declarations of the current sources, as a tree or raw record.
        ignore_rules: Ignore rules, as parsed rules or raw records.
        exclude_root_node: Leave the root name out of qualified paths.
        sink: Optional receiver of issues and trace lines.
        config: Checker configuration.

    Returns:
        The check result.

    Raises:
        DeclarationLoadError: If a raw record is not a declaration tree.
        IgnoreRuleError: If a raw ignore record is malformed.
    """
    checker = CompatibilityChecker(matcher=_as_matcher(ignore_rules), config=config)
    return checker.check_trees(
        _as_tree(previous),
        _as_tree(current),
        root_name="" if exclude_root_node else None,
        sink=sink,
    )


def compare_files(
    previous: str | Path,
    current: str | Path,
    ignore: str | Path | None = None,
    exclude_root_node: bool = False,
    sink: IssueSink | None = None,
    config: CheckerConfig | None = None,
) -> CheckResult:
    """Compare two declaration files.

    Args:
        previous: Declaration file of the previous release.
        current: Declaration file of the current sources.
        ignore: Optional ignore-rule file.
        exclude_root_node: Leave the root name out of qualified paths.
        sink: Optional receiver of issues and trace lines.
        config: Checker configuration.

    Raises:
        DeclarationLoadError: If a declaration file cannot be loaded.
        IgnoreRuleError: If the ignore file cannot be loaded.
    """
    rules = load_ignore_rules(ignore) if ignore is not None else []
    logger.info("Comparing %s against %s with %d ignore rules", previous, current, len(rules))

    return compare(
        load_declarations(previous),
        load_declarations(current),
        ignore_rules=rules,
        exclude_root_node=exclude_root_node,
        sink=sink,
        config=config,
    )
