"""Compatibility checker.

Matches the declarations of two versions by kind-qualified address, runs the
compatibility rules on every matched pair, and reports removed and added
declarations. Every candidate issue is passed through the ignore-rule
matcher before it is reported.

Example:
    checker = CompatibilityChecker(matcher=IgnoreRuleMatcher(rules))
    result = checker.check(flatten(old_tree, ""), flatten(new_tree, ""))

    if not result.is_compatible:
        for issue in result.breaking_issues:
            print(issue.describe())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from declguard.compat.ignore import IgnoreRuleMatcher
from declguard.compat.issues import CheckSummary, Issue, IssueCategory
from declguard.compat.protocols import IssueSink
from declguard.compat.rules import CompatibilityRule, default_rules
from declguard.declarations.flatten import flatten, index_by_key
from declguard.declarations.kinds import DeclarationKind
from declguard.declarations.nodes import DeclarationNode, FlatNode
from declguard.declarations.types import render_type

logger = logging.getLogger(__name__)

# Kinds that every existing use must supply once added without a default
REQUIRED_ON_ADD_KINDS = frozenset({DeclarationKind.PARAMETER, DeclarationKind.TYPE_PARAMETER})


@dataclass
class CheckerConfig:
    """Configuration for the compatibility checker.

    Attributes:
        removal_exempt_kinds: Kinds whose removal is never reported.
        report_added: Report added declarations as informational issues.
        required_parameter_breaking: Report a required parameter or type
            parameter added to an existing declaration as ``RequiredAdded``.
    """

    removal_exempt_kinds: frozenset[DeclarationKind] = frozenset()
    report_added: bool = True
    required_parameter_breaking: bool = True


@dataclass
class CheckResult:
    """Result of a compatibility check.

    Attributes:
        issues: Reported issues in traversal order.
        suppressed: Issues matched by an ignore rule.
        traces: Verbose trace lines.
        visited_old: Declarations visited in the previous version.
        visited_new: Declarations visited in the current version.
    """

    issues: list[Issue] = field(default_factory=list)
    suppressed: list[Issue] = field(default_factory=list)
    traces: list[str] = field(default_factory=list)
    visited_old: int = 0
    visited_new: int = 0

    @property
    def breaking_issues(self) -> list[Issue]:
        return [issue for issue in self.issues if issue.breaking]

    @property
    def breaking_count(self) -> int:
        return len(self.breaking_issues)

    @property
    def added_count(self) -> int:
        return sum(1 for issue in self.issues if issue.category is IssueCategory.ADDED)

    @property
    def is_compatible(self) -> bool:
        return self.breaking_count == 0

    def __bool__(self) -> bool:
        """Boolean evaluation returns compatibility status."""
        return self.is_compatible

    def summary(self) -> CheckSummary:
        return CheckSummary.from_issues(
            self.issues,
            self.suppressed,
            old_nodes=self.visited_old,
            new_nodes=self.visited_new,
        )


class _Emitter:
    """Routes candidate issues and traces for one run."""

    def __init__(
        self,
        result: CheckResult,
        matcher: IgnoreRuleMatcher,
        sink: IssueSink | None,
    ) -> None:
        self._result = result
        self._matcher = matcher
        self._sink = sink

    def issue(self, issue: Issue) -> None:
        rule = self._matcher.match(issue)
        if rule is not None:
            self._result.suppressed.append(issue)
            self.trace(f"Ignored {issue.describe()} (rule: {rule.path})")
            return

        self._result.issues.append(issue)
        if self._sink is not None:
            self._sink.issue(issue)

    def trace(self, line: str) -> None:
        logger.debug(line)
        self._result.traces.append(line)
        if self._sink is not None:
            self._sink.verbose(line)


class CompatibilityChecker:
    """Checker for backward compatibility between two declaration surfaces.

    The previous version drives the traversal. Declarations are matched by
    address and kind; a declaration whose parent was not matched belongs to a
    subtree that has already been reported as removed (or added) and is not
    reported again.
    """

    def __init__(
        self,
        rules: list[CompatibilityRule] | None = None,
        matcher: IgnoreRuleMatcher | None = None,
        config: CheckerConfig | None = None,
    ) -> None:
        """Initialize the checker.

        Args:
            rules: Rules for matched pairs. Defaults to every built-in rule.
            matcher: Ignore-rule matcher. Defaults to one with no rules.
            config: Checker configuration.
        """
        self._rules = rules if rules is not None else default_rules()
        self._matcher = matcher or IgnoreRuleMatcher()
        self._config = config or CheckerConfig()

    @property
    def rules(self) -> list[CompatibilityRule]:
        return list(self._rules)

    def add_rule(self, rule: CompatibilityRule) -> None:
        self._rules.append(rule)

    def remove_rule(self, rule_name: str) -> bool:
        """Remove a rule by name.

        Returns:
            True if removed, False if not found.
        """
        for i, rule in enumerate(self._rules):
            if rule.name == rule_name:
                del self._rules[i]
                return True
        return False

    def check_trees(
        self,
        old_tree: DeclarationNode,
        new_tree: DeclarationNode,
        root_name: str | None = None,
        sink: IssueSink | None = None,
    ) -> CheckResult:
        """Flatten two trees and compare them.

        Args:
            old_tree: Previous version.
            new_tree: Current version.
            root_name: Root name override passed to the flattener.
            sink: Optional receiver of issues and trace lines.
        """
        return self.check(
            flatten(old_tree, root_name),
            flatten(new_tree, root_name),
            sink=sink,
        )

    def check(
        self,
        old_nodes: Iterable[FlatNode],
        new_nodes: Iterable[FlatNode],
        sink: IssueSink | None = None,
    ) -> CheckResult:
        """Compare two flattened declaration sequences.

        Args:
            old_nodes: Previous version in pre-order.
            new_nodes: Current version in pre-order.
            sink: Optional receiver of issues and trace lines.

        Returns:
            Reported and suppressed issues with traversal counts.
        """
        old_list = list(old_nodes)
        new_list = list(new_nodes)
        result = CheckResult()
        emit = _Emitter(result, self._matcher, sink)

        emit.trace(f"Found {len(old_list)} declarations in previous version")
        emit.trace(f"Found {len(new_list)} declarations in current version")

        new_index = index_by_key(new_list)
        replacements = _replacement_index(old_list, new_list)
        matched: set[str] = set()
        claimed: set[str] = set()

        for old in old_list:
            result.visited_old += 1
            if not old.is_root and old.parent_key not in matched:
                continue

            counterpart = new_index.get(old.key)
            if counterpart is None:
                replacement = self._unclaimed(replacements.get((old.parent_key, old.address)), claimed)
                if replacement is not None:
                    claimed.add(replacement.key)
                    emit.issue(self._removed(
                        old,
                        f"{old.node.display_kind} '{old.name}' was replaced by "
                        f"{replacement.node.display_kind}",
                    ))
                    emit.issue(self._added(replacement))
                elif old.kind in self._config.removal_exempt_kinds:
                    emit.trace(f"{old.qualified_path}: removal of {old.kind.value} is exempt")
                else:
                    emit.issue(self._removed(old))
                continue

            claimed.add(counterpart.key)
            matched.add(old.key)
            for rule in self._rules:
                if not rule.applies_to(old, counterpart):
                    continue
                found = rule.check(old, counterpart)
                for issue in found.issues:
                    emit.issue(issue)
                for note in found.notes:
                    emit.trace(note)

        for new in new_list:
            result.visited_new += 1
            if new.key in claimed:
                continue
            if not new.is_root and new.parent_key not in matched:
                continue
            if self._is_required_parameter(new):
                emit.issue(self._required_parameter(new))
            elif self._config.report_added:
                emit.issue(self._added(new))

        logger.info(
            "Compatibility check finished: %d issues (%d breaking), %d suppressed",
            len(result.issues),
            result.breaking_count,
            len(result.suppressed),
        )
        return result

    @staticmethod
    def _unclaimed(candidates: list[FlatNode] | None, claimed: set[str]) -> FlatNode | None:
        for candidate in candidates or ():
            if candidate.key not in claimed:
                return candidate
        return None

    def _is_required_parameter(self, flat: FlatNode) -> bool:
        flags = flat.node.flags
        return (
            self._config.required_parameter_breaking
            and not flat.is_root
            and flat.kind in REQUIRED_ON_ADD_KINDS
            and not flags.optional
            and not flags.rest
        )

    def _removed(self, old: FlatNode, message: str | None = None) -> Issue:
        return Issue(
            path=old.qualified_path,
            category=IssueCategory.REMOVED,
            old_value=old.node.display_kind,
            new_value=None,
            message=message or f"{old.node.display_kind} '{old.name}' was removed",
            breaking=True,
            kind=old.node.display_kind,
            sources=old.node.sources,
        )

    def _added(self, new: FlatNode) -> Issue:
        return Issue(
            path=new.qualified_path,
            category=IssueCategory.ADDED,
            old_value=None,
            new_value=new.node.display_kind,
            message=f"{new.node.display_kind} '{new.name}' was added",
            breaking=False,
            kind=new.node.display_kind,
            sources=new.node.sources,
        )

    def _required_parameter(self, new: FlatNode) -> Issue:
        type_text = render_type(new.node.type)
        return Issue(
            path=new.qualified_path,
            category=IssueCategory.REQUIRED_ADDED,
            old_value=None,
            new_value=type_text,
            message=f"Required {new.node.display_kind.lower()} '{new.name}' was added",
            breaking=True,
            kind=new.node.display_kind,
            sources=new.node.sources,
        )


def _replacement_index(
    old_nodes: list[FlatNode], new_nodes: list[FlatNode]
) -> dict[tuple[str | None, str], list[FlatNode]]:
    """Group new declarations without an old counterpart by parent and address.

    A match here with a different kind means the declaration changed kind.
    """
    old_keys = {flat.key for flat in old_nodes}
    index: dict[tuple[str | None, str], list[FlatNode]] = {}
    for flat in new_nodes:
        if flat.key not in old_keys:
            index.setdefault((flat.parent_key, flat.address), []).append(flat)
    return index


def check_compatibility(
    old_tree: DeclarationNode,
    new_tree: DeclarationNode,
    matcher: IgnoreRuleMatcher | None = None,
    root_name: str | None = None,
    sink: IssueSink | None = None,
) -> CheckResult:
    """Compare two declaration trees with the default rules."""
    checker = CompatibilityChecker(matcher=matcher)
    return checker.check_trees(old_tree, new_tree, root_name=root_name, sink=sink)
