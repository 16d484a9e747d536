"""Compatibility checking module.

This module compares two declaration surfaces and classifies every
difference as breaking, informational, or suppressed by an ignore rule.

Key Features:
- Match declarations across versions by qualified path
- Classify flag and type changes with a widening relation
- Suppress allow-listed issues with wildcard ignore rules
- Hand results to pluggable issue sinks

Example:
    from declguard.compat import CompatibilityChecker, IgnoreRuleMatcher
    from declguard.declarations import flatten

    checker = CompatibilityChecker(matcher=IgnoreRuleMatcher(rules))
    result = checker.check(flatten(old_tree, ""), flatten(new_tree, ""))

    for issue in result.breaking_issues:
        print(f"Breaking change: {issue.describe()}")
"""

from declguard.compat.protocols import IssueSink
from declguard.compat.issues import CheckSummary, Issue, IssueCategory
from declguard.compat.ignore import (
    IgnoreRule,
    IgnoreRuleError,
    IgnoreRuleMatcher,
    is_suppressed,
    load_ignore_rules,
    match_path,
    parse_ignore_rules,
)
from declguard.compat.rules import (
    CompatibilityRule,
    FlagsRule,
    RuleResult,
    TypeRule,
    UnknownKindRule,
    default_rules,
)
from declguard.compat.checker import (
    CheckerConfig,
    CheckResult,
    CompatibilityChecker,
    check_compatibility,
)

__all__ = [
    # Protocols
    "IssueSink",
    # Issues
    "CheckSummary",
    "Issue",
    "IssueCategory",
    # Ignore rules
    "IgnoreRule",
    "IgnoreRuleError",
    "IgnoreRuleMatcher",
    "is_suppressed",
    "load_ignore_rules",
    "match_path",
    "parse_ignore_rules",
    # Rules
    "CompatibilityRule",
    "FlagsRule",
    "RuleResult",
    "TypeRule",
    "UnknownKindRule",
    "default_rules",
    # Checker
    "CheckerConfig",
    "CheckResult",
    "CompatibilityChecker",
    "check_compatibility",
]
