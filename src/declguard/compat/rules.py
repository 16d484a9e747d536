"""Compatibility rules for matched declaration pairs.

Each rule checks one aspect of a declaration that exists in both versions
and reports the differences it finds. Breaking differences come back as
issues; safe differences come back as notes, which are only shown in
verbose output.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from declguard.compat.issues import Issue, IssueCategory
from declguard.declarations.kinds import DeclarationKind
from declguard.declarations.nodes import FlatNode
from declguard.declarations.types import TypeDescriptor, is_narrowing, is_widening, render_type

# The constraint of a type parameter declared without one
UNCONSTRAINED = TypeDescriptor.intrinsic("unknown")


@dataclass
class RuleResult:
    """What a rule found for one matched pair.

    Attributes:
        issues: Breaking differences.
        notes: Non-breaking observations for verbose output.
    """

    issues: list[Issue] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def extend(self, other: "RuleResult") -> None:
        self.issues.extend(other.issues)
        self.notes.extend(other.notes)


class CompatibilityRule(ABC):
    """Abstract base class for compatibility rules.

    Each rule checks a specific aspect of a matched declaration pair.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Rule name."""
        ...

    def applies_to(self, old: FlatNode, new: FlatNode) -> bool:
        """Whether the rule should run for this pair."""
        return old.kind.is_known

    @abstractmethod
    def check(self, old: FlatNode, new: FlatNode) -> RuleResult:
        """Check a matched pair.

        Args:
            old: Declaration in the previous version.
            new: Counterpart in the current version (same address and kind).

        Returns:
            Issues and notes found by the rule.
        """
        ...

    def _issue(
        self,
        old: FlatNode,
        category: IssueCategory,
        old_value: str | None,
        new_value: str | None,
        message: str,
    ) -> Issue:
        return Issue(
            path=old.qualified_path,
            category=category,
            old_value=old_value,
            new_value=new_value,
            message=message,
            breaking=True,
            kind=old.node.display_kind,
            sources=old.node.sources,
        )


def describe(flat: FlatNode) -> str:
    """Name a declaration for messages, e.g. ``Property 'size'``."""
    label = f"{flat.node.display_kind} '{flat.name}'"
    if flat.ordinal:
        label = f"{label} (overload {flat.ordinal + 1})"
    return label


class FlagsRule(CompatibilityRule):
    """Rule for structural modifiers.

    Reducing visibility, making an optional element required, making an
    element readonly, and toggling static or rest are breaking. The reverse
    of the first three is safe.
    """

    @property
    def name(self) -> str:
        return "flags"

    def check(self, old: FlatNode, new: FlatNode) -> RuleResult:
        result = RuleResult()
        before = old.node.flags
        after = new.node.flags
        label = describe(old)

        if after.visibility.is_narrower_than(before.visibility):
            result.issues.append(self._issue(
                old,
                IssueCategory.VISIBILITY_REDUCED,
                before.visibility.value,
                after.visibility.value,
                f"{label} visibility reduced from {before.visibility.value} "
                f"to {after.visibility.value}",
            ))
        elif before.visibility.is_narrower_than(after.visibility):
            result.notes.append(
                f"{old.qualified_path}: visibility widened from "
                f"{before.visibility.value} to {after.visibility.value}"
            )

        if before.optional and not after.optional:
            result.issues.append(self._issue(
                old,
                IssueCategory.REQUIRED_ADDED,
                "optional",
                "required",
                f"{label} became required",
            ))
        elif after.optional and not before.optional:
            result.notes.append(f"{old.qualified_path}: became optional")

        if after.readonly and not before.readonly:
            result.issues.append(self._issue(
                old,
                IssueCategory.SIGNATURE_CHANGED,
                "mutable",
                "readonly",
                f"{label} became readonly",
            ))
        elif before.readonly and not after.readonly:
            result.notes.append(f"{old.qualified_path}: no longer readonly")

        if before.static != after.static:
            result.issues.append(self._issue(
                old,
                IssueCategory.SIGNATURE_CHANGED,
                _static_label(before.static),
                _static_label(after.static),
                f"{label} changed from {_static_label(before.static)} "
                f"to {_static_label(after.static)}",
            ))

        if before.rest != after.rest:
            result.issues.append(self._issue(
                old,
                IssueCategory.SIGNATURE_CHANGED,
                _rest_label(before.rest),
                _rest_label(after.rest),
                f"{label} changed from {_rest_label(before.rest)} "
                f"to {_rest_label(after.rest)} parameter",
            ))

        return result


def _static_label(value: bool) -> str:
    return "static" if value else "instance"


def _rest_label(value: bool) -> str:
    return "rest" if value else "positional"


class TypeRule(CompatibilityRule):
    """Rule for type descriptor changes.

    Signatures carry return types: narrowing them is safe, anything else is
    breaking. Every other declaration carries an input or value type:
    widening it is safe, a proven narrowing is ``TypeNarrowed``, and any
    change that cannot be classified is ``SignatureChanged``.
    A type parameter carries its constraint, which callers must satisfy.
    """

    @property
    def name(self) -> str:
        return "type"

    def check(self, old: FlatNode, new: FlatNode) -> RuleResult:
        result = RuleResult()
        before = old.node.type
        after = new.node.type
        if old.kind is DeclarationKind.TYPE_PARAMETER:
            before = before or UNCONSTRAINED
            after = after or UNCONSTRAINED
        if before == after:
            return result

        old_text = render_type(before)
        new_text = render_type(after)
        label = describe(old)

        if before is None or after is None:
            result.issues.append(self._issue(
                old,
                IssueCategory.SIGNATURE_CHANGED,
                old_text,
                new_text,
                f"{label} type {'added' if before is None else 'removed'}",
            ))
            return result

        if old.kind.is_signature:
            if is_narrowing(before, after):
                result.notes.append(
                    f"{old.qualified_path}: return type narrowed from {old_text} to {new_text}"
                )
            else:
                result.issues.append(self._issue(
                    old,
                    IssueCategory.SIGNATURE_CHANGED,
                    old_text,
                    new_text,
                    f"{label} return type changed from {old_text} to {new_text}",
                ))
            return result

        if is_widening(before, after):
            result.notes.append(
                f"{old.qualified_path}: type widened from {old_text} to {new_text}"
            )
        elif is_narrowing(before, after):
            result.issues.append(self._issue(
                old,
                IssueCategory.TYPE_NARROWED,
                old_text,
                new_text,
                f"{label} type narrowed from {old_text} to {new_text}",
            ))
        else:
            result.issues.append(self._issue(
                old,
                IssueCategory.SIGNATURE_CHANGED,
                old_text,
                new_text,
                f"{label} type changed from {old_text} to {new_text}",
            ))
        return result


class UnknownKindRule(CompatibilityRule):
    """Rule for declarations whose kind is not recognised.

    Nothing is known about how such declarations are used, so any change
    to their flags or type is reported as breaking.
    """

    @property
    def name(self) -> str:
        return "unknown_kind"

    def applies_to(self, old: FlatNode, new: FlatNode) -> bool:
        return old.kind is DeclarationKind.UNKNOWN

    def check(self, old: FlatNode, new: FlatNode) -> RuleResult:
        result = RuleResult()
        label = describe(old)

        if old.node.flags != new.node.flags:
            result.issues.append(self._issue(
                old,
                IssueCategory.SIGNATURE_CHANGED,
                _render_flags(old),
                _render_flags(new),
                f"{label} modifiers changed",
            ))

        if old.node.type != new.node.type:
            old_text = render_type(old.node.type)
            new_text = render_type(new.node.type)
            result.issues.append(self._issue(
                old,
                IssueCategory.SIGNATURE_CHANGED,
                old_text,
                new_text,
                f"{label} type changed from {old_text} to {new_text}",
            ))

        return result


def _render_flags(flat: FlatNode) -> str:
    flags = flat.node.flags
    parts = [flags.visibility.value]
    for enabled, text in (
        (flags.static, "static"),
        (flags.readonly, "readonly"),
        (flags.optional, "optional"),
        (flags.rest, "rest"),
    ):
        if enabled:
            parts.append(text)
    return " ".join(parts)


DEFAULT_RULES: list[type[CompatibilityRule]] = [
    FlagsRule,
    TypeRule,
    UnknownKindRule,
]


def default_rules() -> list[CompatibilityRule]:
    return [rule_class() for rule_class in DEFAULT_RULES]
