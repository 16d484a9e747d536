"""Declaration tree data structures.

This module defines the immutable node types the rest of the package works
on: ``DeclarationNode`` (one exported element, built from a generator
record) and ``FlatNode`` (a node tagged with its qualified path, produced by
the flattener).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from declguard.declarations.kinds import DeclarationKind
from declguard.declarations.types import TypeDescriptor

# Record keys whose values become children, in the order they are folded in
CHILD_KEYS: tuple[str, ...] = (
    "children",
    "signatures",
    "indexSignature",
    "indexSignatures",
    "getSignature",
    "setSignature",
    "parameters",
    "typeParameter",
    "typeParameters",
)


class Visibility(str, Enum):
    """Declaration visibility, ordered from widest to narrowest."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"

    @property
    def rank(self) -> int:
        return _VISIBILITY_RANK[self]

    def is_narrower_than(self, other: "Visibility") -> bool:
        return self.rank > other.rank


_VISIBILITY_RANK = {
    Visibility.PUBLIC: 0,
    Visibility.PROTECTED: 1,
    Visibility.PRIVATE: 2,
}


@dataclass(frozen=True)
class DeclarationFlags:
    """Structural modifiers relevant to compatibility.

    Attributes:
        visibility: Public, protected or private.
        optional: Whether the element may be omitted.
        readonly: Whether the element can only be read.
        static: Whether the element belongs to the class rather than instances.
        rest: Whether a parameter collects the remaining arguments.
    """

    visibility: Visibility = Visibility.PUBLIC
    optional: bool = False
    readonly: bool = False
    static: bool = False
    rest: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None, has_default: bool = False) -> "DeclarationFlags":
        """Create flags from a generator ``flags`` record."""
        data = data or {}
        if data.get("isPrivate"):
            visibility = Visibility.PRIVATE
        elif data.get("isProtected"):
            visibility = Visibility.PROTECTED
        else:
            visibility = Visibility.PUBLIC
        return cls(
            visibility=visibility,
            optional=bool(data.get("isOptional")) or has_default,
            readonly=bool(data.get("isReadonly")) or bool(data.get("isConst")),
            static=bool(data.get("isStatic")),
            rest=bool(data.get("isRest")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "visibility": self.visibility.value,
            "optional": self.optional,
            "readonly": self.readonly,
            "static": self.static,
            "rest": self.rest,
        }


@dataclass(frozen=True)
class SourceLocation:
    """Where a declaration lives in the library sources."""

    file_name: str
    line: int | None = None
    character: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceLocation":
        return cls(
            file_name=str(data.get("fileName", "")),
            line=data.get("line"),
            character=data.get("character"),
        )

    def render(self, root: str | None = None) -> str:
        path = self.file_name
        if root:
            path = f"{root.rstrip('/')}/{path.lstrip('/')}"
        if self.line is not None:
            return f"{path}:{self.line}"
        return path


@dataclass(frozen=True)
class DeclarationNode:
    """One exported program element.

    Attributes:
        name: Identifier as declared.
        kind: Normalised declaration kind.
        kind_string: Raw kind tag from the generator.
        flags: Structural modifiers.
        type: Type descriptor, if the element has one.
        children: Nested declarations in declaration order.
        sources: Source locations reported by the generator.
    """

    name: str
    kind: DeclarationKind = DeclarationKind.UNKNOWN
    kind_string: str = ""
    flags: DeclarationFlags = field(default_factory=DeclarationFlags)
    type: TypeDescriptor | None = None
    children: tuple["DeclarationNode", ...] = ()
    sources: tuple[SourceLocation, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeclarationNode":
        """Build a declaration tree from a generator record.

        The record is walked with an explicit stack so that deeply nested
        namespaces cannot exhaust the interpreter's recursion limit.

        Args:
            data: Root record (``name``, ``kindString``, ``flags``, ``type``,
                ``children`` ...).

        Returns:
            The root node of the immutable tree.
        """
        order: list[tuple[dict[str, Any], int]] = []
        stack: list[tuple[dict[str, Any], int]] = [(data, -1)]
        while stack:
            record, parent = stack.pop()
            position = len(order)
            order.append((record, parent))
            for child in reversed(_child_records(record)):
                stack.append((child, position))

        # Children have larger positions than their parent, so building in
        # reverse order always finds every child already built.
        pending: list[list[DeclarationNode]] = [[] for _ in order]
        root: DeclarationNode | None = None
        for position in range(len(order) - 1, -1, -1):
            record, parent = order[position]
            node = cls._from_record(record, tuple(reversed(pending[position])))
            if parent < 0:
                root = node
            else:
                pending[parent].append(node)

        assert root is not None
        return root

    @classmethod
    def _from_record(
        cls, record: dict[str, Any], children: tuple["DeclarationNode", ...]
    ) -> "DeclarationNode":
        kind_string = str(record.get("kindString") or "")
        return cls(
            name=str(record.get("name") or ""),
            kind=DeclarationKind.from_string(kind_string),
            kind_string=kind_string,
            flags=DeclarationFlags.from_dict(
                record.get("flags"), "defaultValue" in record or "default" in record
            ),
            type=TypeDescriptor.from_dict(record.get("type")),
            children=children,
            sources=tuple(
                SourceLocation.from_dict(source)
                for source in record.get("sources") or []
                if isinstance(source, dict)
            ),
        )

    @property
    def display_kind(self) -> str:
        return self.kind_string or self.kind.value


def _child_records(record: dict[str, Any]) -> list[dict[str, Any]]:
    collected: list[dict[str, Any]] = []
    for key in CHILD_KEYS:
        value = record.get(key)
        if isinstance(value, dict):
            collected.append(value)
        elif isinstance(value, list):
            collected.extend(item for item in value if isinstance(item, dict))
    return collected


@dataclass(frozen=True)
class FlatNode:
    """A declaration node tagged with its position in the tree.

    Attributes:
        node: The declaration.
        qualified_path: Dot-joined names from the root to this node.
        address: Equal to the qualified path, except that the n-th sibling
            (n > 0) with the same name and kind carries a ``#n`` suffix on
            its own segment.
        parent_address: Address of the parent, None for the tree root.
        key: Matching identity. The address segments qualified by kind,
            so merged declarations sharing a name stay apart.
        parent_key: Key of the parent, None for the tree root.
        depth: Distance from the tree root.
        ordinal: Position among siblings with the same name and kind.
    """

    node: DeclarationNode
    qualified_path: str
    address: str
    parent_address: str | None = None
    key: str = ""
    parent_key: str | None = None
    depth: int = 0
    ordinal: int = 0

    @property
    def name(self) -> str:
        return self.node.name

    @property
    def kind(self) -> DeclarationKind:
        return self.node.kind

    @property
    def is_root(self) -> bool:
        return self.parent_address is None
