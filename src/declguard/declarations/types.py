"""Structural type descriptors.

A ``TypeDescriptor`` is the comparable form of a declaration's type as the
generator describes it (``{"type": "union", "types": [...]}`` and so on).
Descriptors are immutable values: two descriptors are equal when they
describe the same type shape, regardless of union or intersection member
order.

The module also defines the widening relation used by the compatibility
rules. ``is_assignable(source, target)`` answers "is every value of
``source`` also a value of ``target``?". It only answers True when that can
be proven from the shapes alone; everything it cannot prove is False, which
the checker treats as a breaking change.

Example:
    >>> old = TypeDescriptor.intrinsic("string")
    >>> new = TypeDescriptor.union([old, TypeDescriptor.intrinsic("number")])
    >>> is_assignable(old, new)
    True
    >>> is_assignable(new, old)
    False
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable


INTRINSIC = "intrinsic"
REFERENCE = "reference"
LITERAL = "literal"
UNION = "union"
INTERSECTION = "intersection"
ARRAY = "array"
TUPLE = "tuple"
FUNCTION = "function"
OBJECT = "object"
UNKNOWN = "unknown"

TOP_TYPES = frozenset({"any", "unknown"})
BOTTOM_TYPES = frozenset({"never"})

# Record keys that change between generator runs without changing the type
BOOKKEEPING_KEYS = frozenset(
    {"id", "sources", "url", "anchor", "comment", "groups", "categories", "hasOwnDocument"}
)


@dataclass(frozen=True)
class MemberDescriptor:
    """A named slot inside a function or object type.

    Used for the parameters of a function type and for the fields of an
    inline object type.
    """

    name: str
    type: "TypeDescriptor | None" = None
    optional: bool = False
    rest: bool = False

    def render(self) -> str:
        prefix = "..." if self.rest else ""
        marker = "?" if self.optional else ""
        rendered = self.type.render() if self.type is not None else "any"
        return f"{prefix}{self.name}{marker}: {rendered}"


@dataclass(frozen=True)
class IndexDescriptor:
    """An index signature of an inline object type (``[key: K]: V``)."""

    key: "TypeDescriptor | None" = None
    value: "TypeDescriptor | None" = None

    def render(self) -> str:
        key = self.key.render() if self.key is not None else "string"
        value = self.value.render() if self.value is not None else "any"
        return f"[key: {key}]: {value}"


@dataclass(frozen=True)
class TypeDescriptor:
    """Comparable description of a declared type.

    Attributes:
        kind: Shape tag (intrinsic, reference, literal, union, ...).
        name: Intrinsic or referenced type name; canonical JSON for
            shapes that are not modelled.
        value: Rendered literal value for literal types.
        base: Intrinsic type a literal widens to.
        members: Union/intersection members (normalised) or tuple elements.
        arguments: Type arguments of a reference.
        element: Element type of an array.
        parameters: Parameters of a function type or fields of an object.
        returns: Return type of a function type.
        indexes: Index signatures of an object type.
    """

    kind: str
    name: str = ""
    value: str | None = None
    base: str | None = None
    members: tuple["TypeDescriptor", ...] = ()
    arguments: tuple["TypeDescriptor", ...] = ()
    element: "TypeDescriptor | None" = None
    parameters: tuple[MemberDescriptor, ...] = ()
    returns: "TypeDescriptor | None" = None
    indexes: tuple[IndexDescriptor, ...] = ()

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def intrinsic(cls, name: str) -> "TypeDescriptor":
        return cls(kind=INTRINSIC, name=name)

    @classmethod
    def reference(
        cls, name: str, arguments: Iterable["TypeDescriptor"] = ()
    ) -> "TypeDescriptor":
        return cls(kind=REFERENCE, name=name, arguments=tuple(arguments))

    @classmethod
    def literal(cls, value: Any) -> "TypeDescriptor":
        """Create a literal type from a raw literal value."""
        if value is None:
            return cls(kind=LITERAL, value="null")
        if isinstance(value, bool):
            return cls(kind=LITERAL, value="true" if value else "false", base="boolean")
        if isinstance(value, (int, float)):
            return cls(kind=LITERAL, value=repr(value), base="number")
        if isinstance(value, dict):
            # bigint literals arrive as {"negative": bool, "value": "123"}
            sign = "-" if value.get("negative") else ""
            return cls(kind=LITERAL, value=f"{sign}{value.get('value')}n", base="bigint")
        return cls(kind=LITERAL, value=json.dumps(str(value)), base="string")

    @classmethod
    def union(cls, members: Iterable["TypeDescriptor"]) -> "TypeDescriptor":
        return cls._combine(UNION, members)

    @classmethod
    def intersection(cls, members: Iterable["TypeDescriptor"]) -> "TypeDescriptor":
        return cls._combine(INTERSECTION, members)

    @classmethod
    def array(cls, element: "TypeDescriptor") -> "TypeDescriptor":
        return cls(kind=ARRAY, element=element)

    @classmethod
    def tuple_of(cls, elements: Iterable["TypeDescriptor"]) -> "TypeDescriptor":
        return cls(kind=TUPLE, members=tuple(elements))

    @classmethod
    def function(
        cls,
        parameters: Iterable[MemberDescriptor],
        returns: "TypeDescriptor | None",
    ) -> "TypeDescriptor":
        return cls(kind=FUNCTION, parameters=tuple(parameters), returns=returns)

    @classmethod
    def object(
        cls,
        fields: Iterable[MemberDescriptor],
        indexes: Iterable[IndexDescriptor] = (),
    ) -> "TypeDescriptor":
        ordered = tuple(sorted(fields, key=lambda item: item.name))
        keyed = tuple(sorted(indexes, key=lambda item: item.render()))
        return cls(kind=OBJECT, parameters=ordered, indexes=keyed)

    @classmethod
    def opaque(cls, raw: Any) -> "TypeDescriptor":
        """Wrap a shape that is not modelled; equality falls back to the raw data.

        Generator bookkeeping (ids, sources, comments) is left out, so the
        same shape compares equal across generator runs.
        """
        return cls(kind=UNKNOWN, name=json.dumps(_strip_bookkeeping(raw), sort_keys=True, default=str))

    @classmethod
    def _combine(cls, kind: str, members: Iterable["TypeDescriptor"]) -> "TypeDescriptor":
        flat: dict[str, TypeDescriptor] = {}
        for member in members:
            nested = member.members if member.kind == kind else (member,)
            for item in nested:
                flat.setdefault(item.render(), item)
        if len(flat) == 1:
            return next(iter(flat.values()))
        return cls(kind=kind, members=tuple(flat[key] for key in sorted(flat)))

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def render(self) -> str:
        """Render the type as a TypeScript-like string."""
        if self.kind == INTRINSIC:
            return self.name
        if self.kind == REFERENCE:
            if self.arguments:
                args = ", ".join(arg.render() for arg in self.arguments)
                return f"{self.name}<{args}>"
            return self.name
        if self.kind == LITERAL:
            return self.value or "null"
        if self.kind == UNION:
            return " | ".join(member._render_nested() for member in self.members)
        if self.kind == INTERSECTION:
            return " & ".join(member._render_nested() for member in self.members)
        if self.kind == ARRAY:
            element = self.element.render() if self.element else "any"
            if self.element is not None and self.element.kind in (UNION, INTERSECTION, FUNCTION):
                element = f"({element})"
            return f"{element}[]"
        if self.kind == TUPLE:
            return "[" + ", ".join(member.render() for member in self.members) + "]"
        if self.kind == FUNCTION:
            params = ", ".join(param.render() for param in self.parameters)
            returns = self.returns.render() if self.returns else "void"
            return f"({params}) => {returns}"
        if self.kind == OBJECT:
            entries = [index.render() for index in self.indexes]
            entries.extend(field.render() for field in self.parameters)
            if not entries:
                return "{}"
            return "{ " + "; ".join(entries) + " }"
        return self.name

    def _render_nested(self) -> str:
        if self.kind in (UNION, INTERSECTION, FUNCTION):
            return f"({self.render()})"
        return self.render()

    def __str__(self) -> str:
        return self.render()

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Any) -> "TypeDescriptor | None":
        """Create a descriptor from a generator type record.

        Args:
            data: The ``type`` record of a declaration, or None.

        Returns:
            The descriptor, or None when the declaration has no type.
        """
        if data is None:
            return None
        if not isinstance(data, dict):
            return cls.opaque(data)

        tag = data.get("type")

        if tag == "intrinsic":
            return cls.intrinsic(str(data.get("name", "any")))

        if tag in ("reference", "typeParameter"):
            args = [
                parsed
                for parsed in (cls.from_dict(arg) for arg in data.get("typeArguments") or [])
                if parsed is not None
            ]
            return cls.reference(str(data.get("name", "")), args)

        if tag in ("literal", "stringLiteral"):
            return cls.literal(data.get("value"))

        if tag in ("union", "intersection"):
            members = [
                parsed
                for parsed in (cls.from_dict(item) for item in data.get("types") or [])
                if parsed is not None
            ]
            if tag == "union":
                return cls.union(members)
            return cls.intersection(members)

        if tag == "array":
            element = cls.from_dict(data.get("elementType"))
            return cls.array(element or cls.intrinsic("any"))

        if tag == "tuple":
            elements = data.get("elements") or data.get("elementTypes") or []
            return cls.tuple_of(
                parsed for parsed in (cls.from_dict(item) for item in elements) if parsed is not None
            )

        if tag == "reflection":
            return cls._from_reflection(data.get("declaration") or {})

        return cls.opaque(data)

    @classmethod
    def _from_reflection(cls, declaration: dict[str, Any]) -> "TypeDescriptor":
        signatures = declaration.get("signatures") or []
        children = declaration.get("children") or []
        indexes = _index_records(declaration)
        if len(signatures) == 1 and not children and not indexes:
            signature = signatures[0]
            return cls.function(
                (_member_from_dict(param) for param in signature.get("parameters") or []),
                cls.from_dict(signature.get("type")),
            )
        if signatures:
            return cls.opaque(declaration)
        return cls.object(
            (_member_from_dict(child) for child in children),
            (_index_from_dict(index) for index in indexes),
        )


def _index_records(declaration: dict[str, Any]) -> list[dict[str, Any]]:
    # Older generator releases write a single ``indexSignature`` record
    records = declaration.get("indexSignatures") or declaration.get("indexSignature") or []
    if isinstance(records, dict):
        records = [records]
    return [record for record in records if isinstance(record, dict)]


def _index_from_dict(data: dict[str, Any]) -> IndexDescriptor:
    parameters = data.get("parameters") or [{}]
    return IndexDescriptor(
        key=TypeDescriptor.from_dict(parameters[0].get("type")),
        value=TypeDescriptor.from_dict(data.get("type")),
    )


def _strip_bookkeeping(raw: Any) -> Any:
    if isinstance(raw, list):
        return [_strip_bookkeeping(item) for item in raw]
    if not isinstance(raw, dict):
        return raw
    return {
        key: _strip_bookkeeping(value)
        for key, value in raw.items()
        # References point at other declarations by generator id
        if key not in BOOKKEEPING_KEYS and not (key == "target" and isinstance(value, int))
    }


def _member_from_dict(data: dict[str, Any]) -> MemberDescriptor:
    flags = data.get("flags") or {}
    return MemberDescriptor(
        name=str(data.get("name", "")),
        type=TypeDescriptor.from_dict(data.get("type")),
        optional=bool(flags.get("isOptional")) or "defaultValue" in data,
        rest=bool(flags.get("isRest")),
    )


# =============================================================================
# Widening relation
# =============================================================================


def is_assignable(source: TypeDescriptor | None, target: TypeDescriptor | None) -> bool:
    """Check that every value of ``source`` is a value of ``target``.

    A missing type is treated as ``any``.

    Args:
        source: The type whose values must fit.
        target: The type that must accept them.

    Returns:
        True only if assignability can be proven structurally.
    """
    if target is None:
        return True
    if source is None:
        return _is_top(target)
    if source == target:
        return True
    if _is_top(target):
        return True
    if source.kind == INTRINSIC and source.name in BOTTOM_TYPES:
        return True

    # Unions and intersections are unpacked before anything else
    if source.kind == UNION:
        return all(is_assignable(member, target) for member in source.members)
    if target.kind == INTERSECTION:
        return all(is_assignable(source, member) for member in target.members)
    if target.kind == UNION:
        return any(is_assignable(source, member) for member in target.members)
    if source.kind == INTERSECTION:
        return any(is_assignable(member, target) for member in source.members)

    if source.kind == LITERAL:
        return target.kind == INTRINSIC and source.base is not None and source.base == target.name

    if source.kind == INTRINSIC and target.kind == INTRINSIC:
        return source.name == "undefined" and target.name == "void"

    if source.kind == ARRAY and target.kind == ARRAY:
        return is_assignable(source.element, target.element)

    if source.kind == TUPLE and target.kind == TUPLE:
        return len(source.members) == len(target.members) and all(
            is_assignable(left, right) for left, right in zip(source.members, target.members)
        )

    if source.kind == TUPLE and target.kind == ARRAY:
        return all(is_assignable(member, target.element) for member in source.members)

    if source.kind == REFERENCE and target.kind == REFERENCE:
        return source.name == target.name and source.arguments == target.arguments

    if source.kind == FUNCTION and target.kind == FUNCTION:
        return _function_assignable(source, target)

    if source.kind == OBJECT and target.kind == OBJECT:
        return _object_assignable(source, target)

    return False


def _is_top(descriptor: TypeDescriptor | None) -> bool:
    return (
        descriptor is not None
        and descriptor.kind == INTRINSIC
        and descriptor.name in TOP_TYPES
    )


def _function_assignable(source: TypeDescriptor, target: TypeDescriptor) -> bool:
    # A source function may be used where target is expected if it needs no
    # more arguments than target supplies and accepts what target passes.
    required = [param for param in source.parameters if not (param.optional or param.rest)]
    if len(required) > len(target.parameters):
        return False
    for index, param in enumerate(source.parameters):
        if index >= len(target.parameters):
            break
        if not is_assignable(target.parameters[index].type, param.type):
            return False
    if target.returns is not None and target.returns == TypeDescriptor.intrinsic("void"):
        return True
    return is_assignable(source.returns, target.returns)


def _object_assignable(source: TypeDescriptor, target: TypeDescriptor) -> bool:
    # Every index signature the target declares must be met by the source
    # with the same key type; anything looser is unproven.
    source_indexes = {index.key: index for index in source.indexes}
    for wanted_index in target.indexes:
        present_index = source_indexes.get(wanted_index.key)
        if present_index is None or not is_assignable(present_index.value, wanted_index.value):
            return False

    fields = {field.name: field for field in source.parameters}
    for wanted in target.parameters:
        present = fields.get(wanted.name)
        if present is None:
            if wanted.optional:
                continue
            return False
        if present.optional and not wanted.optional:
            return False
        if not is_assignable(present.type, wanted.type):
            return False
    return True


def is_widening(old: TypeDescriptor | None, new: TypeDescriptor | None) -> bool:
    """Check that ``new`` accepts at least every value ``old`` accepted."""
    return is_assignable(old, new)


def is_narrowing(old: TypeDescriptor | None, new: TypeDescriptor | None) -> bool:
    """Check that ``new`` accepts at most the values ``old`` accepted."""
    return is_assignable(new, old)


def render_type(descriptor: TypeDescriptor | None) -> str | None:
    return descriptor.render() if descriptor is not None else None
