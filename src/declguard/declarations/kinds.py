"""Declaration kinds.

This module maps the kind tags produced by the declaration generator
(TypeDoc's ``kindString``) onto a closed enum with an explicit
``UNKNOWN`` fallback.
"""

from __future__ import annotations

from enum import Enum


class DeclarationKind(str, Enum):
    """Kinds of exported program elements."""

    PROJECT = "Project"
    MODULE = "Module"
    NAMESPACE = "Namespace"
    ENUM = "Enumeration"
    ENUM_MEMBER = "Enumeration member"
    VARIABLE = "Variable"
    FUNCTION = "Function"
    CLASS = "Class"
    INTERFACE = "Interface"
    CONSTRUCTOR = "Constructor"
    PROPERTY = "Property"
    METHOD = "Method"
    CALL_SIGNATURE = "Call signature"
    INDEX_SIGNATURE = "Index signature"
    CONSTRUCTOR_SIGNATURE = "Constructor signature"
    PARAMETER = "Parameter"
    TYPE_LITERAL = "Type literal"
    TYPE_PARAMETER = "Type parameter"
    ACCESSOR = "Accessor"
    GET_SIGNATURE = "Get signature"
    SET_SIGNATURE = "Set signature"
    OBJECT_LITERAL = "Object literal"
    TYPE_ALIAS = "Type alias"
    EVENT = "Event"
    REFERENCE = "Reference"
    UNKNOWN = "Unknown"

    @classmethod
    def from_string(cls, value: str | None) -> "DeclarationKind":
        """Convert a generator kind tag to a DeclarationKind.

        Matching is case-insensitive. Tags the enum does not know map to
        ``UNKNOWN`` so that the checker can treat them fail-closed.
        """
        if not value:
            return cls.UNKNOWN
        return _BY_LOWER.get(value.strip().lower(), cls.UNKNOWN)

    @property
    def is_signature(self) -> bool:
        """Whether the kind carries a return type rather than a value type."""
        return self in RETURN_TYPE_KINDS

    @property
    def is_known(self) -> bool:
        return self is not DeclarationKind.UNKNOWN


_BY_LOWER: dict[str, DeclarationKind] = {kind.value.lower(): kind for kind in DeclarationKind}
# Older generator releases use these spellings
_BY_LOWER.update(
    {
        "external module": DeclarationKind.MODULE,
        "enum": DeclarationKind.ENUM,
        "enum member": DeclarationKind.ENUM_MEMBER,
        "type alias": DeclarationKind.TYPE_ALIAS,
    }
)

# Kinds whose ``type`` is what callers receive back
RETURN_TYPE_KINDS: frozenset[DeclarationKind] = frozenset(
    {
        DeclarationKind.CALL_SIGNATURE,
        DeclarationKind.CONSTRUCTOR_SIGNATURE,
        DeclarationKind.INDEX_SIGNATURE,
        DeclarationKind.GET_SIGNATURE,
    }
)
