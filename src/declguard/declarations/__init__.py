"""Declaration tree model.

This package turns generator output into immutable declaration trees and
flattens them into addressable nodes.

Example:
    from declguard.declarations import load_declarations, flatten

    tree = load_declarations("api-1.0.json")
    for flat in flatten(tree, root_name=""):
        print(flat.qualified_path, flat.kind.value)
"""

from declguard.declarations.kinds import DeclarationKind, RETURN_TYPE_KINDS
from declguard.declarations.types import (
    IndexDescriptor,
    MemberDescriptor,
    TypeDescriptor,
    is_assignable,
    is_narrowing,
    is_widening,
    render_type,
)
from declguard.declarations.nodes import (
    DeclarationFlags,
    DeclarationNode,
    FlatNode,
    SourceLocation,
    Visibility,
)
from declguard.declarations.flatten import flatten, index_by_address, index_by_key, join_path
from declguard.declarations.loader import (
    DeclarationLoadError,
    load_declarations,
    parse_declarations,
)

__all__ = [
    # Kinds
    "DeclarationKind",
    "RETURN_TYPE_KINDS",
    # Types
    "IndexDescriptor",
    "MemberDescriptor",
    "TypeDescriptor",
    "is_assignable",
    "is_narrowing",
    "is_widening",
    "render_type",
    # Nodes
    "DeclarationFlags",
    "DeclarationNode",
    "FlatNode",
    "SourceLocation",
    "Visibility",
    # Flattening
    "flatten",
    "index_by_address",
    "index_by_key",
    "join_path",
    # Loading
    "DeclarationLoadError",
    "load_declarations",
    "parse_declarations",
]
