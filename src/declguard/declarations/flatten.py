"""Declaration tree flattening.

Turns a nested ``DeclarationNode`` tree into an ordered list of
``FlatNode`` entries, each tagged with its qualified path. The order is
pre-order: every parent precedes its children, and siblings keep their
declaration order.
"""

from __future__ import annotations

import logging
from collections import Counter

from declguard.declarations.nodes import DeclarationNode, FlatNode

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "."
ORDINAL_MARKER = "#"
KEY_SEPARATOR = "/"


def join_path(prefix: str, name: str) -> str:
    """Join a name onto a qualified path, skipping empty parts."""
    if not prefix:
        return name
    if not name:
        return prefix
    return f"{prefix}{PATH_SEPARATOR}{name}"


def flatten(tree: DeclarationNode, root_name: str | None = None) -> list[FlatNode]:
    """Flatten a declaration tree.

    Args:
        tree: Root of the declaration tree.
        root_name: Overrides the root's name in paths. Pass ``""`` to leave
            the root name out of every path.

    Returns:
        Flat nodes in pre-order.
    """
    name = tree.name if root_name is None else root_name
    root = FlatNode(node=tree, qualified_path=name, address=name, key=_key_segment(tree, name))

    result: list[FlatNode] = []
    stack: list[FlatNode] = [root]
    while stack:
        current = stack.pop()
        result.append(current)

        children = _expand(current)
        stack.extend(reversed(children))

    logger.debug("Flattened %d declarations under %r", len(result), name)
    return result


def _kind_tag(node: DeclarationNode) -> str:
    return node.kind.value if node.kind.is_known else node.display_kind


def _key_segment(node: DeclarationNode, segment: str) -> str:
    return f"{_kind_tag(node)}:{segment}"


def _expand(parent: FlatNode) -> list[FlatNode]:
    # Merged declarations (a function and a namespace of the same name) are
    # counted separately, so reordering them keeps their ordinals.
    seen: Counter[tuple[str, str]] = Counter()
    expanded: list[FlatNode] = []
    for child in parent.node.children:
        slot = (child.name, _kind_tag(child))
        ordinal = seen[slot]
        seen[slot] += 1

        segment = child.name if ordinal == 0 else f"{child.name}{ORDINAL_MARKER}{ordinal}"
        address = f"{parent.address}{PATH_SEPARATOR}{segment}" if parent.address else segment
        expanded.append(
            FlatNode(
                node=child,
                qualified_path=join_path(parent.qualified_path, child.name),
                address=address,
                parent_address=parent.address,
                key=f"{parent.key}{KEY_SEPARATOR}{_key_segment(child, segment)}",
                parent_key=parent.key,
                depth=parent.depth + 1,
                ordinal=ordinal,
            )
        )
    return expanded


def index_by_address(nodes: list[FlatNode]) -> dict[str, FlatNode]:
    """Build an address lookup over a flattened sequence.

    When two entries share an address the first one wins.
    """
    index: dict[str, FlatNode] = {}
    for flat in nodes:
        index.setdefault(flat.address, flat)
    return index


def index_by_key(nodes: list[FlatNode]) -> dict[str, FlatNode]:
    """Build a lookup over a flattened sequence by kind-qualified key."""
    return {flat.key: flat for flat in nodes}
