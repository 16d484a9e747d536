"""Loading declaration trees from generator output files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from declguard.declarations.nodes import DeclarationNode
from declguard.errors import DeclguardError

logger = logging.getLogger(__name__)


class DeclarationLoadError(DeclguardError):
    """Raised when a declaration file cannot be read or is not a tree."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path


def parse_declarations(data: Any, root_name: str | None = None) -> DeclarationNode:
    """Build a declaration tree from an already-decoded record.

    Args:
        data: Root record as produced by the generator.
        root_name: Optional replacement for the root's name.

    Returns:
        The immutable declaration tree.

    Raises:
        DeclarationLoadError: If the record is not a JSON object.
    """
    if not isinstance(data, dict):
        raise DeclarationLoadError(
            f"Declaration tree must be a JSON object, got {type(data).__name__}"
        )
    if root_name is not None:
        data = {**data, "name": root_name}
    return DeclarationNode.from_dict(data)


def load_declarations(path: str | Path, root_name: str | None = None) -> DeclarationNode:
    """Read a generator JSON file into a declaration tree.

    Args:
        path: Path to the JSON file.
        root_name: Optional replacement for the root's name.

    Returns:
        The immutable declaration tree.

    Raises:
        DeclarationLoadError: If the file is missing, not JSON, or not a tree.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DeclarationLoadError(f"Cannot read declaration file {path}: {e}", path) from e

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise DeclarationLoadError(f"Invalid JSON in {path}: {e}", path) from e

    try:
        tree = parse_declarations(data, root_name=root_name)
    except DeclarationLoadError as e:
        raise DeclarationLoadError(f"{e} ({path})", path) from e

    logger.debug("Loaded declaration tree %r from %s", tree.name, path)
    return tree
