"""Shared fixtures for declguard tests.

Declaration trees are written as raw generator records, the same shape the
loader reads from disk, so every test also exercises parsing.
"""

from __future__ import annotations

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from declguard.logging import reset_logging


# =============================================================================
# Record builders
# =============================================================================


def intrinsic(name: str) -> dict[str, Any]:
    return {"type": "intrinsic", "name": name}


def union(*types: dict[str, Any]) -> dict[str, Any]:
    return {"type": "union", "types": list(types)}


def literal(value: Any) -> dict[str, Any]:
    return {"type": "literal", "value": value}


def reference(name: str, *arguments: dict[str, Any]) -> dict[str, Any]:
    data: dict[str, Any] = {"type": "reference", "name": name}
    if arguments:
        data["typeArguments"] = list(arguments)
    return data


def decl(
    name: str,
    kind: str,
    type: dict[str, Any] | None = None,
    children: list[dict[str, Any]] | None = None,
    flags: dict[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    data: dict[str, Any] = {"name": name, "kindString": kind, "flags": flags or {}}
    if type is not None:
        data["type"] = type
    if children:
        data["children"] = children
    data.update(extra)
    return data


def project(*children: dict[str, Any], name: str = "lib") -> dict[str, Any]:
    return decl(name, "Project", children=list(children))


def widget(*members: dict[str, Any], kind: str = "Class") -> dict[str, Any]:
    return decl("Widget", kind, children=list(members))


def prop(name: str, type: dict[str, Any], **flags: Any) -> dict[str, Any]:
    return decl(name, "Property", type=type, flags=flags)


def param(name: str, type: dict[str, Any], **flags: Any) -> dict[str, Any]:
    return decl(name, "Parameter", type=type, flags=flags)


def signature(
    name: str,
    returns: dict[str, Any],
    *parameters: dict[str, Any],
    kind: str = "Call signature",
) -> dict[str, Any]:
    data = decl(name, kind, type=returns)
    if parameters:
        data["parameters"] = list(parameters)
    return data


def method(name: str, *signatures: dict[str, Any], **flags: Any) -> dict[str, Any]:
    return decl(name, "Method", flags=flags, signatures=list(signatures))


def function(name: str, *signatures: dict[str, Any]) -> dict[str, Any]:
    return decl(name, "Function", signatures=list(signatures))


@pytest.fixture
def td():
    """Builders for raw declaration records."""
    return SimpleNamespace(
        intrinsic=intrinsic,
        union=union,
        literal=literal,
        reference=reference,
        decl=decl,
        project=project,
        widget=widget,
        prop=prop,
        param=param,
        signature=signature,
        method=method,
        function=function,
    )


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document into the test directory and return its path."""

    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers installed by CLI runs so later tests log nowhere."""
    yield
    reset_logging()
