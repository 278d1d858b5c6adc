"""Pytest hooks to collect wire vectors into JSON fixtures."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from craft_toolkit.definitions import call_from_dict, create_from_dict
from craft_toolkit.errors import EncodeError

_WIRE_VECTORS: list[dict[str, Any]] = []
_VECTOR_CASES: dict[str, list[dict[str, Any]]] = {}


def _assemble(kind: str, definition: dict[str, Any]) -> dict[str, Any]:
    """Assemble a definition, recording the error code on failure."""
    try:
        if kind == "call":
            body = call_from_dict(definition)
        else:
            body = create_from_dict(definition)
    except EncodeError as e:
        return {"ok": False, "error": e.code.name, "field": e.field, "body": None}
    return {"ok": True, "error": None, "field": None, "body": body}


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--output",
        action="store",
        default=None,
        help="Output directory for generated fixtures",
    )


@pytest.fixture
def wire_vector() -> Callable[[str, str, dict[str, Any]], dict[str, Any]]:
    """Assemble a definition, collect it as a wire vector and return the outcome."""

    def _wire_vector(name: str, kind: str, definition: dict[str, Any]) -> dict[str, Any]:
        expected = _assemble(kind, definition)
        _WIRE_VECTORS.append(
            {
                "name": name,
                "input": {"kind": kind, "definition": definition},
                "expected": expected,
            }
        )
        return expected

    return _wire_vector


@pytest.fixture
def vector_test_group() -> Callable[[str, dict[str, Any]], None]:
    """Collect pre-built test_vectors under a specific fixture path."""

    def _vector_test_group(rel_path: str, vector: dict[str, Any]) -> None:
        _VECTOR_CASES.setdefault(rel_path, []).append(vector)

    return _vector_test_group


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    output_dir = session.config.getoption("--output")
    if not output_dir:
        return

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    if _WIRE_VECTORS:
        (out / "wire_format.json").write_text(
            json.dumps({"vectors": _WIRE_VECTORS}, indent=2)
        )

    for rel_path, vectors in _VECTOR_CASES.items():
        if not vectors:
            continue
        target = out / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"test_vectors": vectors}, indent=2))
