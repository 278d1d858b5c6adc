"""Consume fixtures and re-check them against the encoder."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from craft_toolkit.definitions import call_from_dict, create_from_dict
from craft_toolkit.encoding import encode_value
from craft_toolkit.errors import EncodeError

ROOT = Path(__file__).resolve().parent.parent


def _outcome(fn, *args: Any) -> tuple[Any, Any]:
    try:
        return fn(*args), None
    except EncodeError as e:
        return None, e.code.name


def _check_wire_vectors(path: Path) -> list[str]:
    failures: list[str] = []
    data = json.loads(path.read_text())
    for vec in data.get("vectors", []):
        kind = vec["input"]["kind"]
        assemble = call_from_dict if kind == "call" else create_from_dict
        body, error = _outcome(assemble, vec["input"]["definition"])
        expected = vec["expected"]
        if error != expected["error"]:
            failures.append(f"{vec['name']}: error_mismatch ({error} != {expected['error']})")
        elif body != expected["body"]:
            failures.append(f"{vec['name']}: body_mismatch")
    return failures


def _check_value_vectors(path: Path) -> list[str]:
    failures: list[str] = []
    data = json.loads(path.read_text())
    for i, vec in enumerate(data.get("test_vectors", [])):
        wire, error = _outcome(encode_value, vec["type"], vec["value"])
        if (wire, error) != (vec["expected"]["wire"], vec["expected"]["error"]):
            failures.append(f"{path.name}[{i}] {vec['type']}: value_mismatch")
    return failures


def main(argv: list[str]) -> None:
    fixtures = Path(argv[0]) if argv else ROOT / "fixtures"

    failures: list[str] = []

    wire = fixtures / "wire_format.json"
    if wire.exists():
        failures.extend(_check_wire_vectors(wire))

    values = fixtures / "encoding" / "values.json"
    if values.exists():
        failures.extend(_check_value_vectors(values))

    if failures:
        for f in failures:
            print("FAIL", f)
        raise SystemExit(1)

    print("All fixtures passed")


if __name__ == "__main__":
    main(sys.argv[1:])
