"""YAML contract definition files.

A create definition names the code (inline hex, a compiled module file, a
contract in the cargo build directory or the hash of code already on the
ledger), flags, instance parameters with their values and the function
table. A call definition names the contract account, function and call
parameters. Both load into the model types and assemble
through :mod:`craft_toolkit.tx.contracts`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml

from .config import DEFAULT_COMPUTATION_ALLOWANCE
from .errors import ErrorCode, err
from .tx.contracts import assemble_call, assemble_create
from .types import (
    ContractCode,
    ContractFlag,
    ContractHash,
    ContractSource,
    Function,
    FunctionParameter,
    InstanceParameter,
    InstanceParameterValue,
    Parameter,
    ParameterName,
    parameter_name,
)

BUILD_DIR = "build"
WASM_TARGET = "wasm32v1-none"


class PlainDumper(yaml.SafeDumper):
    pass


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style=None)


PlainDumper.add_representer(str, _str_representer)


def dump_yaml(data: Any) -> str:
    return yaml.dump(data, Dumper=PlainDumper, sort_keys=False, width=4096)


def read_module_hex(path: Path) -> str:
    """Compiled contract module as upper-case hex."""
    return Path(path).read_bytes().hex().upper()


def contract_module_path(name: str, build_dir: Path = Path(BUILD_DIR)) -> Path:
    """Release module of contract ``name`` under a cargo build directory."""
    return Path(build_dir) / name / WASM_TARGET / "release" / f"{name}.wasm"


def _load(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(Path(path).read_text())
    except yaml.YAMLError as exc:
        raise err(ErrorCode.INVALID_DEFINITION, f"{path}: {exc}") from None
    if not isinstance(data, dict):
        raise err(ErrorCode.INVALID_DEFINITION, f"{path}: definition must be a mapping")
    return data


def _items(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = data.get(key) or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        raise err(ErrorCode.INVALID_DEFINITION, f"{key} must be a list of mappings")
    return items


def _require(item: dict[str, Any], key: str, where: str) -> Any:
    if key not in item:
        raise err(ErrorCode.INVALID_DEFINITION, f"missing {key!r}", where)
    return item[key]


def _text(item: dict[str, Any], key: str, where: Optional[str] = None) -> str:
    # Unquoted YAML scalars such as 0031 or 1.5 arrive as numbers.
    value = item[key]
    if not isinstance(value, str):
        raise err(ErrorCode.INVALID_DEFINITION, f"{key} must be a quoted string, got {value!r}", where or key)
    return value


def _name(item: dict[str, Any], where: Optional[str] = None) -> Optional[ParameterName]:
    if item.get("name") is None:
        return None
    return parameter_name(_text(item, "name", where), bool(item.get("name_hex", False)))


def _module(path: Path) -> ContractCode:
    try:
        return ContractCode(read_module_hex(path))
    except OSError as exc:
        raise err(ErrorCode.INVALID_DEFINITION, f"cannot read module {path}: {exc.strerror}") from None


def _source(data: dict[str, Any], base_dir: Path) -> ContractSource:
    if "code" in data:
        return ContractCode(_text(data, "code"))
    if "code_contract" in data:
        return _module(contract_module_path(_text(data, "code_contract"), base_dir / BUILD_DIR))
    if "code_file" in data:
        return _module(base_dir / _text(data, "code_file"))
    if "hash" in data:
        return ContractHash(_text(data, "hash"))
    raise err(ErrorCode.INVALID_DEFINITION, "one of code, code_contract, code_file or hash is required")


def _flags(data: dict[str, Any]) -> int:
    flags = data.get("flags", 0)
    if isinstance(flags, bool) or not isinstance(flags, int):
        raise err(ErrorCode.INVALID_DEFINITION, "flags must be an integer", "flags")
    if data.get("immutable"):
        flags |= ContractFlag.IMMUTABLE
    return int(flags)


def create_from_dict(data: dict[str, Any], base_dir: Path = Path(".")) -> dict[str, Any]:
    instance_params = []
    instance_values = []
    for i, item in enumerate(_items(data, "instance")):
        where = f"instance[{i}]"
        tag = _require(item, "type", where)
        flag = item.get("flag", 0)
        instance_params.append(InstanceParameter(tag, flag, _name(item, where)))
        instance_values.append(InstanceParameterValue(tag, _require(item, "value", where), flag))

    functions = []
    for i, item in enumerate(_items(data, "functions")):
        where = f"functions[{i}]"
        params = tuple(
            FunctionParameter(_require(p, "type", f"{where}.parameters[{j}]"), p.get("flag", 0), _name(p, f"{where}.parameters[{j}]"))
            for j, p in enumerate(_items(item, "parameters"))
        )
        functions.append(Function(_name(item, where) or _require(item, "name", where), params))

    return assemble_create(
        _source(data, base_dir),
        _flags(data),
        functions,
        instance_params,
        instance_values,
        account=data.get("account"),
        fee=data.get("fee"),
    )


def call_from_dict(data: dict[str, Any]) -> dict[str, Any]:
    parameters = [
        Parameter(
            _require(p, "type", f"parameters[{i}]"),
            _require(p, "value", f"parameters[{i}]"),
            p.get("flag", 0),
            _name(p, f"parameters[{i}]"),
        )
        for i, p in enumerate(_items(data, "parameters"))
    ]
    _require(data, "function", "function")
    function = parameter_name(_text(data, "function"), bool(data.get("function_hex", False)))
    return assemble_call(
        _require(data, "contract_account", "contract_account"),
        function,
        parameters,
        data.get("computation_allowance", DEFAULT_COMPUTATION_ALLOWANCE),
        account=data.get("account"),
        fee=data.get("fee"),
    )


def load_create(path: Path) -> dict[str, Any]:
    path = Path(path)
    return create_from_dict(_load(path), path.parent)


def load_call(path: Path) -> dict[str, Any]:
    return call_from_dict(_load(Path(path)))


def load_definition(path: Path) -> tuple[str, dict[str, Any]]:
    """Load either kind of definition; returns ``(kind, body)``."""
    path = Path(path)
    data = _load(path)
    if "contract_account" in data:
        return "call", call_from_dict(data)
    return "create", create_from_dict(data, path.parent)

