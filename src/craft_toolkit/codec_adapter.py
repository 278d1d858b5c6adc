"""Convert between assembled transaction bodies and ledger JSON.

Rendering is plain ``json``. Parsing turns the ledger's parameter envelopes
(as returned by ``contract_info`` or read back from fixtures) into model
objects, so that serializing a parsed envelope reproduces it exactly.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from .encoding import decode_value
from .errors import ErrorCode, err
from .types import (
    Function,
    FunctionParameter,
    HexName,
    InstanceParameter,
    InstanceParameterValue,
    Issue,
    IssuedAmount,
    Parameter,
    ParameterFlag,
    ParameterType,
)


def tx_to_json(body: Mapping[str, Any], indent: Optional[int] = None) -> str:
    return json.dumps(body, indent=indent)


def _unwrap(envelope: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(envelope, Mapping) or not isinstance(envelope.get(key), Mapping):
        raise err(ErrorCode.INVALID_DEFINITION, f"expected a {key} envelope")
    return envelope[key]


def _name(inner: Mapping[str, Any], key: str = "ParameterName") -> Optional[HexName]:
    value = inner.get(key)
    return HexName(value) if value is not None else None


def _flag(inner: Mapping[str, Any]) -> ParameterFlag:
    return ParameterFlag.parse(inner.get("ParameterFlag", 0))


def _declared_type(inner: Mapping[str, Any]) -> ParameterType:
    declared = inner.get("ParameterType")
    if not isinstance(declared, Mapping):
        raise err(ErrorCode.INVALID_DEFINITION, "missing ParameterType")
    return ParameterType.parse(declared.get("type"))


def _typed_value(inner: Mapping[str, Any]) -> tuple[ParameterType, Any]:
    typed = inner.get("ParameterValue")
    if not isinstance(typed, Mapping) or "value" not in typed:
        raise err(ErrorCode.INVALID_DEFINITION, "missing ParameterValue")
    tag = ParameterType.parse(typed.get("type"))
    value = typed["value"]
    if tag == ParameterType.AMOUNT and isinstance(value, Mapping):
        return tag, IssuedAmount(value.get("currency"), value.get("issuer"), value.get("value"))
    if tag == ParameterType.ISSUE and isinstance(value, Mapping):
        return tag, Issue(value.get("currency"), value.get("issuer"))
    return tag, decode_value(tag, value)


def parameter_from_xrpl(envelope: Any) -> Parameter:
    inner = _unwrap(envelope, "Parameter")
    tag, value = _typed_value(inner)
    return Parameter(tag, value, _flag(inner), _name(inner))


def function_parameter_from_xrpl(envelope: Any) -> FunctionParameter:
    inner = _unwrap(envelope, "Parameter")
    return FunctionParameter(_declared_type(inner), _flag(inner), _name(inner))


def function_from_xrpl(envelope: Any) -> Function:
    inner = _unwrap(envelope, "Function")
    name = _name(inner, "FunctionName")
    if name is None:
        raise err(ErrorCode.INVALID_DEFINITION, "missing FunctionName")
    params = inner.get("Parameters") or []
    return Function(name, tuple(function_parameter_from_xrpl(p) for p in params))


def instance_parameter_from_xrpl(envelope: Any) -> InstanceParameter:
    inner = _unwrap(envelope, "InstanceParameter")
    return InstanceParameter(_declared_type(inner), _flag(inner), _name(inner))


def instance_value_from_xrpl(envelope: Any) -> InstanceParameterValue:
    inner = _unwrap(envelope, "InstanceParameterValue")
    tag, value = _typed_value(inner)
    return InstanceParameterValue(tag, value, _flag(inner))
