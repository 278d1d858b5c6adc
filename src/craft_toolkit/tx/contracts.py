"""Contract transaction assembly (ContractCreate, ContractCall)."""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from ..config import MAX_COMPUTATION_ALLOWANCE, MAX_FUNCTION_PARAMETERS, MAX_FUNCTIONS
from ..crypto.address import decode_classic_address
from ..encoding import (
    check_send_amount,
    encode_name,
    encode_value,
    is_hex,
    located,
    serialize_function_parameter,
    serialize_instance_parameter,
    serialize_instance_value,
    serialize_parameter,
)
from ..errors import ErrorCode, err
from ..types import (
    ContractCode,
    ContractHash,
    ContractSource,
    Function,
    InstanceParameter,
    InstanceParameterValue,
    IssuedAmount,
    Parameter,
    ParameterName,
    ParameterType,
    coerce_name,
)

logger = logging.getLogger(__name__)

CONTRACT_HASH_HEX_LENGTH = 64


def serialize_function(fn: Function) -> dict[str, Any]:
    if len(fn.parameters) > MAX_FUNCTION_PARAMETERS:
        raise err(
            ErrorCode.TOO_MANY_PARAMETERS,
            f"{len(fn.parameters)} parameters exceed the limit of {MAX_FUNCTION_PARAMETERS}",
        )
    entry: dict[str, Any] = {"FunctionName": located("FunctionName", encode_name, fn.name)}
    check_send_amount((p.flag for p in fn.parameters), "Parameters")
    if fn.parameters:
        params = []
        for i, p in enumerate(fn.parameters):
            params.append(located(f"Parameters[{i}]", serialize_function_parameter, p))
        entry["Parameters"] = params
    return {"Function": entry}


def build_function_table(functions: Sequence[Function]) -> list[dict[str, Any]]:
    if len(functions) > MAX_FUNCTIONS:
        raise err(
            ErrorCode.TOO_MANY_FUNCTIONS,
            f"{len(functions)} functions exceed the limit of {MAX_FUNCTIONS}",
        )

    table = []
    seen: dict[str, int] = {}
    for i, fn in enumerate(functions):
        entry = located(f"Functions[{i}]", serialize_function, fn)
        key = entry["Function"]["FunctionName"].upper()
        if key in seen:
            raise err(
                ErrorCode.DUPLICATE_FUNCTION_NAME,
                f"function name {key} already used by Functions[{seen[key]}]",
                f"Functions[{i}]",
            )
        seen[key] = i
        table.append(entry)
    return table


def pair_instance_params(
    params: Sequence[InstanceParameter],
    values: Sequence[InstanceParameterValue],
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    if len(params) != len(values):
        raise err(
            ErrorCode.ARITY_MISMATCH,
            f"{len(params)} instance parameters but {len(values)} values",
        )

    for i, (param, value) in enumerate(zip(params, values)):
        if param.type != value.type:
            raise err(
                ErrorCode.TYPE_MISMATCH,
                f"declared {param.type.value}, value is {value.type.value}",
                f"InstanceParameterValues[{i}]",
            )
        if param.flag != value.flag:
            raise err(
                ErrorCode.TYPE_MISMATCH,
                f"declared flag {int(param.flag):#x}, value flag {int(value.flag):#x}",
                f"InstanceParameterValues[{i}]",
            )

    check_send_amount((p.flag for p in params), "InstanceParameters")

    declared = []
    assigned = []
    for i, (param, value) in enumerate(zip(params, values)):
        declared.append(located(f"InstanceParameters[{i}]", serialize_instance_parameter, param))
        assigned.append(located(f"InstanceParameterValues[{i}]", serialize_instance_value, value))
    return declared, assigned


def _encode_source(source: ContractSource) -> tuple[str, str]:
    if isinstance(source, ContractCode):
        if not source.hex or not is_hex(source.hex):
            raise err(ErrorCode.INVALID_HEX, "contract code must be non-empty hex", "ContractCode")
        return "ContractCode", source.hex.upper()
    if isinstance(source, ContractHash):
        if len(source.hex) != CONTRACT_HASH_HEX_LENGTH or not is_hex(source.hex):
            raise err(
                ErrorCode.INVALID_HEX,
                f"contract hash must be {CONTRACT_HASH_HEX_LENGTH} hex digits",
                "ContractHash",
            )
        return "ContractHash", source.hex.upper()
    raise err(ErrorCode.INVALID_HEX, f"unsupported contract source: {source!r}", "ContractCode")


def _encode_u32(field: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise err(ErrorCode.VALUE_OUT_OF_RANGE, f"must be an integer: {value!r}", field)
    if not 0 <= value <= MAX_COMPUTATION_ALLOWANCE:
        raise err(ErrorCode.VALUE_OUT_OF_RANGE, f"{value} does not fit UINT32", field)
    return value


def _encode_fee(fee: Any) -> str:
    if isinstance(fee, (dict, IssuedAmount)):
        raise err(ErrorCode.INVALID_AMOUNT, "fee must be in drops", "Fee")
    return located("Fee", encode_value, ParameterType.AMOUNT, fee)


def _common_fields(body: dict[str, Any], account: Optional[str]) -> None:
    if account is not None:
        located("Account", decode_classic_address, account)
        body["Account"] = account


def assemble_create(
    source: ContractSource,
    flags: int,
    functions: Sequence[Function],
    instance_params: Sequence[InstanceParameter] = (),
    instance_values: Sequence[InstanceParameterValue] = (),
    *,
    account: Optional[str] = None,
    fee: Optional[Any] = None,
) -> dict[str, Any]:
    """Build a ContractCreate transaction body.

    Fails with the first :class:`EncodeError` raised by the function table,
    the instance pairing or the code reference; nothing partial is returned.
    """
    table = build_function_table(functions)
    declared, assigned = pair_instance_params(instance_params, instance_values)
    code_field, code = _encode_source(source)

    body: dict[str, Any] = {"TransactionType": "ContractCreate"}
    _common_fields(body, account)
    body[code_field] = code
    body["Flags"] = int(_encode_u32("Flags", flags))
    if table:
        body["Functions"] = table
    if declared:
        body["InstanceParameters"] = declared
        body["InstanceParameterValues"] = assigned
    if fee is not None:
        body["Fee"] = _encode_fee(fee)

    logger.debug(
        "assembled ContractCreate: %d functions, %d instance parameters",
        len(table),
        len(declared),
    )
    return body


def assemble_call(
    contract_account: str,
    function_name: ParameterName,
    parameters: Sequence[Parameter],
    computation_allowance: int,
    *,
    account: Optional[str] = None,
    fee: Optional[Any] = None,
) -> dict[str, Any]:
    """Build a ContractCall transaction body.

    Parameters are encoded in the given order; they are not matched against
    the deployed function signature (see :func:`check_call_signature`).
    """
    body: dict[str, Any] = {"TransactionType": "ContractCall"}
    _common_fields(body, account)
    located("ContractAccount", decode_classic_address, contract_account)
    body["ContractAccount"] = contract_account
    name = coerce_name(function_name)
    if name is None:
        raise err(ErrorCode.INVALID_HEX, "function name is required", "FunctionName")
    body["FunctionName"] = located("FunctionName", encode_name, name)
    body["ComputationAllowance"] = _encode_u32("ComputationAllowance", computation_allowance)

    encoded = []
    for i, p in enumerate(parameters):
        encoded.append(located(f"Parameters[{i}]", serialize_parameter, p))
    check_send_amount((p.flag for p in parameters), "Parameters")
    if encoded:
        body["Parameters"] = encoded
    if fee is not None:
        body["Fee"] = _encode_fee(fee)

    logger.debug(
        "assembled ContractCall %s on %s with %d parameters",
        body["FunctionName"],
        contract_account,
        len(encoded),
    )
    return body


def check_call_signature(function: Function, parameters: Sequence[Parameter]) -> None:
    """Check call parameters against a locally known function declaration."""
    if len(function.parameters) != len(parameters):
        raise err(
            ErrorCode.ARITY_MISMATCH,
            f"function declares {len(function.parameters)} parameters, call has {len(parameters)}",
            "Parameters",
        )
    for i, (declared, given) in enumerate(zip(function.parameters, parameters)):
        if declared.type != given.type or declared.flag != given.flag:
            raise err(
                ErrorCode.TYPE_MISMATCH,
                f"expected {declared.type.value} flag {int(declared.flag):#x}, "
                f"got {given.type.value} flag {int(given.flag):#x}",
                f"Parameters[{i}]",
            )
