"""Wire-format encoding of contract parameters (JSON transaction fields)."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable, Iterable, Optional

from .config import (
    CURRENCY_CODE_CHARS,
    CURRENCY_HEX_LENGTH,
    MAX_DROPS,
    NATIVE_CURRENCY,
)
from .crypto.address import decode_classic_address
from .errors import ErrorCode, EncodeError, err
from .types import (
    TYPE_INFO,
    FunctionParameter,
    HexName,
    InstanceParameter,
    InstanceParameterValue,
    Issue,
    IssuedAmount,
    Parameter,
    ParameterFlag,
    ParameterName,
    ParameterType,
    RawName,
    TypeInfo,
    ValueShape,
)

_HEX_RE = re.compile(r"[0-9A-Fa-f]*")
_DIGITS_RE = re.compile(r"[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# Integers up to this width are JSON numbers; wider ones are hex strings.
_JSON_INT_MAX_WIDTH = 4

_MAX_DROPS_DIGITS = len(str(MAX_DROPS))


def _max_digits(bits: int) -> int:
    return len(str((1 << bits) - 1))


def _short(value: int) -> str:
    return str(value) if value.bit_length() <= 256 else f"<{value.bit_length()}-bit integer>"


# --- Hex helpers ---


def is_hex(value: Any) -> bool:
    return (
        isinstance(value, str)
        and len(value) % 2 == 0
        and _HEX_RE.fullmatch(value) is not None
    )


def string_to_hex(text: str) -> str:
    return text.encode("utf-8").hex().upper()


def hex_to_string(value: str) -> str:
    if not is_hex(value):
        raise err(ErrorCode.INVALID_HEX, f"not valid hex: {value!r}")
    try:
        return bytes.fromhex(value).decode("utf-8")
    except UnicodeDecodeError:
        raise err(ErrorCode.INVALID_HEX, f"hex is not UTF-8 text: {value!r}") from None


# --- 4.1 type / flag ---


def encode_type(tag: Any) -> TypeInfo:
    return TYPE_INFO[ParameterType.parse(tag)]


def validate_flag(flag: Any, tag: Any) -> None:
    flag = ParameterFlag.parse(flag)
    info = encode_type(tag)
    if ParameterFlag.SEND_AMOUNT in flag and info.tag != ParameterType.AMOUNT:
        raise err(
            ErrorCode.FLAG_TYPE_MISMATCH,
            f"tfSendAmount requires AMOUNT, got {info.tag.value}",
        )


def check_send_amount(flags: Iterable[ParameterFlag], label: str) -> None:
    count = sum(1 for flag in flags if ParameterFlag.SEND_AMOUNT in flag)
    if count > 1:
        raise err(ErrorCode.DUPLICATE_SEND_AMOUNT, f"{label}: {count} parameters carry tfSendAmount")


# --- 4.2 values ---


def _encode_integer(info: TypeInfo, value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise err(ErrorCode.VALUE_OUT_OF_RANGE, f"{info.tag.value} requires an integer: {value!r}")
    if isinstance(value, str):
        if _DIGITS_RE.fullmatch(value) is None:
            raise err(ErrorCode.VALUE_OUT_OF_RANGE, f"{info.tag.value} requires decimal digits: {value!r}")
        if len(value.lstrip("0")) > _max_digits(info.bits):
            raise err(ErrorCode.VALUE_OUT_OF_RANGE, f"{len(value)} digits do not fit {info.tag.value}")
        value = int(value.lstrip("0") or "0")
    if value < 0 or value >= 1 << info.bits:
        raise err(ErrorCode.VALUE_OUT_OF_RANGE, f"{_short(value)} does not fit {info.tag.value}")
    if info.byte_width <= _JSON_INT_MAX_WIDTH:
        return value
    return f"{value:0{info.byte_width * 2}X}"


def _encode_blob(info: TypeInfo, value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex().upper()
    if not is_hex(value):
        raise err(ErrorCode.INVALID_HEX, f"VL requires even-length hex: {value!r}")
    return value.upper()


def _encode_address(info: TypeInfo, value: Any) -> str:
    decode_classic_address(value)
    return value


def encode_currency(value: Any) -> str:
    if isinstance(value, str):
        if len(value) == 3 and all(c in CURRENCY_CODE_CHARS for c in value):
            return value
        if len(value) == CURRENCY_HEX_LENGTH and is_hex(value):
            # A leading zero byte is reserved for the standard 3-character form.
            if value[:2] == "00":
                raise err(ErrorCode.INVALID_CURRENCY, f"hex currency must not start with 00: {value!r}")
            return value.upper()
    raise err(ErrorCode.INVALID_CURRENCY, f"invalid currency code: {value!r}")


def _encode_currency(info: TypeInfo, value: Any) -> str:
    return encode_currency(value)


def _encode_decimal(value: Any, code: ErrorCode) -> str:
    if isinstance(value, bool):
        raise err(code, f"not a number: {value!r}")
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError:
            raise err(code, f"number too large: {_short(value)}") from None
    if isinstance(value, str) and _DECIMAL_RE.fullmatch(value) is not None:
        return value
    raise err(code, f"not a decimal number: {value!r}")


def _encode_number(info: TypeInfo, value: Any) -> str:
    return _encode_decimal(value, ErrorCode.INVALID_NUMBER)


def _encode_issued_amount(amount: IssuedAmount) -> dict[str, str]:
    currency = encode_currency(amount.currency)
    if currency == NATIVE_CURRENCY:
        raise err(ErrorCode.INVALID_CURRENCY, "issued amount cannot use the native currency")
    decode_classic_address(amount.issuer)
    value = _encode_decimal(amount.value, ErrorCode.INVALID_AMOUNT)
    if value.startswith("-"):
        raise err(ErrorCode.INVALID_AMOUNT, f"amount must not be negative: {value!r}")
    return {"currency": currency, "issuer": amount.issuer, "value": value}


def _encode_amount(info: TypeInfo, value: Any) -> Any:
    if isinstance(value, Mapping):
        try:
            value = IssuedAmount(value["currency"], value["issuer"], value["value"])
        except KeyError as exc:
            raise err(ErrorCode.INVALID_AMOUNT, f"issued amount missing {exc.args[0]!r}") from None
    if isinstance(value, IssuedAmount):
        return _encode_issued_amount(value)

    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise err(ErrorCode.INVALID_AMOUNT, f"amount must be drops or an issued amount: {value!r}")
    if isinstance(value, str):
        if _DIGITS_RE.fullmatch(value) is None:
            raise err(ErrorCode.INVALID_AMOUNT, f"drops must be a non-negative integer string: {value!r}")
        if len(value.lstrip("0")) > _MAX_DROPS_DIGITS:
            raise err(ErrorCode.INVALID_AMOUNT, f"amount exceeds maximum drops: {len(value)} digits")
        value = int(value.lstrip("0") or "0")
    if value < 0:
        raise err(ErrorCode.INVALID_AMOUNT, f"amount must not be negative: {_short(value)}")
    if value > MAX_DROPS:
        raise err(ErrorCode.INVALID_AMOUNT, f"amount exceeds maximum drops: {_short(value)}")
    return str(value)


def _encode_issue(info: TypeInfo, value: Any) -> dict[str, str]:
    if isinstance(value, Mapping):
        if "currency" not in value:
            raise err(ErrorCode.INVALID_CURRENCY, "issue missing 'currency'")
        value = Issue(value["currency"], value.get("issuer"))
    if not isinstance(value, Issue):
        raise err(ErrorCode.INVALID_CURRENCY, f"issue must be currency + issuer: {value!r}")

    currency = encode_currency(value.currency)
    if currency == NATIVE_CURRENCY:
        if value.issuer is not None:
            raise err(ErrorCode.INVALID_ADDRESS, "native issue must not have an issuer")
        return {"currency": currency}
    if value.issuer is None:
        raise err(ErrorCode.INVALID_ADDRESS, f"issue {currency} requires an issuer")
    decode_classic_address(value.issuer)
    return {"currency": currency, "issuer": value.issuer}


_VALUE_ENCODERS: dict[ValueShape, Callable[[TypeInfo, Any], Any]] = {
    ValueShape.INTEGER: _encode_integer,
    ValueShape.BLOB: _encode_blob,
    ValueShape.ADDRESS: _encode_address,
    ValueShape.AMOUNT: _encode_amount,
    ValueShape.DECIMAL: _encode_number,
    ValueShape.CURRENCY: _encode_currency,
    ValueShape.ISSUE: _encode_issue,
}


def encode_value(tag: Any, value: Any) -> Any:
    """Encode ``value`` as the JSON wire value of parameter type ``tag``."""
    info = encode_type(tag)
    return _VALUE_ENCODERS[info.shape](info, value)


def decode_value(tag: Any, wire: Any) -> Any:
    """Inverse of :func:`encode_value` for integer types.

    Other shapes have no separate in-memory form and are returned as-is.
    """
    info = encode_type(tag)
    if info.shape != ValueShape.INTEGER:
        return wire
    if info.byte_width <= _JSON_INT_MAX_WIDTH:
        return _encode_integer(info, wire)
    if not is_hex(wire) or len(wire) != info.byte_width * 2:
        raise err(ErrorCode.INVALID_HEX, f"{info.tag.value} expects {info.byte_width * 2} hex digits")
    return int(wire, 16)


# --- 4.3 names ---


def encode_name(name: ParameterName) -> str:
    if isinstance(name, HexName):
        if not name.hex or not is_hex(name.hex):
            raise err(ErrorCode.INVALID_HEX, f"name is not valid hex: {name.hex!r}")
        return name.hex
    if isinstance(name, RawName):
        if not name.text:
            raise err(ErrorCode.INVALID_HEX, "name must not be empty")
        return string_to_hex(name.text)
    raise err(ErrorCode.INVALID_HEX, f"unsupported name: {name!r}")


def decode_name(value: str) -> RawName:
    return RawName(hex_to_string(value))


# --- 4.4 envelopes ---


def located(field: str, fn: Callable[..., Any], *args: Any) -> Any:
    try:
        return fn(*args)
    except EncodeError as exc:
        raise exc.at(field) from None


def _head(flag: ParameterFlag, tag: ParameterType, name: Optional[ParameterName]) -> dict[str, Any]:
    located("ParameterType", encode_type, tag)
    located("ParameterFlag", validate_flag, flag, tag)
    inner: dict[str, Any] = {"ParameterFlag": int(flag)}
    if name is not None:
        inner["ParameterName"] = located("ParameterName", encode_name, name)
    return inner


def serialize_parameter(param: Parameter) -> dict[str, Any]:
    inner = _head(param.flag, param.type, None)
    value = located("ParameterValue", encode_value, param.type, param.value)
    if param.name is not None:
        inner["ParameterName"] = located("ParameterName", encode_name, param.name)
    inner["ParameterValue"] = {"type": param.type.value, "value": value}
    return {"Parameter": inner}


def serialize_function_parameter(param: FunctionParameter) -> dict[str, Any]:
    inner = _head(param.flag, param.type, param.name)
    inner["ParameterType"] = {"type": param.type.value}
    return {"Parameter": inner}


def serialize_instance_parameter(param: InstanceParameter) -> dict[str, Any]:
    inner = _head(param.flag, param.type, param.name)
    inner["ParameterType"] = {"type": param.type.value}
    return {"InstanceParameter": inner}


def serialize_instance_value(param: InstanceParameterValue) -> dict[str, Any]:
    inner = _head(param.flag, param.type, None)
    value = located("ParameterValue", encode_value, param.type, param.value)
    inner["ParameterValue"] = {"type": param.type.value, "value": value}
    return {"InstanceParameterValue": inner}
