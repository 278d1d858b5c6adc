"""Core types for contract parameter encoding.

The model covers the two contract transactions of the ledger:
ContractCreate (functions, instance parameters and their values) and
ContractCall (call-time parameters).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Any, Optional, Tuple, Union

from .config import TF_IMMUTABLE, TF_SEND_AMOUNT
from .errors import ErrorCode, err


class ValueShape(Enum):
    INTEGER = "integer"
    BLOB = "blob"
    ADDRESS = "address"
    AMOUNT = "amount"
    DECIMAL = "decimal"
    CURRENCY = "currency"
    ISSUE = "issue"


class ParameterType(Enum):
    UINT8 = "UINT8"
    UINT16 = "UINT16"
    UINT32 = "UINT32"
    UINT64 = "UINT64"
    UINT128 = "UINT128"
    UINT160 = "UINT160"
    UINT192 = "UINT192"
    UINT256 = "UINT256"
    VL = "VL"
    ACCOUNT = "ACCOUNT"
    AMOUNT = "AMOUNT"
    NUMBER = "NUMBER"
    CURRENCY = "CURRENCY"
    ISSUE = "ISSUE"

    @classmethod
    def parse(cls, tag: Any) -> "ParameterType":
        if isinstance(tag, cls):
            return tag
        if isinstance(tag, str):
            try:
                return cls(tag)
            except ValueError:
                pass
        raise err(ErrorCode.UNKNOWN_TYPE, f"unknown parameter type: {tag!r}")


@dataclass(frozen=True)
class TypeInfo:
    tag: ParameterType
    byte_width: Optional[int]
    shape: ValueShape

    @property
    def bits(self) -> Optional[int]:
        return None if self.byte_width is None else self.byte_width * 8


TYPE_INFO: dict[ParameterType, TypeInfo] = {
    ParameterType.UINT8: TypeInfo(ParameterType.UINT8, 1, ValueShape.INTEGER),
    ParameterType.UINT16: TypeInfo(ParameterType.UINT16, 2, ValueShape.INTEGER),
    ParameterType.UINT32: TypeInfo(ParameterType.UINT32, 4, ValueShape.INTEGER),
    ParameterType.UINT64: TypeInfo(ParameterType.UINT64, 8, ValueShape.INTEGER),
    ParameterType.UINT128: TypeInfo(ParameterType.UINT128, 16, ValueShape.INTEGER),
    ParameterType.UINT160: TypeInfo(ParameterType.UINT160, 20, ValueShape.INTEGER),
    ParameterType.UINT192: TypeInfo(ParameterType.UINT192, 24, ValueShape.INTEGER),
    ParameterType.UINT256: TypeInfo(ParameterType.UINT256, 32, ValueShape.INTEGER),
    ParameterType.VL: TypeInfo(ParameterType.VL, None, ValueShape.BLOB),
    ParameterType.ACCOUNT: TypeInfo(ParameterType.ACCOUNT, None, ValueShape.ADDRESS),
    ParameterType.AMOUNT: TypeInfo(ParameterType.AMOUNT, None, ValueShape.AMOUNT),
    ParameterType.NUMBER: TypeInfo(ParameterType.NUMBER, None, ValueShape.DECIMAL),
    ParameterType.CURRENCY: TypeInfo(ParameterType.CURRENCY, None, ValueShape.CURRENCY),
    ParameterType.ISSUE: TypeInfo(ParameterType.ISSUE, None, ValueShape.ISSUE),
}


class ParameterFlag(IntFlag):
    SEND_AMOUNT = TF_SEND_AMOUNT

    @classmethod
    def parse(cls, value: Any) -> "ParameterFlag":
        if isinstance(value, cls):
            return value
        if value is None:
            return cls(0)
        if isinstance(value, bool) or not isinstance(value, int):
            raise err(ErrorCode.UNKNOWN_FLAG, f"parameter flag must be an integer: {value!r}")
        if value < 0 or value & ~int(cls.SEND_AMOUNT):
            raise err(ErrorCode.UNKNOWN_FLAG, f"unknown parameter flag bits: {value:#x}")
        return cls(value)


class ContractFlag(IntFlag):
    IMMUTABLE = TF_IMMUTABLE


# --- Names ---


@dataclass(frozen=True)
class RawName:
    """Plain text name, hex-encoded on the wire."""
    text: str


@dataclass(frozen=True)
class HexName:
    """Name already in wire (hex) form."""
    hex: str


ParameterName = Union[RawName, HexName]


def parameter_name(value: str, is_hex: bool = False) -> ParameterName:
    return HexName(value) if is_hex else RawName(value)


def coerce_name(name: Any) -> Optional[ParameterName]:
    if name is None or isinstance(name, (RawName, HexName)):
        return name
    if isinstance(name, str):
        return RawName(name)
    raise err(ErrorCode.INVALID_HEX, f"name must be text or hex: {name!r}")


# --- Values ---


@dataclass(frozen=True)
class IssuedAmount:
    currency: str
    issuer: str
    value: str


@dataclass(frozen=True)
class Issue:
    currency: str
    issuer: Optional[str] = None


ParameterValue = Union[int, str, bytes, IssuedAmount, Issue]


# --- Parameters and functions ---


@dataclass(frozen=True)
class Parameter:
    """Call-time argument."""
    type: ParameterType
    value: ParameterValue
    flag: ParameterFlag = ParameterFlag(0)
    name: Optional[ParameterName] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ParameterType.parse(self.type))
        object.__setattr__(self, "flag", ParameterFlag.parse(self.flag))
        object.__setattr__(self, "name", coerce_name(self.name))


@dataclass(frozen=True)
class FunctionParameter:
    """Positional slot of a function signature."""
    type: ParameterType
    flag: ParameterFlag = ParameterFlag(0)
    name: Optional[ParameterName] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ParameterType.parse(self.type))
        object.__setattr__(self, "flag", ParameterFlag.parse(self.flag))
        object.__setattr__(self, "name", coerce_name(self.name))


@dataclass(frozen=True)
class Function:
    name: ParameterName
    parameters: Tuple[FunctionParameter, ...] = ()

    def __post_init__(self) -> None:
        name = coerce_name(self.name)
        if name is None:
            raise err(ErrorCode.INVALID_HEX, "function name is required")
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "parameters", tuple(self.parameters or ()))


@dataclass(frozen=True)
class InstanceParameter:
    type: ParameterType
    flag: ParameterFlag = ParameterFlag(0)
    name: Optional[ParameterName] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ParameterType.parse(self.type))
        object.__setattr__(self, "flag", ParameterFlag.parse(self.flag))
        object.__setattr__(self, "name", coerce_name(self.name))


@dataclass(frozen=True)
class InstanceParameterValue:
    type: ParameterType
    value: ParameterValue
    flag: ParameterFlag = ParameterFlag(0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", ParameterType.parse(self.type))
        object.__setattr__(self, "flag", ParameterFlag.parse(self.flag))


# --- Contract code reference ---


@dataclass(frozen=True)
class ContractCode:
    """Compiled module, hex-encoded."""
    hex: str


@dataclass(frozen=True)
class ContractHash:
    """Hash of a module already stored on the ledger."""
    hex: str


ContractSource = Union[ContractCode, ContractHash]
