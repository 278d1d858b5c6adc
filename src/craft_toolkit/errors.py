"""Contract parameter encoding error codes and exceptions."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Optional


class ErrorCategory(IntEnum):
    VALIDATION = 0x01
    STRUCTURE = 0x02
    NETWORK = 0x06
    INTERNAL = 0xFF


class ErrorCode(IntEnum):
    # Validation (single parameter)
    UNKNOWN_TYPE = 0x0100
    UNKNOWN_FLAG = 0x0101
    FLAG_TYPE_MISMATCH = 0x0102
    VALUE_OUT_OF_RANGE = 0x0103
    INVALID_ADDRESS = 0x0104
    INVALID_AMOUNT = 0x0105
    INVALID_CURRENCY = 0x0106
    INVALID_NUMBER = 0x0107
    INVALID_HEX = 0x0108

    # Structure (functions, instance lists, transactions)
    TOO_MANY_FUNCTIONS = 0x0200
    TOO_MANY_PARAMETERS = 0x0201
    DUPLICATE_FUNCTION_NAME = 0x0202
    DUPLICATE_SEND_AMOUNT = 0x0203
    ARITY_MISMATCH = 0x0204
    TYPE_MISMATCH = 0x0205
    INVALID_DEFINITION = 0x0206

    # Network
    RPC_ERROR = 0x0600

    # Internal
    INTERNAL_ERROR = 0xFF00

    @property
    def category(self) -> ErrorCategory:
        return ErrorCategory(self.value >> 8)


@dataclass(frozen=True)
class EncodeError(Exception):
    code: ErrorCode
    message: str
    field: Optional[str] = None

    def __str__(self) -> str:
        where = f"{self.field}: " if self.field else ""
        return f"{self.code.name}({self.code:#06x}): {where}{self.message}"

    def at(self, field: str) -> "EncodeError":
        """Return a copy located under ``field`` (outermost path first)."""
        path = field if not self.field else f"{field}.{self.field}"
        return replace(self, field=path)


@dataclass(frozen=True)
class RpcError(EncodeError):
    """Error result returned by the ledger node."""

    response: Optional[dict] = None


# Allow Python's Exception machinery to set __traceback__/__context__/__cause__
# while keeping dataclass fields frozen (Python 3.13 contextlib compat).
_EXCEPTION_ATTRS = frozenset(("__traceback__", "__context__", "__cause__", "__suppress_context__", "__notes__"))
_frozen_setattr = EncodeError.__setattr__


def _encode_error_setattr(self: EncodeError, name: str, value: object) -> None:
    if name in _EXCEPTION_ATTRS:
        object.__setattr__(self, name, value)
    else:
        _frozen_setattr(self, name, value)


EncodeError.__setattr__ = _encode_error_setattr  # type: ignore[method-assign]
RpcError.__setattr__ = _encode_error_setattr  # type: ignore[method-assign]


def err(code: ErrorCode, message: str, field: Optional[str] = None) -> EncodeError:
    return EncodeError(code=code, message=message, field=field)
