"""Native currency unit conversions (XRP <-> drops)."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Union

from .config import DROPS_PER_XRP, MAX_DROPS
from .errors import ErrorCode, err

DROPS_DECIMALS = 6


def _to_decimal(value: Union[str, int, Decimal]) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (str, int, Decimal)):
        raise err(ErrorCode.INVALID_AMOUNT, f"amount must be a decimal string: {value!r}")
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise err(ErrorCode.INVALID_AMOUNT, f"malformed amount: {value!r}") from None
    if not number.is_finite() or number < 0:
        raise err(ErrorCode.INVALID_AMOUNT, f"amount must be finite and non-negative: {value!r}")
    return number


def xrp_to_drops(xrp: Union[str, int, Decimal]) -> str:
    """Convert a whole/fractional XRP amount to a drops string.

    ``xrp_to_drops("2000") == "2000000000"``. More than six decimal places
    cannot be represented in drops and is rejected.
    """
    drops = _to_decimal(xrp) * DROPS_PER_XRP
    if drops != drops.to_integral_value():
        raise err(ErrorCode.INVALID_AMOUNT, f"more than {DROPS_DECIMALS} decimal places: {xrp!r}")
    if drops > MAX_DROPS:
        raise err(ErrorCode.INVALID_AMOUNT, f"amount exceeds maximum supply: {xrp!r}")
    return str(int(drops))


def drops_to_xrp(drops: Union[str, int]) -> str:
    number = _to_decimal(drops)
    if number != number.to_integral_value():
        raise err(ErrorCode.INVALID_AMOUNT, f"drops must be an integer: {drops!r}")
    xrp = number / DROPS_PER_XRP
    text = format(xrp, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
