"""Classic ledger address encoding (base58check, ledger alphabet)."""

from __future__ import annotations

from hashlib import sha256

from ..config import (
    ACCOUNT_ID_SIZE,
    ACCOUNT_TYPE_PREFIX,
    MAX_ADDRESS_LENGTH,
    MIN_ADDRESS_LENGTH,
)
from ..errors import ErrorCode, EncodeError, err

ALPHABET = "rpshnaf39wBUDNEGHJKLM4PQRST7VWXYZ2bcdeCg65jkm8oFqi1tuvAxyz"
_INDEX = {c: i for i, c in enumerate(ALPHABET)}
CHECKSUM_SIZE = 4


def _b58_encode(data: bytes) -> str:
    value = int.from_bytes(data, "big")
    encoded = ""
    while value > 0:
        value, mod = divmod(value, 58)
        encoded = ALPHABET[mod] + encoded
    # Leading zero bytes map to the first alphabet character.
    padding = len(data) - len(data.lstrip(b"\x00"))
    return ALPHABET[0] * padding + encoded


def _b58_decode(text: str) -> bytes:
    value = 0
    for c in text:
        digit = _INDEX.get(c)
        if digit is None:
            raise err(ErrorCode.INVALID_ADDRESS, f"invalid base58 character {c!r}")
        value = value * 58 + digit
    padding = len(text) - len(text.lstrip(ALPHABET[0]))
    body = value.to_bytes((value.bit_length() + 7) // 8, "big") if value else b""
    return b"\x00" * padding + body


def _checksum(payload: bytes) -> bytes:
    return sha256(sha256(payload).digest()).digest()[:CHECKSUM_SIZE]


def encode_classic_address(account_id: bytes) -> str:
    if len(account_id) != ACCOUNT_ID_SIZE:
        raise err(ErrorCode.INVALID_ADDRESS, f"account id must be {ACCOUNT_ID_SIZE} bytes")
    payload = bytes([ACCOUNT_TYPE_PREFIX]) + bytes(account_id)
    return _b58_encode(payload + _checksum(payload))


def decode_classic_address(address: str) -> bytes:
    """Return the 20-byte account id behind a classic ``r...`` address."""
    if not isinstance(address, str):
        raise err(ErrorCode.INVALID_ADDRESS, "address must be a string")
    if not MIN_ADDRESS_LENGTH <= len(address) <= MAX_ADDRESS_LENGTH:
        raise err(ErrorCode.INVALID_ADDRESS, f"address length out of range: {address!r}")
    if not address.startswith(ALPHABET[0]):
        raise err(ErrorCode.INVALID_ADDRESS, f"address must start with 'r': {address!r}")

    raw = _b58_decode(address)
    if len(raw) != 1 + ACCOUNT_ID_SIZE + CHECKSUM_SIZE:
        raise err(ErrorCode.INVALID_ADDRESS, f"address decodes to {len(raw)} bytes")
    payload, checksum = raw[:-CHECKSUM_SIZE], raw[-CHECKSUM_SIZE:]
    if payload[0] != ACCOUNT_TYPE_PREFIX:
        raise err(ErrorCode.INVALID_ADDRESS, "address has wrong type prefix")
    if _checksum(payload) != checksum:
        raise err(ErrorCode.INVALID_ADDRESS, f"address checksum mismatch: {address!r}")
    return payload[1:]


def is_valid_classic_address(address: str) -> bool:
    try:
        decode_classic_address(address)
    except EncodeError:
        return False
    return True
