"""
Hex and fixed-width byte helpers shared by the UserOperation encoders.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from eth_utils import keccak as _keccak

from .errors import InvalidFieldError, MalformedHexError, ValueOverflowError

WORD_SIZE = 32
ADDRESS_SIZE = 20

_HEX_RE = re.compile(r"0x(?:[0-9a-fA-F]{2})*")

HexOrBytes = Union[str, bytes, bytearray]


def parse_hex(value: str, field: Optional[str] = None) -> bytes:
    """Decode a 0x-prefixed, even-length hex string. ``"0x"`` is empty bytes."""
    if not isinstance(value, str) or not _HEX_RE.fullmatch(value):
        label = field or "value"
        raise MalformedHexError(f"{label} must be 0x-prefixed even-length hex: {value!r}", field=field)
    return bytes.fromhex(value[2:])


def as_bytes(value: HexOrBytes, field: Optional[str] = None) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return parse_hex(value, field)


def to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def to_fixed_width(data: bytes, width: int, field: Optional[str] = None) -> bytes:
    """Left-pad ``data`` with zero bytes to exactly ``width`` bytes."""
    if len(data) > width:
        raise ValueOverflowError(
            f"{field or 'value'} is {len(data)} bytes, wider than {width}",
            field=field,
        )
    return bytes(width - len(data)) + bytes(data)


def encode_uint(value: int, bits: int = 256, field: Optional[str] = None) -> bytes:
    """Big-endian unsigned integer, ``bits // 8`` bytes wide."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(f"{field or 'value'} must be an integer", field=field)
    if value < 0:
        raise ValueOverflowError(f"{field or 'value'} must be non-negative", field=field)
    if value.bit_length() > bits:
        raise ValueOverflowError(f"{field or 'value'} does not fit in {bits} bits", field=field)
    return value.to_bytes(bits // 8, "big")


def decode_uint(data: bytes) -> int:
    return int.from_bytes(data, "big")


def parse_address(value: HexOrBytes, field: Optional[str] = None) -> bytes:
    raw = as_bytes(value, field)
    if len(raw) != ADDRESS_SIZE:
        raise InvalidFieldError(
            f"{field or 'address'} must be {ADDRESS_SIZE} bytes, got {len(raw)}",
            field=field,
        )
    return raw


def encode_word(value: Union[int, bytes], field: Optional[str] = None) -> bytes:
    """
    ABI-encode a single static value as a 32-byte word.

    Integers are big-endian; byte strings (addresses, hashes) are left-padded.
    """
    if isinstance(value, int):
        return encode_uint(value, 256, field)
    return to_fixed_width(value, WORD_SIZE, field)


def concat(*buffers: bytes) -> bytes:
    return b"".join(buffers)


def keccak(data: bytes) -> bytes:
    return _keccak(primitive=bytes(data))
