"""
paymasterAndData layout and the paymaster's signing hash.

    paymasterAndData = paymaster(20) ‖ validUntil(6) ‖ validAfter(6) ‖ signature(65)

``validUntil``/``validAfter`` are big-endian uint48 timestamps;
``validUntil == 0`` means no expiry. An unsponsored operation carries ``0x``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from eth_utils import to_checksum_address

from .canonical import SIGNATURE_LENGTH
from .codec import ADDRESS_SIZE, HexOrBytes, as_bytes, concat, keccak, parse_address
from .errors import (
    FieldTooLargeError,
    InvalidFieldError,
    InvalidSignatureLengthError,
    TruncatedPaymasterDataError,
)

UINT48_BITS = 48
UINT48_MAX = (1 << UINT48_BITS) - 1
TIMESTAMP_SIZE = 6

PAYMASTER_DATA_LENGTH = ADDRESS_SIZE + TIMESTAMP_SIZE + TIMESTAMP_SIZE + SIGNATURE_LENGTH


@dataclass(frozen=True)
class PaymasterData:
    paymaster_address: str
    valid_until: int
    valid_after: int
    signature: bytes

    def is_active(self, now: int) -> bool:
        """True when ``now`` lies inside the validity window."""
        if now < self.valid_after:
            return False
        return self.valid_until == 0 or now <= self.valid_until

    def is_expired(self, now: int) -> bool:
        return self.valid_until != 0 and now > self.valid_until

    def encode(self) -> bytes:
        return encode_paymaster_data(
            self.paymaster_address, self.valid_until, self.valid_after, self.signature
        )


def _encode_uint48(value: int, field: str) -> bytes:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(f"{field} must be an integer", field=field)
    if value < 0 or value > UINT48_MAX:
        raise FieldTooLargeError(f"{field} does not fit in uint48: {value}", field=field)
    return value.to_bytes(TIMESTAMP_SIZE, "big")


def _validity_window(paymaster_address: HexOrBytes, valid_until: int, valid_after: int) -> bytes:
    return concat(
        parse_address(paymaster_address, "paymasterAddress"),
        _encode_uint48(valid_until, "validUntil"),
        _encode_uint48(valid_after, "validAfter"),
    )


def encode_paymaster_data(
    paymaster_address: HexOrBytes,
    valid_until: int,
    valid_after: int,
    signature: HexOrBytes,
) -> bytes:
    raw_signature = as_bytes(signature, "paymasterSignature")
    if len(raw_signature) != SIGNATURE_LENGTH:
        raise InvalidSignatureLengthError(len(raw_signature), field="paymasterSignature")
    return concat(_validity_window(paymaster_address, valid_until, valid_after), raw_signature)


def decode_paymaster_data(data: HexOrBytes) -> Optional[PaymasterData]:
    """
    Unpack ``paymasterAndData``. Returns ``None`` for an unsponsored (empty)
    field.
    """
    raw = as_bytes(data, "paymasterAndData")
    if not raw:
        return None
    if len(raw) < PAYMASTER_DATA_LENGTH:
        raise TruncatedPaymasterDataError(len(raw), PAYMASTER_DATA_LENGTH)
    if len(raw) > PAYMASTER_DATA_LENGTH:
        raise InvalidFieldError(
            f"paymasterAndData has {len(raw) - PAYMASTER_DATA_LENGTH} trailing bytes",
            field="paymasterAndData",
        )

    offset = ADDRESS_SIZE
    return PaymasterData(
        paymaster_address=to_checksum_address(raw[:offset]),
        valid_until=int.from_bytes(raw[offset:offset + TIMESTAMP_SIZE], "big"),
        valid_after=int.from_bytes(raw[offset + TIMESTAMP_SIZE:offset + 2 * TIMESTAMP_SIZE], "big"),
        signature=raw[offset + 2 * TIMESTAMP_SIZE:],
    )


def paymaster_sign_hash(
    paymaster_address: HexOrBytes,
    valid_until: int,
    valid_after: int,
    op_hash: HexOrBytes,
) -> bytes:
    """keccak(keccak(paymaster ‖ be48(validUntil) ‖ be48(validAfter)) ‖ opHash)"""
    raw_op_hash = as_bytes(op_hash, "opHash")
    if len(raw_op_hash) != 32:
        raise InvalidFieldError(f"opHash must be 32 bytes, got {len(raw_op_hash)}", field="opHash")
    return keccak(concat(keccak(_validity_window(paymaster_address, valid_until, valid_after)), raw_op_hash))
