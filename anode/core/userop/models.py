"""
ERC-4337 UserOperation models and helpers.

Two on-wire layouts are supported:

- v0.6 ``UserOperation``: discrete gas limit and fee fields.
- v0.7 ``PackedUserOperation``: ``accountGasLimits`` and ``gasFees`` each pack
  two 128-bit values into one 32-byte word
  (``verificationGasLimit ‖ callGasLimit`` and
  ``maxPriorityFeePerGas ‖ maxFeePerGas``).

Byte-string fields are held as 0x-prefixed hex (``"0x"`` when empty, never
omitted); quantities are plain ints. Values are supplied in raw units
(wei / gas units) and encoded as hex for RPC calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .codec import decode_uint, parse_address, parse_hex, to_hex
from .errors import InvalidFieldError, UnsupportedVersionError

UINT128_BITS = 128
UINT256_BITS = 256
UINT128_MAX = (1 << UINT128_BITS) - 1

_QUANTITY_RE = re.compile(r"0x[0-9a-fA-F]+")


class EntryPointVersion(str, Enum):
    """EntryPoint contract versions with distinct UserOperation layouts."""
    V06 = "0.6"
    V07 = "0.7"

    @classmethod
    def parse(cls, value: Any) -> "EntryPointVersion":
        """Accept ``"0.6"``, ``"v0.6"``, ``"V06"``, ``"06"`` and the same for 0.7."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            tag = value.strip().lower()
            if tag.startswith("v"):
                tag = tag[1:]
            if tag in ("0.6", "06"):
                return cls.V06
            if tag in ("0.7", "07"):
                return cls.V07
        raise UnsupportedVersionError(value)


def _check_uint(value: int, bits: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidFieldError(f"{field} must be an integer", field=field)
    if value < 0 or value.bit_length() > bits:
        raise InvalidFieldError(f"{field} does not fit in uint{bits}", field=field)
    return value


def _check_word(value: str, field: str) -> bytes:
    raw = parse_hex(value, field)
    if len(raw) != 32:
        raise InvalidFieldError(f"{field} must be a 32-byte word, got {len(raw)} bytes", field=field)
    return raw


def pack_uint128_pair(high: int, low: int, field: str = "packed") -> str:
    """Pack two uint128 values into one 32-byte word (``high ‖ low``)."""
    _check_uint(high, UINT128_BITS, field)
    _check_uint(low, UINT128_BITS, field)
    return to_hex(((high << UINT128_BITS) | low).to_bytes(32, "big"))


def unpack_uint128_pair(word: str, field: str = "packed") -> Tuple[int, int]:
    """Split a 32-byte word into its ``(high, low)`` uint128 halves."""
    raw = _check_word(word, field)
    return decode_uint(raw[:16]), decode_uint(raw[16:])


@dataclass
class UserOperationV06:
    """EntryPoint v0.6 UserOperation."""
    sender: str
    nonce: int
    init_code: str
    call_data: str
    call_gas_limit: int
    verification_gas_limit: int
    pre_verification_gas: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    paymaster_and_data: str = "0x"
    signature: str = "0x"

    version = EntryPointVersion.V06

    def __post_init__(self) -> None:
        parse_address(self.sender, "sender")
        _check_uint(self.nonce, UINT256_BITS, "nonce")
        parse_hex(self.init_code, "initCode")
        parse_hex(self.call_data, "callData")
        _check_uint(self.call_gas_limit, UINT256_BITS, "callGasLimit")
        _check_uint(self.verification_gas_limit, UINT256_BITS, "verificationGasLimit")
        _check_uint(self.pre_verification_gas, UINT256_BITS, "preVerificationGas")
        _check_uint(self.max_fee_per_gas, UINT256_BITS, "maxFeePerGas")
        _check_uint(self.max_priority_fee_per_gas, UINT256_BITS, "maxPriorityFeePerGas")
        parse_hex(self.paymaster_and_data, "paymasterAndData")
        parse_hex(self.signature, "signature")

    def to_rpc_dict(self) -> Dict[str, Any]:
        return {
            "sender": self.sender,
            "nonce": hex(self.nonce),
            "initCode": self.init_code,
            "callData": self.call_data,
            "callGasLimit": hex(self.call_gas_limit),
            "verificationGasLimit": hex(self.verification_gas_limit),
            "preVerificationGas": hex(self.pre_verification_gas),
            "maxFeePerGas": hex(self.max_fee_per_gas),
            "maxPriorityFeePerGas": hex(self.max_priority_fee_per_gas),
            "paymasterAndData": self.paymaster_and_data,
            "signature": self.signature,
        }


@dataclass
class UserOperationV07:
    """EntryPoint v0.7 PackedUserOperation."""
    sender: str
    nonce: int
    init_code: str
    call_data: str
    account_gas_limits: str
    pre_verification_gas: int
    gas_fees: str
    paymaster_and_data: str = "0x"
    signature: str = "0x"

    version = EntryPointVersion.V07

    def __post_init__(self) -> None:
        parse_address(self.sender, "sender")
        _check_uint(self.nonce, UINT256_BITS, "nonce")
        parse_hex(self.init_code, "initCode")
        parse_hex(self.call_data, "callData")
        _check_word(self.account_gas_limits, "accountGasLimits")
        _check_uint(self.pre_verification_gas, UINT256_BITS, "preVerificationGas")
        _check_word(self.gas_fees, "gasFees")
        parse_hex(self.paymaster_and_data, "paymasterAndData")
        parse_hex(self.signature, "signature")

    @classmethod
    def from_gas_values(
        cls,
        *,
        sender: str,
        nonce: int,
        init_code: str,
        call_data: str,
        call_gas_limit: int,
        verification_gas_limit: int,
        pre_verification_gas: int,
        max_fee_per_gas: int,
        max_priority_fee_per_gas: int,
        paymaster_and_data: str = "0x",
        signature: str = "0x",
    ) -> "UserOperationV07":
        """Build a packed operation from logical gas values."""
        _check_uint(call_gas_limit, UINT128_BITS, "callGasLimit")
        _check_uint(verification_gas_limit, UINT128_BITS, "verificationGasLimit")
        _check_uint(max_fee_per_gas, UINT128_BITS, "maxFeePerGas")
        _check_uint(max_priority_fee_per_gas, UINT128_BITS, "maxPriorityFeePerGas")
        return cls(
            sender=sender,
            nonce=nonce,
            init_code=init_code,
            call_data=call_data,
            account_gas_limits=pack_uint128_pair(verification_gas_limit, call_gas_limit, "accountGasLimits"),
            pre_verification_gas=pre_verification_gas,
            gas_fees=pack_uint128_pair(max_priority_fee_per_gas, max_fee_per_gas, "gasFees"),
            paymaster_and_data=paymaster_and_data,
            signature=signature,
        )

    def to_rpc_dict(self) -> Dict[str, Any]:
        return {
            "sender": self.sender,
            "nonce": hex(self.nonce),
            "initCode": self.init_code,
            "callData": self.call_data,
            "accountGasLimits": self.account_gas_limits,
            "preVerificationGas": hex(self.pre_verification_gas),
            "gasFees": self.gas_fees,
            "paymasterAndData": self.paymaster_and_data,
            "signature": self.signature,
        }


UserOperation = Union[UserOperationV06, UserOperationV07]


@dataclass(frozen=True)
class GasFields:
    """Logical gas values independent of the wire layout."""
    call_gas_limit: int
    verification_gas_limit: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int


def version_of(user_op: UserOperation) -> EntryPointVersion:
    if isinstance(user_op, UserOperationV06):
        return EntryPointVersion.V06
    if isinstance(user_op, UserOperationV07):
        return EntryPointVersion.V07
    raise InvalidFieldError(f"Not a UserOperation: {type(user_op).__name__}")


def normalize_gas_fields(user_op: UserOperation) -> GasFields:
    """Extract logical gas integers, unpacking the v0.7 words."""
    if isinstance(user_op, UserOperationV07):
        verification_gas_limit, call_gas_limit = unpack_uint128_pair(
            user_op.account_gas_limits, "accountGasLimits"
        )
        max_priority_fee_per_gas, max_fee_per_gas = unpack_uint128_pair(user_op.gas_fees, "gasFees")
        return GasFields(
            call_gas_limit=call_gas_limit,
            verification_gas_limit=verification_gas_limit,
            max_fee_per_gas=max_fee_per_gas,
            max_priority_fee_per_gas=max_priority_fee_per_gas,
        )

    version_of(user_op)
    return GasFields(
        call_gas_limit=_check_uint(user_op.call_gas_limit, UINT256_BITS, "callGasLimit"),
        verification_gas_limit=_check_uint(
            user_op.verification_gas_limit, UINT256_BITS, "verificationGasLimit"
        ),
        max_fee_per_gas=_check_uint(user_op.max_fee_per_gas, UINT256_BITS, "maxFeePerGas"),
        max_priority_fee_per_gas=_check_uint(
            user_op.max_priority_fee_per_gas, UINT256_BITS, "maxPriorityFeePerGas"
        ),
    )


def convert_v06_to_v07(user_op: UserOperationV06) -> UserOperationV07:
    return UserOperationV07.from_gas_values(
        sender=user_op.sender,
        nonce=user_op.nonce,
        init_code=user_op.init_code,
        call_data=user_op.call_data,
        call_gas_limit=user_op.call_gas_limit,
        verification_gas_limit=user_op.verification_gas_limit,
        pre_verification_gas=user_op.pre_verification_gas,
        max_fee_per_gas=user_op.max_fee_per_gas,
        max_priority_fee_per_gas=user_op.max_priority_fee_per_gas,
        paymaster_and_data=user_op.paymaster_and_data,
        signature=user_op.signature,
    )


def convert_v07_to_v06(user_op: UserOperationV07) -> UserOperationV06:
    gas = normalize_gas_fields(user_op)
    return UserOperationV06(
        sender=user_op.sender,
        nonce=user_op.nonce,
        init_code=user_op.init_code,
        call_data=user_op.call_data,
        call_gas_limit=gas.call_gas_limit,
        verification_gas_limit=gas.verification_gas_limit,
        pre_verification_gas=user_op.pre_verification_gas,
        max_fee_per_gas=gas.max_fee_per_gas,
        max_priority_fee_per_gas=gas.max_priority_fee_per_gas,
        paymaster_and_data=user_op.paymaster_and_data,
        signature=user_op.signature,
    )


def _parse_quantity(data: Dict[str, Any], key: str) -> int:
    if key not in data:
        raise InvalidFieldError(f"Missing field {key}", field=key)
    value = data[key]
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and _QUANTITY_RE.fullmatch(value):
        return int(value[2:], 16)
    raise InvalidFieldError(f"{key} must be a hex quantity, got {value!r}", field=key)


def _parse_bytes_field(data: Dict[str, Any], key: str, default: Optional[str] = None) -> str:
    value = data.get(key, default)
    if value is None:
        raise InvalidFieldError(f"Missing field {key}", field=key)
    parse_hex(value, key)
    return value


def user_operation_from_rpc(
    data: Dict[str, Any],
    version: Optional[Any] = None,
) -> UserOperation:
    """
    Parse a camelCase JSON-RPC UserOperation.

    When ``version`` is omitted the layout is detected from the keys present
    (``accountGasLimits``/``gasFees`` mean v0.7).
    """
    if version is None:
        packed = "accountGasLimits" in data and "gasFees" in data
        resolved = EntryPointVersion.V07 if packed else EntryPointVersion.V06
    else:
        resolved = EntryPointVersion.parse(version)

    sender = data.get("sender")
    if not isinstance(sender, str):
        raise InvalidFieldError("Missing field sender", field="sender")

    common = dict(
        sender=sender,
        nonce=_parse_quantity(data, "nonce"),
        init_code=_parse_bytes_field(data, "initCode", "0x"),
        call_data=_parse_bytes_field(data, "callData"),
        pre_verification_gas=_parse_quantity(data, "preVerificationGas"),
        paymaster_and_data=_parse_bytes_field(data, "paymasterAndData", "0x"),
        signature=_parse_bytes_field(data, "signature", "0x"),
    )

    if resolved is EntryPointVersion.V07:
        return UserOperationV07(
            account_gas_limits=_parse_bytes_field(data, "accountGasLimits"),
            gas_fees=_parse_bytes_field(data, "gasFees"),
            **common,
        )

    return UserOperationV06(
        call_gas_limit=_parse_quantity(data, "callGasLimit"),
        verification_gas_limit=_parse_quantity(data, "verificationGasLimit"),
        max_fee_per_gas=_parse_quantity(data, "maxFeePerGas"),
        max_priority_fee_per_gas=_parse_quantity(data, "maxPriorityFeePerGas"),
        **common,
    )
