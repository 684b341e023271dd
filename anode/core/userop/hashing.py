"""
UserOperation hash computation.

The struct hash ABI-encodes every field as a 32-byte word, with the
variable-length fields (initCode, callData, paymasterAndData) replaced by their
keccak hashes. The final hash binds the struct hash to an EntryPoint address
and chain id:

    opHash = keccak(structHash ‖ word(entryPoint) ‖ word(chainId))
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, List

from .codec import concat, encode_word, keccak, parse_address, parse_hex, to_hex
from .errors import InvalidFieldError
from .models import (
    EntryPointVersion,
    UserOperation,
    UserOperationV06,
    UserOperationV07,
)

logger = logging.getLogger(__name__)


def _v06_words(user_op: UserOperationV06) -> List[bytes]:
    return [
        encode_word(parse_address(user_op.sender, "sender"), "sender"),
        encode_word(user_op.nonce, "nonce"),
        keccak(parse_hex(user_op.init_code, "initCode")),
        keccak(parse_hex(user_op.call_data, "callData")),
        encode_word(user_op.call_gas_limit, "callGasLimit"),
        encode_word(user_op.verification_gas_limit, "verificationGasLimit"),
        encode_word(user_op.pre_verification_gas, "preVerificationGas"),
        encode_word(user_op.max_fee_per_gas, "maxFeePerGas"),
        encode_word(user_op.max_priority_fee_per_gas, "maxPriorityFeePerGas"),
        keccak(parse_hex(user_op.paymaster_and_data, "paymasterAndData")),
    ]


def _v07_words(user_op: UserOperationV07) -> List[bytes]:
    return [
        encode_word(parse_address(user_op.sender, "sender"), "sender"),
        encode_word(user_op.nonce, "nonce"),
        keccak(parse_hex(user_op.init_code, "initCode")),
        keccak(parse_hex(user_op.call_data, "callData")),
        encode_word(parse_hex(user_op.account_gas_limits, "accountGasLimits"), "accountGasLimits"),
        encode_word(user_op.pre_verification_gas, "preVerificationGas"),
        encode_word(parse_hex(user_op.gas_fees, "gasFees"), "gasFees"),
        keccak(parse_hex(user_op.paymaster_and_data, "paymasterAndData")),
    ]


def compute_struct_hash(user_op: UserOperation, version: Any) -> bytes:
    """Keccak of the ABI-encoded struct for the given layout version."""
    resolved = EntryPointVersion.parse(version)

    if resolved is EntryPointVersion.V06:
        if not isinstance(user_op, UserOperationV06):
            raise InvalidFieldError("UserOperation layout does not match EntryPoint v0.6", field="version")
        words = _v06_words(user_op)
    else:
        if not isinstance(user_op, UserOperationV07):
            raise InvalidFieldError("UserOperation layout does not match EntryPoint v0.7", field="version")
        words = _v07_words(user_op)

    return keccak(concat(*words))


def compute_user_op_hash(
    user_op: UserOperation,
    entry_point: str,
    chain_id: int,
    version: Any,
) -> bytes:
    """
    Compute the 32-byte userOpHash the EntryPoint hands to the account.

    Args:
        user_op: Operation to hash; its ``signature`` is not part of the hash.
        entry_point: EntryPoint contract address (domain separator).
        chain_id: Target chain id.
        version: ``EntryPointVersion`` or a tag such as ``"0.6"``.

    Raises:
        UnsupportedVersionError: unknown version tag.
        InvalidFieldError / MalformedHexError: malformed operation fields.
    """
    struct_hash = compute_struct_hash(user_op, version)
    op_hash = keccak(
        concat(
            struct_hash,
            encode_word(parse_address(entry_point, "entryPoint"), "entryPoint"),
            encode_word(chain_id, "chainId"),
        )
    )
    logger.debug(
        "Computed userOpHash %s (version=%s, chain_id=%s)",
        to_hex(op_hash),
        EntryPointVersion.parse(version).value,
        chain_id,
    )
    return op_hash


def compute_sponsor_op_hash(
    user_op: UserOperation,
    entry_point: str,
    chain_id: int,
    version: Any,
) -> bytes:
    """
    userOpHash with ``paymasterAndData`` and ``signature`` cleared.

    The paymaster signature is embedded in ``paymasterAndData``, so the
    paymaster signs over the operation as it was before sponsorship.
    """
    unsponsored = replace(user_op, paymaster_and_data="0x", signature="0x")
    return compute_user_op_hash(unsponsored, entry_point, chain_id, version)
