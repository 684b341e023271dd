"""
Recover-and-compare validation of signed UserOperations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .codec import as_bytes, parse_address, to_hex
from .errors import SignatureRecoveryError
from .hashing import compute_sponsor_op_hash, compute_user_op_hash
from .models import UserOperation
from .paymaster_data import decode_paymaster_data, paymaster_sign_hash
from .signer import recover_signer

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Outcome of ``validate_user_operation``.

    ``paymaster_valid`` is None for unsponsored operations;
    ``paymaster_window_valid`` is None unless a ``now`` timestamp was given.
    """
    op_hash: bytes
    signer_valid: bool
    recovered_signer: Optional[str] = None
    paymaster_valid: Optional[bool] = None
    recovered_paymaster_signer: Optional[str] = None
    paymaster_window_valid: Optional[bool] = None

    @property
    def valid(self) -> bool:
        return (
            self.signer_valid
            and self.paymaster_valid is not False
            and self.paymaster_window_valid is not False
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "opHash": to_hex(self.op_hash),
            "valid": self.valid,
            "signerValid": self.signer_valid,
            "recoveredSigner": self.recovered_signer,
            "paymasterValid": self.paymaster_valid,
            "recoveredPaymasterSigner": self.recovered_paymaster_signer,
            "paymasterWindowValid": self.paymaster_window_valid,
        }


def _same_address(left: Optional[str], right: str) -> bool:
    if left is None:
        return False
    return parse_address(left) == parse_address(right)


def _try_recover(message_hash: bytes, signature: bytes) -> Optional[str]:
    try:
        return recover_signer(message_hash, signature)
    except SignatureRecoveryError:
        return None


def validate_user_operation(
    user_op: UserOperation,
    entry_point: str,
    chain_id: int,
    version: Any,
    expected_signer: str,
    expected_paymaster: Optional[str] = None,
    now: Optional[int] = None,
) -> ValidationResult:
    """
    Check that ``user_op.signature`` was produced by ``expected_signer`` and,
    for sponsored operations, that the embedded paymaster signature was
    produced by ``expected_paymaster``.

    Mismatches come back as ``False`` fields; only malformed input raises.
    When ``expected_paymaster`` is omitted the paymaster signature is not
    checked and ``paymaster_valid`` stays None.
    """
    parse_address(expected_signer, "expectedSigner")
    if expected_paymaster is not None:
        parse_address(expected_paymaster, "expectedPaymaster")

    op_hash = compute_user_op_hash(user_op, entry_point, chain_id, version)
    signature = as_bytes(user_op.signature, "signature")
    recovered = _try_recover(op_hash, signature)
    result = ValidationResult(
        op_hash=op_hash,
        signer_valid=_same_address(recovered, expected_signer),
        recovered_signer=recovered,
    )

    paymaster_data = decode_paymaster_data(user_op.paymaster_and_data)
    if paymaster_data is not None:
        if expected_paymaster is not None:
            sponsor_hash = paymaster_sign_hash(
                paymaster_data.paymaster_address,
                paymaster_data.valid_until,
                paymaster_data.valid_after,
                compute_sponsor_op_hash(user_op, entry_point, chain_id, version),
            )
            recovered_paymaster = _try_recover(sponsor_hash, paymaster_data.signature)
            result.recovered_paymaster_signer = recovered_paymaster
            result.paymaster_valid = _same_address(recovered_paymaster, expected_paymaster)
        if now is not None:
            result.paymaster_window_valid = paymaster_data.is_active(now)

    if not result.valid:
        logger.info(
            "UserOperation %s failed validation: signer_valid=%s paymaster_valid=%s window_valid=%s",
            to_hex(op_hash),
            result.signer_valid,
            result.paymaster_valid,
            result.paymaster_window_valid,
        )
    return result
