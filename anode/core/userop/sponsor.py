"""
UserOperation sponsorship and signing helpers.

Assembly order matters: the paymaster signs over the unsponsored operation,
its signature is written into ``paymasterAndData``, and only then does the
account sign the final userOpHash.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .codec import parse_address, parse_hex, to_hex
from .errors import MalformedInputError
from .hashing import compute_sponsor_op_hash, compute_user_op_hash
from .models import EntryPointVersion, UserOperation, normalize_gas_fields, version_of
from .paymaster_data import UINT48_MAX, encode_paymaster_data, paymaster_sign_hash
from .signer import KeySigner, sign_hash

logger = logging.getLogger(__name__)


class PaymentMethod(str, Enum):
    """How gas for an operation gets paid."""
    PAYMASTER = "paymaster"            # Sponsored through paymasterAndData
    DIRECT_PAYMENT = "direct-payment"  # Bundler pays; zero fees, no paymaster


def detect_payment_method(user_op: UserOperation) -> PaymentMethod:
    gas = normalize_gas_fields(user_op)
    if gas.max_fee_per_gas == 0 and gas.max_priority_fee_per_gas == 0:
        return PaymentMethod.DIRECT_PAYMENT
    return PaymentMethod.PAYMASTER


def attach_paymaster_data(
    user_op: UserOperation,
    paymaster_signer: KeySigner,
    paymaster_address: str,
    entry_point: str,
    chain_id: int,
    version: Any,
    valid_until: int = 0,
    valid_after: int = 0,
) -> UserOperation:
    """Sign the sponsorship and write ``paymasterAndData`` onto ``user_op``."""
    op_hash = compute_sponsor_op_hash(user_op, entry_point, chain_id, version)
    sponsor_hash = paymaster_sign_hash(paymaster_address, valid_until, valid_after, op_hash)
    signature = sign_hash(sponsor_hash, paymaster_signer)

    user_op.paymaster_and_data = to_hex(
        encode_paymaster_data(paymaster_address, valid_until, valid_after, signature)
    )
    logger.debug(
        "Attached paymaster data for %s (valid_until=%s, valid_after=%s)",
        user_op.sender,
        valid_until,
        valid_after,
    )
    return user_op


def attach_signature(
    user_op: UserOperation,
    account_signer: KeySigner,
    entry_point: str,
    chain_id: int,
    version: Any,
) -> bytes:
    """Sign the final userOpHash, write ``signature``, and return the hash."""
    op_hash = compute_user_op_hash(user_op, entry_point, chain_id, version)
    user_op.signature = to_hex(sign_hash(op_hash, account_signer))
    return op_hash


@dataclass
class SponsorResult:
    success: bool
    user_operation: UserOperation
    payment_method: PaymentMethod
    sponsor_op_hash: Optional[bytes] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "success": self.success,
            "userOperation": self.user_operation.to_rpc_dict(),
            "paymentMethod": self.payment_method.value,
        }
        if self.sponsor_op_hash is not None:
            payload["sponsorOpHash"] = to_hex(self.sponsor_op_hash)
        if self.error_code:
            payload["error"] = {"code": self.error_code, "message": self.error_message}
        return payload


def max_gas_cost(user_op: UserOperation) -> int:
    """Worst-case wei charged: (call + verification + preVerification gas) * maxFeePerGas."""
    gas = normalize_gas_fields(user_op)
    total_gas = gas.call_gas_limit + gas.verification_gas_limit + user_op.pre_verification_gas
    return total_gas * gas.max_fee_per_gas


@dataclass(frozen=True)
class SponsorshipPolicy:
    """
    Stateless limits an operation must meet before it is sponsored.

    A limit of None is not enforced.
    """
    max_call_gas_limit: Optional[int] = None
    max_fee_per_gas: Optional[int] = None
    max_cost_per_operation: Optional[int] = None

    def violations(self, user_op: UserOperation) -> List[str]:
        gas = normalize_gas_fields(user_op)
        found = []
        if self.max_call_gas_limit is not None and gas.call_gas_limit > self.max_call_gas_limit:
            found.append(f"callGasLimit {gas.call_gas_limit} exceeds {self.max_call_gas_limit}")
        if self.max_fee_per_gas is not None and gas.max_fee_per_gas > self.max_fee_per_gas:
            found.append(f"maxFeePerGas {gas.max_fee_per_gas} exceeds {self.max_fee_per_gas}")
        if self.max_cost_per_operation is not None:
            cost = max_gas_cost(user_op)
            if cost > self.max_cost_per_operation:
                found.append(f"gas cost {cost} exceeds {self.max_cost_per_operation}")
        return found


class PaymasterSponsor:
    """
    Sponsors UserOperations with a verifying-paymaster signature.

    Ops with zero fees are treated as direct-payment and passed through with
    an empty ``paymasterAndData``. Sponsored ops must also satisfy ``policy``.
    """

    def __init__(
        self,
        signer: KeySigner,
        paymaster_address: str,
        entry_point: str,
        chain_id: int,
        version: Any = EntryPointVersion.V06,
        validity_seconds: int = 0,
        policy: Optional[SponsorshipPolicy] = None,
    ) -> None:
        parse_address(paymaster_address, "paymasterAddress")
        parse_address(entry_point, "entryPoint")
        if validity_seconds < 0:
            raise ValueError("validity_seconds must be non-negative")

        self.signer = signer
        self.paymaster_address = paymaster_address
        self.entry_point = entry_point
        self.chain_id = chain_id
        self.version = EntryPointVersion.parse(version)
        self.validity_seconds = validity_seconds
        self.policy = policy or SponsorshipPolicy()

    def validity_window(self, now: int) -> Tuple[int, int]:
        """``(valid_until, valid_after)`` for a sponsorship issued at ``now``."""
        if self.validity_seconds == 0:
            return 0, 0
        return min(now + self.validity_seconds, UINT48_MAX), 0

    def _invalid_fields(self, user_op: UserOperation) -> List[str]:
        invalid = []
        if not parse_hex(user_op.call_data, "callData"):
            invalid.append("callData")
        if version_of(user_op) is not self.version:
            invalid.append("version")
        return invalid

    def process(self, user_op: UserOperation, now: int = 0) -> SponsorResult:
        """Sponsor ``user_op`` in place and report how gas will be paid."""
        invalid = self._invalid_fields(user_op)
        if invalid:
            return SponsorResult(
                success=False,
                user_operation=user_op,
                payment_method=PaymentMethod.PAYMASTER,
                error_code="INVALID_USER_OPERATION",
                error_message=(
                    f"Invalid UserOperation for EntryPoint v{self.version.value}: "
                    f"{', '.join(invalid)}"
                ),
            )

        method = detect_payment_method(user_op)
        if method is PaymentMethod.DIRECT_PAYMENT:
            user_op.paymaster_and_data = "0x"
            return SponsorResult(success=True, user_operation=user_op, payment_method=method)

        violations = self.policy.violations(user_op)
        if violations:
            logger.info("Sponsorship policy rejected sender %s: %s", user_op.sender, "; ".join(violations))
            return SponsorResult(
                success=False,
                user_operation=user_op,
                payment_method=method,
                error_code="POLICY_VIOLATION",
                error_message="; ".join(violations),
            )

        valid_until, valid_after = self.validity_window(now)
        try:
            attach_paymaster_data(
                user_op,
                self.signer,
                self.paymaster_address,
                self.entry_point,
                self.chain_id,
                self.version,
                valid_until=valid_until,
                valid_after=valid_after,
            )
        except MalformedInputError as exc:
            return SponsorResult(
                success=False,
                user_operation=user_op,
                payment_method=method,
                error_code=exc.kind.value.upper(),
                error_message=exc.message,
            )

        logger.info("Sponsored UserOperation for sender %s", user_op.sender)
        return SponsorResult(
            success=True,
            user_operation=user_op,
            payment_method=method,
            sponsor_op_hash=compute_sponsor_op_hash(user_op, self.entry_point, self.chain_id, self.version),
        )
