"""
Shared UserOperation fixtures.

Known-answer values live in ``vectors/userop_sepolia.json``.
"""

import json
from pathlib import Path
from types import SimpleNamespace

import pytest

from anode.core.userop import UserOperationV06, UserOperationV07

VECTORS_PATH = Path(__file__).parent / "vectors" / "userop_sepolia.json"


def _logical_fields(operation: dict) -> dict:
    return dict(
        sender=operation["sender"],
        nonce=int(operation["nonce"], 16),
        init_code=operation["initCode"],
        call_data=operation["callData"],
        call_gas_limit=int(operation["callGasLimit"], 16),
        verification_gas_limit=int(operation["verificationGasLimit"], 16),
        pre_verification_gas=int(operation["preVerificationGas"], 16),
        max_fee_per_gas=int(operation["maxFeePerGas"], 16),
        max_priority_fee_per_gas=int(operation["maxPriorityFeePerGas"], 16),
    )


@pytest.fixture(scope="session")
def vectors() -> SimpleNamespace:
    data = json.loads(VECTORS_PATH.read_text())
    return SimpleNamespace(
        raw=data,
        operation=data["operation"],
        chain_id=data["chainId"],
        entry_point_v06=data["entryPointV06"],
        entry_point_v07=data["entryPointV07"],
        account_key=data["account"]["privateKey"],
        account_address=data["account"]["address"],
        paymaster_key=data["paymaster"]["privateKey"],
        paymaster_signer=data["paymaster"]["signer"],
        paymaster_contract=data["paymaster"]["contract"],
        valid_until=data["paymaster"]["validUntil"],
        valid_after=data["paymaster"]["validAfter"],
        expected=data["expected"],
    )


@pytest.fixture
def make_v06_op(vectors):
    def _make(**overrides) -> UserOperationV06:
        fields = _logical_fields(vectors.operation)
        fields.update(overrides)
        return UserOperationV06(**fields)

    return _make


@pytest.fixture
def make_v07_op(vectors):
    def _make(**overrides) -> UserOperationV07:
        fields = _logical_fields(vectors.operation)
        fields.update(overrides)
        return UserOperationV07.from_gas_values(**fields)

    return _make


@pytest.fixture
def v06_op(make_v06_op) -> UserOperationV06:
    return make_v06_op()


@pytest.fixture
def v07_op(make_v07_op) -> UserOperationV07:
    return make_v07_op()
