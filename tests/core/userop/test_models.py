"""
Tests for the v0.6 / v0.7 UserOperation models.
"""

import pytest

from anode.core.userop import (
    EntryPointVersion,
    InvalidFieldError,
    MalformedHexError,
    UnsupportedVersionError,
    UserOperationV06,
    UserOperationV07,
    convert_v06_to_v07,
    convert_v07_to_v06,
    default_entry_point,
    normalize_gas_fields,
    pack_uint128_pair,
    unpack_uint128_pair,
    user_operation_from_rpc,
    version_of,
)


@pytest.mark.parametrize("tag", ["0.6", "v0.6", "V06", "06", " 0.6 "])
def test_version_parse_v06_aliases(tag) -> None:
    assert EntryPointVersion.parse(tag) is EntryPointVersion.V06


@pytest.mark.parametrize("tag", ["0.7", "v0.7", "V07", "07"])
def test_version_parse_v07_aliases(tag) -> None:
    assert EntryPointVersion.parse(tag) is EntryPointVersion.V07


@pytest.mark.parametrize("tag", ["0.8", "v1", "", None, 6])
def test_version_parse_rejects_unknown(tag) -> None:
    with pytest.raises(UnsupportedVersionError) as exc_info:
        EntryPointVersion.parse(tag)
    assert exc_info.value.to_dict()["code"] == "unsupported_version"


def test_v07_packs_gas_words(v07_op, vectors) -> None:
    assert v07_op.account_gas_limits == vectors.expected["v07AccountGasLimits"]
    assert v07_op.gas_fees == vectors.expected["v07GasFees"]


def test_pack_uint128_pair_round_trip_at_limits() -> None:
    word = pack_uint128_pair(2**128 - 1, 1)
    assert unpack_uint128_pair(word) == (2**128 - 1, 1)


def test_v07_rejects_gas_value_wider_than_128_bits(make_v07_op) -> None:
    with pytest.raises(InvalidFieldError) as exc_info:
        make_v07_op(call_gas_limit=2**128)
    assert exc_info.value.field == "callGasLimit"


def test_v07_rejects_short_packed_word(vectors) -> None:
    with pytest.raises(InvalidFieldError) as exc_info:
        UserOperationV07(
            sender=vectors.operation["sender"],
            nonce=0,
            init_code="0x",
            call_data="0x",
            account_gas_limits="0x" + "00" * 31,
            pre_verification_gas=0,
            gas_fees=vectors.expected["v07GasFees"],
        )
    assert exc_info.value.field == "accountGasLimits"


def test_v06_rejects_value_wider_than_256_bits(make_v06_op) -> None:
    with pytest.raises(InvalidFieldError) as exc_info:
        make_v06_op(nonce=2**256)
    assert exc_info.value.field == "nonce"


def test_v06_rejects_malformed_hex(make_v06_op) -> None:
    with pytest.raises(MalformedHexError) as exc_info:
        make_v06_op(call_data="0x123")
    assert exc_info.value.field == "callData"


def test_normalize_gas_fields_agrees_across_layouts(v06_op, v07_op) -> None:
    gas = normalize_gas_fields(v07_op)

    assert gas == normalize_gas_fields(v06_op)
    assert gas.call_gas_limit == 0x5208
    assert gas.verification_gas_limit == 0x186A0
    assert gas.max_fee_per_gas == 0x3B9ACA00


def test_convert_between_layouts(v06_op, v07_op) -> None:
    assert convert_v06_to_v07(v06_op) == v07_op
    assert convert_v07_to_v06(v07_op) == v06_op
    assert version_of(convert_v06_to_v07(v06_op)) is EntryPointVersion.V07


def test_from_rpc_detects_layout(v06_op, v07_op) -> None:
    assert user_operation_from_rpc(v06_op.to_rpc_dict()) == v06_op
    assert user_operation_from_rpc(v07_op.to_rpc_dict()) == v07_op


def test_from_rpc_parses_fixture_operation(vectors, v06_op) -> None:
    parsed = user_operation_from_rpc(vectors.operation, "0.6")

    assert isinstance(parsed, UserOperationV06)
    assert parsed == v06_op


def test_from_rpc_defaults_optional_bytes(vectors) -> None:
    data = dict(vectors.operation)
    del data["initCode"]
    del data["paymasterAndData"]
    del data["signature"]

    parsed = user_operation_from_rpc(data)

    assert parsed.init_code == "0x"
    assert parsed.paymaster_and_data == "0x"
    assert parsed.signature == "0x"


def test_from_rpc_reports_missing_and_bad_quantities(vectors) -> None:
    data = dict(vectors.operation)
    del data["nonce"]
    with pytest.raises(InvalidFieldError) as exc_info:
        user_operation_from_rpc(data)
    assert exc_info.value.field == "nonce"

    data = dict(vectors.operation, callGasLimit="21000")
    with pytest.raises(InvalidFieldError) as exc_info:
        user_operation_from_rpc(data)
    assert exc_info.value.field == "callGasLimit"


def test_to_rpc_dict_uses_hex_quantities(v06_op) -> None:
    rpc = v06_op.to_rpc_dict()

    assert rpc["nonce"] == "0x11"
    assert rpc["verificationGasLimit"] == "0x186a0"
    assert rpc["paymasterAndData"] == "0x"


def test_default_entry_points(vectors) -> None:
    assert default_entry_point("0.6") == vectors.entry_point_v06
    assert default_entry_point(EntryPointVersion.V07) == vectors.entry_point_v07
    with pytest.raises(UnsupportedVersionError):
        default_entry_point("0.8")


def test_bytes_fields_reject_trailing_newline(make_v06_op, vectors) -> None:
    with pytest.raises(MalformedHexError) as exc_info:
        make_v06_op(call_data=vectors.operation["callData"] + "\n")
    assert exc_info.value.field == "callData"


@pytest.mark.parametrize("nonce", ["0x1_1", "0x11 ", " 0x11", "0x", "0x+1", "11"])
def test_from_rpc_rejects_loose_quantities(vectors, nonce) -> None:
    with pytest.raises(InvalidFieldError) as exc_info:
        user_operation_from_rpc(dict(vectors.operation, nonce=nonce))
    assert exc_info.value.field == "nonce"


def test_from_rpc_accepts_leading_zero_quantity(vectors) -> None:
    parsed = user_operation_from_rpc(dict(vectors.operation, nonce="0x0011"))

    assert parsed.nonce == 0x11
