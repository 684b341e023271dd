import pytest
from fastapi.testclient import TestClient

from anode.config import settings
from anode.core.userop import ENTRYPOINT_ADDRESSES, EntryPointVersion
from anode.main import app

client = TestClient(app)


@pytest.fixture(autouse=True)
def default_chain(monkeypatch):
    monkeypatch.setattr(settings, "chain_id", 11155111)
    monkeypatch.setattr(settings, "entrypoint_version", "0.6")
    monkeypatch.setattr(settings, "entrypoint_v06_address", ENTRYPOINT_ADDRESSES[EntryPointVersion.V06])
    monkeypatch.setattr(settings, "entrypoint_v07_address", ENTRYPOINT_ADDRESSES[EntryPointVersion.V07])
    monkeypatch.setattr(settings, "paymaster_private_key", "")
    monkeypatch.setattr(settings, "paymaster_address", "")
    monkeypatch.setattr(settings, "paymaster_validity_seconds", 0)
    monkeypatch.setattr(settings, "paymaster_max_call_gas_limit", 10_000_000)
    monkeypatch.setattr(settings, "paymaster_max_fee_per_gas", None)
    monkeypatch.setattr(settings, "paymaster_max_cost_per_operation", None)


@pytest.fixture
def paymaster_configured(monkeypatch, vectors):
    monkeypatch.setattr(settings, "paymaster_private_key", vectors.paymaster_key)
    monkeypatch.setattr(settings, "paymaster_address", vectors.paymaster_contract)


def test_health_reports_configuration():
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["entryPointVersion"] == "0.6"
    assert data["entryPoint"] == ENTRYPOINT_ADDRESSES[EntryPointVersion.V06]
    assert data["chainId"] == 11155111
    assert data["paymasterConfigured"] is False
    assert "x-request-id" in resp.headers


def test_root_lists_docs():
    data = client.get("/").json()
    assert data["docs"] == "/docs"
    assert data["health"] == "/health"


def test_hash_endpoint_known_answer(vectors):
    resp = client.post("/api/v1/userop/hash", json={"userOperation": vectors.operation})
    assert resp.status_code == 200, resp.json()
    data = resp.json()
    assert data["opHash"] == vectors.expected["v06OpHash"]
    assert data["version"] == "0.6"
    assert data["entryPoint"] == vectors.entry_point_v06


def test_hash_endpoint_v07(v07_op, vectors):
    resp = client.post(
        "/api/v1/userop/hash",
        json={"userOperation": v07_op.to_rpc_dict(), "entryPointVersion": "v0.7"},
    )
    assert resp.status_code == 200, resp.json()
    assert resp.json()["opHash"] == vectors.expected["v07OpHash"]
    assert resp.json()["entryPoint"] == vectors.entry_point_v07


def test_hash_endpoint_overrides(vectors):
    resp = client.post(
        "/api/v1/userop/hash",
        json={"userOperation": vectors.operation, "chainId": 1, "entryPoint": vectors.entry_point_v07},
    )
    assert resp.status_code == 200
    assert resp.json()["chainId"] == 1
    assert resp.json()["opHash"] != vectors.expected["v06OpHash"]


def test_malformed_hex_is_a_client_error(vectors):
    op = dict(vectors.operation, callData="0x123")
    resp = client.post("/api/v1/userop/hash", json={"userOperation": op})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "malformed_hex"
    assert body["error"]["field"] == "callData"


def test_unsupported_version_is_a_client_error(vectors):
    resp = client.post("/api/v1/userop/hash", json={"userOperation": vectors.operation, "entryPointVersion": "0.5"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "unsupported_version"


def test_validate_sponsored_operation(vectors):
    op = dict(
        vectors.operation,
        paymasterAndData=vectors.expected["paymasterAndData"],
        signature=vectors.expected["sponsoredSignature"],
    )
    resp = client.post(
        "/api/v1/userop/validate",
        json={
            "userOperation": op,
            "expectedSigner": vectors.account_address,
            "expectedPaymaster": vectors.paymaster_signer,
            "now": vectors.valid_until + 1,
        },
    )
    assert resp.status_code == 200, resp.json()
    data = resp.json()
    assert data["opHash"] == vectors.expected["sponsoredOpHash"]
    assert data["signerValid"] is True
    assert data["paymasterValid"] is True
    assert data["paymasterWindowValid"] is False
    assert data["valid"] is False


def test_validate_requires_expected_signer(vectors):
    resp = client.post("/api/v1/userop/validate", json={"userOperation": vectors.operation})
    assert resp.status_code == 422


def test_validate_unsigned_operation(vectors):
    resp = client.post(
        "/api/v1/userop/validate",
        json={"userOperation": vectors.operation, "expectedSigner": vectors.account_address},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "invalid_signature_length"


def test_process_without_paymaster_key(vectors):
    resp = client.post("/api/v1/paymaster/process", json={"userOperation": vectors.operation})
    assert resp.status_code == 503


def test_process_sponsors_and_validates(vectors, paymaster_configured):
    resp = client.post("/api/v1/paymaster/process", json={"userOperation": vectors.operation})
    assert resp.status_code == 200, resp.json()
    data = resp.json()
    assert data["success"] is True
    assert data["paymentMethod"] == "paymaster"
    assert data["sponsorOpHash"] == vectors.expected["v06OpHash"]
    assert data["processing"]["modules"] == ["basic_paymaster"]
    assert data["processing"]["totalDuration"].endswith("ms")
    assert "error" not in data

    paymaster_and_data = data["userOperation"]["paymasterAndData"]
    assert len(paymaster_and_data) == 2 + 97 * 2
    assert paymaster_and_data.startswith(vectors.paymaster_contract.lower() + "00" * 12)

    # Sponsorship must survive the account signing step
    check = client.post(
        "/api/v1/userop/validate",
        json={
            "userOperation": dict(data["userOperation"], signature="0x" + "00" * 64 + "1b"),
            "expectedSigner": vectors.account_address,
            "expectedPaymaster": vectors.paymaster_signer,
        },
    )
    assert check.status_code == 200, check.json()
    assert check.json()["paymasterValid"] is True


def test_process_direct_payment(vectors, paymaster_configured):
    op = dict(vectors.operation, maxFeePerGas="0x0", maxPriorityFeePerGas="0x0")
    resp = client.post("/api/v1/paymaster/process", json={"userOperation": op})
    assert resp.status_code == 200
    data = resp.json()
    assert data["paymentMethod"] == "direct-payment"
    assert data["userOperation"]["paymasterAndData"] == "0x"
    assert "sponsorOpHash" not in data


def test_process_rejects_empty_call_data(vectors, paymaster_configured):
    op = dict(vectors.operation, callData="0x")
    resp = client.post("/api/v1/paymaster/process", json={"userOperation": op})
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["success"] is False
    assert detail["error"]["code"] == "INVALID_USER_OPERATION"


@pytest.mark.asyncio
async def test_hash_route_called_directly(vectors):
    from anode.api.userops import userop_hash
    from anode.types import UserOpHashRequest

    response = await userop_hash(UserOpHashRequest(userOperation=vectors.operation, entryPointVersion="06"))

    assert response.opHash == vectors.expected["v06OpHash"]
    assert response.chainId == vectors.chain_id


@pytest.mark.asyncio
async def test_paymaster_sponsor_follows_settings(monkeypatch, vectors, paymaster_configured):
    from anode.api.health import health_check
    from anode.api.paymaster import get_paymaster_sponsor

    monkeypatch.setattr(settings, "paymaster_validity_seconds", 600)

    sponsor = get_paymaster_sponsor("0.7")
    health = await health_check()

    assert sponsor.version is EntryPointVersion.V07
    assert sponsor.entry_point == vectors.entry_point_v07
    assert sponsor.signer.address == vectors.paymaster_signer
    assert sponsor.validity_window(1000) == (1600, 0)
    assert health["paymasterConfigured"] is True


def test_process_enforces_configured_policy(monkeypatch, vectors, paymaster_configured):
    monkeypatch.setattr(settings, "paymaster_max_fee_per_gas", 1_000_000)

    resp = client.post("/api/v1/paymaster/process", json={"userOperation": vectors.operation})

    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["error"]["code"] == "POLICY_VIOLATION"
    assert "maxFeePerGas" in detail["error"]["message"]
