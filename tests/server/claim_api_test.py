import time

import anyio

from fastapi.testclient import TestClient

from faucet_relay.chain import MockFaucetChain
from faucet_relay.config import Config, set_config
from faucet_relay.lock_store import MemoryLockStore
from faucet_relay.models import LockKind


def test_claim(client: TestClient, sepolia: MockFaucetChain, recipient):
    resp = client.post(
        "/claim",
        json={"network": "sepolia", "recipient": recipient, "captchaToken": "valid-token"},
    )
    resp.raise_for_status()

    resp_data = resp.json()
    assert resp_data["success"]
    assert resp_data["txHash"].startswith("0x")
    assert "error" not in resp_data
    assert "wait" not in resp_data
    assert sepolia.dispatched == [recipient]


def test_claim_repeat_is_rate_limited(client: TestClient, sepolia: MockFaucetChain, recipient):
    body = {"network": "sepolia", "recipient": recipient, "captchaToken": "valid-token"}
    resp = client.post("/claim", json=body)
    resp.raise_for_status()

    resp = client.post("/claim", json=body)
    assert resp.status_code == 429
    resp_data = resp.json()
    assert resp_data == {
        "success": False,
        "error": "Wait before next claim",
        "wait": 24 * 60 * 60,
    }
    assert len(sepolia.dispatched) == 1


def test_claim_missing_captcha(client: TestClient, sepolia: MockFaucetChain, recipient):
    resp = client.post("/claim", json={"network": "sepolia", "recipient": recipient})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid captcha"}
    assert sepolia.dispatched == []


def test_claim_invalid_network(client: TestClient, lock_store: MemoryLockStore, recipient):
    resp = client.post(
        "/claim",
        json={"network": "unknown", "recipient": recipient, "captchaToken": "valid-token"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid network"}


def test_claim_invalid_recipient(client: TestClient, lock_store: MemoryLockStore):
    resp = client.post(
        "/claim",
        json={"network": "sepolia", "recipient": "not-an-address", "captchaToken": "valid-token"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid recipient address"}


def test_claim_null_fields(client: TestClient, sepolia: MockFaucetChain):
    resp = client.post(
        "/claim",
        json={"network": None, "recipient": None, "captchaToken": "valid-token"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid network"}

    resp = client.post(
        "/claim",
        json={"network": "sepolia", "recipient": None, "captchaToken": None},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid captcha"}
    assert sepolia.dispatched == []


def test_claim_malformed_body(client: TestClient, sepolia: MockFaucetChain):
    for kwargs in (
        {"json": ["sepolia"]},
        {"json": "sepolia"},
        {"content": b"{not json", "headers": {"Content-Type": "application/json"}},
        {"json": {"network": 1, "recipient": [], "captchaToken": "valid-token"}},
    ):
        resp = client.post("/claim", **kwargs)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Invalid request body"}
    assert sepolia.dispatched == []


def test_claim_chain_cooldown(client: TestClient, sepolia: MockFaucetChain, recipient):
    sepolia.last_claims[recipient] = int(time.time())

    resp = client.post(
        "/claim",
        json={"network": "sepolia", "recipient": recipient, "captchaToken": "valid-token"},
    )
    assert resp.status_code == 400
    resp_data = resp.json()
    assert not resp_data["success"]
    assert resp_data["error"] == "Wait before next claim"
    assert 24 * 60 * 60 - 2 <= resp_data["wait"] <= 24 * 60 * 60


def test_claim_transport_error(client: TestClient, sepolia: MockFaucetChain, recipient):
    sepolia.transport_error = "connection refused"

    resp = client.post(
        "/claim",
        json={"network": "sepolia", "recipient": recipient, "captchaToken": "valid-token"},
    )
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "connection refused"}


def remaining(store: MemoryLockStore, client_id: str) -> int:
    return anyio.run(store.get_remaining, client_id, "sepolia", LockKind.Cooldown)


def test_client_id_from_peer(client: TestClient, lock_store: MemoryLockStore, recipient):
    resp = client.post(
        "/claim",
        json={"network": "sepolia", "recipient": recipient, "captchaToken": "valid-token"},
        headers={"X-Forwarded-For": "203.0.113.7"},
    )
    resp.raise_for_status()

    # proxy headers are ignored unless trusted
    assert remaining(lock_store, "testclient") > 0
    assert remaining(lock_store, "203.0.113.7") == 0


def test_client_id_from_forwarded_header(
    client: TestClient, lock_store: MemoryLockStore, recipient
):
    set_config(Config(trust_proxy=True))

    resp = client.post(
        "/claim",
        json={"network": "sepolia", "recipient": recipient, "captchaToken": "valid-token"},
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    resp.raise_for_status()

    assert remaining(lock_store, "203.0.113.7") > 0
    assert remaining(lock_store, "testclient") == 0


def test_networks(client: TestClient, sepolia: MockFaucetChain, amoy: MockFaucetChain):
    amoy.transport_error = "timeout"

    resp = client.get("/networks")
    resp.raise_for_status()

    resp_data = resp.json()
    assert len(resp_data) == 2
    sepolia_info, amoy_info = resp_data
    assert sepolia_info == {
        "network": "sepolia",
        "contract": sepolia.contract_address,
        "claimAmount": 10**16,
        "cooldown": 24 * 60 * 60,
        "balance": 10**18,
        "paused": False,
    }
    assert amoy_info["network"] == "amoy"
    assert "timeout" in amoy_info["error"]
    assert "claimAmount" not in amoy_info
