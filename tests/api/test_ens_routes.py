import pytest
from fastapi.testclient import TestClient

from walletlens.config import Settings
from walletlens.container import build_services
from walletlens.main import app
from walletlens.tools.opensea import KNOWN_OPERATIONS

VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"

client = TestClient(app)


@pytest.fixture(autouse=True)
def services(stub_endpoint):
    settings = Settings(
        _env_file=None,
        opensea_mcp_token="",
        ethereum_rpc_url="",
        ens_fallback_rpc_urls=[],
    )
    built = build_services(settings)
    built.resolver.endpoints = [
        stub_endpoint(
            "stub",
            names={VITALIK: "vitalik.eth"},
            addresses={"vitalik.eth": VITALIK},
            texts={"vitalik.eth": {"url": "https://vitalik.ca"}},
        )
    ]
    app.state.services = built
    yield built
    del app.state.services


def test_root_and_health():
    assert client.get("/").json()["health"] == "/healthz"

    data = client.get("/healthz").json()
    assert data["status"] == "degraded"
    assert data["providers"]["opensea_mcp"] == {"status": "unavailable", "session": "uninitialized"}
    assert data["providers"]["ens"] == {"status": "configured", "endpoints": 1}


def test_list_tools_serves_catalog_without_token():
    resp = client.get("/tools/opensea")

    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == len(KNOWN_OPERATIONS)
    assert data["tools"][0]["name"] == "search"


def test_call_tool_without_token_returns_error_payload():
    resp = client.post("/tools/opensea/search", json={"arguments": {"query": "punks"}})

    assert resp.status_code == 200
    assert resp.json()["error"] is True
    assert "not configured" in resp.json()["message"]


def test_call_unknown_tool_is_404():
    resp = client.post("/tools/opensea/delete_everything", json={})

    assert resp.status_code == 404


def test_resolve_by_name():
    data = client.get("/ens/resolve", params={"input": "vitalik.eth"}).json()

    assert data["success"] is True
    assert data["address"] == VITALIK
    assert data["profile"]["url"] == "https://vitalik.ca"


def test_batch_and_cache_lifecycle(services):
    resp = client.post("/ens/batch", json={"inputs": [VITALIK, "nobody.eth"]})
    assert resp.status_code == 200
    assert resp.json()["resolved"] == 1

    stats = client.get("/ens/cache").json()
    assert VITALIK.lower() in stats["names"]["entries"]

    assert client.delete("/ens/cache").json() == {"success": True}
    assert client.get("/ens/cache").json()["names"]["size"] == 0


def test_batch_rejects_empty_inputs():
    assert client.post("/ens/batch", json={"inputs": []}).status_code == 422


def test_enhance_payload():
    resp = client.post("/ens/enhance", json={"payload": {"owner": VITALIK, "items": [{"maker": VITALIK.lower()}]}})

    data = resp.json()
    assert data["_addressCount"] == 1
    assert data["_ensData"][VITALIK.lower()] == {"name": "vitalik.eth", "avatar": None}
    assert data["owner"] == VITALIK
