"""Tests for the inform relay app (controller mocked with httpx.MockTransport)."""
import httpx
import pytest
from fastapi.testclient import TestClient

from unispi.keys import KeyStore
from unispi.parsing.inform import CompressionMethod, EncryptionMethod, build_inform_packet
from unispi.relay_app import RelaySettings, create_app
from unispi.relay_app.controller_adapter import forwardable_headers

MAC = "aa:bb:cc:dd:ee:ff"
KEY = "00112233445566778899aabbccddeeff"
REQUEST = {"_type": "inform", "mac": MAC, "uptime": 42}
RESPONSE = {"_type": "noop", "interval": 10}


def _settings(tmp_path, **overrides):
    values = {
        "controller_url": "http://controller.test",
        "keys_file": str(tmp_path / "keys.txt"),
        "store_max_size": 10,
        "log_ring_size": 50,
    }
    values.update(overrides)
    return RelaySettings(**values)


class Controller:
    def __init__(self, body: bytes, status_code: int = 200):
        self.body = body
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(
            self.status_code,
            content=self.body,
            headers={"content-type": "application/x-binary", "x-controller": "yes"},
        )


@pytest.fixture
def packets():
    req = build_inform_packet(REQUEST, MAC, key=KEY, encryption=EncryptionMethod.AES_GCM)
    res = build_inform_packet(RESPONSE, MAC, key=KEY, compression=CompressionMethod.SNAPPY)
    return req, res


def test_forward_and_decode(tmp_path, packets):
    req, res = packets
    controller = Controller(res)
    app = create_app(
        _settings(tmp_path),
        key_store=KeyStore({MAC: KEY}),
        controller_transport=httpx.MockTransport(controller),
    )
    with TestClient(app) as client:
        resp = client.post("/inform", content=req, headers={"content-type": "application/x-binary"})
        assert resp.status_code == 200
        assert resp.content == res
        assert resp.headers["x-controller"] == "yes"

        assert len(controller.requests) == 1
        assert controller.requests[0].url.path == "/inform"
        assert controller.requests[0].content == req

        txns = client.get("/transactions").json()
        assert txns["total"] == 1
        txn = txns["transactions"][0]
        assert txn["meta"]["mac"] == MAC
        assert txn["req"]["payload"] == REQUEST
        assert txn["res"]["payload"] == RESPONSE
        assert txn["req"]["head"]["encryption_method"] == "AES-GCM"
        assert txn["req"]["key_used"] == KEY


def test_default_key_devices(tmp_path):
    req = build_inform_packet(REQUEST, MAC)
    res = build_inform_packet(RESPONSE, MAC)
    app = create_app(
        _settings(tmp_path),
        key_store=KeyStore(),
        controller_transport=httpx.MockTransport(Controller(res)),
    )
    with TestClient(app) as client:
        client.post("/inform", content=req)
        txn = client.get("/transactions").json()["transactions"][0]
        assert txn["req"]["key_used"] == "(default)"


def test_decode_failure_does_not_alter_forwarding(tmp_path):
    garbage = b"definitely not an inform packet"
    app = create_app(
        _settings(tmp_path),
        key_store=KeyStore(),
        controller_transport=httpx.MockTransport(Controller(b"controller says hi", status_code=404)),
    )
    with TestClient(app) as client:
        resp = client.post("/inform", content=garbage)
        assert resp.status_code == 404
        assert resp.content == b"controller says hi"
        assert client.get("/transactions").json()["transactions"] == []

        events = client.get("/logs").json()["events"]
        failures = [e for e in events if e["event"] == "inform_decode_failed"]
        assert failures
        assert failures[-1]["details"]["error_type"] == "MagicMismatch"


def test_controller_unreachable(tmp_path, packets):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    app = create_app(
        _settings(tmp_path),
        key_store=KeyStore(),
        controller_transport=httpx.MockTransport(handler),
    )
    with TestClient(app) as client:
        resp = client.post("/inform", content=packets[0])
        assert resp.status_code == 502
        assert client.get("/transactions").json()["total"] == 0


def test_decoding_disabled(tmp_path, packets):
    req, res = packets
    app = create_app(
        _settings(tmp_path, enable_decoding=False),
        key_store=KeyStore({MAC: KEY}),
        controller_transport=httpx.MockTransport(Controller(res)),
    )
    with TestClient(app) as client:
        assert client.post("/inform", content=req).content == res
        assert client.get("/transactions").json()["total"] == 0


def test_transactions_filter_and_limit(tmp_path, packets):
    req, res = packets
    app = create_app(
        _settings(tmp_path),
        key_store=KeyStore({MAC: KEY}),
        controller_transport=httpx.MockTransport(Controller(res)),
    )
    with TestClient(app) as client:
        for _ in range(3):
            client.post("/inform", content=req)
        assert len(client.get("/transactions", params={"limit": 2}).json()["transactions"]) == 2
        assert len(client.get("/transactions", params={"mac": MAC.upper()}).json()["transactions"]) == 3
        assert client.get("/transactions", params={"mac": "00:00:00:00:00:00"}).json()["transactions"] == []


def test_keys_loaded_from_file(tmp_path, packets):
    req, res = packets
    (tmp_path / "keys.txt").write_text('{"mac": "%s", "x_authkey": "%s"}\n' % (MAC, KEY), encoding="utf-8")
    app = create_app(_settings(tmp_path), controller_transport=httpx.MockTransport(Controller(res)))
    with TestClient(app) as client:
        client.post("/inform", content=req)
        assert client.get("/transactions").json()["total"] == 1


def test_logs_redact_keys(tmp_path, packets):
    req, res = packets
    app = create_app(
        _settings(tmp_path),
        key_store=KeyStore({MAC: KEY}),
        controller_transport=httpx.MockTransport(Controller(res)),
    )
    with TestClient(app) as client:
        client.post("/inform", content=req)
        events = client.get("/logs").json()["events"]
        decoded = [e for e in events if e["event"] == "inform_decoded"]
        assert decoded[-1]["details"]["key_used"] == "***"


def test_health(tmp_path):
    app = create_app(_settings(tmp_path), key_store=KeyStore())
    with TestClient(app) as client:
        assert client.get("/health").text == "ok"


def test_forwardable_headers():
    headers = {"Host": "relay", "Content-Length": "10", "User-Agent": "AirControl Agent v1.0"}
    assert forwardable_headers(headers) == {"User-Agent": "AirControl Agent v1.0"}
