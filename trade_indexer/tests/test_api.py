import asyncio
import json
import pytest
from fastapi.testclient import TestClient
from trade_indexer.api.historical import HistoricalQueryService
from trade_indexer.api.live import SubscriptionHub
from trade_indexer.main import create_app
from trade_indexer.runtime import Runtime
from trade_indexer.tests.fakes import POOL, TOKEN, FakeRpc, make_record


@pytest.fixture
def runtime(sink, registry):
    asyncio.run(sink.save_batch(20, [make_record(b) for b in (10, 20)]))
    rpc = FakeRpc()
    rpc.balances[POOL] = 10**18
    hub = SubscriptionHub()
    return Runtime(
        sink=sink,
        hub=hub,
        service=HistoricalQueryService(sink, registry=registry, rpc=rpc),
        registry=registry,
        rpc=rpc,
    )


@pytest.fixture
def client(runtime):
    with TestClient(create_app(mode="serve", runtime=runtime)) as client:
        yield client


def test_root(client):
    assert client.get("/api/").status_code == 200


def test_status(client):
    body = client.get("/api/status").json()
    assert body["mode"] == "serve"
    assert body["pools"] == 1
    assert body["subscribers"] == 0


def test_trades(client):
    body = client.get("/api/trades", params={"token": TOKEN, "limit": 1}).json()
    assert body["type"] == "historical"
    assert body["totalCount"] == 2
    assert [d["blockNumber"] for d in body["data"]] == [20]


def test_trades_rejects_bad_paging(client):
    assert client.get("/api/trades", params={"page": 0}).status_code == 422
    assert client.get("/api/trades", params={"limit": 0}).status_code == 422


def test_metrics(client):
    body = client.get("/api/metrics").json()
    assert body["liquidity"] == "1"
    assert body["volume"] == "0.000000000000002"


def test_decode(client):
    body = client.post("/api/decode", json={"data": "0x12345678"}).json()
    assert body == {"functionName": "Unknown (0x12345678)", "params": {}}


def test_websocket_history_and_live_updates(client, runtime):
    with client.websocket_connect("/api/ws") as ws:
        ws.send_text("garbage")
        ws.send_text(json.dumps({"type": "ping"}))
        ws.send_text(json.dumps({"type": "getHistorical", "tokenAddress": TOKEN}))

        history = ws.receive_json()
        assert history["type"] == "historical"
        assert history["totalCount"] == 2
        assert len(runtime.hub) == 1

        client.portal.call(runtime.hub.publish_records, [make_record(21)])
        update = ws.receive_json()
        assert update == {"type": "update", "data": make_record(21).to_document()}


def test_websocket_accepts_binary_frames(client):
    with client.websocket_connect("/api/ws") as ws:
        ws.send_bytes(b"\x00\x01")
        ws.send_bytes(json.dumps({"type": "getHistorical", "tokenAddress": TOKEN}).encode())

        history = ws.receive_json()
        assert history["type"] == "historical"
        assert history["totalCount"] == 2
