"""HTTP API over the catalog and swap sessions."""

import pytest
from fastapi.testclient import TestClient

from tokenswap.core.config import Settings
from tokenswap.main import create_app


def make_settings(**overrides) -> Settings:
    values = dict(
        catalog_source="static",
        tx_delay_min_seconds=0,
        tx_delay_max_seconds=0,
        tx_failure_rate=0.0,
        debug=False,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def app():
    return create_app(make_settings())


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def session_id(client):
    resp = client.post("/sessions/")
    assert resp.status_code == 201
    return resp.json()["session_id"]


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Token Swap API", "version": "0.1.0"}


def test_request_id_echoed(client):
    resp = client.get("/", headers={"x-request-id": "abc-123"})
    assert resp.headers["x-request-id"] == "abc-123"
    assert client.get("/").headers["x-request-id"]


def test_unknown_route(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "not_found", "detail": "No route for GET /nope"}


class TestTokens:
    def test_list(self, client):
        resp = client.get("/tokens/")
        assert resp.status_code == 200
        tokens = resp.json()
        assert [t["symbol"] for t in tokens] == ["ATOM", "BLUR", "ETH", "USD", "USDC"]
        eth = tokens[2]
        assert eth["price"] == "1645.93"
        assert eth["display_price"] == "1645.93"
        assert eth["icon_url"].endswith("/ETH.svg")
        assert tokens[1]["display_price"] == "0.2081"

    def test_query(self, client):
        resp = client.get("/tokens/", params={"query": "us"})
        assert [t["symbol"] for t in resp.json()] == ["USD", "USDC"]

    def test_refresh(self, client, app):
        client.get("/tokens/")
        resp = client.post("/tokens/refresh")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["source"] == "static"
        assert body["count"] == 5
        assert app.state.catalog_service.load_count == 2


class TestSessions:
    def test_create(self, client):
        resp = client.post("/sessions/")
        assert resp.status_code == 201
        view = resp.json()
        assert (view["from_token"], view["to_token"]) == ("ETH", "USDC")
        assert view["from_amount"] == "1"
        assert view["to_amount"] == "1662.837734080126728576162419481286"
        assert view["to_amount_display"] == "1662.837734"
        assert view["exchange_rate_display"] == "1 ETH = 1662.837734 USDC"
        assert view["can_confirm"] is True
        assert view["status_message"] == "Confirm Swap"

    def test_read(self, client, session_id):
        resp = client.get(f"/sessions/{session_id}")
        assert resp.status_code == 200
        assert resp.json()["session_id"] == session_id

    def test_set_amount(self, client, session_id):
        resp = client.put(f"/sessions/{session_id}/amount", json={"text": "2.5"})
        view = resp.json()
        assert view["from_amount"] == "2.5"
        assert view["from_usd"] == "$4114.83"

    def test_invalid_amount_reported(self, client, session_id):
        view = client.put(f"/sessions/{session_id}/amount", json={"text": "."}).json()
        assert view["from_amount"] == "."
        assert view["errors"] == {"from": "Please enter a valid number"}
        assert view["to_amount"] == ""
        assert view["to_usd"] == "$0.00"
        assert view["can_confirm"] is False

    def test_select_token(self, client, session_id):
        resp = client.put(f"/sessions/{session_id}/tokens/to", json={"symbol": "USD"})
        assert resp.status_code == 200
        assert resp.json()["to_amount"] == "1645.93"

    def test_select_unknown_token(self, client, session_id):
        resp = client.put(f"/sessions/{session_id}/tokens/to", json={"symbol": "DOGE"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "not_found", "detail": "token 'DOGE' is not in the catalog"}

    def test_select_bad_side(self, client, session_id):
        resp = client.put(f"/sessions/{session_id}/tokens/sideways", json={"symbol": "ETH"})
        assert resp.status_code == 422
        assert resp.json()["error"] == "validation_error"

    def test_swap(self, client, session_id):
        view = client.post(f"/sessions/{session_id}/swap").json()
        assert (view["from_token"], view["to_token"]) == ("USDC", "ETH")
        assert view["from_amount"] == "1662.837734"
        assert view["to_amount_display"] == "1"

    def test_refresh_rate(self, client, session_id):
        resp = client.post(f"/sessions/{session_id}/refresh")
        assert resp.status_code == 200
        assert resp.json()["exchange_rate"] == "1662.837734080126728576162419481286"

    def test_confirm(self, client, session_id):
        resp = client.post(f"/sessions/{session_id}/confirm")
        assert resp.status_code == 200
        outcome = resp.json()
        assert outcome["status"] == "success"
        assert outcome["message"] == "Successfully swapped 1 ETH for 1662.837734 USDC"

        again = client.post(f"/sessions/{session_id}/confirm")
        assert again.status_code == 409
        assert again.json() == {"error": "not_ready", "detail": "Enter amount"}

        view = client.get(f"/sessions/{session_id}").json()
        assert view["last_outcome"]["title"] == "Swap Successful!"

    def test_confirm_failure(self):
        app = create_app(make_settings(tx_failure_rate=1.0))
        with TestClient(app) as client:
            sid = client.post("/sessions/").json()["session_id"]
            outcome = client.post(f"/sessions/{sid}/confirm").json()
        assert outcome["status"] == "error"
        assert outcome["message"] == "Transaction failed. Please try again."

    def test_unknown_session(self, client):
        resp = client.get("/sessions/missing")
        assert resp.status_code == 404
        assert resp.json() == {"error": "not_found", "detail": "session 'missing' not found"}

    def test_delete(self, client, session_id):
        resp = client.delete(f"/sessions/{session_id}")
        assert resp.json() == {"status": "deleted", "session_id": session_id}
        assert client.get(f"/sessions/{session_id}").status_code == 404
        assert client.delete(f"/sessions/{session_id}").status_code == 404


def test_unhandled_error_is_500(app):
    with TestClient(app, raise_server_exceptions=False) as client:
        sid = client.post("/sessions/").json()["session_id"]
        session = app.state.sessions.get(sid)

        def boom():
            raise RuntimeError("boom")

        session.refresh_rate = boom
        resp = client.post(f"/sessions/{sid}/refresh")
    assert resp.status_code == 500
    assert resp.json() == {"error": "internal_error", "detail": "An unexpected error occurred."}


def test_rejects_bad_settings():
    with pytest.raises(ValueError):
        create_app(make_settings(catalog_source="ftp"))
