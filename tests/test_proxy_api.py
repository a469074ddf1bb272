import json

from backend.mocks import ETH, USDC


def test_get_is_rewritten_and_forwarded(client, stub, monkeypatch):
    monkeypatch.setenv("ONEINCH_AUTH_KEY", "secret")
    stub.respond(200, json={"dstAmount": "42"})

    r = client.get("/api/1inch/swap/1/quote", params={"src": ETH, "dst": USDC, "amount": "1"})

    assert r.status_code == 200
    assert r.json() == {"dstAmount": "42"}
    assert r.headers["x-real-time-data"] == "true"
    assert r.headers["x-data-source"] == "1inch-api"
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["cache-control"] == "public, max-age=30"

    sent = stub.last
    assert sent.url.path == "/swap/v6.0/1/quote"
    assert sent.url.host == "api.1inch.dev"
    assert sent.url.params["amount"] == "1"
    assert sent.headers["authorization"] == "Bearer secret"
    assert sent.headers["x-api-version"] == "6.0"


def test_custom_base_url(client, stub, monkeypatch):
    monkeypatch.setenv("ONEINCH_BASE_URL", "http://upstream.test")
    client.get("/api/1inch/orderbook/1/active-orders")
    assert str(stub.last.url) == "http://upstream.test/orderbook/v4.0/1/active-orders"
    assert stub.last.headers["x-api-version"] == "4.0"


def test_post_body_is_forwarded(client, stub):
    stub.respond(201, json={"orderHash": "0xabc"})
    payload = {"order": {"maker": "0x0"}}

    r = client.post("/api/1inch/fusion/orders/submit", json=payload)

    assert r.status_code == 200
    assert r.headers["cache-control"] == "no-cache"
    assert stub.last.method == "POST"
    assert json.loads(stub.last.content) == payload
    assert stub.last.url.path == "/fusion/v1.0/orders/submit"


def test_forced_mock_skips_upstream(client, stub, monkeypatch):
    monkeypatch.setenv("FORCE_MOCK_DATA", "true")

    r = client.get("/api/1inch/orderbook/1/active-orders")

    assert r.status_code == 200
    assert r.json() == {"orders": []}
    assert r.headers["x-mock-data"] == "true"
    assert r.headers["x-mock-reason"] == "forced"
    assert stub.requests == []


def test_unauthorized_falls_back_to_mock(client, stub):
    stub.respond(401, text="invalid key")

    r = client.get("/api/1inch/tokens/1/extra")

    assert r.status_code == 200
    assert r.headers["x-mock-data"] == "true"
    assert r.headers["x-fallback-reason"] == "unauthorized"
    assert ETH in r.json()["tokens"]


def test_network_error_falls_back_to_mock(client, stub):
    stub.fail()

    r = client.post("/api/1inch/fusion/orders/submit", json={})

    assert r.status_code == 200
    assert r.headers["x-fallback-reason"] == "network-error"
    assert r.json()["status"] == "pending"


def test_configured_fallback_statuses(client, stub, monkeypatch):
    monkeypatch.setenv("MOCK_FALLBACK_STATUSES", "401,503")
    stub.respond(503, text="down")

    r = client.get("/api/1inch/swap/1/healthcheck")

    assert r.status_code == 200
    assert r.headers["x-fallback-reason"] == "upstream-503"
    assert r.json()["status"] == "OK"


def test_other_errors_pass_through(client, stub):
    stub.respond(400, text="insufficient liquidity")

    r = client.get("/api/1inch/swap/1/quote")

    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "1inch API error: Bad Request"
    assert body["details"] == "insufficient liquidity"
    assert body["status"] == 400
    assert r.headers["access-control-allow-origin"] == "*"
    assert "x-mock-data" not in r.headers


def test_non_json_success_is_bad_gateway(client, stub):
    stub.respond(200, text="<html>oops</html>")

    r = client.get("/api/1inch/price/1")

    assert r.status_code == 502
    assert r.json()["error"] == "Invalid upstream response"


def test_get_responses_are_cached(client, stub):
    stub.respond(200, json={"ok": True})

    first = client.get("/api/1inch/price/1", params={"currency": "USD"})
    second = client.get("/api/1inch/price/1", params={"currency": "USD"})

    assert first.headers["x-cache"] == "MISS"
    assert second.headers["x-cache"] == "HIT"
    assert second.json() == {"ok": True}
    assert len(stub.requests) == 1


def test_cache_can_be_disabled(client, stub, monkeypatch):
    monkeypatch.setenv("PROXY_CACHE_ENABLED", "false")
    stub.respond(200, json={"ok": True})

    client.get("/api/1inch/price/1")
    r = client.get("/api/1inch/price/1")

    assert r.headers["x-cache"] == "BYPASS"
    assert len(stub.requests) == 2


def test_mock_fallbacks_are_not_cached(client, stub):
    stub.respond(401)
    client.get("/api/1inch/price/1")
    stub.respond(200, json={"real": True})

    r = client.get("/api/1inch/price/1")

    assert r.json() == {"real": True}
    assert len(stub.requests) == 2


def test_unexpected_failure_is_internal_error(client, monkeypatch):
    from backend import upstream

    async def broken(*args, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(upstream, "send", broken)

    r = client.delete("/api/1inch/orderbook/1/order/0xabc")

    assert r.status_code == 500
    assert r.json() == {"error": "Internal proxy error", "details": "kaboom"}


def test_options_returns_cors_headers(client):
    r = client.options("/api/1inch/swap/1/quote")

    assert r.status_code == 200
    assert r.headers["access-control-allow-methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert r.headers["access-control-max-age"] == "86400"


def test_browser_preflight_gets_proxy_cors_set(client):
    r = client.options(
        "/api/1inch/swap/1/quote",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "X-API-Key",
        },
    )

    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    assert r.headers["access-control-allow-methods"] == "GET, POST, PUT, DELETE, OPTIONS"
    assert r.headers["access-control-max-age"] == "86400"
    assert "access-control-allow-credentials" not in r.headers


def test_preflight_rejects_unlisted_method(client):
    r = client.options(
        "/api/1inch/swap/1/quote",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "PATCH"},
    )

    assert r.status_code == 400
