import httpx
import pytest
from fastapi.testclient import TestClient

from backend import main, upstream

# Variables read by get_settings(); cleared so the host environment cannot leak in
SETTINGS_VARS = [
    "ONEINCH_AUTH_KEY",
    "ONEINCH_DEV_PORTAL_KEY",
    "NEXT_PUBLIC_ONEINCH_API_KEY",
    "ONEINCH_BASE_URL",
    "FORCE_MOCK_DATA",
    "MOCK_FALLBACK_STATUSES",
    "UPSTREAM_TIMEOUT_SECONDS",
    "BUILDBEAR_CHAIN_ID",
    "FORK_TARGET_CHAIN_ID",
    "PROXY_CACHE_ENABLED",
    "PROXY_CACHE_MAX_ENTRIES",
    "CORS_ORIGINS",
    "APP_ENV",
    "VERSION",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in SETTINGS_VARS:
        monkeypatch.delenv(var, raising=False)
    main.cache.clear()
    yield
    main.cache.clear()


@pytest.fixture
def client():
    return TestClient(main.app)


class UpstreamStub:
    """Replaces the upstream httpx client with a MockTransport and records requests"""

    def __init__(self):
        self.requests = []
        self.handler = lambda request: httpx.Response(200, json={})

    def dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def respond(self, status_code=200, **kwargs):
        self.handler = lambda request: httpx.Response(status_code, **kwargs)

    def fail(self, message="connection refused"):
        def handler(request):
            raise httpx.ConnectError(message, request=request)
        self.handler = handler

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def stub(monkeypatch):
    stub = UpstreamStub()

    def build_client(timeout):
        return httpx.AsyncClient(transport=httpx.MockTransport(stub.dispatch), timeout=timeout)

    monkeypatch.setattr(upstream, "build_client", build_client)
    return stub
