import pytest

from backend.config import Settings
from backend.routing import (
    enhance_api_path,
    is_valid_address,
    is_valid_chain_id,
    map_fork_chain,
    protocol_headers,
)

WALLET = "0x1111111111111111111111111111111111111111"


@pytest.mark.parametrize(
    "path, expected",
    [
        ("swap/v6.0/1/quote", "swap/v6.0/1/quote"),
        ("fusion-plus/quoter/v1.0/quote/receive", "fusion-plus/quoter/v1.0/quote/receive"),
        ("prices/8453", "price/v1.1/8453"),
        (f"balance/8453/{WALLET}", f"balance/v1.2/8453/balances/{WALLET}"),
        ("tokens/137", "swap/v6.0/137/tokens"),
        ("swap/1/quote", "swap/v6.0/1/quote"),
        ("swap/1", "swap/v6.0/1"),
        (f"history/1/{WALLET}", f"history/v2.0/1/history/{WALLET}"),
        ("quote/1", "swap/v6.0/1"),
        ("healthcheck", "swap/v6.0"),
        ("orderbook/1/active-orders", "orderbook/v4.0/1/active-orders"),
        ("limit-order/1/all", "orderbook/v4.0/1/all"),
        ("fusion/orders/active", "fusion/v1.0/orders/active"),
        ("cross-chain/quote", "fusion-plus/v1.0/quote"),
        ("traces/1/block", "traces/v1.0/1/block"),
        ("balance/1", "balance/v1.2/1"),
        ("unknown/thing", "unknown/thing"),
    ],
)
def test_enhance_api_path(path, expected):
    assert enhance_api_path(path) == expected


def test_bare_protocol_alias_maps_to_base():
    assert enhance_api_path("swap") == "swap/v6.0"
    assert enhance_api_path("fusion") == "fusion/v1.0"


def test_protocol_headers_with_key():
    headers = protocol_headers("swap/v6.0/1/quote", "secret")
    assert headers["Authorization"] == "Bearer secret"
    assert headers["Accept"] == "application/json"
    assert headers["Content-Type"] == "application/json"
    assert headers["X-API-Version"] == "6.0"


def test_protocol_headers_without_key_has_no_authorization():
    assert "Authorization" not in protocol_headers("price/v1.1/1")


@pytest.mark.parametrize(
    "path, version",
    [
        ("orderbook/v4.0/1/all", "4.0"),
        ("limit-order/stuff", "4.0"),
        ("fusion/v1.0/orders", "1.0"),
        ("fusion-plus/v1.0/quote", "1.0"),
        ("swap/v6.0/1/swap", "6.0"),
        ("price/v1.1/1", None),
    ],
)
def test_protocol_version_header(path, version):
    assert protocol_headers(path).get("X-API-Version") == version


def test_map_fork_chain():
    settings = Settings()
    assert map_fork_chain("27257", settings) == "8453"
    assert map_fork_chain("1", settings) == "1"
    custom = Settings(fork_chain_id="31337", fork_target_chain_id="1")
    assert map_fork_chain("31337", custom) == "1"


def test_validators():
    assert is_valid_address(WALLET)
    assert is_valid_address("0xABCDEFabcdef0123456789ABCDEFabcdef012345")
    assert not is_valid_address("0x123")
    assert not is_valid_address("1111111111111111111111111111111111111111")
    assert is_valid_chain_id("8453")
    assert not is_valid_chain_id("base")
    assert not is_valid_chain_id("")
