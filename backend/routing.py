"""
Path rewriting and header selection for the 1inch API family.
"""

import re
from typing import Dict, List, Optional

from backend.config import Settings

# ============================================================================
# PROTOCOL TABLE
# ============================================================================

PROTOCOL_ENDPOINTS: Dict[str, str] = {
    # Classic Swap (Aggregation Protocol v6)
    "swap": "swap/v6.0",
    "quote": "swap/v6.0",
    "tokens": "swap/v6.0",
    "healthcheck": "swap/v6.0",
    "price": "price/v1.1",
    "balance": "balance/v1.2",
    # Limit Order Protocol
    "limit-order": "orderbook/v4.0",
    "orderbook": "orderbook/v4.0",
    "fusion": "fusion/v1.0",
    # Fusion+ cross-chain
    "fusion-plus": "fusion-plus/v1.0",
    "cross-chain": "fusion-plus/v1.0",
    "history": "history/v2.0",
    "traces": "traces/v1.0",
}

VERSIONED_PATH = re.compile(r"/v\d+\.\d+")
ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
CHAIN_ID_PATTERN = re.compile(r"^\d+$")


# ============================================================================
# PATH REWRITING
# ============================================================================

def _after(segments: List[str], name: str, count: int) -> Optional[List[str]]:
    """Return the `count` segments following `name`, or None if too short"""
    if name not in segments:
        return None
    start = segments.index(name) + 1
    if start + count > len(segments):
        return None
    return segments[start:start + count]


def _join(*parts: str) -> str:
    return "/".join(p for p in parts if p)


def enhance_api_path(api_path: str) -> str:
    """Rewrite a shorthand path into a versioned 1inch endpoint path"""
    if VERSIONED_PATH.search(api_path):
        return api_path

    segments = api_path.strip("/").split("/")

    found = _after(segments, "prices", 1)
    if found:
        return f"price/v1.1/{found[0]}"

    found = _after(segments, "balance", 2)
    if found:
        chain_id, address = found
        return f"balance/v1.2/{chain_id}/balances/{address}"

    found = _after(segments, "tokens", 1)
    if found:
        return f"swap/v6.0/{found[0]}/tokens"

    found = _after(segments, "swap", 1)
    if found:
        start = segments.index("swap") + 1
        return _join("swap/v6.0", segments[start], "/".join(segments[start + 1:]))

    found = _after(segments, "history", 2)
    if found:
        chain_id, address = found
        return f"history/v2.0/{chain_id}/history/{address}"

    if segments[0] in PROTOCOL_ENDPOINTS:
        return _join(PROTOCOL_ENDPOINTS[segments[0]], "/".join(segments[1:]))

    return api_path


# ============================================================================
# HEADERS
# ============================================================================

def protocol_headers(api_path: str, api_key: Optional[str] = None) -> Dict[str, str]:
    """Upstream request headers for the protocol addressed by `api_path`"""
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"

    if "limit-order" in api_path or "orderbook" in api_path:
        headers["X-API-Version"] = "4.0"
    elif "fusion" in api_path:
        headers["X-API-Version"] = "1.0"
    elif "swap" in api_path:
        headers["X-API-Version"] = "6.0"
    return headers


# ============================================================================
# CHAIN / ADDRESS HELPERS
# ============================================================================

def map_fork_chain(chain_id: str, settings: Settings) -> str:
    """BuildBear fork requests are served from the mainnet it forks"""
    if chain_id == settings.fork_chain_id:
        return settings.fork_target_chain_id
    return chain_id


def is_valid_address(value: str) -> bool:
    return bool(ADDRESS_PATTERN.match(value or ""))


def is_valid_chain_id(value: str) -> bool:
    return bool(CHAIN_ID_PATTERN.match(value or ""))
