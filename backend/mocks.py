"""
Mock 1inch payloads served when the upstream API cannot answer
(forced mock mode, unauthorized key, network failure).
"""

import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

ETH = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
USDC = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
WETH = "0x4200000000000000000000000000000000000006"
IJT = "0xe5ccdc758917ec96bd81932af3ef39837aebe01a"
ROUTER_V6 = "0x111111125421ca6dc452d289314280a0f8842a65"

ETH_LOGO = "https://tokens.1inch.io/0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee.png"
USDC_LOGO = "https://tokens.1inch.io/0xa0b86a33e6441e6c7d3e4c5b4b6b8b8b8b8b8b8b.png"

# USD prices and decimals used for amount-aware quotes
QUOTE_TOKENS: Dict[str, Dict[str, Any]] = {
    IJT: {"symbol": "IJT", "price": Decimal("1.50"), "decimals": 18},
    USDC: {"symbol": "USDC", "price": Decimal("1.00"), "decimals": 6},
    ETH: {"symbol": "ETH", "price": Decimal("2500.00"), "decimals": 18},
    WETH: {"symbol": "WETH", "price": Decimal("2500.00"), "decimals": 18},
}

QUOTE_SLIPPAGE = Decimal("0.97")
FALLBACK_SRC_UNITS = Decimal("1000")
MAX_SRC_UNITS = Decimal("1e12")

# (address, symbol, price, change24h, volume24h, marketCap)
MOCK_PRICE_TABLE = [
    (ETH, "ETH", "2500.00", "2.5", "1000000000", "300000000000"),
    (USDC, "USDC", "1.00", "0.1", "500000000", "35000000000"),
    (WETH, "WETH", "2498.50", "2.3", "800000000", "300000000000"),
    ("0x50c5725949a6f0c72e6c4a641f24049a917db0cb", "DAI", "0.999", "-0.05", "200000000", "5000000000"),
    ("0x2ae3f1ec7f1f5012cfeab0185bfc7aa3cf0dec22", "cbETH", "2650.00", "3.2", "150000000", "12000000000"),
    ("0x532f27101965dd16442e59d40670faf5ebb142e4", "BRETT", "0.085", "15.7", "25000000", "850000000"),
    ("0x4ed4e862860bed51a9570b96d89af5e1b0efefed", "DEGEN", "0.012", "-8.3", "18000000", "480000000"),
    ("0x0578d8a44db98b23bf096a382e016e29a5ce0ffe", "HIGHER", "0.034", "22.1", "12000000", "340000000"),
    ("0x6921b130d297cc43754afba22e5eac0fbf8db75b", "DOGINME", "0.0045", "-12.8", "8000000", "45000000"),
    ("0xc1cba3fcea344f92d9239c08c0568f6f2f0ee452", "wstETH", "2890.00", "4.1", "120000000", "28000000000"),
    ("0x940181a94a35a4569e4529a3cdfb74e38fd98631", "AERO", "1.25", "7.8", "45000000", "1250000000"),
    ("0x78a087d713be963bf307b18f2ff8122ef9a63ae9", "BSWAP", "0.18", "-3.2", "5000000", "18000000"),
    ("0x2416092f143378750bb29b79ed961ab195cceea5", "ezETH", "2520.00", "2.8", "80000000", "15000000000"),
    ("0x04c0599ae5a44757c0af6f9ec3b93da8976c150a", "weETH", "2610.00", "3.5", "95000000", "18000000000"),
    ("0x1c7999deb4fcf5ac8a6a92aa669c4d8d96ce1b5f", "PRIME", "8.45", "12.3", "35000000", "845000000"),
]


def now_ms() -> int:
    return int(time.time() * 1000)


def _route(src: str, dst: str, name: str = "UNISWAP_V3", part: int = 100) -> Dict[str, Any]:
    return {"name": name, "part": part, "fromTokenAddress": src, "toTokenAddress": dst}


# ============================================================================
# QUOTES
# ============================================================================

def _src_units(amount: str, decimals: int) -> Decimal:
    """Convert a base-unit amount to whole tokens, falling back to 1000"""
    try:
        units = Decimal(int(amount)) / (Decimal(10) ** decimals)
    except (ValueError, InvalidOperation):
        logger.warning("⚠️  Unparsable quote amount %r, using fallback", amount)
        return FALLBACK_SRC_UNITS
    if units < 0 or units > MAX_SRC_UNITS:
        return FALLBACK_SRC_UNITS
    return units


def generate_mock_quote(src: str, dst: str, amount: str) -> Dict[str, Any]:
    """Quote priced through the mock USD table with 3% slippage"""
    src_info = QUOTE_TOKENS.get(src.lower(), {})
    dst_info = QUOTE_TOKENS.get(dst.lower(), {})
    src_price = src_info.get("price", Decimal("1"))
    dst_price = dst_info.get("price", Decimal("1"))
    src_decimals = src_info.get("decimals", 18)
    dst_decimals = dst_info.get("decimals", 18)

    units = _src_units(amount, src_decimals)
    dst_units = units * (src_price / dst_price) * QUOTE_SLIPPAGE
    dst_amount = int(dst_units * (Decimal(10) ** dst_decimals))

    return {
        "srcAmount": amount,
        "dstAmount": str(dst_amount),
        "protocols": [[
            _route(src, dst, "1inch", 60),
            _route(src, dst, "Uniswap V3", 40),
        ]],
        "estimatedGas": "150000",
    }


def _static_quote() -> Dict[str, Any]:
    return {
        "srcAmount": "1000000000000000000",
        "dstAmount": "2500000000",
        "protocols": [[[_route(ETH, USDC)]]],
        "estimatedGas": "150000",
    }


# ============================================================================
# CATCH-ALL PROXY MOCKS
# ============================================================================

def generate_mock_response(api_path: str, method: str, query: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Mock payload for a rewritten 1inch path"""
    query = query or {}
    logger.info("🔧 Generating mock response for: %s %s", method, api_path)

    if "healthcheck" in api_path:
        return {"status": "OK", "timestamp": now_ms()}

    if "tokens" in api_path:
        return {
            "tokens": {
                ETH: {"symbol": "ETH", "name": "Ethereum", "decimals": 18, "address": ETH, "logoURI": ETH_LOGO},
                USDC: {"symbol": "USDC", "name": "USD Coin", "decimals": 6, "address": USDC, "logoURI": USDC_LOGO},
            }
        }

    has_quote_params = all(query.get(k) for k in ("src", "dst", "amount"))

    if "quote" in api_path:
        if has_quote_params:
            return generate_mock_quote(query["src"], query["dst"], query["amount"])
        return _static_quote()

    if "swap" in api_path:
        result = generate_mock_quote(query["src"], query["dst"], query["amount"]) if has_quote_params else _static_quote()
        result["tx"] = {
            "from": query.get("from") or "0x0000000000000000000000000000000000000000",
            "to": ROUTER_V6,
            "data": "0x12aa3caf000000000000000000000000e37e799d5077682fa0a244d46e5649f71457bd09"
                    "000000000000000000000000eeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
                    "000000000000000000000000833589fcd6edb6e08f4c7c32d4f71b54bda02913",
            "value": result["srcAmount"] if query.get("src", ETH).lower() == ETH else "0",
            "gasPrice": "20000000000",
            "gas": "150000",
        }
        return result

    if "balance" in api_path:
        return {
            "address": "0x0000000000000000000000000000000000000000",
            "chainId": 8453,
            "totalBalanceUSD": "5000.00",
            "tokens": {
                ETH: {
                    "symbol": "ETH", "name": "Ethereum", "decimals": 18,
                    "balance": "2000000000000000000", "balanceUSD": "5000.00", "price": "2500.00",
                }
            },
        }

    if "price" in api_path:
        if ETH in api_path.lower():
            return {"symbol": "ETH", "price": "2500.00", "change24h": "2.5"}
        return {
            ETH: {"symbol": "ETH", "price": "2500.00", "change24h": "2.5"},
            USDC: {"symbol": "USDC", "price": "1.00", "change24h": "0.1"},
        }

    if "orderbook" in api_path:
        if "active-orders" in api_path:
            return {"orders": []}
        return {"bids": [], "asks": []}

    if "fusion" in api_path:
        if method == "POST":
            return {
                "srcAmount": "1000000000000000000",
                "dstAmount": "2500000000",
                "orderHash": "0x" + "a" * 64,
                "status": "pending",
            }
        return {"supported": True, "chains": [1, 8453, 42161, 137]}

    return {
        "success": True,
        "message": "Mock response",
        "timestamp": now_ms(),
        "path": api_path,
        "method": method,
    }


# ============================================================================
# DATA ROUTE MOCKS
# ============================================================================

def mock_balances(address: str, chain_id: int) -> Dict[str, Any]:
    tokens = {
        ETH: {
            "symbol": "ETH", "name": "Ethereum", "decimals": 18,
            "balance": "2000000000000000000", "balanceUSD": "5000.00", "price": "2500.00",
            "logoURI": ETH_LOGO,
        },
        USDC: {
            "symbol": "USDC", "name": "USD Coin", "decimals": 6,
            "balance": "1000000000", "balanceUSD": "1000.00", "price": "1.00",
            "logoURI": USDC_LOGO,
        },
    }
    return {
        "address": address.lower(),
        "chainId": chain_id,
        "totalBalanceUSD": "6000.00",
        "tokens": tokens,
        "lastUpdated": now_ms(),
    }


def mock_history(address: str, chain_id: int) -> Dict[str, Any]:
    now_s = int(time.time())
    owner = address.lower()
    transactions: List[Dict[str, Any]] = [
        {
            "txHash": "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef",
            "blockNumber": 12345678,
            "timestamp": now_s - 3600,
            "from": owner,
            "to": ROUTER_V6,
            "value": "1000000000000000000",
            "gasUsed": "150000",
            "gasPrice": "20000000000",
            "status": "success",
            "tokenIn": {"address": ETH, "symbol": "ETH", "amount": "1000000000000000000"},
            "tokenOut": {"address": USDC, "symbol": "USDC", "amount": "2500000000"},
            "protocol": "1inch",
            "type": "swap",
        },
        {
            "txHash": "0xabcdef1234567890abcdef1234567890abcdef1234567890abcdef1234567890",
            "blockNumber": 12345677,
            "timestamp": now_s - 7200,
            "from": owner,
            "to": USDC,
            "value": "0",
            "gasUsed": "65000",
            "gasPrice": "18000000000",
            "status": "success",
            "protocol": "ERC20",
            "type": "approval",
        },
    ]
    return {
        "address": owner,
        "chainId": chain_id,
        "transactions": transactions,
        "totalCount": len(transactions),
        "hasMore": False,
        "lastUpdated": now_ms(),
    }


def mock_prices(chain_id: int, currency: str = "USD") -> Dict[str, Any]:
    prices = {
        address: {
            "symbol": symbol,
            "price": price,
            "priceUSD": price,
            "change24h": change,
            "volume24h": volume,
            "marketCap": cap,
        }
        for address, symbol, price, change, volume, cap in MOCK_PRICE_TABLE
    }
    return {"chainId": chain_id, "currency": currency, "prices": prices, "lastUpdated": now_ms()}


def mock_token_metadata(chain_id: int) -> Dict[str, Any]:
    tokens = [
        {
            "address": ETH, "symbol": "ETH", "name": "Ethereum", "decimals": 18,
            "logoURI": ETH_LOGO, "tags": ["native"],
            "description": "Ethereum native token", "website": "https://ethereum.org",
            "isFoT": False, "synth": False,
        },
        {
            "address": USDC, "symbol": "USDC", "name": "USD Coin", "decimals": 6,
            "logoURI": USDC_LOGO, "tags": ["stablecoin"],
            "description": "USD Coin stablecoin", "website": "https://centre.io",
            "isFoT": False, "synth": False,
        },
    ]
    return {"chainId": chain_id, "tokens": tokens, "lastUpdated": now_ms()}
