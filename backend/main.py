"""
IntentJournal 1inch Proxy - Backend API
Server-side gateway to the 1inch API family with mock-data fallback
"""

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from typing import Any, Callable, Dict, Optional
from datetime import datetime, timezone
from urllib.parse import urlencode
import logging
import os
import time

import httpx

from backend import upstream
from backend.cache import SimpleCache
from backend.config import Settings, configure_logging, get_settings
from backend.mocks import (
    generate_mock_response,
    mock_balances,
    mock_history,
    mock_prices,
    mock_token_metadata,
    now_ms,
)
from backend.routing import (
    enhance_api_path,
    is_valid_address,
    is_valid_chain_id,
    map_fork_chain,
    protocol_headers,
)

# ============================================================================
# ENVIRONMENT & APPLICATION SETUP
# ============================================================================

startup_settings = get_settings()
configure_logging(startup_settings.log_level)
logger = logging.getLogger(__name__)

logger.info("🔑 1inch API key available: %s", startup_settings.api_key_configured)
logger.info("🌐 Forced mock data: %s", startup_settings.force_mock)

app = FastAPI(
    title="IntentJournal 1inch Proxy API",
    description="Server-side proxy for the 1inch API family with mock fallback",
    version=startup_settings.version,
)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", "X-API-Key", "Accept"]
CORS_MAX_AGE = 86400

# Browser preflights are answered here; wildcard origins must not echo the caller
app.add_middleware(
    CORSMiddleware,
    allow_origins=startup_settings.cors_origins,
    allow_credentials="*" not in startup_settings.cors_origins,
    allow_methods=CORS_METHODS,
    allow_headers=CORS_ALLOW_HEADERS,
    max_age=CORS_MAX_AGE,
)

cache = SimpleCache(max_entries=startup_settings.cache_max_entries)
START_TIME = time.monotonic()

PROXY_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(CORS_METHODS),
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
    "Access-Control-Max-Age": str(CORS_MAX_AGE),
}

DATA_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# Cache-Control max-age per data route, also used as server-side cache TTL
PROXY_TTL = 30
BALANCE_TTL = 30
PRICES_TTL = 60
HISTORY_TTL = 120
TOKENS_TTL = 300


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class BalanceSnapshot(BaseModel):
    address: str
    chainId: int
    totalBalanceUSD: Any = "0"
    tokens: Dict[str, Any] = {}
    lastUpdated: int


class TransactionHistory(BaseModel):
    address: str
    chainId: int
    transactions: list = []
    totalCount: int = 0
    hasMore: bool = False
    lastUpdated: int


class PriceSheet(BaseModel):
    chainId: int
    currency: str
    prices: Any = {}
    lastUpdated: int


class TokenCatalog(BaseModel):
    chainId: int
    tokens: Any = []
    lastUpdated: int


class HealthStatus(BaseModel):
    status: str
    timestamp: str
    uptime: float
    environment: str
    version: str
    services: Dict[str, Any]


# ============================================================================
# RESPONSE HELPERS
# ============================================================================

def fallback_reason(status_code: int) -> str:
    return "unauthorized" if status_code == 401 else f"upstream-{status_code}"


def mock_reply(
    payload: Any,
    cors: Dict[str, str],
    cache_control: str,
    forced: bool = False,
    reason: Optional[str] = None,
) -> JSONResponse:
    """Wrap mock data with the headers that flag it as such"""
    headers = {**cors, "Cache-Control": cache_control, "X-Mock-Data": "true"}
    if forced:
        headers["X-Mock-Reason"] = "forced"
    if reason:
        headers["X-Fallback-Reason"] = reason
    return JSONResponse(payload, headers=headers)


def proxy_error(error: str, details: Any, cors: Dict[str, str], status_code: int = 500) -> JSONResponse:
    return JSONResponse({"error": error, "details": details}, status_code=status_code, headers=cors)


def parse_upstream_json(response: httpx.Response) -> Any:
    """Decode an upstream body; an empty body decodes to {}"""
    if not response.content:
        return {}
    return response.json()


# ============================================================================
# API ENDPOINTS - GENERAL
# ============================================================================

@app.get("/")
async def root():
    return {
        "service": "IntentJournal 1inch Proxy API",
        "version": startup_settings.version,
        "endpoints": [
            "/api/1inch/{path}",
            "/api/1inch/balance/{chainId}/{address}",
            "/api/1inch/history/{chainId}/{address}",
            "/api/1inch/prices/{chainId}",
            "/api/1inch/tokens/{chainId}",
            "/api/health",
        ],
    }


@app.get("/health")
@app.get("/api/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Service status with external API configuration and cache stats"""
    try:
        health = HealthStatus(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime=round(time.monotonic() - START_TIME, 3),
            environment=settings.environment,
            version=settings.version,
            services={
                "api": "operational",
                "cache": cache.stats(),
                "mock_mode": "forced" if settings.force_mock else "fallback",
                "external_apis": {
                    "oneinch": "configured" if settings.api_key_configured else "not_configured",
                },
            },
        )
        return health.model_dump()
    except Exception as e:
        logger.exception("❌ ERROR in health check")
        return JSONResponse(
            {"status": "unhealthy", "error": str(e), "timestamp": datetime.now(timezone.utc).isoformat()},
            status_code=500,
        )


@app.head("/health")
@app.head("/api/health")
async def health_head():
    return Response(status_code=200)


# ============================================================================
# API ENDPOINTS - DATA ROUTES
# ============================================================================

async def fetch_data_route(
    settings: Settings,
    label: str,
    upstream_path: str,
    params: Dict[str, str],
    ttl: int,
    not_found: Dict[str, Any],
    make_mock: Callable[[], Dict[str, Any]],
    normalize: Callable[[Any], BaseModel],
) -> JSONResponse:
    """Shared GET flow of the balance / history / prices / tokens routes"""
    cache_control = f"public, max-age={ttl}"
    try:
        if settings.force_mock:
            logger.info("🔧 Using mock %s data (forced)", label)
            return mock_reply(make_mock(), DATA_CORS_HEADERS, cache_control, forced=True)

        url = f"{settings.base_url}/{upstream_path}"
        if params:
            url += f"?{urlencode(params)}"

        if settings.cache_enabled:
            cached = cache.get(url)
            if cached is not None:
                return JSONResponse(cached, headers={**DATA_CORS_HEADERS, "Cache-Control": cache_control, "X-Cache": "HIT"})

        logger.info("🔄 Proxying 1inch %s API request: %s", label, url)
        try:
            response = await upstream.send("GET", url, protocol_headers(upstream_path, settings.api_key),
                                           timeout=settings.timeout_seconds)
        except httpx.RequestError as e:
            logger.warning("⚠️  1inch %s API unreachable, falling back to mock data: %s", label, e)
            return mock_reply(make_mock(), DATA_CORS_HEADERS, cache_control, reason="network-error")

        if not response.is_success:
            if response.status_code == 404:
                return JSONResponse(not_found, status_code=200, headers=DATA_CORS_HEADERS)
            if response.status_code in settings.fallback_statuses:
                logger.info("🔧 1inch %s API returned %s, falling back to mock data", label, response.status_code)
                return mock_reply(make_mock(), DATA_CORS_HEADERS, cache_control,
                                  reason=fallback_reason(response.status_code))
            return JSONResponse(
                {"error": f"1inch {label} API error: {response.reason_phrase}"},
                status_code=response.status_code,
                headers=DATA_CORS_HEADERS,
            )

        try:
            data = parse_upstream_json(response)
        except ValueError:
            logger.error("1inch %s API returned a non-JSON body for %s", label, url)
            return proxy_error("Invalid upstream response", response.text[:500], DATA_CORS_HEADERS, 502)

        payload = normalize(data).model_dump()
        if settings.cache_enabled:
            cache.set(url, payload, ttl_seconds=ttl)
        logger.info("✅ Successfully fetched %s data from 1inch API", label)
        return JSONResponse(payload, headers={**DATA_CORS_HEADERS, "Cache-Control": cache_control, "X-Cache": "MISS"})
    except Exception as e:
        logger.exception("❌ %s proxy error", label)
        return proxy_error("Internal proxy error", str(e), DATA_CORS_HEADERS)


def invalid_request(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=400, headers=DATA_CORS_HEADERS)


def balance_tokens(data: Any) -> Dict[str, Any]:
    """Token map of a balance payload; a bare address->balance map is used as-is"""
    if not isinstance(data, dict):
        return {}
    if "tokens" in data:
        return data.get("tokens") or {}
    return {k: v for k, v in data.items() if k != "totalBalanceUSD"}


@app.get("/api/1inch/balance/{chain_id}/{address}")
async def get_balances(chain_id: str, address: str, settings: Settings = Depends(get_settings)):
    """Token balances of a wallet"""
    if not is_valid_chain_id(chain_id):
        return invalid_request("Invalid chain ID")
    if not is_valid_address(address):
        return invalid_request("Invalid address format")

    chain = int(chain_id)
    api_chain = map_fork_chain(chain_id, settings)

    def normalize(data: Any) -> BalanceSnapshot:
        total = data.get("totalBalanceUSD") if isinstance(data, dict) else None
        return BalanceSnapshot(
            address=address.lower(),
            chainId=chain,
            totalBalanceUSD=total or "0",
            tokens=balance_tokens(data),
            lastUpdated=now_ms(),
        )

    return await fetch_data_route(
        settings,
        label="Balance",
        upstream_path=f"balance/v1.2/{api_chain}/balances/{address}",
        params={},
        ttl=BALANCE_TTL,
        not_found={
            "error": "Address not found or no balances available",
            "address": address,
            "chainId": chain,
            "tokens": {},
            "totalBalanceUSD": "0",
        },
        make_mock=lambda: mock_balances(address, chain),
        normalize=normalize,
    )


@app.get("/api/1inch/history/{chain_id}/{address}")
async def get_history(
    chain_id: str,
    address: str,
    limit: str = "50",
    offset: str = "0",
    timeframe: str = "7d",
    settings: Settings = Depends(get_settings),
):
    """Transaction history of a wallet"""
    if not is_valid_chain_id(chain_id):
        return invalid_request("Invalid chain ID")
    if not is_valid_address(address):
        return invalid_request("Invalid address format")

    chain = int(chain_id)
    api_chain = map_fork_chain(chain_id, settings)
    params = {"limit": limit, "offset": offset}
    if timeframe:
        params["timeframe"] = timeframe

    def normalize(data: Any) -> TransactionHistory:
        data = data if isinstance(data, dict) else {}
        meta = data.get("meta") or {}
        return TransactionHistory(
            address=address.lower(),
            chainId=chain,
            transactions=data.get("items") or [],
            totalCount=meta.get("totalCount") or 0,
            hasMore=bool(meta.get("hasMore")),
            lastUpdated=now_ms(),
        )

    return await fetch_data_route(
        settings,
        label="Transaction History",
        upstream_path=f"history/v2.0/{api_chain}/history/{address}",
        params=params,
        ttl=HISTORY_TTL,
        not_found={
            "error": "No transaction history found",
            "address": address,
            "chainId": chain,
            "transactions": [],
            "totalCount": 0,
        },
        make_mock=lambda: mock_history(address, chain),
        normalize=normalize,
    )


@app.get("/api/1inch/prices/{chain_id}")
async def get_prices(
    chain_id: str,
    tokens: Optional[str] = None,
    currency: str = "USD",
    settings: Settings = Depends(get_settings),
):
    """Spot prices for a chain, optionally restricted to `tokens`"""
    if not is_valid_chain_id(chain_id):
        return invalid_request("Invalid chain ID")

    chain = int(chain_id)
    api_chain = map_fork_chain(chain_id, settings)
    params = {}
    if tokens:
        params["tokens"] = tokens
    if currency:
        params["currency"] = currency

    return await fetch_data_route(
        settings,
        label="Token Prices",
        upstream_path=f"price/v1.1/{api_chain}",
        params=params,
        ttl=PRICES_TTL,
        not_found={"error": "Token prices not found", "chainId": chain, "prices": {}},
        make_mock=lambda: mock_prices(chain, currency),
        normalize=lambda data: PriceSheet(chainId=chain, currency=currency, prices=data or {}, lastUpdated=now_ms()),
    )


@app.get("/api/1inch/tokens/{chain_id}")
async def get_token_metadata(
    chain_id: str,
    addresses: Optional[str] = None,
    limit: str = "100",
    offset: str = "0",
    settings: Settings = Depends(get_settings),
):
    """Token metadata for a chain"""
    if not is_valid_chain_id(chain_id):
        return invalid_request("Invalid chain ID")

    chain = int(chain_id)
    api_chain = map_fork_chain(chain_id, settings)
    params = {}
    if addresses:
        params["addresses"] = addresses
    params["limit"] = limit
    params["offset"] = offset

    return await fetch_data_route(
        settings,
        label="Token Metadata",
        upstream_path=f"token/v1.2/{api_chain}",
        params=params,
        ttl=TOKENS_TTL,
        not_found={"error": "Token metadata not found", "chainId": chain, "tokens": []},
        make_mock=lambda: mock_token_metadata(chain),
        normalize=lambda data: TokenCatalog(chainId=chain, tokens=data or [], lastUpdated=now_ms()),
    )


@app.options("/api/1inch/balance/{chain_id}/{address}")
@app.options("/api/1inch/history/{chain_id}/{address}")
@app.options("/api/1inch/prices/{chain_id}")
@app.options("/api/1inch/tokens/{chain_id}")
async def data_route_options():
    return Response(status_code=200, headers=DATA_CORS_HEADERS)


# ============================================================================
# API ENDPOINTS - CATCH-ALL PROXY
# ============================================================================

@app.api_route("/api/1inch/{path:path}", methods=["GET", "POST", "PUT", "DELETE"])
async def proxy_request(path: str, request: Request, settings: Settings = Depends(get_settings)):
    """Forward any 1inch path upstream after rewriting it to a versioned endpoint"""
    method = request.method
    cache_control = f"public, max-age={PROXY_TTL}" if method == "GET" else "no-cache"
    try:
        enhanced_path = enhance_api_path(path)
        url = f"{settings.base_url}/{enhanced_path}"
        if request.url.query:
            url += f"?{request.url.query}"
        query = dict(request.query_params)

        logger.info("🔄 Proxying 1inch API %s request: %s", method, url)
        logger.debug("📍 Original path: %s → Enhanced path: %s", path, enhanced_path)

        body = None
        if method in ("POST", "PUT"):
            body = await request.body()
            logger.debug("📝 Request body: %s", body)

        if settings.force_mock:
            logger.info("🔧 Using mock data (forced by FORCE_MOCK_DATA)")
            return mock_reply(generate_mock_response(enhanced_path, method, query),
                              PROXY_CORS_HEADERS, cache_control, forced=True)

        use_cache = method == "GET" and settings.cache_enabled
        if use_cache:
            cached = cache.get(url)
            if cached is not None:
                return JSONResponse(cached, headers={
                    **PROXY_CORS_HEADERS,
                    "Cache-Control": cache_control,
                    "X-Real-Time-Data": "true",
                    "X-Data-Source": "1inch-api",
                    "X-Cache": "HIT",
                })

        try:
            response = await upstream.send(method, url, protocol_headers(enhanced_path, settings.api_key),
                                           body=body, timeout=settings.timeout_seconds)
        except httpx.RequestError as e:
            logger.warning("⚠️  1inch API unreachable, falling back to mock data: %s", e)
            return mock_reply(generate_mock_response(enhanced_path, method, query),
                              PROXY_CORS_HEADERS, cache_control, reason="network-error")

        if not response.is_success:
            logger.error("Error details: %s", response.text)
            if response.status_code in settings.fallback_statuses:
                logger.info("🔧 1inch API returned %s, falling back to mock data", response.status_code)
                return mock_reply(generate_mock_response(enhanced_path, method, query),
                                  PROXY_CORS_HEADERS, cache_control,
                                  reason=fallback_reason(response.status_code))
            return JSONResponse(
                {
                    "error": f"1inch API error: {response.reason_phrase}",
                    "details": response.text,
                    "status": response.status_code,
                },
                status_code=response.status_code,
                headers=PROXY_CORS_HEADERS,
            )

        try:
            data = parse_upstream_json(response)
        except ValueError:
            logger.error("1inch API returned a non-JSON body for %s", url)
            return proxy_error("Invalid upstream response", response.text[:500], PROXY_CORS_HEADERS, 502)

        if use_cache:
            cache.set(url, data, ttl_seconds=PROXY_TTL)
        logger.info("✅ Successfully fetched real-time data from 1inch API")
        return JSONResponse(data, headers={
            **PROXY_CORS_HEADERS,
            "Cache-Control": cache_control,
            "X-Real-Time-Data": "true",
            "X-Data-Source": "1inch-api",
            "X-Cache": "MISS" if use_cache else "BYPASS",
        })
    except Exception as e:
        logger.exception("❌ Proxy error")
        return proxy_error("Internal proxy error", str(e), PROXY_CORS_HEADERS)


@app.options("/api/1inch/{path:path}")
async def proxy_options(path: str):
    return Response(status_code=200, headers=PROXY_CORS_HEADERS)


# ============================================================================
# SERVER STARTUP
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8002")))
