"""
HTTP transport to the 1inch API.
"""

import logging
from typing import Dict, Optional

import httpx

logger = logging.getLogger(__name__)


def build_client(timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout)


async def send(
    method: str,
    url: str,
    headers: Dict[str, str],
    body: Optional[bytes] = None,
    timeout: float = 10.0,
) -> httpx.Response:
    """Issue one request upstream; network failures raise httpx.RequestError"""
    async with build_client(timeout) as client:
        response = await client.request(method, url, headers=headers, content=body or None)
    if response.is_error:
        logger.error("1inch API error: %s %s", response.status_code, response.reason_phrase)
    return response
