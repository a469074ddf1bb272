"""
Environment configuration for the 1inch proxy backend.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = "https://api.1inch.dev"

# Checked in order, first non-empty value wins
API_KEY_VARS = ("ONEINCH_AUTH_KEY", "ONEINCH_DEV_PORTAL_KEY", "NEXT_PUBLIC_ONEINCH_API_KEY")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _resolve_api_key() -> Optional[str]:
    for var in API_KEY_VARS:
        value = os.getenv(var)
        if value:
            return value
    return None


def _fallback_statuses() -> FrozenSet[int]:
    statuses = set()
    for item in _env_list("MOCK_FALLBACK_STATUSES", "401"):
        if item.isdigit():
            statuses.add(int(item))
    return frozenset(statuses)


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    force_mock: bool = False
    fallback_statuses: FrozenSet[int] = frozenset({401})
    timeout_seconds: float = 10.0
    fork_chain_id: str = "27257"
    fork_target_chain_id: str = "8453"
    cache_enabled: bool = True
    cache_max_entries: int = 1000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    environment: str = "development"
    version: str = "0.1.0"

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key)


def get_settings() -> Settings:
    """Build settings from the current environment"""
    return Settings(
        api_key=_resolve_api_key(),
        base_url=os.getenv("ONEINCH_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        force_mock=_env_bool("FORCE_MOCK_DATA"),
        fallback_statuses=_fallback_statuses(),
        timeout_seconds=_env_float("UPSTREAM_TIMEOUT_SECONDS", 10.0),
        fork_chain_id=os.getenv("BUILDBEAR_CHAIN_ID", "27257"),
        fork_target_chain_id=os.getenv("FORK_TARGET_CHAIN_ID", "8453"),
        cache_enabled=_env_bool("PROXY_CACHE_ENABLED", True),
        cache_max_entries=max(1, _env_int("PROXY_CACHE_MAX_ENTRIES", 1000)),
        cors_origins=_env_list("CORS_ORIGINS", "*"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        environment=os.getenv("APP_ENV", "development"),
        version=os.getenv("VERSION", "0.1.0"),
    )


def configure_logging(level_name: str = "INFO") -> int:
    """Configure root logging; unknown level names fall back to INFO"""
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return level
