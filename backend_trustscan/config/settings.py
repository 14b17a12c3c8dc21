"""
Application settings.

Typed settings (database path, cache TTL, collector timeouts, poll budgets,
API host/port, vendor credentials) read once from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from backend_trustscan.config.env import (
    BLOCKLIST_WEBRISK,
    get_abuseipdb_api_key,
    get_blocklist_provider,
    get_safe_browsing_api_key,
    get_virustotal_api_key,
    get_web_risk_api_key,
    load_trustscan_env,
)

DEFAULT_DB_PATH = "trustscan.db"
DEFAULT_CACHE_TTL_SEC = 3600
DEFAULT_COLLECTOR_TIMEOUT_SEC = 8.0


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Service configuration. Build with get_settings(); override fields in tests."""

    db_path: Path = Path(DEFAULT_DB_PATH)
    cache_ttl_sec: int = DEFAULT_CACHE_TTL_SEC
    collector_timeout_sec: float = DEFAULT_COLLECTOR_TIMEOUT_SEC
    reputation_poll_attempts: int = 3
    reputation_poll_interval_sec: float = 2.0
    reputation_poll_budget_sec: float = 6.0
    certificate_poll_attempts: int = 3
    certificate_poll_interval_sec: float = 2.0
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    virustotal_api_key: str | None = None
    safe_browsing_api_key: str | None = None
    web_risk_api_key: str | None = None
    abuseipdb_api_key: str | None = None
    blocklist_provider: str = "safebrowsing"

    @property
    def blocklist_api_key(self) -> str | None:
        """Credential for the selected blocklist provider."""
        if self.blocklist_provider == BLOCKLIST_WEBRISK:
            return self.web_risk_api_key
        return self.safe_browsing_api_key


def get_settings() -> Settings:
    """Return settings resolved from the environment (.env loaded first)."""
    load_trustscan_env()
    return Settings(
        db_path=Path((os.getenv("DB_PATH") or DEFAULT_DB_PATH).strip() or DEFAULT_DB_PATH),
        cache_ttl_sec=_env_int("CACHE_TTL_SEC", DEFAULT_CACHE_TTL_SEC),
        collector_timeout_sec=_env_float("COLLECTOR_TIMEOUT_SEC", DEFAULT_COLLECTOR_TIMEOUT_SEC),
        reputation_poll_attempts=_env_int("REPUTATION_POLL_ATTEMPTS", 3),
        reputation_poll_interval_sec=_env_float("REPUTATION_POLL_INTERVAL_SEC", 2.0),
        reputation_poll_budget_sec=_env_float("REPUTATION_POLL_BUDGET_SEC", 6.0),
        certificate_poll_attempts=_env_int("CERTIFICATE_POLL_ATTEMPTS", 3),
        certificate_poll_interval_sec=_env_float("CERTIFICATE_POLL_INTERVAL_SEC", 2.0),
        api_host=(os.getenv("API_HOST") or "0.0.0.0").strip(),
        api_port=_env_int("API_PORT", 8000),
        virustotal_api_key=get_virustotal_api_key(),
        safe_browsing_api_key=get_safe_browsing_api_key(),
        web_risk_api_key=get_web_risk_api_key(),
        abuseipdb_api_key=get_abuseipdb_api_key(),
        blocklist_provider=get_blocklist_provider(),
    )
