"""
Environment variable loading for TrustScan.

- VIRUSTOTAL_API_KEY: multi-engine URL reputation (VirusTotal v3)
- GOOGLE_SAFE_BROWSING_API_KEY: blocklist check via Safe Browsing v4
- GOOGLE_WEB_RISK_API_KEY: blocklist check via Web Risk (BLOCKLIST_PROVIDER=webrisk)
- ABUSEIPDB_API_KEY: IP abuse confidence (AbuseIPDB v2)
- BLOCKLIST_PROVIDER: safebrowsing | webrisk (default: safebrowsing)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_trustscan/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

BLOCKLIST_SAFEBROWSING = "safebrowsing"
BLOCKLIST_WEBRISK = "webrisk"


def load_trustscan_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def _get_key(name: str) -> str | None:
    load_trustscan_env()
    value = (os.getenv(name) or "").strip()
    return value or None


def get_virustotal_api_key() -> str | None:
    return _get_key("VIRUSTOTAL_API_KEY")


def get_safe_browsing_api_key() -> str | None:
    return _get_key("GOOGLE_SAFE_BROWSING_API_KEY")


def get_web_risk_api_key() -> str | None:
    return _get_key("GOOGLE_WEB_RISK_API_KEY")


def get_abuseipdb_api_key() -> str | None:
    return _get_key("ABUSEIPDB_API_KEY")


def get_blocklist_provider() -> str:
    """
    Return BLOCKLIST_PROVIDER from env: safebrowsing | webrisk.
    Unknown values fall back to safebrowsing.
    """
    load_trustscan_env()
    raw = (os.getenv("BLOCKLIST_PROVIDER") or BLOCKLIST_SAFEBROWSING).strip().lower()
    if raw in ("webrisk", "web_risk", "web-risk"):
        return BLOCKLIST_WEBRISK
    return BLOCKLIST_SAFEBROWSING


def mask_key(key: str | None) -> str:
    """Mask an API key for logs: keep the last 4 characters."""
    if not key:
        return "<unset>"
    if len(key) <= 4:
        return "***"
    return "***" + key[-4:]
