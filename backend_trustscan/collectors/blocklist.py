"""
Blocklist check: tri-state SAFE / DANGEROUS / UNKNOWN.

Two interchangeable providers: Google Safe Browsing v4 (default) and Google
Web Risk. A well-formed response without matches is SAFE; matches are
DANGEROUS; any transport, HTTP or payload error is UNKNOWN, never SAFE and
never DANGEROUS.
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_trustscan.analysis_engine.models import SOURCE_BLOCKLIST, BlocklistResult, BlockStatus
from backend_trustscan.collectors.base import DEFAULT_TIMEOUT_SEC, Collector
from backend_trustscan.core.exceptions import CollectorError

SAFE_BROWSING_URL = "https://safebrowsing.googleapis.com/v4/threatMatches:find"
WEB_RISK_URL = "https://webrisk.googleapis.com/v1/uris:search"
CLIENT_ID = "backend-trustscan"
CLIENT_VERSION = "0.1.0"

SAFE_BROWSING_THREAT_TYPES = (
    "MALWARE",
    "SOCIAL_ENGINEERING",
    "UNWANTED_SOFTWARE",
    "POTENTIALLY_HARMFUL_APPLICATION",
)
WEB_RISK_THREAT_TYPES = ("MALWARE", "SOCIAL_ENGINEERING", "UNWANTED_SOFTWARE")


def parse_safe_browsing(payload: Any) -> BlocklistResult:
    """{} -> SAFE; {"matches": [...]} -> DANGEROUS. Anything else raises."""
    if not isinstance(payload, dict):
        raise CollectorError(SOURCE_BLOCKLIST, "unexpected Safe Browsing payload")
    matches = payload.get("matches")
    if not matches:
        return BlocklistResult(status=BlockStatus.SAFE)
    if not isinstance(matches, list):
        raise CollectorError(SOURCE_BLOCKLIST, "malformed Safe Browsing matches")
    threats = sorted({str(m.get("threatType")) for m in matches if isinstance(m, dict) and m.get("threatType")})
    return BlocklistResult(status=BlockStatus.DANGEROUS, threats=tuple(threats))


def parse_web_risk(payload: Any) -> BlocklistResult:
    """{} -> SAFE; {"threat": {"threatTypes": [...]}} -> DANGEROUS. Anything else raises."""
    if not isinstance(payload, dict):
        raise CollectorError(SOURCE_BLOCKLIST, "unexpected Web Risk payload")
    threat = payload.get("threat")
    if not threat:
        return BlocklistResult(status=BlockStatus.SAFE)
    if not isinstance(threat, dict):
        raise CollectorError(SOURCE_BLOCKLIST, "malformed Web Risk threat")
    threats = sorted({str(t) for t in threat.get("threatTypes") or [] if t})
    return BlocklistResult(status=BlockStatus.DANGEROUS, threats=tuple(threats))


class _BlocklistCollector(Collector[BlocklistResult]):
    name = SOURCE_BLOCKLIST

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ) -> None:
        super().__init__(client, timeout_sec=timeout_sec)
        self._api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def unknown(self) -> BlocklistResult:
        return BlocklistResult.unknown()


class SafeBrowsingCollector(_BlocklistCollector):
    async def _fetch(self, target: str) -> BlocklistResult:
        body = {
            "client": {"clientId": CLIENT_ID, "clientVersion": CLIENT_VERSION},
            "threatInfo": {
                "threatTypes": list(SAFE_BROWSING_THREAT_TYPES),
                "platformTypes": ["ANY_PLATFORM"],
                "threatEntryTypes": ["URL"],
                "threatEntries": [{"url": target}],
            },
        }
        payload = await self._post_json(SAFE_BROWSING_URL, params={"key": self._api_key}, json=body)
        return parse_safe_browsing(payload)


class WebRiskCollector(_BlocklistCollector):
    async def _fetch(self, target: str) -> BlocklistResult:
        params: list[tuple[str, str]] = [("key", self._api_key or ""), ("uri", target)]
        params.extend(("threatTypes", t) for t in WEB_RISK_THREAT_TYPES)
        payload = await self._get_json(WEB_RISK_URL, params=params)
        return parse_web_risk(payload)
