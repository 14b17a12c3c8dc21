"""
IP abuse-confidence lookup via AbuseIPDB v2 (reports from the last 90 days).

Only invoked once an IP is known; the aggregator skips it otherwise.
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_trustscan.analysis_engine.models import SOURCE_ABUSE, AbuseReport
from backend_trustscan.collectors.base import DEFAULT_TIMEOUT_SEC, Collector

ABUSEIPDB_CHECK_URL = "https://api.abuseipdb.com/api/v2/check"
MAX_AGE_DAYS = 90


def parse_abuse_check(payload: Any) -> AbuseReport:
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        return AbuseReport.unknown()
    data = payload["data"]
    confidence = data.get("abuseConfidenceScore")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        return AbuseReport.unknown()
    reports = data.get("totalReports")
    return AbuseReport(
        confidence=max(0, min(100, int(confidence))),
        total_reports=int(reports) if isinstance(reports, int) and not isinstance(reports, bool) else None,
    )


class AbuseIpCollector(Collector[AbuseReport]):
    name = SOURCE_ABUSE

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

    def unknown(self) -> AbuseReport:
        return AbuseReport.unknown()

    async def _fetch(self, target: str) -> AbuseReport:
        payload = await self._get_json(
            ABUSEIPDB_CHECK_URL,
            headers={"Key": self._api_key or "", "Accept": "application/json"},
            params={"ipAddress": target, "maxAgeInDays": str(MAX_AGE_DAYS)},
        )
        return parse_abuse_check(payload)
