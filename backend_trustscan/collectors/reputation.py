"""
Multi-engine reputation scan via VirusTotal v3.

Submits the URL, then polls the analysis with a bounded wait. "No completed
report yet" is unknown (counts None), never malicious.
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_trustscan.analysis_engine.models import SOURCE_REPUTATION, ReputationScan
from backend_trustscan.collectors.base import DEFAULT_TIMEOUT_SEC, Collector
from backend_trustscan.collectors.polling import poll_until
from backend_trustscan.core.exceptions import CollectorError

VIRUSTOTAL_BASE_URL = "https://www.virustotal.com/api/v3"
STATUS_COMPLETED = "completed"


def _count(stats: dict[str, Any], key: str) -> int | None:
    value = stats.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def parse_submission_id(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    analysis_id = data.get("id")
    return analysis_id if isinstance(analysis_id, str) and analysis_id else None


def analysis_status(payload: Any) -> str | None:
    try:
        return payload["data"]["attributes"]["status"]
    except (KeyError, TypeError):
        return None


def parse_analysis(payload: Any) -> ReputationScan:
    """Engine counts from a completed analysis; unknown for anything else."""
    if analysis_status(payload) != STATUS_COMPLETED:
        return ReputationScan.unknown()
    stats = payload["data"]["attributes"].get("stats")
    if not isinstance(stats, dict):
        return ReputationScan.unknown()
    malicious = _count(stats, "malicious")
    if malicious is None:
        return ReputationScan.unknown()
    return ReputationScan(
        malicious_count=malicious,
        suspicious_count=_count(stats, "suspicious"),
        harmless_count=_count(stats, "harmless"),
    )


class ReputationCollector(Collector[ReputationScan]):
    name = SOURCE_REPUTATION

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str | None,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        poll_attempts: int = 3,
        poll_interval_sec: float = 2.0,
        poll_budget_sec: float | None = None,
    ) -> None:
        super().__init__(client, timeout_sec=timeout_sec)
        self._api_key = api_key
        self._poll_attempts = poll_attempts
        self._poll_interval_sec = poll_interval_sec
        self._poll_budget_sec = poll_budget_sec if poll_budget_sec is not None else timeout_sec

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def unknown(self) -> ReputationScan:
        return ReputationScan.unknown()

    async def _fetch(self, target: str) -> ReputationScan:
        headers = {"x-apikey": self._api_key or "", "Accept": "application/json"}
        submitted = await self._post_json(
            f"{VIRUSTOTAL_BASE_URL}/urls",
            headers=headers,
            data={"url": target},
        )
        analysis_id = parse_submission_id(submitted)
        if analysis_id is None:
            raise CollectorError(self.name, "submission returned no analysis id")

        async def fetch() -> Any:
            return await self._get_json(f"{VIRUSTOTAL_BASE_URL}/analyses/{analysis_id}", headers=headers)

        report = await poll_until(
            fetch,
            lambda payload: analysis_status(payload) == STATUS_COMPLETED,
            attempts=self._poll_attempts,
            interval_sec=self._poll_interval_sec,
            budget_sec=self._poll_budget_sec,
            initial_delay_sec=self._poll_interval_sec,
        )
        if report is None:
            return ReputationScan.unknown()
        return parse_analysis(report)
