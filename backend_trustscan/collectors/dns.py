"""
DNS resolver: domain -> first IPv4 address via DNS-over-HTTPS JSON.

Failure of any kind reports the IP as unknown (None).
"""

from __future__ import annotations

import ipaddress
from typing import Any, Optional

from backend_trustscan.collectors.base import Collector
from backend_trustscan.analysis_engine.models import SOURCE_DNS

DOH_URL = "https://dns.google/resolve"
DNS_TYPE_A = 1


def parse_doh_answer(payload: Any) -> str | None:
    """First valid A record from a DoH JSON payload ({"Answer": [{"type": 1, "data": "1.2.3.4"}]})."""
    if not isinstance(payload, dict):
        return None
    answers = payload.get("Answer")
    if not isinstance(answers, list):
        return None
    for answer in answers:
        if not isinstance(answer, dict) or answer.get("type") != DNS_TYPE_A:
            continue
        data = str(answer.get("data") or "").strip()
        try:
            return str(ipaddress.IPv4Address(data))
        except ValueError:
            continue
    return None


class DnsResolver(Collector[Optional[str]]):
    name = SOURCE_DNS

    def unknown(self) -> str | None:
        return None

    async def _fetch(self, target: str) -> str | None:
        payload = await self._get_json(DOH_URL, params={"name": target, "type": "A"})
        return parse_doh_answer(payload)
