"""
Signal collectors: one independent, failable intelligence source each.

Every collector converts its vendor payload into typed facts and reports the
unknown state instead of raising. build_collectors() wires the production
set to one shared httpx.AsyncClient; tests swap in fakes via CollectorSet.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from backend_trustscan.collectors.abuse import AbuseIpCollector
from backend_trustscan.collectors.base import USER_AGENT, Collector
from backend_trustscan.collectors.blocklist import SafeBrowsingCollector, WebRiskCollector
from backend_trustscan.collectors.certificate import CertificateCollector
from backend_trustscan.collectors.dns import DnsResolver
from backend_trustscan.collectors.registration import RegistrationCollector
from backend_trustscan.collectors.reputation import ReputationCollector
from backend_trustscan.config.env import BLOCKLIST_WEBRISK
from backend_trustscan.config.settings import Settings


@dataclass
class CollectorSet:
    """The six collectors the aggregator depends on. Any member may be a fake."""

    dns: Any
    registration: Any
    certificate: Any
    reputation: Any
    blocklist: Any
    abuse: Any


def new_http_client(settings: Settings) -> httpx.AsyncClient:
    """Shared client for all collectors; collect() enforces the overall per-collector timeout."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.collector_timeout_sec),
        headers={"User-Agent": USER_AGENT},
    )


def build_collectors(settings: Settings, client: httpx.AsyncClient) -> CollectorSet:
    timeout = settings.collector_timeout_sec
    if settings.blocklist_provider == BLOCKLIST_WEBRISK:
        blocklist: Collector = WebRiskCollector(client, settings.web_risk_api_key, timeout_sec=timeout)
    else:
        blocklist = SafeBrowsingCollector(client, settings.safe_browsing_api_key, timeout_sec=timeout)
    return CollectorSet(
        dns=DnsResolver(client, timeout_sec=timeout),
        registration=RegistrationCollector(client, timeout_sec=timeout),
        certificate=CertificateCollector(
            client,
            timeout_sec=timeout,
            poll_attempts=settings.certificate_poll_attempts,
            poll_interval_sec=settings.certificate_poll_interval_sec,
        ),
        reputation=ReputationCollector(
            client,
            settings.virustotal_api_key,
            timeout_sec=timeout,
            poll_attempts=settings.reputation_poll_attempts,
            poll_interval_sec=settings.reputation_poll_interval_sec,
            poll_budget_sec=settings.reputation_poll_budget_sec,
        ),
        blocklist=blocklist,
        abuse=AbuseIpCollector(client, settings.abuseipdb_api_key, timeout_sec=timeout),
    )


__all__ = [
    "AbuseIpCollector",
    "CertificateCollector",
    "Collector",
    "CollectorSet",
    "DnsResolver",
    "RegistrationCollector",
    "ReputationCollector",
    "SafeBrowsingCollector",
    "WebRiskCollector",
    "build_collectors",
    "new_http_client",
]
