"""
Aggregator: run all collectors for one URL and merge their facts into one
EvidenceRecord.

Phase 1 runs DNS, registration, certificate, reputation and blocklist
concurrently. Phase 2 runs the IP abuse lookup once an IP is known (DNS
answer first, registration record second) and only when the reputation scan or
the blocklist produced an answer. A collector that raises despite
its own handling is logged and replaced with its unknown state; partial
failure only lowers confidence.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

from backend_trustscan.analysis_engine.models import (
    SOURCE_ABUSE,
    SOURCE_BLOCKLIST,
    SOURCE_CERTIFICATE,
    SOURCE_DNS,
    SOURCE_REGISTRATION,
    SOURCE_REPUTATION,
    AbuseReport,
    BlockStatus,
    EvidenceRecord,
    ReputationFacts,
    SourceStatus,
)
from backend_trustscan.core.exceptions import IntelligenceUnavailableError
from backend_trustscan.trustscan_logging import get_logger
from backend_trustscan.utils.url_utils import domain_of

if TYPE_CHECKING:
    from backend_trustscan.collectors import CollectorSet

logger = get_logger(__name__)

NO_THREAT_SOURCES_MESSAGE = (
    "Threat intelligence is unavailable: neither the reputation scanner "
    "nor the blocklist check could be consulted."
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_configured(collector: Any) -> bool:
    return bool(getattr(collector, "configured", True))


def _source_status(collector: Any, facts: Any) -> SourceStatus:
    if not _is_configured(collector):
        return SourceStatus.UNCONFIGURED
    if collector.is_usable(facts):
        return SourceStatus.AVAILABLE
    return SourceStatus.FAILED


class Aggregator:
    """Fan out to the collector set and build the evidence record."""

    def __init__(self, collectors: CollectorSet, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._collectors = collectors
        self._clock = clock

    def _settle(self, collector: Any, result: Any) -> Any:
        """Replace an exception that escaped collect() with the unknown state."""
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning(
                "collector_escaped",
                source=getattr(collector, "name", "unknown"),
                error=str(result),
                error_type=type(result).__name__,
            )
            return collector.unknown()
        return result

    async def gather(self, url: str) -> EvidenceRecord:
        """
        Collect evidence for an already validated URL.

        Raises IntelligenceUnavailableError when both the reputation scan and
        the blocklist check are unconfigured up front, or came back unknown.
        """
        c = self._collectors
        if not _is_configured(c.reputation) and not _is_configured(c.blocklist):
            logger.error("aggregator_no_threat_sources", url=url)
            raise IntelligenceUnavailableError(NO_THREAT_SOURCES_MESSAGE)

        domain = domain_of(url)
        phase_one = (
            (c.dns, domain),
            (c.registration, domain),
            (c.certificate, domain),
            (c.reputation, url),
            (c.blocklist, url),
        )
        results = await asyncio.gather(
            *(collector.collect(target) for collector, target in phase_one),
            return_exceptions=True,
        )
        resolved_ip, registration, certificate, scan, blocklist = (
            self._settle(collector, result) for (collector, _), result in zip(phase_one, results)
        )

        sources = {
            SOURCE_DNS: _source_status(c.dns, resolved_ip),
            SOURCE_REGISTRATION: _source_status(c.registration, registration),
            SOURCE_CERTIFICATE: _source_status(c.certificate, certificate),
            SOURCE_REPUTATION: _source_status(c.reputation, scan),
            SOURCE_BLOCKLIST: _source_status(c.blocklist, blocklist),
        }

        if scan.malicious_count is None and blocklist.status is BlockStatus.UNKNOWN:
            logger.error(
                "aggregator_threat_sources_unknown",
                url=url,
                sources={name: status.value for name, status in sources.items()},
            )
            raise IntelligenceUnavailableError(NO_THREAT_SOURCES_MESSAGE)

        ip = resolved_ip or registration.ip_address
        if ip:
            try:
                abuse = await c.abuse.collect(ip)
            except Exception as e:
                abuse = self._settle(c.abuse, e)
            sources[SOURCE_ABUSE] = _source_status(c.abuse, abuse)
        else:
            abuse = AbuseReport.unknown()
            sources[SOURCE_ABUSE] = SourceStatus.SKIPPED
            logger.debug("abuse_lookup_skipped", url=url, reason="no_ip")

        registration = replace(registration, ip_address=ip)
        reputation = ReputationFacts.merge(scan, blocklist, abuse)
        logger.info(
            "evidence_gathered",
            url=url,
            domain=domain,
            sources={name: status.value for name, status in sources.items()},
        )

        return EvidenceRecord(
            url=url,
            domain=domain,
            certificate=certificate,
            registration=registration,
            reputation=reputation,
            sources=sources,
            collected_at=self._clock().isoformat(),
        )
