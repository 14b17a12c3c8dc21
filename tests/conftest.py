"""
Pytest fixtures for TrustScan tests. Uses a temporary SQLite DB for the result
cache and fake collectors that record every call.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from backend_trustscan.analysis_engine.models import (
    AbuseReport,
    BlocklistResult,
    BlockStatus,
    CertificateFacts,
    EvidenceRecord,
    RegistrationFacts,
    ReputationFacts,
    ReputationScan,
)

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
HOST_IP = "93.184.216.34"


class FakeCollector:
    """Stand-in for a Collector: fixed result (or error), call log, configured flag."""

    def __init__(self, name: str, result: Any, unknown: Any, *, configured: bool = True, error: Exception | None = None):
        self.name = name
        self.result = result
        self.configured = configured
        self.error = error
        self.calls: list[str] = []
        self._unknown = unknown

    def unknown(self) -> Any:
        return self._unknown

    def is_usable(self, facts: Any) -> bool:
        return facts != self._unknown

    async def collect(self, target: str) -> Any:
        self.calls.append(target)
        if self.error is not None:
            raise self.error
        if not self.configured:
            return self._unknown
        return self.result


def healthy_results() -> dict[str, Any]:
    """Facts for an established, clean site."""
    return {
        "dns": HOST_IP,
        "registration": RegistrationFacts(age_days=4000, registrar="Example Registrar, Inc."),
        "certificate": CertificateFacts(
            available=True,
            is_valid=True,
            issuer="DigiCert Inc",
            days_to_expiry=120,
            protocol_versions=("TLS 1.2", "TLS 1.3"),
            age_days=200,
        ),
        "reputation": ReputationScan(malicious_count=0, suspicious_count=0, harmless_count=70),
        "blocklist": BlocklistResult(status=BlockStatus.SAFE),
        "abuse": AbuseReport(confidence=0, total_reports=0),
    }


UNKNOWNS: dict[str, Any] = {
    "dns": None,
    "registration": RegistrationFacts.unknown(),
    "certificate": CertificateFacts.unavailable(),
    "reputation": ReputationScan.unknown(),
    "blocklist": BlocklistResult.unknown(),
    "abuse": AbuseReport.unknown(),
}


@pytest.fixture
def make_collectors():
    """
    Build a CollectorSet of FakeCollectors. Keyword overrides per source:
    a value replaces the result; an Exception makes collect() raise;
    unconfigured=[names] marks sources as lacking credentials.
    """
    from backend_trustscan.collectors import CollectorSet

    def _make(unconfigured: tuple[str, ...] = (), **overrides: Any) -> CollectorSet:
        results = healthy_results()
        fakes = {}
        for name, default in results.items():
            value = overrides.get(name, default)
            error = value if isinstance(value, Exception) else None
            fakes[name] = FakeCollector(
                name,
                None if error else value,
                UNKNOWNS[name],
                configured=name not in unconfigured,
                error=error,
            )
        return CollectorSet(**fakes)

    return _make


@pytest.fixture
def make_evidence():
    """Build an EvidenceRecord from healthy facts with keyword overrides."""

    def _make(
        *,
        certificate: CertificateFacts | None = None,
        registration: RegistrationFacts | None = None,
        scan: ReputationScan | None = None,
        blocklist: BlocklistResult | None = None,
        abuse: AbuseReport | None = None,
        url: str = "https://example.com/login",
    ) -> EvidenceRecord:
        base = healthy_results()
        return EvidenceRecord(
            url=url,
            domain="example.com",
            certificate=certificate if certificate is not None else base["certificate"],
            registration=registration if registration is not None else base["registration"],
            reputation=ReputationFacts.merge(
                scan if scan is not None else base["reputation"],
                blocklist if blocklist is not None else base["blocklist"],
                abuse if abuse is not None else base["abuse"],
            ),
            collected_at=FIXED_NOW.isoformat(),
        )

    return _make


@pytest.fixture
def db(tmp_path):
    """Fresh SQLite Database on a temporary file."""
    from backend_trustscan.database import get_database

    return get_database(tmp_path / "trustscan.db")


class FakeClock:
    """Settable time source (seconds) for cache TTL tests."""

    def __init__(self, now: float = 1_760_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(db, clock):
    from backend_trustscan.database import ResultCache

    return ResultCache(db, ttl_sec=3600, clock=clock)


@pytest.fixture
def make_service(cache):
    """SecurityAnalysisService over fake collectors and the temp-DB cache."""
    from backend_trustscan.analysis_engine.aggregator import Aggregator
    from backend_trustscan.api_server.handler import SecurityAnalysisService

    def _make(collectors, *, use_cache: bool = True):
        aggregator = Aggregator(collectors, clock=lambda: FIXED_NOW)
        return SecurityAnalysisService(aggregator, cache if use_cache else None)

    return _make


@pytest.fixture
def client(tmp_path, monkeypatch, db, make_collectors, make_service):
    """
    FastAPI TestClient with the analysis service and database overridden.
    DB_PATH points at tmp_path so the lifespan never touches a real file.
    """
    monkeypatch.setenv("DB_PATH", str(tmp_path / "lifespan.db"))
    from fastapi.testclient import TestClient

    from backend_trustscan.api_server.routes import get_db, get_service
    from backend_trustscan.api_server.server import app

    collectors = make_collectors()
    service = make_service(collectors)
    app.dependency_overrides[get_service] = lambda: service
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as test_client:
        test_client.collectors = collectors
        yield test_client
    app.dependency_overrides.clear()
