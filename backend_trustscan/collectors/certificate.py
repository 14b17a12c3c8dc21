"""
Certificate inspector via the SSL Labs v3 assessment API.

Cached assessments (fromCache=on, maxAge=24h) are usually READY at once;
otherwise the assessment is polled with a bounded wait. A timeout, an ERROR
status or a missing certificate chain yields the unavailable() sentinel.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from backend_trustscan.analysis_engine.models import SOURCE_CERTIFICATE, CertificateFacts
from backend_trustscan.collectors.base import DEFAULT_TIMEOUT_SEC, Collector
from backend_trustscan.collectors.polling import poll_until

SSLLABS_ANALYZE_URL = "https://api.ssllabs.com/api/v3/analyze"
STATUS_READY = "READY"
STATUS_ERROR = "ERROR"
FAILING_GRADES = frozenset({"F", "T", "M"})
VALIDATION_TYPE_EV = "E"
_MS_THRESHOLD = 10**11
_ISSUER_ORG = re.compile(r"(?:^|,\s*)O=([^,]+)")
_ISSUER_CN = re.compile(r"(?:^|,\s*)CN=([^,]+)")


def _epoch_to_datetime(value: Any) -> datetime | None:
    """SSL Labs timestamps are epoch milliseconds; tolerate seconds too."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    seconds = value / 1000.0 if value > _MS_THRESHOLD else float(value)
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _issuer_name(cert: dict[str, Any]) -> str | None:
    label = cert.get("issuerLabel")
    if isinstance(label, str) and label.strip():
        return label.strip()
    subject = cert.get("issuerSubject")
    if isinstance(subject, str) and subject.strip():
        match = _ISSUER_ORG.search(subject) or _ISSUER_CN.search(subject)
        return match.group(1).strip() if match else subject.strip()
    return None


def _leaf_certificate(payload: dict[str, Any], endpoint: dict[str, Any]) -> dict[str, Any] | None:
    details = endpoint.get("details") or {}
    chains = details.get("certChains") or []
    cert_ids: list[str] = []
    if chains and isinstance(chains[0], dict):
        cert_ids = list(chains[0].get("certIds") or [])
    certs = [c for c in payload.get("certs") or [] if isinstance(c, dict)]
    if cert_ids:
        for cert in certs:
            if cert.get("id") == cert_ids[0]:
                return cert
    if certs:
        return certs[0]
    legacy = details.get("cert")
    return legacy if isinstance(legacy, dict) else None


def parse_ssllabs_report(payload: Any, now: datetime) -> CertificateFacts:
    """Typed certificate facts from a READY SSL Labs host report."""
    if not isinstance(payload, dict) or payload.get("status") != STATUS_READY:
        return CertificateFacts.unavailable()
    endpoints = [e for e in payload.get("endpoints") or [] if isinstance(e, dict)]
    if not endpoints:
        return CertificateFacts.unavailable()
    endpoint = endpoints[0]
    cert = _leaf_certificate(payload, endpoint)
    if cert is None:
        return CertificateFacts.unavailable()

    not_before = _epoch_to_datetime(cert.get("notBefore"))
    not_after = _epoch_to_datetime(cert.get("notAfter"))
    days_to_expiry = (not_after - now).days if not_after else None
    age_days = max(0, (now - not_before).days) if not_before else None

    grade = str(endpoint.get("grade") or "").strip().upper()
    expired = days_to_expiry is not None and days_to_expiry <= 0
    is_valid = grade not in FAILING_GRADES and not expired

    protocols = tuple(
        f"{p.get('name')} {p.get('version')}"
        for p in (endpoint.get("details") or {}).get("protocols") or []
        if isinstance(p, dict) and p.get("name") and p.get("version")
    )
    return CertificateFacts(
        available=True,
        is_valid=is_valid,
        issuer=_issuer_name(cert),
        valid_from=not_before.isoformat() if not_before else None,
        valid_to=not_after.isoformat() if not_after else None,
        days_to_expiry=days_to_expiry,
        signature_algorithm=cert.get("sigAlg") or None,
        protocol_versions=protocols,
        is_extended_validation=cert.get("validationType") == VALIDATION_TYPE_EV,
        age_days=age_days,
    )


def _is_settled(payload: Any) -> bool:
    return isinstance(payload, dict) and payload.get("status") in (STATUS_READY, STATUS_ERROR)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CertificateCollector(Collector[CertificateFacts]):
    name = SOURCE_CERTIFICATE

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        poll_attempts: int = 3,
        poll_interval_sec: float = 2.0,
        poll_budget_sec: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        super().__init__(client, timeout_sec=timeout_sec)
        self._poll_attempts = poll_attempts
        self._poll_interval_sec = poll_interval_sec
        self._poll_budget_sec = poll_budget_sec if poll_budget_sec is not None else timeout_sec
        self._clock = clock

    def unknown(self) -> CertificateFacts:
        return CertificateFacts.unavailable()

    async def _fetch(self, target: str) -> CertificateFacts:
        params = {"host": target, "fromCache": "on", "maxAge": "24", "all": "done"}

        async def fetch() -> Any:
            return await self._get_json(SSLLABS_ANALYZE_URL, params=params)

        payload = await poll_until(
            fetch,
            _is_settled,
            attempts=self._poll_attempts,
            interval_sec=self._poll_interval_sec,
            budget_sec=self._poll_budget_sec,
        )
        if payload is None:
            return CertificateFacts.unavailable()
        return parse_ssllabs_report(payload, self._clock())
