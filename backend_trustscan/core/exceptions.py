"""
Application-level exceptions.

Each carries a stable code so the API boundary can map failures to a
consistent error envelope without leaking internals.
"""

from __future__ import annotations


class TrustScanError(Exception):
    """Base class for TrustScan domain errors."""

    code = "TRUSTSCAN_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidURLError(TrustScanError):
    """Input is missing or not a well-formed absolute http(s) URL."""

    code = "INVALID_URL"


class IntelligenceUnavailableError(TrustScanError):
    """Neither the reputation scan nor the blocklist produced usable data."""

    code = "INTELLIGENCE_UNAVAILABLE"


class CollectorError(TrustScanError):
    """A vendor call or payload extraction failed inside a collector."""

    code = "COLLECTOR_ERROR"

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
