"""
Backend TrustScan: URL/domain trust scoring from third-party threat intelligence.

Collects blocklist, multi-engine reputation, registration, certificate and
IP-abuse signals concurrently, combines them into a bounded trust score with
an explained verdict, and caches verdicts per URL. Modular architecture with
clear separation between collectors, analysis engine, database and API server.
"""

__version__ = "0.1.0"
