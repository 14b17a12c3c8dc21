# backend_trustscan/analysis_engine/indicators.py

"""
Central indicator registry for TrustScan.
Every triggered scoring rule is reported by one of these codes; all modules import from here.
"""

from __future__ import annotations

TIER_CRITICAL = "CRITICAL"
TIER_HIGH = "HIGH"
TIER_MEDIUM = "MEDIUM"
TIER_LOW = "LOW"
TIER_INFO = "INFO"

# Rank used for ordering; lower sorts first
TIER_RANK = {
    TIER_CRITICAL: 0,
    TIER_HIGH: 1,
    TIER_MEDIUM: 2,
    TIER_LOW: 3,
    TIER_INFO: 4,
}

# === CRITICAL ===
BLOCKLIST_FLAGGED = "BLOCKLIST_FLAGGED"
REPUTATION_MALICIOUS_DETECTION = "REPUTATION_MALICIOUS_DETECTION"

# === HIGH ===
EXTREMELY_NEW_DOMAIN = "EXTREMELY_NEW_DOMAIN"
RECENTLY_CREATED_DOMAIN = "RECENTLY_CREATED_DOMAIN"
IP_VERY_HIGH_ABUSE = "IP_VERY_HIGH_ABUSE"
IP_MODERATE_ABUSE = "IP_MODERATE_ABUSE"

# === MEDIUM ===
HIGH_SUSPICIOUS_FLAGS = "HIGH_SUSPICIOUS_FLAGS"
MULTIPLE_SUSPICIOUS_FLAGS = "MULTIPLE_SUSPICIOUS_FLAGS"
YOUNG_DOMAIN = "YOUNG_DOMAIN"
INVALID_CERTIFICATE = "INVALID_CERTIFICATE"
VERY_NEW_CERTIFICATE = "VERY_NEW_CERTIFICATE"
RECENTLY_ISSUED_CERTIFICATE = "RECENTLY_ISSUED_CERTIFICATE"

# === LOW ===
USES_DOMAIN_PRIVACY = "USES_DOMAIN_PRIVACY"
OUTDATED_TLS_PROTOCOL = "OUTDATED_TLS_PROTOCOL"

# === INFO
LIMITED_INTELLIGENCE_DATA = "LIMITED_INTELLIGENCE_DATA"

INDICATOR_TIERS = {
    BLOCKLIST_FLAGGED: TIER_CRITICAL,
    REPUTATION_MALICIOUS_DETECTION: TIER_CRITICAL,
    EXTREMELY_NEW_DOMAIN: TIER_HIGH,
    RECENTLY_CREATED_DOMAIN: TIER_HIGH,
    IP_VERY_HIGH_ABUSE: TIER_HIGH,
    IP_MODERATE_ABUSE: TIER_HIGH,
    HIGH_SUSPICIOUS_FLAGS: TIER_MEDIUM,
    MULTIPLE_SUSPICIOUS_FLAGS: TIER_MEDIUM,
    YOUNG_DOMAIN: TIER_MEDIUM,
    INVALID_CERTIFICATE: TIER_MEDIUM,
    VERY_NEW_CERTIFICATE: TIER_MEDIUM,
    RECENTLY_ISSUED_CERTIFICATE: TIER_MEDIUM,
    USES_DOMAIN_PRIVACY: TIER_LOW,
    OUTDATED_TLS_PROTOCOL: TIER_LOW,
    LIMITED_INTELLIGENCE_DATA: TIER_INFO,
}

CRITICAL_INDICATORS = frozenset(
    code for code, tier in INDICATOR_TIERS.items() if tier == TIER_CRITICAL
)

INDICATOR_SUMMARIES = {
    BLOCKLIST_FLAGGED: "This URL is on a known malware or phishing blocklist. Avoid visiting this site.",
    REPUTATION_MALICIOUS_DETECTION: "This URL is flagged as malicious by multiple security vendors.",
    EXTREMELY_NEW_DOMAIN: "This domain was registered within the last week, a strong indicator of malicious intent.",
    RECENTLY_CREATED_DOMAIN: "This domain was registered recently, which is a common indicator of malicious intent.",
    IP_VERY_HIGH_ABUSE: "The server hosting this site has a very high record of reported abuse.",
    IP_MODERATE_ABUSE: "The server hosting this site has been reported for abusive activity.",
    HIGH_SUSPICIOUS_FLAGS: "Many security vendors consider this URL suspicious.",
    MULTIPLE_SUSPICIOUS_FLAGS: "Several security vendors consider this URL suspicious.",
    YOUNG_DOMAIN: "This domain is less than three months old. Exercise caution.",
    INVALID_CERTIFICATE: "This site's security certificate is invalid or expired.",
    VERY_NEW_CERTIFICATE: "This site's security certificate was issued within the last week.",
    RECENTLY_ISSUED_CERTIFICATE: "This site's security certificate was issued recently.",
    USES_DOMAIN_PRIVACY: "The owner of this domain is hidden behind a privacy service.",
    OUTDATED_TLS_PROTOCOL: "This site only supports outdated encryption protocols.",
    LIMITED_INTELLIGENCE_DATA: "Limited threat intelligence was available for this URL; treat the result with care.",
}

CLASSIFICATION_SUMMARIES = {
    "SAFE": "This URL appears to be safe based on our comprehensive security analysis.",
    "CAUTION": "This URL shows some risk indicators. Exercise caution when visiting.",
    "DANGEROUS": "This URL has been flagged as potentially dangerous. Avoid visiting this site.",
}

MAXIMAL_TRUST_SUMMARY = (
    "This URL is highly trusted: every available intelligence source reports it as clean."
)


def tier_of(code: str) -> str:
    return INDICATOR_TIERS.get(code, TIER_INFO)


def order_by_tier(codes: list[str]) -> list[str]:
    """Stable sort by tier rank; rule order is kept within a tier."""
    return sorted(codes, key=lambda c: TIER_RANK[tier_of(c)])
