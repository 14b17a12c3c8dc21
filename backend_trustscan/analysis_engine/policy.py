"""
Scoring policy: every weight, ceiling and threshold of the verdict engine.

The defaults are one internally consistent policy; they are policy choices,
not derived values. Override by constructing ScoringPolicy(...) with new
values and passing it to compute_verdict().
"""

from __future__ import annotations

from dataclasses import dataclass

TRUSTED_ISSUERS = ("DigiCert", "Sectigo", "GlobalSign")
LEGACY_PROTOCOL_MARKERS = ("SSL 2", "SSL 3", "TLS 1.0", "TLS 1.1")


@dataclass(frozen=True)
class ScoringPolicy:
    # Confidence and base score
    high_confidence_sources: int = 3
    medium_confidence_sources: int = 2
    base_high: int = 70
    base_medium: int = 50
    base_low: int = 30

    # Critical tier: score = min(score - penalty, ceiling)
    blocklist_penalty: int = 60
    blocklist_ceiling: int = 15
    malicious_base_penalty: int = 45
    malicious_per_engine_penalty: int = 15
    malicious_ceiling: int = 20

    # High tier
    extremely_new_domain_days: int = 7
    extremely_new_domain_penalty: int = 35
    recent_domain_days: int = 30
    recent_domain_penalty: int = 25
    very_high_abuse_pct: int = 75
    very_high_abuse_penalty: int = 35
    moderate_abuse_pct: int = 25
    moderate_abuse_penalty: int = 20

    # Medium tier
    high_suspicious_count: int = 5
    high_suspicious_penalty: int = 25
    multiple_suspicious_count: int = 2
    multiple_suspicious_penalty: int = 15
    young_domain_days: int = 90
    young_domain_penalty: int = 15
    invalid_certificate_penalty: int = 20
    very_new_certificate_days: int = 7
    very_new_certificate_penalty: int = 15
    recent_certificate_days: int = 30
    recent_certificate_penalty: int = 10

    # Low tier
    privacy_penalty: int = 8
    outdated_tls_penalty: int = 10

    # Positive adjustments (skipped when a critical indicator fired)
    clean_feeds_bonus: int = 25
    domain_age_bonuses: tuple[tuple[int, int], ...] = ((3650, 15), (1825, 10), (365, 5))
    """(days, bonus) pairs checked in order; first age strictly above wins."""
    extended_validation_bonus: int = 8
    trusted_issuer_bonus: int = 5
    trusted_issuers: tuple[str, ...] = TRUSTED_ISSUERS
    legacy_protocols: tuple[str, ...] = LEGACY_PROTOCOL_MARKERS

    # Classification thresholds
    safe_threshold: int = 75
    caution_threshold: int = 40
    maximal_trust_threshold: int = 85

    score_min: int = 0
    score_max: int = 100


DEFAULT_POLICY = ScoringPolicy()
