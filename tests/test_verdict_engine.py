"""
Tests for the verdict engine (compute_verdict): confidence tiers, rule tiers,
indicator ordering, summaries and score bounds.
"""

from __future__ import annotations

import itertools

from backend_trustscan.analysis_engine import indicators as ind
from backend_trustscan.analysis_engine.models import (
    AbuseReport,
    BlocklistResult,
    BlockStatus,
    CertificateFacts,
    Classification,
    Confidence,
    RegistrationFacts,
    ReputationScan,
)
from backend_trustscan.analysis_engine.policy import DEFAULT_POLICY, ScoringPolicy
from backend_trustscan.analysis_engine.verdict_engine import (
    classify,
    compute_verdict,
    confidence_and_base,
    count_available_sources,
)

DANGEROUS_BLOCKLIST = BlocklistResult(status=BlockStatus.DANGEROUS, threats=("SOCIAL_ENGINEERING",))


def _cert(**kwargs) -> CertificateFacts:
    params = {"available": True, "is_valid": True, "issuer": "Let's Encrypt", "age_days": 200}
    params.update(kwargs)
    return CertificateFacts(**params)


def test_confidence_and_base_tiers():
    assert confidence_and_base(4) == (Confidence.HIGH, 70)
    assert confidence_and_base(3) == (Confidence.HIGH, 70)
    assert confidence_and_base(2) == (Confidence.MEDIUM, 50)
    assert confidence_and_base(1) == (Confidence.LOW, 30)
    assert confidence_and_base(0) == (Confidence.LOW, 30)


def test_classify_thresholds():
    assert classify(75) is Classification.SAFE
    assert classify(74) is Classification.CAUTION
    assert classify(40) is Classification.CAUTION
    assert classify(39) is Classification.DANGEROUS


def test_count_available_sources_ignores_certificate(make_evidence):
    evidence = make_evidence(certificate=CertificateFacts.unavailable())
    assert count_available_sources(evidence) == 4
    evidence = make_evidence(
        scan=ReputationScan.unknown(),
        abuse=AbuseReport.unknown(),
        registration=RegistrationFacts.unknown(),
    )
    assert count_available_sources(evidence) == 1


def test_clean_established_site_gets_maximal_trust(make_evidence):
    """All feeds clean, old domain, trusted issuer: clamped to 100 with the maximal-trust summary."""
    verdict = compute_verdict(make_evidence())
    assert verdict.confidence is Confidence.HIGH
    assert verdict.trust_score == 100
    assert verdict.classification is Classification.SAFE
    assert verdict.indicators == ()
    assert verdict.summary == ind.MAXIMAL_TRUST_SUMMARY
    assert verdict.took_millis == 0
    assert verdict.served_from_cache is False


def test_blocklist_flag_is_critical(make_evidence):
    """Blocklist DANGEROUS clamps to <= 15 and suppresses every bonus."""
    verdict = compute_verdict(make_evidence(blocklist=DANGEROUS_BLOCKLIST))
    assert verdict.trust_score == 10  # min(70 - 60, 15)
    assert verdict.classification is Classification.DANGEROUS
    assert verdict.indicators[0] == ind.BLOCKLIST_FLAGGED
    assert verdict.summary == ind.INDICATOR_SUMMARIES[ind.BLOCKLIST_FLAGGED]
    assert verdict.is_threat


def test_malicious_detection_clamps_below_ceiling(make_evidence):
    """Old domain, EV cert and trusted issuer cannot lift a malicious detection above 20."""
    evidence = make_evidence(
        scan=ReputationScan(malicious_count=1, suspicious_count=0, harmless_count=60),
        registration=RegistrationFacts(age_days=6000),
        certificate=_cert(issuer="DigiCert Inc", is_extended_validation=True),
    )
    verdict = compute_verdict(evidence)
    assert verdict.trust_score == 10  # min(70 - 60, 20)
    assert verdict.indicators == (ind.REPUTATION_MALICIOUS_DETECTION,)
    assert verdict.classification is Classification.DANGEROUS


def test_many_malicious_engines_clamp_to_zero(make_evidence):
    verdict = compute_verdict(make_evidence(scan=ReputationScan(malicious_count=5, suspicious_count=0)))
    assert verdict.trust_score == 0


def test_both_critical_rules_keep_rule_order(make_evidence):
    evidence = make_evidence(blocklist=DANGEROUS_BLOCKLIST, scan=ReputationScan(malicious_count=2, suspicious_count=0))
    verdict = compute_verdict(evidence)
    assert verdict.indicators[:2] == (ind.BLOCKLIST_FLAGGED, ind.REPUTATION_MALICIOUS_DETECTION)
    assert verdict.summary != ind.MAXIMAL_TRUST_SUMMARY


def test_extremely_new_domain_does_not_also_flag_young(make_evidence):
    evidence = make_evidence(registration=RegistrationFacts(age_days=3), certificate=_cert(issuer="DigiCert"))
    verdict = compute_verdict(evidence)
    # 70 - 35 + 25 (clean feeds) + 5 (trusted issuer)
    assert verdict.trust_score == 65
    assert verdict.indicators == (ind.EXTREMELY_NEW_DOMAIN,)
    assert verdict.classification is Classification.CAUTION
    assert verdict.summary == ind.INDICATOR_SUMMARIES[ind.EXTREMELY_NEW_DOMAIN]


def test_domain_age_boundaries(make_evidence):
    def codes(age):
        return compute_verdict(make_evidence(registration=RegistrationFacts(age_days=age))).indicators

    assert codes(6) == (ind.EXTREMELY_NEW_DOMAIN,)
    assert codes(7) == (ind.RECENTLY_CREATED_DOMAIN,)
    assert codes(29) == (ind.RECENTLY_CREATED_DOMAIN,)
    assert codes(30) == (ind.YOUNG_DOMAIN,)
    assert codes(89) == (ind.YOUNG_DOMAIN,)
    assert codes(90) == ()


def test_unknown_registration_age_is_not_new(make_evidence):
    """Unknown age triggers no age rule and earns no age bonus."""
    unknown_age = compute_verdict(make_evidence(registration=RegistrationFacts(registrar="X")))
    assert not {ind.EXTREMELY_NEW_DOMAIN, ind.RECENTLY_CREATED_DOMAIN, ind.YOUNG_DOMAIN} & set(unknown_age.indicators)
    # 3 sources: HIGH base 70 + 25 clean + 0 age + 0 issuer (Let's Encrypt not trusted)
    evidence = make_evidence(registration=RegistrationFacts(), certificate=_cert())
    assert compute_verdict(evidence).trust_score == 95


def test_abuse_thresholds(make_evidence):
    def codes(confidence):
        return compute_verdict(make_evidence(abuse=AbuseReport(confidence=confidence, total_reports=10))).indicators

    assert codes(80) == (ind.IP_VERY_HIGH_ABUSE,)
    assert codes(76) == (ind.IP_VERY_HIGH_ABUSE,)
    assert codes(75) == (ind.IP_MODERATE_ABUSE,)
    assert codes(26) == (ind.IP_MODERATE_ABUSE,)
    assert codes(25) == ()


def test_suspicious_thresholds(make_evidence):
    def codes(suspicious):
        scan = ReputationScan(malicious_count=0, suspicious_count=suspicious, harmless_count=50)
        return compute_verdict(make_evidence(scan=scan)).indicators

    assert codes(6) == (ind.HIGH_SUSPICIOUS_FLAGS,)
    assert codes(3) == (ind.MULTIPLE_SUSPICIOUS_FLAGS,)
    assert codes(2) == ()


def test_unavailable_certificate_is_not_penalized(make_evidence):
    verdict = compute_verdict(make_evidence(certificate=CertificateFacts.unavailable()))
    assert ind.INVALID_CERTIFICATE not in verdict.indicators
    assert ind.OUTDATED_TLS_PROTOCOL not in verdict.indicators


def test_invalid_or_expired_certificate(make_evidence):
    invalid = compute_verdict(make_evidence(certificate=_cert(is_valid=False)))
    assert invalid.indicators == (ind.INVALID_CERTIFICATE,)
    expired = compute_verdict(make_evidence(certificate=_cert(days_to_expiry=0)))
    assert expired.indicators == (ind.INVALID_CERTIFICATE,)


def test_certificate_age_rules(make_evidence):
    assert compute_verdict(make_evidence(certificate=_cert(age_days=2))).indicators == (ind.VERY_NEW_CERTIFICATE,)
    assert compute_verdict(make_evidence(certificate=_cert(age_days=20))).indicators == (
        ind.RECENTLY_ISSUED_CERTIFICATE,
    )
    assert compute_verdict(make_evidence(certificate=_cert(age_days=None))).indicators == ()


def test_outdated_tls_only_when_every_protocol_is_legacy(make_evidence):
    legacy = compute_verdict(make_evidence(certificate=_cert(protocol_versions=("TLS 1.0", "TLS 1.1"))))
    assert ind.OUTDATED_TLS_PROTOCOL in legacy.indicators
    mixed = compute_verdict(make_evidence(certificate=_cert(protocol_versions=("TLS 1.0", "TLS 1.2"))))
    assert ind.OUTDATED_TLS_PROTOCOL not in mixed.indicators
    empty = compute_verdict(make_evidence(certificate=_cert(protocol_versions=())))
    assert ind.OUTDATED_TLS_PROTOCOL not in empty.indicators


def test_privacy_protected_registration(make_evidence):
    evidence = make_evidence(registration=RegistrationFacts(age_days=4000, is_privacy_protected=True))
    verdict = compute_verdict(evidence)
    assert verdict.indicators == (ind.USES_DOMAIN_PRIVACY,)


def test_limited_data_never_displaces_severity_indicator(make_evidence):
    """LOW confidence plus a recent domain: the domain indicator stays first."""
    evidence = make_evidence(
        registration=RegistrationFacts(age_days=10),
        scan=ReputationScan.unknown(),
        blocklist=BlocklistResult.unknown(),
        abuse=AbuseReport.unknown(),
    )
    verdict = compute_verdict(evidence)
    assert verdict.confidence is Confidence.LOW
    assert verdict.indicators == (ind.RECENTLY_CREATED_DOMAIN, ind.LIMITED_INTELLIGENCE_DATA)
    assert verdict.summary == ind.INDICATOR_SUMMARIES[ind.RECENTLY_CREATED_DOMAIN]


def test_limited_data_alone_is_reported(make_evidence):
    evidence = make_evidence(
        registration=RegistrationFacts(),
        scan=ReputationScan.unknown(),
        abuse=AbuseReport.unknown(),
        certificate=_cert(),
    )
    verdict = compute_verdict(evidence)
    assert verdict.confidence is Confidence.LOW
    assert verdict.indicators == (ind.LIMITED_INTELLIGENCE_DATA,)
    # Blocklist SAFE alone does not earn the clean-feeds bonus
    assert verdict.trust_score == 30


def test_indicators_ordered_by_tier(make_evidence):
    evidence = make_evidence(
        registration=RegistrationFacts(age_days=20, is_privacy_protected=True),
        scan=ReputationScan(malicious_count=0, suspicious_count=4),
        certificate=_cert(is_valid=False, protocol_versions=("TLS 1.0",)),
        abuse=AbuseReport(confidence=50, total_reports=3),
    )
    verdict = compute_verdict(evidence)
    ranks = [ind.TIER_RANK[ind.tier_of(code)] for code in verdict.indicators]
    assert ranks == sorted(ranks)
    assert verdict.indicators[0] == ind.RECENTLY_CREATED_DOMAIN
    assert len(verdict.indicators) == len(set(verdict.indicators))


def test_maximal_summary_requires_high_confidence(make_evidence):
    """Score clears 85 on MEDIUM confidence: summary falls back to the classification sentence."""
    evidence = make_evidence(abuse=AbuseReport.unknown(), registration=RegistrationFacts(), certificate=_cert())
    verdict = compute_verdict(evidence)
    assert verdict.confidence is Confidence.MEDIUM
    assert verdict.trust_score == 75  # 50 + 25
    assert verdict.summary == ind.CLASSIFICATION_SUMMARIES["SAFE"]


def test_compute_verdict_is_deterministic(make_evidence):
    evidence = make_evidence(registration=RegistrationFacts(age_days=45), abuse=AbuseReport(confidence=40))
    assert compute_verdict(evidence) == compute_verdict(evidence)
    assert compute_verdict(evidence).computed_at == evidence.collected_at


def test_score_bounds_and_classification_consistency(make_evidence):
    """Score always in [0, 100] and classification always matches the thresholds."""
    scans = [ReputationScan.unknown(), ReputationScan(0, 0, 10), ReputationScan(3, 7, 1)]
    blocklists = [BlocklistResult.unknown(), BlocklistResult(BlockStatus.SAFE), DANGEROUS_BLOCKLIST]
    ages = [RegistrationFacts(), RegistrationFacts(age_days=1), RegistrationFacts(age_days=5000)]
    abuses = [AbuseReport.unknown(), AbuseReport(0), AbuseReport(100)]
    certs = [CertificateFacts.unavailable(), _cert(is_valid=False, age_days=1), _cert(is_extended_validation=True)]
    for scan, blocklist, reg, abuse, cert in itertools.product(scans, blocklists, ages, abuses, certs):
        verdict = compute_verdict(
            make_evidence(scan=scan, blocklist=blocklist, registration=reg, abuse=abuse, certificate=cert)
        )
        assert 0 <= verdict.trust_score <= 100
        assert verdict.classification is classify(verdict.trust_score)
        if blocklist.status is BlockStatus.DANGEROUS:
            assert verdict.trust_score <= DEFAULT_POLICY.blocklist_ceiling
        if scan.malicious_count:
            assert verdict.trust_score <= DEFAULT_POLICY.malicious_ceiling


def test_blocklist_flag_never_raises_score(make_evidence):
    for reg in (RegistrationFacts(), RegistrationFacts(age_days=2), RegistrationFacts(age_days=9000)):
        clean = compute_verdict(make_evidence(registration=reg))
        flagged = compute_verdict(make_evidence(registration=reg, blocklist=DANGEROUS_BLOCKLIST))
        assert flagged.trust_score <= clean.trust_score


def test_custom_policy_thresholds(make_evidence):
    strict = ScoringPolicy(safe_threshold=101)
    verdict = compute_verdict(make_evidence(), strict)
    assert verdict.trust_score == 100
    assert verdict.classification is Classification.CAUTION


def test_scenario_established_clean_site(make_evidence):
    evidence = make_evidence(
        registration=RegistrationFacts(age_days=4000),
        certificate=_cert(issuer="R11", age_days=400),
        abuse=AbuseReport(confidence=2, total_reports=1),
    )
    verdict = compute_verdict(evidence)
    assert verdict.classification is Classification.SAFE
    assert verdict.confidence is Confidence.HIGH
    assert verdict.trust_score >= 85
    assert not set(verdict.indicators) & ind.CRITICAL_INDICATORS
    assert verdict.summary == ind.MAXIMAL_TRUST_SUMMARY


def test_scenario_flagged_brand_new_phishing_site(make_evidence):
    evidence = make_evidence(
        blocklist=DANGEROUS_BLOCKLIST,
        scan=ReputationScan(malicious_count=5, suspicious_count=0),
        registration=RegistrationFacts(age_days=2),
    )
    verdict = compute_verdict(evidence)
    assert verdict.classification is Classification.DANGEROUS
    assert verdict.trust_score <= 15
    assert verdict.indicators[0] == ind.BLOCKLIST_FLAGGED
    assert ind.EXTREMELY_NEW_DOMAIN in verdict.indicators
    assert ind.RECENTLY_CREATED_DOMAIN not in verdict.indicators


def test_confidence_never_decreases_with_more_sources(make_evidence):
    order = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}
    steps = [
        dict(scan=ReputationScan.unknown(), abuse=AbuseReport.unknown(), registration=RegistrationFacts()),
        dict(abuse=AbuseReport.unknown(), registration=RegistrationFacts()),
        dict(registration=RegistrationFacts()),
        dict(),
    ]
    levels = [order[compute_verdict(make_evidence(**step)).confidence] for step in steps]
    assert levels == sorted(levels)
    assert levels[0] == 0 and levels[-1] == 2
