"""
Verdict engine: compute a 0-100 trust score, confidence and classification
from an EvidenceRecord.

Pure and deterministic: no I/O and no clock. computed_at is taken from the
evidence and took_millis is left at 0 for the caller to stamp.

Rule order is critical -> high -> medium -> low, then positive adjustments,
so the indicator list is already ordered by severity. Critical rules clamp
the score to a ceiling instead of subtracting, so bonuses cannot offset
them; bonuses are skipped entirely once a critical rule fired.
"""

from __future__ import annotations

from backend_trustscan.analysis_engine import indicators as ind
from backend_trustscan.analysis_engine.models import (
    BlockStatus,
    CertificateFacts,
    Classification,
    Confidence,
    EvidenceRecord,
    Verdict,
)
from backend_trustscan.analysis_engine.policy import DEFAULT_POLICY, ScoringPolicy
from backend_trustscan.trustscan_logging import get_logger

logger = get_logger(__name__)


def count_available_sources(evidence: EvidenceRecord) -> int:
    """Independent sources with usable data: reputation scan, blocklist, abuse lookup, registration age."""
    rep = evidence.reputation
    return sum(
        (
            rep.malicious_count is not None,
            rep.block_status is not BlockStatus.UNKNOWN,
            rep.abuse_confidence is not None,
            evidence.registration.age_days is not None,
        )
    )


def confidence_and_base(available: int, policy: ScoringPolicy = DEFAULT_POLICY) -> tuple[Confidence, int]:
    if available >= policy.high_confidence_sources:
        return Confidence.HIGH, policy.base_high
    if available >= policy.medium_confidence_sources:
        return Confidence.MEDIUM, policy.base_medium
    return Confidence.LOW, policy.base_low


def classify(score: int, policy: ScoringPolicy = DEFAULT_POLICY) -> Classification:
    if score >= policy.safe_threshold:
        return Classification.SAFE
    if score >= policy.caution_threshold:
        return Classification.CAUTION
    return Classification.DANGEROUS


def _is_legacy_only(cert: CertificateFacts, policy: ScoringPolicy) -> bool:
    if not cert.protocol_versions:
        return False
    return all(
        any(marker in version for marker in policy.legacy_protocols)
        for version in cert.protocol_versions
    )


def _is_trusted_issuer(issuer: str | None, policy: ScoringPolicy) -> bool:
    if not issuer:
        return False
    lowered = issuer.lower()
    return any(name.lower() in lowered for name in policy.trusted_issuers)


def _apply_critical(evidence: EvidenceRecord, score: int, codes: list[str], policy: ScoringPolicy) -> int:
    rep = evidence.reputation
    if rep.block_status is BlockStatus.DANGEROUS:
        score = min(score - policy.blocklist_penalty, policy.blocklist_ceiling)
        codes.append(ind.BLOCKLIST_FLAGGED)
    if rep.malicious_count is not None and rep.malicious_count > 0:
        penalty = rep.malicious_count * policy.malicious_per_engine_penalty + policy.malicious_base_penalty
        score = min(score - penalty, policy.malicious_ceiling)
        codes.append(ind.REPUTATION_MALICIOUS_DETECTION)
    return score


def _apply_high(evidence: EvidenceRecord, score: int, codes: list[str], policy: ScoringPolicy) -> int:
    age = evidence.registration.age_days
    if age is not None:
        if age < policy.extremely_new_domain_days:
            score -= policy.extremely_new_domain_penalty
            codes.append(ind.EXTREMELY_NEW_DOMAIN)
        elif age < policy.recent_domain_days:
            score -= policy.recent_domain_penalty
            codes.append(ind.RECENTLY_CREATED_DOMAIN)

    abuse = evidence.reputation.abuse_confidence
    if abuse is not None:
        if abuse > policy.very_high_abuse_pct:
            score -= policy.very_high_abuse_penalty
            codes.append(ind.IP_VERY_HIGH_ABUSE)
        elif abuse > policy.moderate_abuse_pct:
            score -= policy.moderate_abuse_penalty
            codes.append(ind.IP_MODERATE_ABUSE)
    return score


def _apply_medium(evidence: EvidenceRecord, score: int, codes: list[str], policy: ScoringPolicy) -> int:
    suspicious = evidence.reputation.suspicious_count
    if suspicious is not None:
        if suspicious > policy.high_suspicious_count:
            score -= policy.high_suspicious_penalty
            codes.append(ind.HIGH_SUSPICIOUS_FLAGS)
        elif suspicious > policy.multiple_suspicious_count:
            score -= policy.multiple_suspicious_penalty
            codes.append(ind.MULTIPLE_SUSPICIOUS_FLAGS)

    age = evidence.registration.age_days
    already_age_flagged = ind.EXTREMELY_NEW_DOMAIN in codes or ind.RECENTLY_CREATED_DOMAIN in codes
    if age is not None and age < policy.young_domain_days and not already_age_flagged:
        score -= policy.young_domain_penalty
        codes.append(ind.YOUNG_DOMAIN)

    cert = evidence.certificate
    if cert.available:
        expired = cert.days_to_expiry is not None and cert.days_to_expiry <= 0
        if not cert.is_valid or expired:
            score -= policy.invalid_certificate_penalty
            codes.append(ind.INVALID_CERTIFICATE)
        if cert.age_days is not None:
            if cert.age_days < policy.very_new_certificate_days:
                score -= policy.very_new_certificate_penalty
                codes.append(ind.VERY_NEW_CERTIFICATE)
            elif cert.age_days < policy.recent_certificate_days:
                score -= policy.recent_certificate_penalty
                codes.append(ind.RECENTLY_ISSUED_CERTIFICATE)
    return score


def _apply_low(evidence: EvidenceRecord, score: int, codes: list[str], policy: ScoringPolicy) -> int:
    if evidence.registration.is_privacy_protected:
        score -= policy.privacy_penalty
        codes.append(ind.USES_DOMAIN_PRIVACY)
    if evidence.certificate.available and _is_legacy_only(evidence.certificate, policy):
        score -= policy.outdated_tls_penalty
        codes.append(ind.OUTDATED_TLS_PROTOCOL)
    return score


def _apply_positive(evidence: EvidenceRecord, score: int, policy: ScoringPolicy) -> int:
    rep = evidence.reputation
    if rep.malicious_count == 0 and rep.block_status is BlockStatus.SAFE:
        score += policy.clean_feeds_bonus

    age = evidence.registration.age_days
    if age is not None:
        for days, bonus in policy.domain_age_bonuses:
            if age > days:
                score += bonus
                break

    cert = evidence.certificate
    if cert.available and cert.is_extended_validation:
        score += policy.extended_validation_bonus
    if cert.available and _is_trusted_issuer(cert.issuer, policy):
        score += policy.trusted_issuer_bonus
    return score


def select_summary(
    codes: list[str],
    classification: Classification,
    confidence: Confidence,
    score: int,
    critical_fired: bool,
    policy: ScoringPolicy = DEFAULT_POLICY,
) -> str:
    if confidence is Confidence.HIGH and score >= policy.maximal_trust_threshold and not critical_fired:
        return ind.MAXIMAL_TRUST_SUMMARY
    if codes:
        return ind.INDICATOR_SUMMARIES[codes[0]]
    return ind.CLASSIFICATION_SUMMARIES[classification.value]


def compute_verdict(evidence: EvidenceRecord, policy: ScoringPolicy = DEFAULT_POLICY) -> Verdict:
    """
    Compute the verdict for one evidence record.

    Same evidence and policy always give an equal Verdict.
    """
    available = count_available_sources(evidence)
    confidence, score = confidence_and_base(available, policy)
    codes: list[str] = []
    if confidence is Confidence.LOW:
        codes.append(ind.LIMITED_INTELLIGENCE_DATA)

    score = _apply_critical(evidence, score, codes, policy)
    critical_fired = any(code in ind.CRITICAL_INDICATORS for code in codes)
    score = _apply_high(evidence, score, codes, policy)
    score = _apply_medium(evidence, score, codes, policy)
    score = _apply_low(evidence, score, codes, policy)
    if not critical_fired:
        score = _apply_positive(evidence, score, policy)

    score = max(policy.score_min, min(policy.score_max, int(score)))
    classification = classify(score, policy)
    ordered = ind.order_by_tier(codes)
    summary = select_summary(ordered, classification, confidence, score, critical_fired, policy)

    logger.debug(
        "verdict_computed",
        url=evidence.url,
        score=score,
        confidence=confidence.value,
        classification=classification.value,
        sources_available=available,
        indicators=ordered,
    )
    return Verdict(
        trust_score=score,
        confidence=confidence,
        classification=classification,
        summary=summary,
        indicators=tuple(ordered),
        evidence=evidence,
        computed_at=evidence.collected_at,
    )
