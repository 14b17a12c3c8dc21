"""
Analysis engine package: evidence models, aggregation and verdicts.

The aggregator gathers facts from the collectors into an EvidenceRecord;
the verdict engine turns that record into a trust score, confidence,
classification and ordered indicators under a ScoringPolicy.
"""

from backend_trustscan.analysis_engine.models import (
    AbuseReport,
    BlocklistResult,
    BlockStatus,
    CertificateFacts,
    Classification,
    Confidence,
    EvidenceRecord,
    RegistrationFacts,
    ReputationFacts,
    ReputationScan,
    SourceStatus,
    Verdict,
)
from backend_trustscan.analysis_engine.policy import DEFAULT_POLICY, ScoringPolicy
from backend_trustscan.analysis_engine.verdict_engine import compute_verdict

__all__ = [
    "AbuseReport",
    "BlocklistResult",
    "BlockStatus",
    "CertificateFacts",
    "Classification",
    "Confidence",
    "DEFAULT_POLICY",
    "EvidenceRecord",
    "RegistrationFacts",
    "ReputationFacts",
    "ReputationScan",
    "ScoringPolicy",
    "SourceStatus",
    "Verdict",
    "compute_verdict",
]
