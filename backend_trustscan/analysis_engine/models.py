"""
Evidence and verdict models.

Every fact is either a concrete value or an explicit unknown marker (None,
BlockStatus.UNKNOWN, or the CertificateFacts.unavailable() sentinel); nothing
is defaulted to a value that looks like a real measurement. All models are
frozen so a verdict is read-only once produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class BlockStatus(str, Enum):
    SAFE = "SAFE"
    DANGEROUS = "DANGEROUS"
    UNKNOWN = "UNKNOWN"


class Confidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Classification(str, Enum):
    SAFE = "SAFE"
    CAUTION = "CAUTION"
    DANGEROUS = "DANGEROUS"


class SourceStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    FAILED = "FAILED"
    UNCONFIGURED = "UNCONFIGURED"
    SKIPPED = "SKIPPED"


# Source names used in EvidenceRecord.sources and in logs
SOURCE_DNS = "dns"
SOURCE_REGISTRATION = "registration"
SOURCE_CERTIFICATE = "certificate"
SOURCE_REPUTATION = "reputation"
SOURCE_BLOCKLIST = "blocklist"
SOURCE_ABUSE = "abuse"


@dataclass(frozen=True)
class CertificateFacts:
    """TLS certificate facts for the domain's primary endpoint."""

    available: bool
    is_valid: bool
    issuer: str | None = None
    valid_from: str | None = None
    valid_to: str | None = None
    days_to_expiry: int | None = None
    signature_algorithm: str | None = None
    protocol_versions: tuple[str, ...] = ()
    is_extended_validation: bool = False
    age_days: int | None = None
    """Days since notBefore; None when unknown."""

    @classmethod
    def unavailable(cls) -> CertificateFacts:
        """Known-invalid sentinel used when no certificate could be inspected."""
        return cls(available=False, is_valid=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "available": self.available,
            "isValid": self.is_valid,
            "issuer": self.issuer,
            "validFrom": self.valid_from,
            "validTo": self.valid_to,
            "daysToExpiry": self.days_to_expiry,
            "signatureAlgorithm": self.signature_algorithm,
            "protocolVersions": list(self.protocol_versions),
            "isExtendedValidation": self.is_extended_validation,
            "ageDays": self.age_days,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CertificateFacts:
        return cls(
            available=bool(data.get("available")),
            is_valid=bool(data.get("isValid")),
            issuer=data.get("issuer"),
            valid_from=data.get("validFrom"),
            valid_to=data.get("validTo"),
            days_to_expiry=data.get("daysToExpiry"),
            signature_algorithm=data.get("signatureAlgorithm"),
            protocol_versions=tuple(data.get("protocolVersions") or ()),
            is_extended_validation=bool(data.get("isExtendedValidation")),
            age_days=data.get("ageDays"),
        )


@dataclass(frozen=True)
class RegistrationFacts:
    """Domain registration facts. age_days None means unknown, not zero."""

    age_days: int | None = None
    registrar: str | None = None
    is_privacy_protected: bool = False
    ip_address: str | None = None
    created_date: str | None = None
    updated_date: str | None = None
    expiry_date: str | None = None
    nameservers: tuple[str, ...] = ()

    @classmethod
    def unknown(cls) -> RegistrationFacts:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            "ageDays": self.age_days,
            "registrar": self.registrar,
            "isPrivacyProtected": self.is_privacy_protected,
            "ipAddress": self.ip_address,
            "createdDate": self.created_date,
            "updatedDate": self.updated_date,
            "expiryDate": self.expiry_date,
            "nameservers": list(self.nameservers),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RegistrationFacts:
        return cls(
            age_days=data.get("ageDays"),
            registrar=data.get("registrar"),
            is_privacy_protected=bool(data.get("isPrivacyProtected")),
            ip_address=data.get("ipAddress"),
            created_date=data.get("createdDate"),
            updated_date=data.get("updatedDate"),
            expiry_date=data.get("expiryDate"),
            nameservers=tuple(data.get("nameservers") or ()),
        )


@dataclass(frozen=True)
class ReputationScan:
    """Multi-engine scan result. Counts are None when no report is available."""

    malicious_count: int | None = None
    suspicious_count: int | None = None
    harmless_count: int | None = None

    @classmethod
    def unknown(cls) -> ReputationScan:
        return cls()


@dataclass(frozen=True)
class BlocklistResult:
    status: BlockStatus = BlockStatus.UNKNOWN
    threats: tuple[str, ...] = ()

    @classmethod
    def unknown(cls) -> BlocklistResult:
        return cls()


@dataclass(frozen=True)
class AbuseReport:
    confidence: int | None = None
    total_reports: int | None = None

    @classmethod
    def unknown(cls) -> AbuseReport:
        return cls()


@dataclass(frozen=True)
class ReputationFacts:
    """Merged threat-feed facts: reputation scan, blocklist and IP abuse."""

    malicious_count: int | None = None
    suspicious_count: int | None = None
    harmless_count: int | None = None
    block_status: BlockStatus = BlockStatus.UNKNOWN
    blocklist_threats: tuple[str, ...] = ()
    abuse_confidence: int | None = None
    abuse_total_reports: int | None = None

    @classmethod
    def merge(cls, scan: ReputationScan, blocklist: BlocklistResult, abuse: AbuseReport) -> ReputationFacts:
        return cls(
            malicious_count=scan.malicious_count,
            suspicious_count=scan.suspicious_count,
            harmless_count=scan.harmless_count,
            block_status=blocklist.status,
            blocklist_threats=blocklist.threats,
            abuse_confidence=abuse.confidence,
            abuse_total_reports=abuse.total_reports,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "maliciousCount": self.malicious_count,
            "suspiciousCount": self.suspicious_count,
            "harmlessCount": self.harmless_count,
            "blockStatus": self.block_status.value,
            "blocklistThreats": list(self.blocklist_threats),
            "abuseConfidence": self.abuse_confidence,
            "abuseTotalReports": self.abuse_total_reports,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReputationFacts:
        return cls(
            malicious_count=data.get("maliciousCount"),
            suspicious_count=data.get("suspiciousCount"),
            harmless_count=data.get("harmlessCount"),
            block_status=BlockStatus(data.get("blockStatus") or BlockStatus.UNKNOWN.value),
            blocklist_threats=tuple(data.get("blocklistThreats") or ()),
            abuse_confidence=data.get("abuseConfidence"),
            abuse_total_reports=data.get("abuseTotalReports"),
        )


@dataclass(frozen=True)
class EvidenceRecord:
    """Per-analysis facts from all collectors, merged read-only."""

    url: str
    domain: str
    certificate: CertificateFacts = field(default_factory=CertificateFacts.unavailable)
    registration: RegistrationFacts = field(default_factory=RegistrationFacts.unknown)
    reputation: ReputationFacts = field(default_factory=ReputationFacts)
    sources: Mapping[str, SourceStatus] = field(default_factory=dict)
    collected_at: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "domain": self.domain,
            "certificate": self.certificate.to_dict(),
            "registration": self.registration.to_dict(),
            "reputation": self.reputation.to_dict(),
            "sources": {name: status.value for name, status in self.sources.items()},
            "collectedAt": self.collected_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EvidenceRecord:
        return cls(
            url=data["url"],
            domain=data["domain"],
            certificate=CertificateFacts.from_dict(data.get("certificate") or {}),
            registration=RegistrationFacts.from_dict(data.get("registration") or {}),
            reputation=ReputationFacts.from_dict(data.get("reputation") or {}),
            sources={name: SourceStatus(value) for name, value in (data.get("sources") or {}).items()},
            collected_at=data.get("collectedAt") or "",
        )


@dataclass(frozen=True)
class Verdict:
    """Verdict engine output. Immutable; cache hits return a modified copy."""

    trust_score: int
    confidence: Confidence
    classification: Classification
    summary: str
    indicators: tuple[str, ...]
    evidence: EvidenceRecord
    computed_at: str
    took_millis: int = 0
    served_from_cache: bool = False

    @property
    def is_threat(self) -> bool:
        return self.classification is Classification.DANGEROUS

    def as_cached(self, took_millis: int | None = None) -> Verdict:
        """Copy flagged as served from cache; the stored copy is never mutated."""
        if took_millis is None:
            return replace(self, served_from_cache=True)
        return replace(self, served_from_cache=True, took_millis=took_millis)

    def to_dict(self) -> dict[str, Any]:
        return {
            "trustScore": self.trust_score,
            "confidence": self.confidence.value,
            "classification": self.classification.value,
            "summary": self.summary,
            "indicators": list(self.indicators),
            "evidence": self.evidence.to_dict(),
            "computedAt": self.computed_at,
            "tookMillis": self.took_millis,
            "servedFromCache": self.served_from_cache,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Verdict:
        return cls(
            trust_score=int(data["trustScore"]),
            confidence=Confidence(data["confidence"]),
            classification=Classification(data["classification"]),
            summary=data["summary"],
            indicators=tuple(data.get("indicators") or ()),
            evidence=EvidenceRecord.from_dict(data["evidence"]),
            computed_at=data.get("computedAt") or "",
            took_millis=int(data.get("tookMillis") or 0),
            served_from_cache=bool(data.get("servedFromCache")),
        )
