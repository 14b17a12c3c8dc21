"""
Registration-data lookup via RDAP.

Registration event -> created date and age in whole days. An absent or
unparsable creation date leaves age_days None (unknown), never 0.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from backend_trustscan.analysis_engine.models import SOURCE_REGISTRATION, RegistrationFacts
from backend_trustscan.collectors.base import DEFAULT_TIMEOUT_SEC, Collector

RDAP_URL_TEMPLATE = "https://rdap.org/domain/{domain}"

PRIVACY_PATTERN = re.compile(
    r"redacted|privacy|private|proxy|whoisguard|withheld|domains by proxy|contact privacy",
    re.IGNORECASE,
)


def parse_rdap_datetime(value: Any) -> datetime | None:
    """Parse an RDAP eventDate (ISO 8601, usually with Z). Returns aware UTC datetime or None."""
    if not isinstance(value, str) or not value.strip():
        return None
    raw = value.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        try:
            parsed = datetime.strptime(raw[:10], "%Y-%m-%d")
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _vcard_field(entity: dict[str, Any], field_name: str) -> str | None:
    vcard = entity.get("vcardArray")
    if not isinstance(vcard, list) or len(vcard) < 2 or not isinstance(vcard[1], list):
        return None
    for item in vcard[1]:
        if isinstance(item, list) and len(item) >= 4 and item[0] == field_name:
            value = item[3]
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def _entity_names(entities: Any, role: str) -> list[str]:
    names: list[str] = []
    if not isinstance(entities, list):
        return names
    for entity in entities:
        if not isinstance(entity, dict):
            continue
        roles = entity.get("roles") or []
        if role in roles:
            fn = _vcard_field(entity, "fn") or _vcard_field(entity, "org")
            if fn:
                names.append(fn)
        names.extend(_entity_names(entity.get("entities"), role))
    return names


def _redacts_registrant_identity(redacted: Any) -> bool:
    """True when an RFC 9537 redaction covers the registrant name or organization."""
    if not isinstance(redacted, list):
        return False
    for item in redacted:
        if not isinstance(item, dict):
            continue
        name = item.get("name") or {}
        label = str(name.get("type") or name.get("description") or "") if isinstance(name, dict) else ""
        label = label.lower()
        if "registrant" in label and ("name" in label or "organization" in label):
            return True
    return False


def _is_privacy_protected(payload: dict[str, Any]) -> bool:
    # Policy redaction (GDPR, registry) alone is not an opt-in privacy service.
    registrants = _entity_names(payload.get("entities"), "registrant")
    if any(PRIVACY_PATTERN.search(name) for name in registrants):
        return True
    if not registrants and _redacts_registrant_identity(payload.get("redacted")):
        return True
    for remark in payload.get("remarks") or []:
        if isinstance(remark, dict) and PRIVACY_PATTERN.search(str(remark.get("title") or "")):
            return True
    return False


def parse_rdap_domain(payload: Any, now: datetime) -> RegistrationFacts:
    """Typed registration facts from an RDAP domain object."""
    if not isinstance(payload, dict):
        return RegistrationFacts.unknown()

    events: dict[str, datetime] = {}
    for event in payload.get("events") or []:
        if not isinstance(event, dict):
            continue
        action = str(event.get("eventAction") or "").strip().lower()
        when = parse_rdap_datetime(event.get("eventDate"))
        if action and when is not None:
            events[action] = when

    created = events.get("registration")
    age_days = None
    if created is not None:
        age_days = max(0, (now - created).days)
    updated = events.get("last changed")
    expiry = events.get("expiration")

    registrars = _entity_names(payload.get("entities"), "registrar")
    nameservers = tuple(
        str(ns.get("ldhName")).lower()
        for ns in payload.get("nameservers") or []
        if isinstance(ns, dict) and ns.get("ldhName")
    )
    return RegistrationFacts(
        age_days=age_days,
        registrar=registrars[0] if registrars else None,
        is_privacy_protected=_is_privacy_protected(payload),
        created_date=created.isoformat() if created else None,
        updated_date=updated.isoformat() if updated else None,
        expiry_date=expiry.isoformat() if expiry else None,
        nameservers=nameservers,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RegistrationCollector(Collector[RegistrationFacts]):
    name = SOURCE_REGISTRATION

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        super().__init__(client, timeout_sec=timeout_sec)
        self._clock = clock

    def unknown(self) -> RegistrationFacts:
        return RegistrationFacts.unknown()

    async def _fetch(self, target: str) -> RegistrationFacts:
        payload = await self._get_json(
            RDAP_URL_TEMPLATE.format(domain=target),
            headers={"Accept": "application/rdap+json"},
            follow_redirects=True,
        )
        return parse_rdap_domain(payload, self._clock())
