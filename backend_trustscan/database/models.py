"""
Domain models for database entities.

One row per completed analysis in scan_history; the serialized verdict is
kept whole in scan_details so a cache hit can rebuild it exactly.
No ORM coupling so backends stay swappable.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

SCAN_TYPE_COMPREHENSIVE = "comprehensive"
SYSTEM_USER_ID = "00000000-0000-0000-0000-000000000000"


@dataclass
class ScanRecord:
    """Single scan_history row."""

    id: int | None
    scanned_url: str
    trust_score: int
    threat_level: str
    """Lowercased classification: safe, caution or dangerous."""
    is_threat: bool
    scan_details: str
    """JSON of the full verdict (camelCase keys)."""
    created_at: float
    """Unix timestamp (seconds) when the row was written."""
    scan_type: str = SCAN_TYPE_COMPREHENSIVE
    user_id: str = SYSTEM_USER_ID

    def details(self) -> dict[str, Any]:
        return json.loads(self.scan_details)

    def to_summary(self) -> dict[str, Any]:
        """History view without the verdict payload."""
        return {
            "id": self.id,
            "scannedUrl": self.scanned_url,
            "trustScore": self.trust_score,
            "threatLevel": self.threat_level,
            "isThreat": self.is_threat,
            "scanType": self.scan_type,
            "createdAt": self.created_at,
        }
