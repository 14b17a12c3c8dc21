"""
Time-bounded verdict cache over the scan history table.

Keyed by the exact URL string; append-only, the freshest row within the TTL
wins. Expired rows are never served and never deleted here.
"""

from __future__ import annotations

import json
import time
from typing import Callable

from backend_trustscan.analysis_engine.models import Verdict
from backend_trustscan.database.database import Database
from backend_trustscan.database.models import SCAN_TYPE_COMPREHENSIVE, SYSTEM_USER_ID, ScanRecord
from backend_trustscan.trustscan_logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SEC = 3600


class ResultCache:
    def __init__(
        self,
        db: Database,
        *,
        ttl_sec: float = DEFAULT_TTL_SEC,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db = db
        self._ttl_sec = ttl_sec
        self._clock = clock

    def get(self, url: str) -> Verdict | None:
        """Freshest verdict for url within the TTL, flagged served_from_cache; None on miss."""
        record = self._db.query_latest_within_ttl(url, self._ttl_sec, self._clock())
        if record is None:
            return None
        try:
            verdict = Verdict.from_dict(record.details())
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("cache_entry_corrupt", url=url, row_id=record.id, error=str(e))
            return None
        return verdict.as_cached()

    def put(self, url: str, verdict: Verdict) -> int:
        """Append the verdict for url. Returns row id."""
        stored = verdict.to_dict()
        stored["servedFromCache"] = False
        record = ScanRecord(
            id=None,
            scanned_url=url,
            trust_score=verdict.trust_score,
            threat_level=verdict.classification.value.lower(),
            is_threat=verdict.is_threat,
            scan_type=SCAN_TYPE_COMPREHENSIVE,
            scan_details=json.dumps(stored, sort_keys=True),
            user_id=SYSTEM_USER_ID,
            created_at=self._clock(),
        )
        row_id = self._db.insert_scan(record)
        logger.debug("cache_put", url=url, row_id=row_id, trust_score=verdict.trust_score)
        return row_id
