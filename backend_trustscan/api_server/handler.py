"""
Boundary handler: validate input, consult the cache, run aggregation and the
verdict engine, and wrap the outcome in a status envelope.

The envelope is always {"status": "SUCCESS", "data": <verdict>} or
{"status": "ERROR", "message": <text>}; exceptions never leave analyze().
"""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Any, Callable

from backend_trustscan.analysis_engine.aggregator import Aggregator
from backend_trustscan.analysis_engine.models import Verdict
from backend_trustscan.analysis_engine.policy import DEFAULT_POLICY, ScoringPolicy
from backend_trustscan.analysis_engine.verdict_engine import compute_verdict
from backend_trustscan.core.exceptions import IntelligenceUnavailableError, InvalidURLError
from backend_trustscan.database.result_cache import ResultCache
from backend_trustscan.trustscan_logging import bind_url, get_logger
from backend_trustscan.utils.url_utils import validate_url

logger = get_logger(__name__)

STATUS_SUCCESS = "SUCCESS"
STATUS_ERROR = "ERROR"
GENERIC_ERROR_MESSAGE = "Security analysis failed due to an internal error. Please try again later."


def success_envelope(verdict: Verdict) -> dict[str, Any]:
    return {"status": STATUS_SUCCESS, "data": verdict.to_dict()}


def error_envelope(message: str) -> dict[str, Any]:
    return {"status": STATUS_ERROR, "message": message}


def _elapsed_ms(started: float, clock: Callable[[], float]) -> int:
    return max(0, int(round((clock() - started) * 1000)))


class SecurityAnalysisService:
    """One analysis per call; collaborators are injected so tests can fake them."""

    def __init__(
        self,
        aggregator: Aggregator,
        cache: ResultCache | None = None,
        policy: ScoringPolicy = DEFAULT_POLICY,
        *,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._aggregator = aggregator
        self._cache = cache
        self._policy = policy
        self._timer = timer

    def _cached(self, url: str, started: float) -> Verdict | None:
        if self._cache is None:
            return None
        try:
            hit = self._cache.get(url)
        except Exception as e:
            logger.warning("cache_read_failed", url=url, error=str(e))
            return None
        if hit is None:
            return None
        return hit.as_cached(took_millis=_elapsed_ms(started, self._timer))

    def _store(self, url: str, verdict: Verdict) -> None:
        if self._cache is None:
            return
        try:
            self._cache.put(url, verdict)
        except Exception as e:
            logger.warning("cache_write_failed", url=url, error=str(e))

    async def analyze(self, raw: Any) -> dict[str, Any]:
        """
        Analyze one URL and return the envelope.

        Invalid input is rejected before any collector runs. A cache hit
        within the TTL is returned with servedFromCache=true.
        """
        started = self._timer()
        try:
            url = validate_url(raw)
        except InvalidURLError as e:
            logger.info("analysis_rejected", error=e.message)
            return error_envelope(e.message)

        with bind_url(url):
            try:
                cached = self._cached(url, started)
                if cached is not None:
                    logger.info("analysis_cache_hit", took_millis=cached.took_millis)
                    return success_envelope(cached)

                evidence = await self._aggregator.gather(url)
                verdict = compute_verdict(evidence, self._policy)
                verdict = replace(verdict, took_millis=_elapsed_ms(started, self._timer))
                self._store(url, verdict)
            except IntelligenceUnavailableError as e:
                logger.warning("analysis_unavailable", error=e.message)
                return error_envelope(e.message)
            except Exception as e:
                logger.exception("analysis_failed", error=str(e), error_type=type(e).__name__)
                return error_envelope(GENERIC_ERROR_MESSAGE)

            logger.info(
                "analysis_complete",
                trust_score=verdict.trust_score,
                classification=verdict.classification.value,
                confidence=verdict.confidence.value,
                took_millis=verdict.took_millis,
            )
            return success_envelope(verdict)
