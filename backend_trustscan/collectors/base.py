"""
Collector contract: given a domain, URL or IP, return a best-effort typed
fact set and never raise past collect().

Subclasses implement _fetch() (vendor call plus typed extraction) and
unknown() (the fact set reported when nothing usable came back).
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

import httpx

from backend_trustscan.core.exceptions import CollectorError
from backend_trustscan.trustscan_logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SEC = 8.0
USER_AGENT = "backend-trustscan/0.1"


class Collector(ABC, Generic[T]):
    """One independent intelligence source."""

    name = "collector"

    def __init__(self, client: httpx.AsyncClient, *, timeout_sec: float = DEFAULT_TIMEOUT_SEC) -> None:
        self._client = client
        self._timeout_sec = timeout_sec

    @property
    def configured(self) -> bool:
        """False when a required credential is missing; collect() then skips I/O."""
        return True

    @abstractmethod
    def unknown(self) -> T:
        ...

    @abstractmethod
    async def _fetch(self, target: str) -> T:
        ...

    def is_usable(self, facts: T) -> bool:
        """True when the fact set carries real data rather than the unknown state."""
        return facts != self.unknown()

    async def collect(self, target: str) -> T:
        if not self.configured:
            logger.debug("collector_unconfigured", source=self.name)
            return self.unknown()
        try:
            facts = await asyncio.wait_for(self._fetch(target), timeout=self._timeout_sec)
        except asyncio.TimeoutError:
            logger.warning("collector_timeout", source=self.name, target=target, timeout_sec=self._timeout_sec)
            return self.unknown()
        except Exception as e:
            logger.warning("collector_failed", source=self.name, target=target, error=str(e), error_type=type(e).__name__)
            return self.unknown()
        logger.debug("collector_done", source=self.name, target=target)
        return facts

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        response = await self._client.get(url, **kwargs)
        return self._json_or_raise(response)

    async def _post_json(self, url: str, **kwargs: Any) -> Any:
        response = await self._client.post(url, **kwargs)
        return self._json_or_raise(response)

    def _json_or_raise(self, response: httpx.Response) -> Any:
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            raise CollectorError(self.name, "response is not JSON") from e
