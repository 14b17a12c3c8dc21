"""
Analyze one URL from the command line and print the envelope as JSON.

Usage:
  python -m backend_trustscan.tools.analyze_url https://example.com
  python -m backend_trustscan.tools.analyze_url https://example.com --no-cache

Exit code 0 on SUCCESS, 1 on ERROR. Credentials come from .env / environment.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import replace
from pathlib import Path
from typing import Any

from backend_trustscan.analysis_engine.aggregator import Aggregator
from backend_trustscan.api_server.handler import STATUS_SUCCESS, SecurityAnalysisService
from backend_trustscan.collectors import build_collectors, new_http_client
from backend_trustscan.config import Settings, get_settings
from backend_trustscan.database import ResultCache, get_database
from backend_trustscan.trustscan_logging import get_logger

logger = get_logger(__name__)


async def run_analysis(url: str, settings: Settings, *, use_cache: bool = True) -> dict[str, Any]:
    """One analysis with a client scoped to this call."""
    async with new_http_client(settings) as client:
        cache = None
        if use_cache:
            cache = ResultCache(get_database(settings.db_path), ttl_sec=settings.cache_ttl_sec)
        service = SecurityAnalysisService(Aggregator(build_collectors(settings, client)), cache)
        return await service.analyze(url)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Compute a trust verdict for a URL.")
    ap.add_argument("url", help="Absolute http(s) URL")
    ap.add_argument("--no-cache", dest="no_cache", action="store_true", help="Skip the result cache (no read, no write)")
    ap.add_argument("--db", dest="db_path", default=None, help="SQLite path (overrides DB_PATH)")
    args = ap.parse_args(argv)

    settings = get_settings()
    if args.db_path:
        settings = replace(settings, db_path=Path(args.db_path))

    envelope = asyncio.run(run_analysis(args.url, settings, use_cache=not args.no_cache))
    print(json.dumps(envelope, indent=2))
    logger.debug("cli_analysis_done", url=args.url, status=envelope.get("status"))
    return 0 if envelope.get("status") == STATUS_SUCCESS else 1


if __name__ == "__main__":
    raise SystemExit(main())
