"""
FastAPI server: URL trust analysis API.

Exposes POST /api/analyze (verdict envelope), GET /api/scans (scan history)
and GET /health. The lifespan owns the shared httpx client, the collectors,
the database and the analysis service. Config via env (see config.settings).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend_trustscan import __version__
from backend_trustscan.analysis_engine.aggregator import Aggregator
from backend_trustscan.api_server.handler import SecurityAnalysisService
from backend_trustscan.api_server.routes import router as analysis_router
from backend_trustscan.collectors import build_collectors, new_http_client
from backend_trustscan.config import Settings, get_settings
from backend_trustscan.database import ResultCache, get_database
from backend_trustscan.trustscan_logging import get_logger

logger = get_logger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


def build_service(settings: Settings, client: Any, db: Any) -> SecurityAnalysisService:
    """Wire collectors, aggregator and cache into one service."""
    collectors = build_collectors(settings, client)
    cache = ResultCache(db, ttl_sec=settings.cache_ttl_sec)
    return SecurityAnalysisService(Aggregator(collectors), cache)


# -----------------------------------------------------------------------------
# Lifespan: shared HTTP client and database for all requests
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the shared client, database and service; close the client on shutdown."""
    settings = get_settings()
    db = get_database(settings.db_path)
    client = new_http_client(settings)
    app.state.db = db
    app.state.service = build_service(settings, client, db)
    logger.info(
        "api_started",
        db_path=str(settings.db_path),
        cache_ttl_sec=settings.cache_ttl_sec,
        blocklist_provider=settings.blocklist_provider,
    )
    try:
        yield
    finally:
        await client.aclose()
        logger.info("api_stopped")


# -----------------------------------------------------------------------------
# App and routes
# -----------------------------------------------------------------------------

app = FastAPI(
    title="Backend TrustScan API",
    description="URL and domain trust analysis: score, confidence, classification and indicators.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=CORS_ALLOW_HEADERS,
)

app.include_router(analysis_router, prefix="/api")


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}


@app.exception_handler(HTTPException)
def http_exception_handler(request: Any, exc: HTTPException) -> JSONResponse:
    """Consistent JSON error response for HTTPException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
