"""
FastAPI router: POST /api/analyze, GET /api/scans.

Both analysis outcomes return HTTP 200 with the status envelope; clients
branch on "status", not on the HTTP code.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend_trustscan.api_server.handler import SecurityAnalysisService
from backend_trustscan.database import Database
from backend_trustscan.trustscan_logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["analysis"])

MAX_HISTORY_LIMIT = 100


class AnalyzeResponse(BaseModel):
    """Envelope: data on SUCCESS, message on ERROR."""

    status: Literal["SUCCESS", "ERROR"]
    data: dict[str, Any] | None = Field(None, description="Verdict (camelCase keys)")
    message: str | None = Field(None, description="Error message")


class ScanHistoryEntry(BaseModel):
    id: int | None
    scannedUrl: str
    trustScore: int
    threatLevel: str
    isThreat: bool
    scanType: str
    createdAt: float


class ScanHistoryResponse(BaseModel):
    url: str
    scans: list[ScanHistoryEntry] = Field(default_factory=list)


def get_service(request: Request) -> SecurityAnalysisService:
    """Dependency: app-scoped analysis service built in the lifespan."""
    return request.app.state.service


def get_db(request: Request) -> Database:
    """Dependency: app-scoped Database built in the lifespan."""
    return request.app.state.db


ANALYZE_REQUEST_SCHEMA = {
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "properties": {"url": {"type": "string", "description": "Absolute http(s) URL to analyze"}},
            }
        }
    }
}


async def _url_from_body(request: Request) -> Any:
    """The "url" member of a JSON object body; None for anything else."""
    try:
        payload = await request.json()
    except ValueError as e:
        logger.info("analyze_body_unreadable", error=str(e))
        return None
    if not isinstance(payload, dict):
        logger.info("analyze_body_not_object", body_type=type(payload).__name__)
        return None
    return payload.get("url")


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    openapi_extra={"requestBody": ANALYZE_REQUEST_SCHEMA},
)
async def analyze(
    request: Request,
    service: SecurityAnalysisService = Depends(get_service),
) -> JSONResponse:
    """Analyze one URL and return the verdict envelope (HTTP 200 for SUCCESS and ERROR)."""
    raw = await _url_from_body(request)
    envelope = await service.analyze(raw)
    return JSONResponse(status_code=200, content=envelope)


@router.get("/scans", response_model=ScanHistoryResponse)
def scan_history(
    url: str = Query(..., min_length=1, description="Exact URL as analyzed"),
    limit: int = Query(20, ge=1, le=MAX_HISTORY_LIMIT),
    db: Database = Depends(get_db),
) -> ScanHistoryResponse:
    """Recent scans for a URL, newest first."""
    records = db.get_scan_history(url.strip(), limit=limit)
    logger.debug("scan_history_read", url=url, count=len(records))
    return ScanHistoryResponse(
        url=url.strip(),
        scans=[ScanHistoryEntry(**r.to_summary()) for r in records],
    )
