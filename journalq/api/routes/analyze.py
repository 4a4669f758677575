"""Journal analysis endpoints.

POST /api/analyze        batch of entries plus an aggregate report
POST /api/analyze/entry  one entry
HEAD /api/analyze        liveness probe with API version headers

Bodies are validated by the engine rather than by pydantic so that every
malformed request maps to a 400 with an error/details pair.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request, Response

from journalq.config import API_VERSION
from journalq.journal.service import AnalysisEngine
from journalq.observability.logging import get_logger
from journalq.observability.telemetry import counter
from journalq.storage.repository import JournalRepository
from journalq.utils.validators import ValidationError

router = APIRouter(prefix="/api", tags=["analyze"])
logger = get_logger(__name__)


def get_engine(request: Request) -> AnalysisEngine:
    return request.app.state.engine


def get_repository(request: Request) -> JournalRepository:
    return request.app.state.repository


async def read_json_body(request: Request) -> Any:
    """
    Parsed JSON body.

    Raises:
        ValidationError: If the body is not valid JSON
    """
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Invalid request body", "Request body must be valid JSON") from exc


@router.post("/analyze")
async def analyze_batch(
    request: Request,
    engine: AnalysisEngine = Depends(get_engine),
    repository: JournalRepository = Depends(get_repository),
) -> dict[str, Any]:
    """
    Analyze a batch of journal entries.

    Each entry is analyzed independently; an invalid or failing entry becomes
    an error descriptor in `results`. The aggregate report is stored as the
    latest analysis.
    """
    payload = await read_json_body(request)
    batch = await engine.analyze_batch(payload)
    counter("api.analyze.batch")

    body = batch.to_dict()
    repository.save_analysis(body["aggregateMetrics"])
    return body


@router.post("/analyze/entry")
async def analyze_entry(
    request: Request,
    engine: AnalysisEngine = Depends(get_engine),
    repository: JournalRepository = Depends(get_repository),
) -> dict[str, Any]:
    """Analyze one `{content, id}` entry and record it in the journal."""
    payload = await read_json_body(request)
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request body", "Request body must be a JSON object")

    result = await engine.analyze_single(payload)
    counter("api.analyze.single")

    repository.add_entry(
        {
            "id": result["id"],
            "content": payload["content"],
            "date": payload.get("date") or result["analyzedAt"],
            "mood": result["metrics"]["mood"],
            "metrics": result["metrics"],
        }
    )
    return result


@router.head("/analyze")
async def analyze_probe() -> Response:
    return Response(
        status_code=200,
        headers={
            "x-api-version": API_VERSION,
            "x-api-status": "healthy",
            "x-api-timestamp": datetime.now(UTC).isoformat(),
        },
    )
