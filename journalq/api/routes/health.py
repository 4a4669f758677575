"""Health check endpoint for the journal analysis API.

Provides a liveness probe; never rate limited.
"""

from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Request

from journalq.config import APP_VERSION
from journalq.observability.telemetry import snapshot_counters

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(request: Request) -> dict[str, Any]:
    """Health check endpoint.

    Returns service status, version, and credential readiness for
    Vertex AI / Gemini (does not make an API call, only checks presence).
    """
    has_api_key = bool(os.getenv("GOOGLE_API_KEY"))
    has_project = bool(os.getenv("GOOGLE_CLOUD_PROJECT"))
    engine = request.app.state.engine

    return {
        "status": "healthy",
        "service": "Journal Analysis API",
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
        "llm": {
            "ready": has_api_key or has_project,
            "enabled": engine.client.enabled,
            "google_api_key": has_api_key,
            "google_cloud_project": has_project,
        },
        "cache": {
            "entries": len(engine.cache),
            **snapshot_counters("cache."),
        },
        "rate_limiter": {"active_callers": engine.rate_limiter.active_callers()},
    }
