"""Period report endpoints.

POST /api/reports/health-score  health score plus sleep/exercise analysis

Entries, habits, goals and meals default to what the journal repository
holds, so a client may send only the period.
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from journalq.api.routes.analyze import get_repository
from journalq.journal.reports import build_period_report, render_text_report
from journalq.observability.telemetry import counter
from journalq.storage.repository import JournalRepository

router = APIRouter(prefix="/api/reports", tags=["reports"])


class HealthScoreRequest(BaseModel):
    """Inputs for one period report; omitted lists come from storage."""

    period: Literal["week", "month", "quarter"] = "month"
    entries: list[dict[str, Any]] | None = None
    habits: list[dict[str, Any]] | None = None
    goals: list[dict[str, Any]] | None = None
    meals: list[dict[str, Any]] | None = Field(default=None)


@router.post("/health-score", response_model=None)
async def health_score_report(
    request: HealthScoreRequest,
    output: Literal["json", "text"] = Query(default="json", alias="format"),
    repository: JournalRepository = Depends(get_repository),
) -> dict[str, Any] | PlainTextResponse:
    """
    Build the period report and store its health score.

    `?format=text` returns the plain-text export instead of JSON.
    """
    goals_data = repository.get_goals()
    report = build_period_report(
        entries=request.entries if request.entries is not None else repository.get_entries(),
        habits=request.habits if request.habits is not None else goals_data["habits"],
        goals=request.goals if request.goals is not None else goals_data["goals"],
        meals=request.meals if request.meals is not None else repository.get_nutrition()["meals"],
        period=request.period,
    )
    counter("api.reports.health_score")

    repository.save_health_score(
        report.health_score,
        details={
            "sleep": report.sleep.consistency,
            "exercise": report.exercise.consistency,
            "habits": report.active_habits,
        },
    )

    if output == "text":
        return PlainTextResponse(render_text_report(report))
    return report.to_dict()
