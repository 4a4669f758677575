"""
Module: models
Purpose: Shared domain types for the journal analysis pipeline.
Dependencies: none (leaf module)

Stable import boundary: these types flow between extractor, enrichment,
aggregator, health score, reports, and the API layer. Keeping them in a leaf
module prevents circular imports.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def parse_timestamp(value: Any) -> datetime | None:
    """Accept datetimes, ISO strings and epoch milliseconds; anything unparseable is None."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def as_number(value: Any, default: float = 0.0) -> float:
    """Finite float from a stored value; malformed or missing values become default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def as_label(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Mood(str, Enum):
    """Mood category detected by the local extractor."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Energy(str, Enum):
    """Energy level detected by the local extractor."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Trend(str, Enum):
    """Direction of a numeric series across its two time halves."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class AnalysisSource(str, Enum):
    """Which insight strategy produced an EnrichedAnalysis."""

    AI = "ai"
    LOCAL = "local"


# ---------------------------------------------------------------------------
# Entry and extracted metrics
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JournalEntry:
    """One journal submission as received; the service validates content."""

    id: Any
    content: Any
    timestamp: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JournalEntry:
        return cls(
            id=data.get("id"),
            content=data.get("content", ""),
            timestamp=parse_timestamp(data.get("timestamp") or data.get("date")),
        )


@dataclass(frozen=True)
class Metrics:
    """Health signals extracted from one entry. Value object, never mutated."""

    sleep_hours: float | None
    exercise_minutes: int | None
    mood: Mood
    energy: Energy | None
    symptoms: tuple[str, ...]
    extracted_at: datetime

    def signals(self) -> dict[str, Any]:
        """The extracted signals without the extraction instant."""
        return {
            "sleep": self.sleep_hours,
            "exercise": self.exercise_minutes,
            "mood": self.mood.value,
            "energy": self.energy.value if self.energy else None,
            "symptoms": list(self.symptoms),
        }

    def fingerprint(self) -> str:
        """Canonical JSON of the signals, stable across extractions of the same text."""
        return json.dumps(self.signals(), sort_keys=True, separators=(",", ":"))

    def to_dict(self) -> dict[str, Any]:
        data = self.signals()
        data["timestamp"] = self.extracted_at.isoformat()
        return data


# ---------------------------------------------------------------------------
# Enrichment result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EnrichedAnalysis:
    """Metrics plus narrative insights and suggestions."""

    metrics: Metrics
    insights: tuple[str, ...]
    suggestions: tuple[str, ...]
    cached: bool = False
    source: AnalysisSource = AnalysisSource.AI

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": self.metrics.to_dict(),
            "insights": list(self.insights),
            "suggestions": list(self.suggestions),
            "cached": self.cached,
            "source": self.source.value,
        }


@dataclass
class EntryResult:
    """Outcome of analyzing one entry inside a batch: an analysis or an error descriptor."""

    id: Any
    analysis: EnrichedAnalysis | None = None
    error: str | None = None
    details: str | None = None
    timestamp: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.analysis is not None and self.error is None

    @classmethod
    def failed(cls, entry_id: Any, error: str, details: str) -> EntryResult:
        return cls(id=entry_id, error=error, details=details)

    def to_dict(self) -> dict[str, Any]:
        if not self.succeeded:
            return {"id": self.id, "error": self.error, "details": self.details}
        assert self.analysis is not None
        return {"id": self.id, **self.analysis.to_dict()}


# ---------------------------------------------------------------------------
# Batch aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrendSummary:
    sleep: Trend = Trend.STABLE
    exercise: Trend = Trend.STABLE
    mood: Trend = Trend.STABLE

    def to_dict(self) -> dict[str, str]:
        return {"sleep": self.sleep.value, "exercise": self.exercise.value, "mood": self.mood.value}


@dataclass(frozen=True)
class AggregateReport:
    """Derived statistics over a batch; recomputed on every aggregation call."""

    total_entries: int
    success_count: int
    failure_count: int
    average_sleep: float
    average_exercise: float
    common_symptoms: tuple[str, ...]
    predominant_mood: str | None
    predominant_energy: str | None
    trends: TrendSummary
    generated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEntries": self.total_entries,
            "successfulAnalyses": self.success_count,
            "failedAnalyses": self.failure_count,
            "averageMetrics": {
                "averageSleep": self.average_sleep,
                "averageExercise": self.average_exercise,
                "commonSymptoms": list(self.common_symptoms),
                "predominantMood": self.predominant_mood,
                "predominantEnergy": self.predominant_energy,
            },
            "trends": self.trends.to_dict(),
            "analysisTimestamp": self.generated_at.isoformat(),
        }


# ---------------------------------------------------------------------------
# Health score inputs and output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HealthRecord:
    """Per-entry inputs to the health score; labels default where the entry is silent."""

    date: datetime | None = None
    sleep_hours: float = 0.0
    sleep_quality: str = "normal"
    exercise_minutes: float = 0.0
    exercise_intensity: str = "moderate"
    mood: str = "neutral"
    water_intake_ml: float = 0.0
    meals_logged: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HealthRecord:
        """
        Build from a stored entry: top-level fields win over nested metrics.

        Malformed values fall back to the field defaults; stored entries
        carry no schema version.
        """
        metrics = data.get("metrics")
        if not isinstance(metrics, dict):
            metrics = {}
        return cls(
            date=parse_timestamp(data.get("date") or data.get("timestamp")),
            sleep_hours=as_number(metrics.get("sleep")),
            sleep_quality=as_label(metrics.get("sleepQuality"), "normal"),
            exercise_minutes=as_number(metrics.get("exercise")),
            exercise_intensity=as_label(metrics.get("exerciseIntensity"), "moderate"),
            mood=as_label(data.get("mood"), "") or as_label(metrics.get("mood"), "neutral"),
            water_intake_ml=as_number(metrics.get("waterIntake")),
            meals_logged=int(as_number(metrics.get("mealsLogged"))),
        )

    @classmethod
    def from_analysis(cls, analysis: EnrichedAnalysis, date: datetime | None = None) -> HealthRecord:
        metrics = analysis.metrics
        return cls(
            date=date or metrics.extracted_at,
            sleep_hours=metrics.sleep_hours or 0.0,
            exercise_minutes=metrics.exercise_minutes or 0,
            mood=metrics.mood.value,
        )


@dataclass(frozen=True)
class HabitRecord:
    name: str = ""
    streak: int = 0
    completed_days: int = 0
    total_days: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HabitRecord:
        return cls(
            name=str(data.get("name", "")),
            streak=int(as_number(data.get("streak"))),
            completed_days=int(as_number(data.get("completedDays"))),
            total_days=int(as_number(data.get("totalDays"))),
        )


@dataclass(frozen=True)
class ScoreComponents:
    sleep: float = 0.0
    exercise: float = 0.0
    mood: float = 0.0
    habits: float = 0.0
    nutrition: float = 0.0

    def to_dict(self) -> dict[str, int]:
        return {
            "sleep": round(self.sleep),
            "exercise": round(self.exercise),
            "mood": round(self.mood),
            "habits": round(self.habits),
            "nutrition": round(self.nutrition),
        }


@dataclass(frozen=True)
class HealthScore:
    """Composite 0-100 score for a report period."""

    value: int
    components: ScoreComponents = field(default_factory=ScoreComponents)

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.value, "components": self.components.to_dict()}
