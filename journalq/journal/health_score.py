"""
Composite 0-100 health score for a report period.

Score = weighted sum of five sub-scores (each 0-100):

    sleep      0.25   0.4 * consistency(target 8h) + 0.6 * quality
    exercise   0.25   0.4 * consistency(target 30min) + 0.3 * intensity + 0.3 * weekly volume
    mood       0.20   mean of the 5-point mood label map
    habits     0.15   mean of 0.6 * streak + 0.4 * completion rate
    nutrition  0.15   mean of 0.5 * water + 0.5 * meals

The final value is clamped to [0, 100] and rounded. An empty period scores 0,
and any computation error yields 0 instead of propagating.
"""

from __future__ import annotations

from collections.abc import Sequence

from journalq.config import (
    DAILY_WATER_GOAL_ML,
    EXERCISE_TARGET_MINUTES,
    SLEEP_TARGET_HOURS,
    WEEKLY_EXERCISE_GOAL_MINUTES,
)
from journalq.journal.models import HabitRecord, HealthRecord, HealthScore, ScoreComponents
from journalq.observability.logging import get_logger
from journalq.observability.telemetry import counter

logger = get_logger(__name__)

WEIGHTS: dict[str, float] = {
    "sleep": 0.25,
    "exercise": 0.25,
    "mood": 0.20,
    "habits": 0.15,
    "nutrition": 0.15,
}


def check_weights(weights: dict[str, float]) -> None:
    """Raise ValueError unless the weights sum to 1.0."""
    total = sum(weights.values())
    if abs(total - 1.0) > 1e-9:
        raise ValueError(f"Health score weights must sum to 1.0, got {total}")


check_weights(WEIGHTS)

SLEEP_QUALITY_SCORES = {"good": 100, "normal": 70, "poor": 40}
EXERCISE_INTENSITY_SCORES = {"high": 100, "moderate": 70, "low": 40}
MOOD_SCORES = {
    "very positive": 100,
    "positive": 80,
    "neutral": 60,
    "negative": 40,
    "very negative": 20,
}
DEFAULT_LABEL_SCORE = 70
DEFAULT_MOOD_SCORE = 60


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def consistency_score(values: Sequence[float], target: float | None = None) -> int:
    """
    0-100 penalty score for how steady a series is.

    With a target: 100 - 10 * mean |v - target|.
    Without one: 100 - sum(10 * |v_i - v_(i-1)|) / n.
    Fewer than two values scores 0.
    """
    if len(values) < 2:
        return 0

    count = len(values)
    if target is not None:
        penalty = sum(abs(v - target) for v in values) / count * 10
    else:
        penalty = sum(abs(values[i] - values[i - 1]) * 10 for i in range(1, count)) / count

    return round(_clamp(100 - penalty))


def label_average(labels: Sequence[str], table: dict[str, int], default: int) -> int:
    """Rounded mean of labels mapped through table; unknown labels take default."""
    if not labels:
        return 0
    return round(sum(table.get(label, default) for label in labels) / len(labels))


def sleep_subscore(records: Sequence[HealthRecord]) -> float:
    consistency = consistency_score([r.sleep_hours for r in records], SLEEP_TARGET_HOURS)
    quality = label_average(
        [r.sleep_quality for r in records], SLEEP_QUALITY_SCORES, DEFAULT_LABEL_SCORE
    )
    return 0.4 * consistency + 0.6 * quality


def weekly_exercise_average(records: Sequence[HealthRecord]) -> int:
    if not records:
        return 0
    return round(sum(r.exercise_minutes for r in records) / len(records) * 7)


def exercise_subscore(records: Sequence[HealthRecord]) -> float:
    consistency = consistency_score([r.exercise_minutes for r in records], EXERCISE_TARGET_MINUTES)
    intensity = label_average(
        [r.exercise_intensity for r in records], EXERCISE_INTENSITY_SCORES, DEFAULT_LABEL_SCORE
    )
    volume = min(100.0, weekly_exercise_average(records) / WEEKLY_EXERCISE_GOAL_MINUTES * 100)
    return 0.4 * consistency + 0.3 * intensity + 0.3 * volume


def mood_subscore(records: Sequence[HealthRecord]) -> float:
    if not records:
        return 0.0
    total = sum(MOOD_SCORES.get(r.mood.lower(), DEFAULT_MOOD_SCORE) for r in records)
    return total / len(records)


def habits_subscore(habits: Sequence[HabitRecord]) -> float:
    if not habits:
        return 0.0

    total = 0.0
    for habit in habits:
        streak = min(100.0, habit.streak * 10)
        completion = (
            habit.completed_days / max(1, habit.total_days) * 100
            if habit.completed_days and habit.total_days
            else 0.0
        )
        total += 0.6 * streak + 0.4 * completion
    return total / len(habits)


def nutrition_subscore(records: Sequence[HealthRecord]) -> float:
    if not records:
        return 0.0

    total = 0.0
    for record in records:
        water = min(100.0, record.water_intake_ml / DAILY_WATER_GOAL_ML * 100)
        meals = min(100.0, record.meals_logged * 25)
        total += 0.5 * water + 0.5 * meals
    return total / len(records)


def calculate_health_score(
    records: Sequence[HealthRecord],
    habits: Sequence[HabitRecord] | None = None,
) -> HealthScore:
    """
    Score one period.

    Args:
        records: Per-entry health inputs for the period
        habits: Externally tracked habits (may be empty)

    Returns:
        HealthScore; value 0 for an empty period or on any computation error

    Side Effects:
        - Increments telemetry counter (health_score.error) on failure
    """
    if not records:
        return HealthScore(value=0)

    try:
        components = ScoreComponents(
            sleep=sleep_subscore(records),
            exercise=exercise_subscore(records),
            mood=mood_subscore(records),
            habits=habits_subscore(habits or []),
            nutrition=nutrition_subscore(records),
        )
        weighted = (
            components.sleep * WEIGHTS["sleep"]
            + components.exercise * WEIGHTS["exercise"]
            + components.mood * WEIGHTS["mood"]
            + components.habits * WEIGHTS["habits"]
            + components.nutrition * WEIGHTS["nutrition"]
        )
        return HealthScore(value=round(_clamp(weighted)), components=components)
    except Exception as exc:
        counter("health_score.error")
        logger.error("Error calculating health score: %s", exc)
        return HealthScore(value=0)
