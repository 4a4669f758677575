"""
Batch aggregation over per-entry analysis results.

Pure functions: the same results always produce the same AggregateReport
(apart from generated_at). Failures count toward totals but contribute no
metrics.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime

from journalq.journal.models import AggregateReport, EntryResult, Trend, TrendSummary

TREND_THRESHOLD_PCT = 10.0

MOOD_VALUES: dict[str, int] = {"positive": 3, "neutral": 2, "negative": 1}


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_trend(values: Sequence[float]) -> Trend:
    """
    Classify a time-ordered series by comparing the means of its two halves.

    The earlier half takes floor(n/2) points, the later half the rest. A change
    above +10% is improving, below -10% declining, otherwise stable. Fewer than
    two points is stable. When the earlier mean is 0 the direction follows the
    sign of the later mean.
    """
    if len(values) < 2:
        return Trend.STABLE

    split = len(values) // 2
    first_avg = _mean(values[:split])
    second_avg = _mean(values[split:])

    if first_avg == 0:
        if second_avg > 0:
            return Trend.IMPROVING
        if second_avg < 0:
            return Trend.DECLINING
        return Trend.STABLE

    change_pct = (second_avg - first_avg) / abs(first_avg) * 100
    if change_pct > TREND_THRESHOLD_PCT:
        return Trend.IMPROVING
    if change_pct < -TREND_THRESHOLD_PCT:
        return Trend.DECLINING
    return Trend.STABLE


def find_most_common(values: Iterable[str]) -> list[str]:
    """Distinct values by descending count; ties keep first-seen order."""
    # Counter preserves insertion order and sorted() is stable
    counts = Counter(values)
    return [value for value, _ in sorted(counts.items(), key=lambda item: -item[1])]


def mood_trend(moods: Iterable[str | None]) -> Trend:
    """Trend over moods mapped positive=3, neutral=2, negative=1; unmapped values dropped."""
    numeric = [MOOD_VALUES[mood] for mood in moods if mood in MOOD_VALUES]
    return calculate_trend(numeric)


def _time_ordered(successes: list[EntryResult]) -> list[EntryResult]:
    if successes and all(result.timestamp is not None for result in successes):
        return sorted(successes, key=lambda result: result.timestamp)
    return successes


def aggregate(
    results: Sequence[EntryResult],
    clock: Callable[[], datetime] | None = None,
) -> AggregateReport:
    """
    Build the AggregateReport for one batch.

    Missing sleep/exercise count as 0 in the means (they stay in the
    denominator). A missing energy counts as "medium".

    Args:
        results: Per-entry results in submission order
        clock: Optional clock for generated_at (tests)
    """
    successes = [result for result in results if result.succeeded]
    ordered = _time_ordered(successes)
    metrics = [result.analysis.metrics for result in ordered if result.analysis is not None]

    sleep_series = [m.sleep_hours or 0 for m in metrics]
    exercise_series = [m.exercise_minutes or 0 for m in metrics]

    symptoms = [tag for m in metrics for tag in m.symptoms]
    moods = find_most_common(m.mood.value for m in metrics)
    energies = find_most_common(m.energy.value if m.energy else "medium" for m in metrics)

    trends = TrendSummary(
        sleep=calculate_trend(sleep_series),
        exercise=calculate_trend(exercise_series),
        mood=mood_trend(m.mood.value for m in metrics),
    )

    return AggregateReport(
        total_entries=len(results),
        success_count=len(successes),
        failure_count=len(results) - len(successes),
        average_sleep=_mean(sleep_series),
        average_exercise=_mean(exercise_series),
        common_symptoms=tuple(find_most_common(symptoms)),
        predominant_mood=moods[0] if moods else None,
        predominant_energy=energies[0] if energies else None,
        trends=trends,
        generated_at=clock() if clock else datetime.now(UTC),
    )
