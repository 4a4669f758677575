"""
Local insight strategy.

Deterministic insights and suggestions derived purely from Metrics. Used when
AI enrichment is unavailable or has exhausted its retries. The categories it
covers are not guaranteed to match what the LLM produces.
"""

from __future__ import annotations

from journalq.journal.models import AnalysisSource, EnrichedAnalysis, Energy, Metrics, Mood

HEALTHY_SLEEP_HOURS = 7
DAILY_EXERCISE_MINUTES = 30


def generate_local_insights(metrics: Metrics) -> list[str]:
    insights: list[str] = []

    sleep = metrics.sleep_hours
    if sleep is not None and sleep > 0:
        quality = "healthy" if sleep >= HEALTHY_SLEEP_HOURS else "below recommended"
        advice = (
            "Consider aiming for 7-9 hours for optimal health."
            if sleep < HEALTHY_SLEEP_HOURS
            else "Maintain this healthy sleep pattern."
        )
        insights.append(f"Sleep duration is {sleep:g} hours ({quality}). {advice}")

    exercise = metrics.exercise_minutes
    if exercise is not None and exercise > 0:
        level = "meeting" if exercise >= DAILY_EXERCISE_MINUTES else "below"
        advice = (
            "Aim for at least 30 minutes of daily activity."
            if exercise < DAILY_EXERCISE_MINUTES
            else "Keep up this good level of activity."
        )
        insights.append(
            f"Exercise duration is {exercise} minutes ({level} recommended levels). {advice}"
        )

    energy = metrics.energy.value if metrics.energy else "unreported"
    wellbeing = f"Overall wellbeing shows {metrics.mood.value} mood with {energy} energy levels"
    if metrics.symptoms:
        wellbeing += f". Health concerns noted: {', '.join(metrics.symptoms)}"
    else:
        wellbeing += " with no reported symptoms."
    insights.append(wellbeing)

    return insights


def generate_local_suggestions(metrics: Metrics) -> list[str]:
    suggestions: list[str] = []

    # A missing reading counts as below target
    if (metrics.sleep_hours or 0) < HEALTHY_SLEEP_HOURS:
        suggestions.append("Establish a consistent bedtime routine and aim for 7-9 hours of sleep")

    if (metrics.exercise_minutes or 0) < DAILY_EXERCISE_MINUTES:
        suggestions.append(
            "Start with short exercise sessions and gradually work up to 30 minutes daily"
        )

    if metrics.symptoms:
        suggestions.append(
            "Monitor your symptoms and consider consulting a healthcare provider if they persist"
        )

    if len(suggestions) < 2:
        if metrics.energy == Energy.LOW:
            suggestions.append("Try to identify and address factors affecting your energy levels")
        elif metrics.mood == Mood.NEGATIVE:
            suggestions.append(
                "Consider activities that boost your mood like exercise or socializing"
            )
        else:
            suggestions.append(
                "Maintain your current healthy routines and track any changes in your wellbeing"
            )

    return suggestions


def local_analysis(metrics: Metrics) -> EnrichedAnalysis:
    """Fallback EnrichedAnalysis built without any external call."""
    return EnrichedAnalysis(
        metrics=metrics,
        insights=tuple(generate_local_insights(metrics)),
        suggestions=tuple(generate_local_suggestions(metrics)),
        cached=False,
        source=AnalysisSource.LOCAL,
    )
