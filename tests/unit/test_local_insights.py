"""Tests for the deterministic local insight strategy"""

from __future__ import annotations

from journalq.journal.extractor import extract_metrics
from journalq.journal.insights import (
    generate_local_insights,
    generate_local_suggestions,
    local_analysis,
)
from journalq.journal.models import AnalysisSource


def test_healthy_day():
    metrics = extract_metrics("Slept 8 hours, ran 45 minutes, feeling great and energetic")

    insights = generate_local_insights(metrics)

    assert insights == [
        "Sleep duration is 8 hours (healthy). Maintain this healthy sleep pattern.",
        "Exercise duration is 45 minutes (meeting recommended levels). "
        "Keep up this good level of activity.",
        "Overall wellbeing shows positive mood with high energy levels "
        "with no reported symptoms.",
    ]
    assert generate_local_suggestions(metrics) == [
        "Maintain your current healthy routines and track any changes in your wellbeing"
    ]


def test_short_sleep_with_symptoms():
    metrics = extract_metrics("slept 5.5 hours, headache and feeling sad")

    insights = generate_local_insights(metrics)
    suggestions = generate_local_suggestions(metrics)

    assert insights[0].startswith("Sleep duration is 5.5 hours (below recommended)")
    assert insights[-1] == (
        "Overall wellbeing shows negative mood with unreported energy levels. "
        "Health concerns noted: headache"
    )
    assert len(suggestions) == 3
    assert suggestions[2].startswith("Monitor your symptoms")


def test_missing_readings_suggest_both_routines():
    metrics = extract_metrics("quiet day")

    suggestions = generate_local_suggestions(metrics)

    assert suggestions[0].startswith("Establish a consistent bedtime routine")
    assert suggestions[1].startswith("Start with short exercise sessions")
    # No sleep or exercise insight without a reading
    assert len(generate_local_insights(metrics)) == 1


def test_low_energy_suggestion_when_only_one_other():
    metrics = extract_metrics("slept 8 hours, exhausted")

    assert generate_local_suggestions(metrics)[-1] == (
        "Try to identify and address factors affecting your energy levels"
    )


def test_local_analysis_is_marked_local():
    analysis = local_analysis(extract_metrics("slept 7 hours"))

    assert analysis.source == AnalysisSource.LOCAL
    assert analysis.cached is False
    assert analysis.insights
    assert analysis.suggestions
