"""
Tests for period reports.

Entries mirror what the journal stores: a date plus a metrics dict with
sleep/exercise and optional quality, intensity, water and meal fields.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from journalq.journal.models import HealthRecord
from journalq.journal.reports import (
    analyze_exercise_patterns,
    analyze_sleep_patterns,
    average_calories,
    build_period_report,
    period_bounds,
    render_text_report,
)
from journalq.utils.validators import ValidationError

NOW = datetime(2025, 3, 31, 12, 0, tzinfo=UTC)


def _entry(day, sleep=8, exercise=30, **extra):
    return {
        "id": f"e{day}",
        "date": f"2025-03-{day:02d}T08:00:00Z",
        "content": "journal",
        "metrics": {"sleep": sleep, "exercise": exercise, **extra},
    }


class TestSleepPatterns:
    def test_empty(self):
        patterns = analyze_sleep_patterns([])
        assert patterns.average == 0.0
        assert patterns.insights == ()

    def test_under_sleeping_is_critical(self):
        records = [HealthRecord(sleep_hours=5), HealthRecord(sleep_hours=5.5)]
        patterns = analyze_sleep_patterns(records)

        assert patterns.average == 5.2
        assert patterns.insights[0].startswith("Critical")

    def test_consistent_good_sleep(self):
        records = [HealthRecord(sleep_hours=8, sleep_quality="good")] * 3
        patterns = analyze_sleep_patterns(records)

        assert patterns.consistency == 100
        assert patterns.quality_score == 100
        assert patterns.insights == (
            "Great! Your sleep duration is within the recommended range.",
            "Excellent sleep schedule consistency! Keep it up!",
            "You're experiencing good quality sleep overall.",
        )


class TestExercisePatterns:
    def test_weekly_average_and_most_active_day(self):
        records = [
            HealthRecord(date=datetime(2025, 3, 1, tzinfo=UTC), exercise_minutes=20),
            HealthRecord(date=datetime(2025, 3, 2, tzinfo=UTC), exercise_minutes=40),
            HealthRecord(date=datetime(2025, 3, 3, tzinfo=UTC), exercise_minutes=40),
        ]
        patterns = analyze_exercise_patterns(records)

        # mean 33.3 min/day -> 233 per week
        assert patterns.weekly_average == 233
        assert patterns.most_active_day == "2025-03-02"
        assert patterns.insights[0].startswith("Excellent!")

    def test_no_exercise(self):
        patterns = analyze_exercise_patterns([HealthRecord(), HealthRecord()])
        assert patterns.weekly_average == 0
        assert patterns.insights[0].startswith("No exercise recorded")

    def test_empty(self):
        assert analyze_exercise_patterns([]).most_active_day == "N/A"


class TestPeriodReport:
    def test_filters_entries_to_period(self):
        entries = [_entry(1), _entry(25), _entry(30)]

        report = build_period_report(entries, period="week", clock=lambda: NOW)

        assert report.start.isoformat() == "2025-03-24"
        assert report.end.isoformat() == "2025-03-31"
        assert report.total_entries == 2

    def test_overview_counts(self):
        report = build_period_report(
            [_entry(30)],
            habits=[{"name": "walk", "streak": 3}, {"name": "read", "streak": 0}],
            goals=[{"completed": True}, {"completed": False}],
            meals=[
                {"date": "2025-03-30", "calories": 500},
                {"date": "2025-03-30", "calories": 700},
                {"date": "2024-01-01", "calories": 5000},
            ],
            period="month",
            clock=lambda: NOW,
        )

        assert report.completed_goals == 1
        assert report.active_habits == 1
        assert report.average_calories == 600

    def test_empty_period_scores_zero(self):
        report = build_period_report([_entry(1)], period="week", clock=lambda: NOW)

        assert report.total_entries == 0
        assert report.health_score.value == 0

    def test_unknown_period_rejected(self):
        with pytest.raises(ValidationError):
            period_bounds("year", NOW.date())

    def test_to_dict_and_text_export(self):
        entries = [
            _entry(29, sleep=7, exercise=30, sleepQuality="good", exerciseIntensity="high"),
            _entry(30, sleep=8, exercise=45, waterIntake=1500, mealsLogged=3),
        ]
        report = build_period_report(entries, period="week", clock=lambda: NOW)

        body = report.to_dict()
        assert body["overview"]["totalEntries"] == 2
        assert 0 < body["healthScore"] <= 100
        assert set(body["scoreComponents"]) == {"sleep", "exercise", "mood", "habits", "nutrition"}

        text = render_text_report(report)
        assert text.startswith("Health Report (week)")
        assert f"Health Score: {report.health_score.value}%" in text
        assert "- Average Sleep: 7.5 hours" in text
        assert "- Most Active Day: 2025-03-30" in text


def test_average_calories_empty():
    assert average_calories([]) == 0


class TestMalformedStoredValues:
    """Stored JSON has no schema; bad fields must not break the report."""

    def test_non_numeric_metrics_count_as_zero(self):
        entries = [
            {"date": "2025-03-30", "metrics": {"sleep": "n/a", "exercise": [30]}},
            _entry(29),
        ]

        report = build_period_report(entries, period="week", clock=lambda: NOW)

        assert report.total_entries == 2
        assert report.sleep.average == 4.0
        assert 0 <= report.health_score.value <= 100

    def test_non_dict_metrics_and_bad_labels(self):
        entries = [
            {"date": "2025-03-30", "metrics": "slept well", "mood": ["happy"]},
            {"date": "2025-03-29", "metrics": {"sleepQuality": {"x": 1}, "sleep": 7}},
        ]

        report = build_period_report(entries, period="week", clock=lambda: NOW)

        assert report.total_entries == 2
        assert report.sleep.quality_score == 70

    def test_bad_habit_and_meal_fields(self):
        report = build_period_report(
            [_entry(30)],
            habits=[{"name": "walk", "streak": "x", "completedDays": None}, "junk"],
            goals=["done", {"completed": True}],
            meals=[
                {"date": "2025-03-30", "calories": "lots"},
                {"date": "2025-03-30", "calories": 600},
            ],
            period="week",
            clock=lambda: NOW,
        )

        assert report.active_habits == 0
        assert report.completed_goals == 1
        assert report.average_calories == 300
        assert report.health_score.value > 0

    def test_out_of_range_epoch_date_is_skipped(self):
        report = build_period_report(
            [{"date": 1e20, "metrics": {"sleep": 8}}], period="week", clock=lambda: NOW
        )

        assert report.total_entries == 0
        assert report.health_score.value == 0
