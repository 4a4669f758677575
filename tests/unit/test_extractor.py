"""
Tests for the local metric extractor.

Covers sleep/exercise number parsing, first-match-wins mood and energy
tables, match-any symptoms, and the "never fails" contract.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from journalq.journal.extractor import (
    extract_energy,
    extract_exercise_minutes,
    extract_metrics,
    extract_mood,
    extract_sleep_hours,
    extract_symptoms,
)
from journalq.journal.models import Energy, Mood


class TestSleepExtraction:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("I slept 7 hours last night", 7.0),
            ("Slept for 7.5 hours and woke up early", 7.5),
            ("sleep about 6 hour", 6.0),
            ("slept8hours", 8.0),
        ],
    )
    def test_sleep_hours_parsed(self, text, expected):
        assert extract_metrics(text).sleep_hours == expected

    def test_first_sleep_mention_wins(self):
        assert extract_sleep_hours("slept 5 hours, then slept 2 hours") == 5.0

    def test_no_sleep_keyword_is_none(self):
        assert extract_sleep_hours("went to bed early") is None


class TestExerciseExtraction:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("ran 30 minutes this morning", 30),
            ("worked out for 45 mins", 45),
            ("walked 20 min after lunch", 20),
            ("jogged for 10 minute", 10),
        ],
    )
    def test_minutes_parsed(self, text, expected):
        assert extract_exercise_minutes(text) == expected

    def test_hours_are_stored_as_raw_number(self):
        """An hour duration is not converted to minutes."""
        assert extract_exercise_minutes("exercised for 2 hours") == 2

    def test_unknown_activity_is_none(self):
        assert extract_exercise_minutes("swam 30 minutes") is None


class TestMoodAndEnergy:
    def test_positive_mood(self):
        assert extract_mood("feeling great today") == Mood.POSITIVE

    def test_positive_table_wins_over_negative(self):
        """First matching row in table order wins, not first word in text."""
        assert extract_mood("bad start but a good evening") == Mood.POSITIVE

    def test_negative_mood(self):
        assert extract_mood("really stressed about work") == Mood.NEGATIVE

    def test_mood_defaults_to_neutral(self):
        assert extract_mood("nothing much happened") == Mood.NEUTRAL

    def test_word_boundaries_respected(self):
        assert extract_mood("goodness me") == Mood.NEUTRAL

    def test_energy_high_before_low(self):
        assert extract_energy("tired but energetic after coffee") == Energy.HIGH

    def test_energy_low(self):
        assert extract_energy("completely exhausted") == Energy.LOW

    def test_energy_medium(self):
        assert extract_energy("decent energy all day") == Energy.MEDIUM

    def test_energy_absent_is_none(self):
        assert extract_energy("regular day") is None

    def test_extraction_is_case_insensitive(self):
        metrics = extract_metrics("HAPPY and ENERGETIC, Slept 8 Hours")
        assert metrics.mood == Mood.POSITIVE
        assert metrics.energy == Energy.HIGH
        assert metrics.sleep_hours == 8.0


class TestSymptoms:
    def test_multiple_symptoms_reported_in_table_order(self):
        text = "tired with a migraine and some anxiety"
        assert extract_symptoms(text) == ("headache", "anxiety", "fatigue")

    def test_no_symptoms(self):
        assert extract_symptoms("lovely walk in the park") == ()


class TestExtractMetrics:
    def test_no_keywords_yields_empty_metrics(self):
        metrics = extract_metrics("Had lunch with a friend.")
        assert metrics.sleep_hours is None
        assert metrics.exercise_minutes is None
        assert metrics.symptoms == ()
        assert metrics.mood == Mood.NEUTRAL
        assert metrics.energy is None

    def test_empty_text_never_raises(self):
        metrics = extract_metrics("")
        assert metrics.sleep_hours is None

    def test_idempotent_on_same_text(self):
        text = "Slept 6 hours, feeling sad and tired, bit of a headache"
        first = extract_metrics(text)
        second = extract_metrics(text)
        assert first.signals() == second.signals()
        assert first.fingerprint() == second.fingerprint()

    def test_clock_sets_extraction_instant(self):
        instant = datetime(2025, 1, 1, tzinfo=UTC)
        metrics = extract_metrics("slept 7 hours", clock=lambda: instant)
        assert metrics.extracted_at == instant
        assert metrics.to_dict()["timestamp"] == instant.isoformat()
