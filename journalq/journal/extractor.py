"""
Local Extractor - deterministic, pattern-based metric extraction.

Stage 1 of the analysis pipeline. Runs synchronously on every entry before
any enrichment is attempted, so its output is always available even when
the LLM is down.

Pattern tables are ordered (tag, regex) lists:
- mood / energy: first match wins, in table order
- symptoms: every matching tag is reported (not mutually exclusive)

Exercise durations given in hours are stored as the raw number; no unit
conversion happens anywhere downstream.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from journalq.journal.models import Energy, Metrics, Mood

SLEEP_PATTERN = re.compile(r"(?:slept|sleep)\s*(?:for|about)?\s*(\d+(?:\.\d+)?)\s*hours?")
EXERCISE_PATTERN = re.compile(
    r"(?:exercised|worked out|ran|jogged|walked)\s*(?:for)?\s*(\d+)\s*(?:min(?:ute)?s?|hours?)"
)

MOOD_PATTERNS: list[tuple[Mood, re.Pattern[str]]] = [
    (Mood.POSITIVE, re.compile(r"\b(?:happy|great|good|excellent|wonderful|amazing|fantastic)\b")),
    (Mood.NEGATIVE, re.compile(r"\b(?:sad|bad|terrible|awful|depressed|unhappy|stressed)\b")),
    (Mood.NEUTRAL, re.compile(r"\b(?:okay|fine|alright|normal)\b")),
]

ENERGY_PATTERNS: list[tuple[Energy, re.Pattern[str]]] = [
    (Energy.HIGH, re.compile(r"\b(?:energetic|energized|active|full of energy)\b")),
    (Energy.LOW, re.compile(r"\b(?:tired|exhausted|fatigued|low energy)\b")),
    (Energy.MEDIUM, re.compile(r"\b(?:moderate energy|decent energy)\b")),
]

SYMPTOM_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("headache", re.compile(r"\b(?:headache|migraine)\b")),
    ("nausea", re.compile(r"\b(?:nausea|nauseated|sick to (?:my|the) stomach)\b")),
    ("pain", re.compile(r"\b(?:pain|ache|sore)\b")),
    ("anxiety", re.compile(r"\b(?:anxiety|anxious|worried|stress)\b")),
    ("fatigue", re.compile(r"\b(?:fatigue|exhaustion|tired)\b")),
]


def _first_match(text: str, table: Sequence[tuple[object, re.Pattern[str]]]) -> object | None:
    for tag, pattern in table:
        if pattern.search(text):
            return tag
    return None


def extract_sleep_hours(text: str) -> float | None:
    """Hours from the first "slept/sleep ... N[.M] hour(s)" phrase, else None."""
    match = SLEEP_PATTERN.search(text)
    return float(match.group(1)) if match else None


def extract_exercise_minutes(text: str) -> int | None:
    """Duration from the first activity phrase, raw number regardless of unit."""
    match = EXERCISE_PATTERN.search(text)
    return int(match.group(1)) if match else None


def extract_mood(text: str) -> Mood:
    mood = _first_match(text, MOOD_PATTERNS)
    return mood if isinstance(mood, Mood) else Mood.NEUTRAL


def extract_energy(text: str) -> Energy | None:
    energy = _first_match(text, ENERGY_PATTERNS)
    return energy if isinstance(energy, Energy) else None


def extract_symptoms(text: str) -> tuple[str, ...]:
    return tuple(tag for tag, pattern in SYMPTOM_PATTERNS if pattern.search(text))


def extract_metrics(
    text: str,
    clock: Callable[[], datetime] | None = None,
) -> Metrics:
    """
    Extract health signals from one journal entry.

    Never raises: a missing signal yields None (or the mood default, neutral).

    Args:
        text: Raw entry content
        clock: Optional clock for the extraction timestamp (tests)

    Returns:
        Metrics value object

    Side Effects:
        None (pure function apart from reading the clock)
    """
    lowered = (text or "").lower()
    now = clock() if clock else datetime.now(UTC)

    return Metrics(
        sleep_hours=extract_sleep_hours(lowered),
        exercise_minutes=extract_exercise_minutes(lowered),
        mood=extract_mood(lowered),
        energy=extract_energy(lowered),
        symptoms=extract_symptoms(lowered),
        extracted_at=now,
    )
