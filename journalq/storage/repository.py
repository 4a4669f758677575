"""
Journal repository over a KeyValueStore.

Fixed keys: journalEntries, journalAnalysis, healthScore, nutritionData,
goalsData. Absent or malformed values read back as empty defaults (and are
logged); reads never raise.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from journalq.config import (
    STORAGE_KEY_ANALYSIS,
    STORAGE_KEY_ENTRIES,
    STORAGE_KEY_GOALS,
    STORAGE_KEY_HEALTH_SCORE,
    STORAGE_KEY_NUTRITION,
)
from journalq.journal.models import HealthScore
from journalq.observability.logging import get_logger
from journalq.observability.telemetry import counter
from journalq.storage.store import InMemoryStore, KeyValueStore

logger = get_logger(__name__)


class JournalRepository:
    """Typed access to the journal blobs in a key-value store."""

    def __init__(
        self,
        store: KeyValueStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store if store is not None else InMemoryStore()
        self._clock = clock

    def _now(self) -> str:
        return (self._clock() if self._clock else datetime.now(UTC)).isoformat()

    def _read(self, key: str, expected: type, default: Any) -> Any:
        try:
            value = self.store.get(key)
        except ValueError as exc:
            counter("storage.malformed")
            logger.warning("Storage value for %s is not valid JSON: %s", key, exc)
            return default

        if value is None:
            return default
        if not isinstance(value, expected):
            counter("storage.malformed")
            logger.warning(
                "Storage value for %s has type %s, expected %s",
                key,
                type(value).__name__,
                expected.__name__,
            )
            return default
        return value

    # Journal entries

    def get_entries(self) -> list[dict[str, Any]]:
        entries = self._read(STORAGE_KEY_ENTRIES, list, [])
        return [entry for entry in entries if isinstance(entry, dict)]

    def save_entries(self, entries: list[dict[str, Any]]) -> None:
        self.store.set(STORAGE_KEY_ENTRIES, entries)

    def add_entry(self, entry: dict[str, Any]) -> list[dict[str, Any]]:
        """Prepend entry (newest first) and return the updated list."""
        updated = [entry, *self.get_entries()]
        self.save_entries(updated)
        return updated

    def search_entries(self, query: str) -> list[dict[str, Any]]:
        """Entries whose content contains query, case-insensitively."""
        needle = (query or "").lower()
        return [
            entry for entry in self.get_entries() if needle in str(entry.get("content", "")).lower()
        ]

    # Latest batch analysis

    def save_analysis(self, analysis: dict[str, Any]) -> dict[str, Any]:
        stamped = {**analysis, "timestamp": self._now()}
        self.store.set(STORAGE_KEY_ANALYSIS, stamped)
        return stamped

    def get_analysis(self) -> dict[str, Any] | None:
        return self._read(STORAGE_KEY_ANALYSIS, dict, None)

    # Latest health score

    def save_health_score(
        self, score: HealthScore, details: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        record = {
            **score.to_dict(),
            "timestamp": self._now(),
            "details": details or {},
        }
        self.store.set(STORAGE_KEY_HEALTH_SCORE, record)
        return record

    def get_health_score(self) -> dict[str, Any] | None:
        return self._read(STORAGE_KEY_HEALTH_SCORE, dict, None)

    # Nutrition and goals (written elsewhere, read for reports)

    def get_nutrition(self) -> dict[str, Any]:
        data = self._read(STORAGE_KEY_NUTRITION, dict, {})
        return {
            "meals": data.get("meals") if isinstance(data.get("meals"), list) else [],
            "waterIntake": data.get("waterIntake") or 0,
            "timestamp": data.get("timestamp"),
        }

    def save_nutrition(self, meals: list[dict[str, Any]], water_intake: float) -> None:
        self.store.set(
            STORAGE_KEY_NUTRITION,
            {"meals": meals, "waterIntake": water_intake, "timestamp": self._now()},
        )

    def get_goals(self) -> dict[str, Any]:
        data = self._read(STORAGE_KEY_GOALS, dict, {})
        return {
            "goals": data.get("goals") if isinstance(data.get("goals"), list) else [],
            "habits": data.get("habits") if isinstance(data.get("habits"), list) else [],
            "timestamp": data.get("timestamp"),
        }

    def save_goals(self, goals: list[dict[str, Any]], habits: list[dict[str, Any]]) -> None:
        self.store.set(
            STORAGE_KEY_GOALS,
            {"goals": goals, "habits": habits, "timestamp": self._now()},
        )
