"""Centralized configuration for the journalq analysis engine.

Re-exports everything from journalq.infrastructure.settings so existing imports
continue to work, then adds typed constants for enrichment, rate limiting,
validation, scoring, and storage.  Environment variable overrides use safe
defaults so the engine starts without extra env configuration.
"""

from __future__ import annotations

import os

from journalq.infrastructure.settings import *  # noqa: F401, F403 re-export existing

# --- App ---
APP_VERSION: str = "1.0.0"
API_VERSION: str = "1.0"

# --- Enrichment ---
ENRICHMENT_CACHE_TTL_SECONDS: float = float(os.getenv("JOURNALQ_CACHE_TTL", "1800"))
ENRICHMENT_CACHE_MAX_ENTRIES: int = int(os.getenv("JOURNALQ_CACHE_MAX_ENTRIES", "10000"))
ENRICHMENT_MAX_ATTEMPTS: int = int(os.getenv("JOURNALQ_ENRICHMENT_MAX_ATTEMPTS", "2"))

# --- LLM ---
LLM_TIMEOUT_SECONDS: float = float(os.getenv("JOURNALQ_LLM_TIMEOUT", "5"))
LLM_SDK_MAX_RETRIES: int = int(os.getenv("JOURNALQ_LLM_SDK_MAX_RETRIES", "2"))

# --- Rate Limiting ---
RATE_LIMIT_REQUESTS: int = int(os.getenv("JOURNALQ_RATE_LIMIT", "10"))
RATE_LIMIT_WINDOW_SECONDS: float = float(os.getenv("JOURNALQ_RATE_LIMIT_WINDOW", "60"))
RATE_LIMIT_MAX_CALLERS: int = 10000

# --- Validation ---
ENTRY_MIN_CHARS: int = 1
ENTRY_MAX_CHARS: int = 10_000
BATCH_MAX_ENTRIES: int = int(os.getenv("JOURNALQ_BATCH_MAX_ENTRIES", "500"))

# --- Scoring targets ---
SLEEP_TARGET_HOURS: float = 8.0
EXERCISE_TARGET_MINUTES: float = 30.0
WEEKLY_EXERCISE_GOAL_MINUTES: float = 150.0
DAILY_WATER_GOAL_ML: float = 2000.0

# --- Report periods (days back from today) ---
REPORT_PERIOD_DAYS: dict[str, int] = {"week": 7, "month": 30, "quarter": 90}

# --- Storage keys ---
STORAGE_KEY_ENTRIES: str = "journalEntries"
STORAGE_KEY_ANALYSIS: str = "journalAnalysis"
STORAGE_KEY_HEALTH_SCORE: str = "healthScore"
STORAGE_KEY_NUTRITION: str = "nutritionData"
STORAGE_KEY_GOALS: str = "goalsData"
