"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os

# Environment
ENV = os.getenv("JOURNALQ_ENV", "development")

# API Configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# Google Cloud / Gemini
GOOGLE_CLOUD_PROJECT = os.getenv("GOOGLE_CLOUD_PROJECT")
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-001")
GEMINI_LOCATION = os.getenv("GEMINI_LOCATION", "us-central1")
GEMINI_MAX_TOKENS = int(os.getenv("GEMINI_MAX_TOKENS", "1024"))
GEMINI_TEMPERATURE = float(os.getenv("GEMINI_TEMPERATURE", "0.7"))

# Feature Flags
USE_AI_ENRICHMENT = os.getenv("USE_AI_ENRICHMENT", "true").lower() == "true"


def is_development() -> bool:
    """Check if running in development (read fresh so .env and tests can change it)"""
    return os.getenv("JOURNALQ_ENV", ENV) == "development"


def has_llm_credentials() -> bool:
    """True when either Vertex AI or a Gemini API key is configured.

    Reads the environment fresh so a .env loaded after import is honoured.
    """
    return bool(
        os.getenv("GOOGLE_CLOUD_PROJECT")
        or GOOGLE_CLOUD_PROJECT
        or os.getenv("GOOGLE_API_KEY")
        or GOOGLE_API_KEY
    )
