"""JournalQ - health signals, insights and scores from free-text journal entries"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so lightweight modules load without the LLM/web stack
def __getattr__(name: str):
    """
    Lazy imports to avoid loading heavy dependencies when only importing lightweight modules.
    """
    if name == "AnalysisEngine":
        from journalq.journal.service import AnalysisEngine

        return AnalysisEngine

    if name in ("extract_metrics", "calculate_health_score", "aggregate"):
        from journalq.journal import aggregator, extractor, health_score

        if name == "extract_metrics":
            return extractor.extract_metrics
        if name == "calculate_health_score":
            return health_score.calculate_health_score
        if name == "aggregate":
            return aggregator.aggregate

    if name == "create_app":
        from journalq.api.app import create_app

        return create_app

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "AnalysisEngine",
    "aggregate",
    "calculate_health_score",
    "create_app",
    "extract_metrics",
]
