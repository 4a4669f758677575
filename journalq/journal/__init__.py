"""Journal analysis: extraction, enrichment cache, aggregation, scoring, reports"""

from __future__ import annotations

from journalq.journal.models import (
    AggregateReport,
    EnrichedAnalysis,
    EntryResult,
    JournalEntry,
    Metrics,
)

__all__ = ["AggregateReport", "EnrichedAnalysis", "EntryResult", "JournalEntry", "Metrics"]
