"""
Analysis engine: the top-level orchestration for journal analysis.

Pipeline per entry:
    1. Local extraction (never fails)
    2. AI enrichment through the retry wrapper
    3. On a final EnrichmentFailure, local insights/suggestions instead

A batch runs one task per entry with no ordering between them; a failing
entry becomes an error descriptor and never aborts the batch.

The engine owns the process-wide mutable state (enrichment cache and rate
limiter). Construct one per app, call start_sweepers() once an event loop
is running and stop() on shutdown.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from journalq.config import ENRICHMENT_MAX_ATTEMPTS, USE_AI_ENRICHMENT
from journalq.infrastructure.rate_limiter import SlidingWindowRateLimiter
from journalq.infrastructure.retry import SleepFn, enrich_with_retry
from journalq.journal.aggregator import aggregate
from journalq.journal.enrichment_cache import EnrichmentCache
from journalq.journal.extractor import extract_metrics
from journalq.journal.insights import local_analysis
from journalq.journal.models import AggregateReport, EnrichedAnalysis, EntryResult, JournalEntry
from journalq.llm.client import EnrichmentClient, EnrichmentFailure
from journalq.llm.gemini import TextGenerator
from journalq.observability.logging import get_logger
from journalq.observability.telemetry import counter, log_event, time_block
from journalq.utils.error_sanitizer import redact_credentials
from journalq.utils.redaction import redact
from journalq.utils.validators import (
    INVALID_CONTENT_DETAILS,
    is_valid_content,
    validate_batch_entries,
    validate_entry_content,
)

logger = get_logger(__name__)


@dataclass
class BatchAnalysis:
    results: list[EntryResult]
    report: AggregateReport

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "batch",
            "results": [result.to_dict() for result in self.results],
            "aggregateMetrics": self.report.to_dict(),
        }


class AnalysisEngine:
    """Extract, enrich with retry, fall back locally, aggregate."""

    def __init__(
        self,
        generator: TextGenerator | None = None,
        cache: EnrichmentCache | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        max_attempts: int = ENRICHMENT_MAX_ATTEMPTS,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], datetime] | None = None,
        enrichment_enabled: bool = USE_AI_ENRICHMENT,
    ) -> None:
        self.cache = cache if cache is not None else EnrichmentCache()
        self.rate_limiter = rate_limiter if rate_limiter is not None else SlidingWindowRateLimiter()
        self.client = EnrichmentClient(
            generator=generator, cache=self.cache, enabled=enrichment_enabled
        )
        self.max_attempts = max_attempts
        self._sleep = sleep
        self._clock = clock
        self._sweepers: list[asyncio.Task[None]] = []

    def _now(self) -> datetime:
        return self._clock() if self._clock else datetime.now(UTC)

    def admit(self, caller_id: str) -> None:
        """
        Rate-limit one request from caller_id.

        Raises:
            RateLimitExceeded: With retry_after_seconds
        """
        self.rate_limiter.check(caller_id)

    async def analyze_entry(self, text: str) -> EnrichedAnalysis:
        """
        Analyze one entry; always returns a usable analysis.

        Side Effects:
            - Calls the AI capability (via cache and retry wrapper)
            - Increments telemetry counter (analysis.local_fallback) on fallback
        """
        metrics = extract_metrics(text, clock=self._clock)

        try:
            return await enrich_with_retry(
                self.client, text, metrics, max_attempts=self.max_attempts, sleep=self._sleep
            )
        except EnrichmentFailure as exc:
            counter("analysis.local_fallback")
            logger.info("AI analysis failed, using local analysis: %s", exc)
            log_event(
                "analysis.local_fallback",
                reason=type(exc).__name__,
                entry=redact(text),
            )
            return local_analysis(metrics)

    async def analyze_single(self, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Analyze a single `{content, id}` payload.

        Returns:
            The analysis dict plus the echoed id and analyzedAt

        Raises:
            ValidationError: If content is not a string of 1-10000 characters
        """
        content = validate_entry_content(payload.get("content"))
        with time_block("analysis.single.latency"):
            analysis = await self.analyze_entry(content)
        return {
            "id": payload.get("id"),
            **analysis.to_dict(),
            "analyzedAt": self._now().isoformat(),
        }

    async def _analyze_batch_entry(self, raw: dict[str, Any]) -> EntryResult:
        entry = JournalEntry.from_dict(raw)
        entry_id = entry.id
        if not is_valid_content(entry.content):
            counter("analysis.batch.invalid_entry")
            return EntryResult.failed(entry_id, "Invalid content", INVALID_CONTENT_DETAILS)

        try:
            analysis = await self.analyze_entry(entry.content)
        except Exception as exc:
            counter("analysis.batch.entry_error")
            logger.error("Analysis error for entry %s: %s", entry_id, redact_credentials(str(exc)))
            return EntryResult.failed(entry_id, "Analysis failed", redact_credentials(str(exc)))

        return EntryResult(
            id=entry_id,
            analysis=analysis,
            timestamp=entry.timestamp,
        )

    async def analyze_batch(self, payload: Any) -> BatchAnalysis:
        """
        Analyze `{entries: [{id, content}], type: "batch"}` concurrently.

        Raises:
            ValidationError: If entries is missing, not a list, or empty
        """
        entries = validate_batch_entries(payload)

        with time_block("analysis.batch.latency"):
            results = await asyncio.gather(
                *(self._analyze_batch_entry(entry) for entry in entries)
            )

        report = aggregate(results, clock=self._clock)
        log_event(
            "analysis.batch.complete",
            total=report.total_entries,
            succeeded=report.success_count,
            failed=report.failure_count,
        )
        return BatchAnalysis(results=list(results), report=report)

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    async def _sweep_every(self, interval: float, sweep: Callable[[], int]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                sweep()
            except Exception as exc:
                logger.error("Sweep failed: %s", exc)

    def start_sweepers(self) -> None:
        """Schedule cache and rate-limiter sweeps at their own intervals."""
        if self._sweepers:
            return
        self._sweepers = [
            asyncio.create_task(self._sweep_every(self.cache.ttl_seconds, self.cache.sweep)),
            asyncio.create_task(
                self._sweep_every(self.rate_limiter.window_seconds, self.rate_limiter.sweep)
            ),
        ]

    async def stop(self) -> None:
        """Cancel sweepers and drop cached state."""
        for task in self._sweepers:
            task.cancel()
        for task in self._sweepers:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._sweepers = []
        self.cache.clear()
