"""
Retry wrapper for AI enrichment.

Retries EnrichmentError with exponential backoff: after failed attempt n
(counting from 0) it waits 2**n seconds. There is no wait after the final
attempt; the last failure is re-raised unchanged. EnrichmentUnavailable is a
configuration problem and propagates on the first attempt.

The wrapper never falls back to local insights. That decision belongs to
the analysis service.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from journalq.config import ENRICHMENT_MAX_ATTEMPTS
from journalq.journal.models import EnrichedAnalysis, Metrics
from journalq.llm.client import EnrichmentClient, EnrichmentError
from journalq.observability.logging import get_logger
from journalq.observability.telemetry import counter, log_event

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


def _log_retry(retry_state: RetryCallState) -> None:
    counter("retry_count")
    outcome = retry_state.outcome
    error = outcome.exception() if outcome is not None else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        "Enrichment attempt %d failed (%s), retrying in %.0fs",
        retry_state.attempt_number,
        error,
        delay,
    )
    log_event(
        "stage_error",
        stage="enrichment",
        error=str(error),
        attempt=retry_state.attempt_number,
    )


async def enrich_with_retry(
    client: EnrichmentClient,
    text: str,
    metrics: Metrics,
    max_attempts: int = ENRICHMENT_MAX_ATTEMPTS,
    sleep: SleepFn = asyncio.sleep,
) -> EnrichedAnalysis:
    """
    Call client.enrich up to max_attempts times.

    Args:
        client: Enrichment client (one external call per attempt)
        text: Raw entry text
        metrics: Metrics already extracted from text
        max_attempts: Total attempts including the first (default 2)
        sleep: Awaitable sleep used for backoff (injectable for tests)

    Raises:
        EnrichmentError: The last failure once attempts are exhausted
        EnrichmentUnavailable: Immediately, never retried
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, exp_base=2),
        retry=retry_if_exception_type(EnrichmentError),
        before_sleep=_log_retry,
        sleep=sleep,
        reraise=True,
    )
    return await retrying(client.enrich, text, metrics)
