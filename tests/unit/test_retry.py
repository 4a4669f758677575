"""
Tests for the enrichment retry wrapper.

Backoff is observed through an injected sleep, so no test actually waits.
"""

from __future__ import annotations

import asyncio

import pytest

from journalq.infrastructure.retry import enrich_with_retry
from journalq.journal.extractor import extract_metrics
from journalq.journal.insights import local_analysis
from journalq.llm.client import EnrichmentError, EnrichmentUnavailable
from journalq.observability.telemetry import snapshot_counters

TEXT = "slept 7 hours"


class ScriptedClient:
    """Fails with the given exceptions in order, then succeeds."""

    def __init__(self, *failures):
        self.failures = list(failures)
        self.calls = 0

    async def enrich(self, text, metrics):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return local_analysis(metrics)


def _retry(client, recording_sleep, max_attempts=2):
    return asyncio.run(
        enrich_with_retry(
            client,
            TEXT,
            extract_metrics(TEXT),
            max_attempts=max_attempts,
            sleep=recording_sleep,
        )
    )


def test_first_attempt_success_does_not_sleep(recording_sleep):
    client = ScriptedClient()

    result = _retry(client, recording_sleep)

    assert result.metrics.sleep_hours == 7.0
    assert client.calls == 1
    assert recording_sleep.delays == []


def test_recovers_on_second_attempt_after_one_second(recording_sleep):
    client = ScriptedClient(EnrichmentError("flaky"))

    result = _retry(client, recording_sleep)

    assert result is not None
    assert client.calls == 2
    assert recording_sleep.delays == [1]
    assert snapshot_counters("retry_count") == {"retry_count": 1}


def test_second_failure_propagates_within_two_attempts(recording_sleep):
    """A client that would succeed on a third call never gets one."""
    first = EnrichmentError("first")
    second = EnrichmentError("second")
    client = ScriptedClient(first, second)

    with pytest.raises(EnrichmentError) as exc_info:
        _retry(client, recording_sleep)

    assert exc_info.value is second
    assert client.calls == 2
    # No backoff after the final attempt
    assert recording_sleep.delays == [1]


def test_backoff_doubles_per_attempt(recording_sleep):
    client = ScriptedClient(*(EnrichmentError(str(i)) for i in range(4)))

    with pytest.raises(EnrichmentError):
        _retry(client, recording_sleep, max_attempts=4)

    assert recording_sleep.delays == [1, 2, 4]
    assert client.calls == 4


def test_unavailable_is_not_retried(recording_sleep):
    client = ScriptedClient(EnrichmentUnavailable("no credentials"))

    with pytest.raises(EnrichmentUnavailable):
        _retry(client, recording_sleep)

    assert client.calls == 1
    assert recording_sleep.delays == []
