"""
In-process telemetry for the analysis engine.

Nothing is shipped externally; events go to the log and counters/latencies
stay in memory so tests and the /health endpoint can read them.
"""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger("journalq.telemetry")

_COUNTERS: dict[str, int] = {}
_LATENCIES: dict[str, list[float]] = {}
_LOCK = threading.Lock()


def _normalize_latency_name(metric_name: str) -> str:
    if metric_name.endswith("_ms"):
        return metric_name
    if metric_name.endswith(".latency"):
        return f"{metric_name}_ms"
    return metric_name


def log_event(event_name: str, **fields: Any) -> None:
    """
    Structured log event. Caller must hash or redact journal text first.

    Side Effects:
        - Writes to logger (info level)
    """
    logger.info("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    """
    Increment an in-memory counter and emit a debug log.

    Side Effects:
        - Modifies _COUNTERS dict (in-memory state)
        - Writes to logger (debug level)
    """
    with _LOCK:
        value = _COUNTERS.get(name, 0) + increment
        _COUNTERS[name] = value
    logger.debug("counter=%s value=%s", name, value)
    return value


def snapshot_counters(prefix: str = "") -> dict[str, int]:
    """Copy of the counters whose name starts with prefix."""
    with _LOCK:
        return {k: v for k, v in _COUNTERS.items() if k.startswith(prefix)}


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """
    Context manager for timing code blocks.

    Side Effects:
        - Appends to _LATENCIES dict (in-memory state)
        - Writes to logger (debug level) with timing
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        normalized = _normalize_latency_name(metric_name)
        logger.debug("timing=%s seconds=%.6f", normalized, elapsed)
        with _LOCK:
            _LATENCIES.setdefault(normalized, []).append(elapsed)


def get_latency_stats(metric_name: str) -> dict[str, float]:
    """
    Get latency statistics (count, min, max, avg, p50, p95) for a metric.
    """
    normalized = _normalize_latency_name(metric_name)
    with _LOCK:
        samples = sorted(_LATENCIES.get(normalized, []))
    if not samples:
        return {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p95": 0.0}

    count = len(samples)
    return {
        "count": count,
        "min": samples[0],
        "max": samples[-1],
        "avg": sum(samples) / count,
        "p50": samples[int(count * 0.50)],
        "p95": samples[min(int(count * 0.95), count - 1)],
    }


def reset_telemetry() -> None:
    """
    Clear counters and latencies (useful for tests).

    Side Effects:
        - Clears _COUNTERS and _LATENCIES (in-memory state)
    """
    with _LOCK:
        _COUNTERS.clear()
        _LATENCIES.clear()
