"""
Pytest configuration for journalq tests

Provides fake collaborators (text generator, clocks, sleep) shared across
unit and integration tests. Nothing here touches the network.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from journalq.observability.telemetry import reset_telemetry

VALID_RESPONSE = json.dumps(
    {
        "insights": ["Sleep was on target."],
        "suggestions": ["Keep the same bedtime."],
    }
)


class FakeGenerator:
    """
    Scripted TextGenerator.

    Each call pops the next item from `script`: a string is returned, an
    exception is raised. When the script runs out the last item repeats.
    """

    def __init__(self, *script):
        self.script = list(script) or [VALID_RESPONSE]
        self.calls: list[tuple[str, str | None]] = []

    async def generate(self, prompt: str, system_instruction: str | None = None) -> str:
        self.calls.append((prompt, system_instruction))
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return item


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def _clean_telemetry():
    reset_telemetry()
    yield
    reset_telemetry()


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def manual_clock():
    return ManualClock()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 15, 9, 30, tzinfo=UTC)


@pytest.fixture
def make_generator():
    """Factory for scripted generators: make_generator(response_or_exc, ...)."""
    return FakeGenerator
