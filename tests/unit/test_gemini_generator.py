"""Tests for the Gemini adapter's SDK-level retry (no network; the model is faked)."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import pytest
from google.api_core.exceptions import InvalidArgument, ResourceExhausted, ServiceUnavailable

from journalq.config import LLM_SDK_MAX_RETRIES
from journalq.llm.gemini import GeminiInitializationError, GeminiTextGenerator, select_backend
from journalq.observability.telemetry import snapshot_counters


class FakeModel:
    def __init__(self, *script):
        self.script = list(script)
        self.calls = []

    async def generate_content_async(self, prompt, generation_config=None):
        self.calls.append((prompt, generation_config))
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return SimpleNamespace(text=item)


def _generator(model, recording_sleep, **kwargs):
    generator = GeminiTextGenerator(backend="genai", sleep=recording_sleep, **kwargs)
    generator._models[None] = model
    return generator


def test_requests_json_output(recording_sleep):
    model = FakeModel('{"insights": [], "suggestions": []}')
    generator = _generator(model, recording_sleep)

    text = asyncio.run(generator.generate("prompt"))

    assert text == '{"insights": [], "suggestions": []}'
    assert model.calls[0][1]["response_mime_type"] == "application/json"
    assert recording_sleep.delays == []


def test_transient_errors_retried_up_to_max_retries(recording_sleep):
    model = FakeModel(ServiceUnavailable("down"), ResourceExhausted("429"), "{}")
    generator = _generator(model, recording_sleep, max_retries=2)

    assert asyncio.run(generator.generate("prompt")) == "{}"
    assert len(model.calls) == 3
    assert len(recording_sleep.delays) == 2


def test_retries_exhausted_raises_converted_error(recording_sleep):
    model = FakeModel(ServiceUnavailable("down"), ServiceUnavailable("still down"))
    generator = _generator(model, recording_sleep, max_retries=1)

    with pytest.raises(ConnectionError):
        asyncio.run(generator.generate("prompt"))

    assert len(model.calls) == 2
    assert snapshot_counters("gemini.")["gemini.error"] == 1


def test_zero_retries_makes_one_call(recording_sleep):
    model = FakeModel(ServiceUnavailable("down"))
    generator = _generator(model, recording_sleep, max_retries=0)

    with pytest.raises(ConnectionError):
        asyncio.run(generator.generate("prompt"))

    assert len(model.calls) == 1


def test_non_transient_errors_are_not_retried(recording_sleep):
    model = FakeModel(InvalidArgument("bad request"))
    generator = _generator(model, recording_sleep)

    with pytest.raises(InvalidArgument):
        asyncio.run(generator.generate("prompt"))

    assert len(model.calls) == 1


def test_default_retry_count_comes_from_config():
    assert GeminiTextGenerator(backend="genai").max_retries == LLM_SDK_MAX_RETRIES


def test_select_backend_without_credentials(monkeypatch):
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setattr("journalq.llm.gemini.GOOGLE_CLOUD_PROJECT", None)

    with pytest.raises(GeminiInitializationError):
        select_backend()
