"""
Gemini text generation adapter.

Supports two backends, chosen from configuration rather than from which SDK
happens to import:
  1. Vertex AI SDK (production, Cloud Run) - uses GOOGLE_CLOUD_PROJECT + service account
  2. google-generativeai (local dev) - uses GOOGLE_API_KEY

The enrichment client only depends on the TextGenerator protocol, so tests
substitute a fake generator and never touch either SDK.

Transient Google API errors (deadline, unavailable, internal, rate limited)
are retried inside generate() up to LLM_SDK_MAX_RETRIES times. This is the
SDK-level retry; the enrichment retry wrapper sits above it.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from journalq.config import LLM_SDK_MAX_RETRIES
from journalq.infrastructure.settings import (
    GEMINI_LOCATION,
    GEMINI_MAX_TOKENS,
    GEMINI_MODEL,
    GEMINI_TEMPERATURE,
    GOOGLE_CLOUD_PROJECT,
)
from journalq.observability.logging import get_logger
from journalq.observability.telemetry import counter

logger = get_logger(__name__)


class GeminiInitializationError(RuntimeError):
    """Raised when no Gemini backend can be configured."""


class TextGenerator(Protocol):
    """Anything that turns a prompt into model text."""

    async def generate(self, prompt: str, system_instruction: str | None = None) -> str: ...


def select_backend() -> str:
    """
    Pick the backend from configuration.

    Reads env vars fresh (settings may have been imported before dotenv ran).

    Raises:
        GeminiInitializationError: If neither credential is configured
    """
    if os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT:
        return "vertexai"
    if os.getenv("GOOGLE_API_KEY"):
        return "genai"
    raise GeminiInitializationError("Neither GOOGLE_CLOUD_PROJECT nor GOOGLE_API_KEY is set")


class GeminiTextGenerator:
    """TextGenerator backed by a Gemini model, async end to end."""

    def __init__(
        self,
        model_name: str = GEMINI_MODEL,
        temperature: float = GEMINI_TEMPERATURE,
        max_output_tokens: int = GEMINI_MAX_TOKENS,
        backend: str | None = None,
        max_retries: int = LLM_SDK_MAX_RETRIES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.model_name = model_name
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.backend = backend or select_backend()
        self.max_retries = max_retries
        self._sleep = sleep
        self._models: dict[str | None, Any] = {}
        self._configured = False

    def _configure(self) -> None:
        if self._configured:
            return
        try:
            if self.backend == "vertexai":
                import vertexai

                project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
                location = os.getenv("GEMINI_LOCATION", "") or GEMINI_LOCATION or "us-central1"
                vertexai.init(project=project, location=location)
                logger.info(
                    "Initialized Gemini (Vertex AI): project=%s, location=%s, model=%s",
                    project,
                    location,
                    self.model_name,
                )
            else:
                import google.generativeai as genai

                genai.configure(api_key=os.getenv("GOOGLE_API_KEY"))
                logger.info("Initialized Gemini (google-generativeai): model=%s", self.model_name)
        except ImportError as e:
            raise GeminiInitializationError(
                f"SDK for backend '{self.backend}' is not installed: {e}"
            ) from e
        self._configured = True

    def _model(self, system_instruction: str | None) -> Any:
        """One model instance per system instruction (instructions are per-model in Gemini)."""
        if system_instruction not in self._models:
            self._configure()
            if self.backend == "vertexai":
                from vertexai.generative_models import GenerativeModel

                model = GenerativeModel(self.model_name, system_instruction=system_instruction)
            else:
                import google.generativeai as genai

                model = genai.GenerativeModel(self.model_name, system_instruction=system_instruction)
            self._models[system_instruction] = model
        return self._models[system_instruction]

    async def _call_model(self, model: Any, prompt: str, generation_config: dict) -> str:
        """One SDK call, with transient Google API errors converted to builtin types."""
        from google.api_core.exceptions import (
            DeadlineExceeded,
            InternalServerError,
            ResourceExhausted,
            ServiceUnavailable,
        )

        try:
            response = await model.generate_content_async(
                prompt, generation_config=generation_config
            )
        except DeadlineExceeded as e:
            counter("gemini.timeout")
            raise TimeoutError(f"Gemini call timed out: {e}") from e
        except (ServiceUnavailable, InternalServerError) as e:
            counter("gemini.service_unavailable")
            logger.warning("Gemini unavailable, will retry: %s", e)
            raise ConnectionError(f"Gemini unavailable: {e}") from e
        except ResourceExhausted as e:
            counter("gemini.rate_limited")
            logger.warning("Gemini rate limited (429), will retry: %s", e)
            raise OSError(f"Gemini rate limited: {e}") from e
        return response.text

    async def generate(self, prompt: str, system_instruction: str | None = None) -> str:
        """
        Request JSON output for prompt.

        Side Effects:
            - Calls the Gemini API (network), at most 1 + max_retries times
            - Increments telemetry counters (gemini.call, gemini.error)
        """
        model = self._model(system_instruction)
        generation_config = {
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
            "response_mime_type": "application/json",
        }
        counter("gemini.call")
        retrying = AsyncRetrying(
            stop=stop_after_attempt(1 + max(0, self.max_retries)),
            wait=wait_exponential(multiplier=0.5, max=2),
            retry=retry_if_exception_type((TimeoutError, ConnectionError, OSError)),
            sleep=self._sleep,
            reraise=True,
        )
        try:
            return await retrying(self._call_model, model, prompt, generation_config)
        except Exception:
            counter("gemini.error")
            raise
