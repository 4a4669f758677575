"""
AI enrichment client: narrative insights and suggestions for one entry.

Safety features:
- Cache results by (entry text, metrics fingerprint) for 30 minutes
- Bounded call time; a timeout is a retryable EnrichmentError
- Strict schema validation on every model response
- Journal text is hashed before it reaches any log line
- Credential-looking substrings are redacted from error text

The client makes exactly one external call per invocation. Retrying is the
job of journalq.infrastructure.retry; falling back to local insights is the
job of the analysis service.
"""

from __future__ import annotations

import asyncio
import json
import re
from collections.abc import Callable
from dataclasses import replace

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from journalq.config import LLM_TIMEOUT_SECONDS, USE_AI_ENRICHMENT
from journalq.infrastructure.settings import has_llm_credentials
from journalq.journal.enrichment_cache import EnrichmentCache
from journalq.journal.models import AnalysisSource, EnrichedAnalysis, Metrics
from journalq.llm.gemini import GeminiInitializationError, GeminiTextGenerator, TextGenerator
from journalq.llm.prompts import get_enrichment_prompt, get_system_instruction
from journalq.observability.logging import get_logger
from journalq.observability.telemetry import counter, log_event, time_block
from journalq.utils.error_sanitizer import redact_credentials
from journalq.utils.redaction import redact, sanitize_for_prompt

logger = get_logger(__name__)

_CODE_FENCE_OPEN = re.compile(r"^```(?:json)?\s*")
_CODE_FENCE_CLOSE = re.compile(r"\s*```$")


class EnrichmentFailure(RuntimeError):
    """Base class for enrichment failures the service falls back from."""


class EnrichmentUnavailable(EnrichmentFailure):
    """No credential or configuration for the AI capability. Not retried."""


class EnrichmentError(EnrichmentFailure):
    """Transient call or response-format failure. Retried."""


class EnrichmentSchema(BaseModel):
    """Required shape of the model's JSON response."""

    insights: list[str]
    suggestions: list[str]


def parse_enrichment_response(response_text: str) -> EnrichmentSchema:
    """
    Parse model text into EnrichmentSchema.

    Raises:
        EnrichmentError: If the text is not JSON with both string arrays
    """
    json_text = (response_text or "").strip()
    if json_text.startswith("```"):
        counter("enrichment.code_fence_fallback")
        json_text = _CODE_FENCE_CLOSE.sub("", _CODE_FENCE_OPEN.sub("", json_text))

    try:
        data = json.loads(json_text)
    except json.JSONDecodeError as exc:
        counter("enrichment.schema_validation_failures")
        raise EnrichmentError(f"AI response is not valid JSON: {exc}") from exc

    try:
        return EnrichmentSchema.model_validate(data)
    except SchemaValidationError as exc:
        counter("enrichment.schema_validation_failures")
        log_event("enrichment.schema_validation_failed", errors=exc.error_count())
        raise EnrichmentError("AI response does not match the insights/suggestions shape") from exc


class EnrichmentClient:
    """One-shot AI enrichment with a cache in front of it."""

    def __init__(
        self,
        generator: TextGenerator | None = None,
        cache: EnrichmentCache | None = None,
        timeout_seconds: float = LLM_TIMEOUT_SECONDS,
        enabled: bool = USE_AI_ENRICHMENT,
        generator_factory: Callable[[], TextGenerator] = GeminiTextGenerator,
    ) -> None:
        """
        Args:
            generator: Text generator to call; built lazily from config when None
            cache: Shared enrichment cache (a private one is created when None)
            timeout_seconds: Upper bound on one model call
            enabled: Feature flag; when False every call is EnrichmentUnavailable
            generator_factory: Builds the default generator when credentials exist
        """
        self.cache = cache if cache is not None else EnrichmentCache()
        self.timeout_seconds = timeout_seconds
        self.enabled = enabled
        self._generator = generator
        self._generator_factory = generator_factory

    def _resolve_generator(self) -> TextGenerator:
        if not self.enabled:
            counter("enrichment.disabled")
            raise EnrichmentUnavailable("AI enrichment is disabled")
        if self._generator is not None:
            return self._generator
        if not has_llm_credentials():
            counter("enrichment.unconfigured")
            raise EnrichmentUnavailable("AI credentials not configured")
        try:
            self._generator = self._generator_factory()
        except GeminiInitializationError as exc:
            raise EnrichmentUnavailable(str(exc)) from exc
        return self._generator

    async def enrich(self, text: str, metrics: Metrics) -> EnrichedAnalysis:
        """
        Enrich one entry.

        Returns:
            EnrichedAnalysis; cached=True only when served from the cache

        Raises:
            EnrichmentUnavailable: No credential/configuration
            EnrichmentError: Call failed, timed out, or returned a bad shape

        Side Effects:
            - Reads and writes the enrichment cache
            - Calls the external model (network) on a cache miss
            - Increments telemetry counters (enrichment.*)
        """
        key = self.cache.make_key(text, metrics)
        cached = self.cache.get(key)
        if cached is not None:
            log_event("enrichment.cache_hit", entry=redact(text))
            return replace(cached, metrics=metrics, cached=True)

        generator = self._resolve_generator()
        prompt = get_enrichment_prompt(
            entry=sanitize_for_prompt(text),
            metrics_json=json.dumps(metrics.to_dict(), indent=2),
        )

        log_event("enrichment.call_start", entry=redact(text))
        try:
            with time_block("enrichment.latency"):
                raw = await asyncio.wait_for(
                    generator.generate(prompt, system_instruction=get_system_instruction()),
                    timeout=self.timeout_seconds,
                )
        except asyncio.TimeoutError as exc:
            counter("enrichment.timeout")
            logger.warning("Enrichment call timed out after %ss", self.timeout_seconds)
            raise EnrichmentError(f"AI call timed out after {self.timeout_seconds}s") from exc
        except GeminiInitializationError as exc:
            raise EnrichmentUnavailable(str(exc)) from exc
        except Exception as exc:
            counter("enrichment.call_error")
            message = redact_credentials(str(exc))
            log_event("enrichment.call_error", error=message, entry=redact(text))
            raise EnrichmentError(f"AI analysis failed: {message}") from exc

        parsed = parse_enrichment_response(raw)
        analysis = EnrichedAnalysis(
            metrics=metrics,
            insights=tuple(parsed.insights),
            suggestions=tuple(parsed.suggestions),
            cached=False,
            source=AnalysisSource.AI,
        )
        self.cache.put(key, analysis)
        counter("enrichment.success")
        return analysis
