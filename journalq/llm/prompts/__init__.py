"""
Prompt templates for AI enrichment.

Templates live in .txt files beside this module so they can be edited without
touching code. Set JOURNALQ_ENRICHMENT_PROMPT to try an alternate user prompt.
"""

from __future__ import annotations

import os
from pathlib import Path

PROMPTS_DIR = Path(__file__).parent

ENRICHMENT_PROMPT_NAME = os.getenv("JOURNALQ_ENRICHMENT_PROMPT", "enrichment_user")


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self) -> None:
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load a prompt template from file.

        Args:
            prompt_name: Name of the prompt file (without .txt extension)

        Raises:
            FileNotFoundError: If no such template exists
        """
        if prompt_name not in self._cache:
            prompt_path = PROMPTS_DIR / f"{prompt_name}.txt"
            if not prompt_path.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_path}")
            self._cache[prompt_name] = prompt_path.read_text(encoding="utf-8")
        return self._cache[prompt_name]

    def get_system_instruction(self) -> str:
        return self.load_prompt("enrichment_system").strip()

    def get_enrichment_prompt(self, entry: str, metrics_json: str) -> str:
        template = self.load_prompt(ENRICHMENT_PROMPT_NAME)
        return template.format(entry=entry, metrics_json=metrics_json)

    def reload(self) -> None:
        self._cache.clear()


_loader = PromptLoader()


def get_system_instruction() -> str:
    return _loader.get_system_instruction()


def get_enrichment_prompt(entry: str, metrics_json: str) -> str:
    """Enrichment prompt with the entry and its metrics injected."""
    return _loader.get_enrichment_prompt(entry, metrics_json)


def reload_prompts() -> None:
    _loader.reload()
