"""
Input validation utilities.

Validates journal payloads before any analysis runs. Failures raise
ValidationError, which callers surface as a 400 and never retry.
"""

from __future__ import annotations

from typing import Any

from journalq.config import BATCH_MAX_ENTRIES, ENTRY_MAX_CHARS, ENTRY_MIN_CHARS

INVALID_CONTENT_DETAILS = (
    f"Content must be a string between {ENTRY_MIN_CHARS} and {ENTRY_MAX_CHARS} characters"
)


class ValidationError(ValueError):
    """Raised when input validation fails."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, str]:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


def is_valid_content(content: Any) -> bool:
    """True when content is a string of 1-10000 characters."""
    if not content or not isinstance(content, str):
        return False
    return ENTRY_MIN_CHARS <= len(content) <= ENTRY_MAX_CHARS


def validate_entry_content(content: Any) -> str:
    """
    Validate a single journal entry body.

    Returns:
        The content unchanged

    Raises:
        ValidationError: If content is not a string of allowed length
    """
    if not is_valid_content(content):
        raise ValidationError("Invalid content", INVALID_CONTENT_DETAILS)
    return content


def validate_batch_entries(payload: Any) -> list[dict[str, Any]]:
    """
    Validate the batch payload envelope.

    Individual entry bodies are NOT validated here; an entry with bad content
    becomes an error descriptor in the batch result instead of failing the batch.

    Raises:
        ValidationError: If entries is missing, not a list, empty, or too large
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request body", "Request body must be a JSON object")

    entries = payload.get("entries")
    if not isinstance(entries, list):
        raise ValidationError("Invalid entries provided", "Entries must be an array")

    if len(entries) == 0:
        raise ValidationError("No entries provided", "At least one entry is required")

    if len(entries) > BATCH_MAX_ENTRIES:
        raise ValidationError(
            "Too many entries provided",
            f"A batch may contain at most {BATCH_MAX_ENTRIES} entries",
        )

    return [entry if isinstance(entry, dict) else {"content": entry} for entry in entries]
