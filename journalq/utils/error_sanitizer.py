"""
Error message sanitization utility.

Credentials that leak into exception text (LLM SDK errors echo API keys
surprisingly often) are masked before any message leaves the process.
"""

from __future__ import annotations

import re

from journalq.observability.logging import get_logger

logger = get_logger(__name__)

# (pattern, replacement) pairs applied in order
CREDENTIAL_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"key-[a-zA-Z0-9\-_]+"), "KEY-REDACTED"),
    (re.compile(r"sk-[a-zA-Z0-9\-_]+"), "SK-REDACTED"),
    (re.compile(r"AIza[0-9A-Za-z\-_]{20,}"), "GOOGLE-KEY-REDACTED"),
    (re.compile(r"Bearer [A-Za-z0-9._\-]+"), "Bearer REDACTED"),
]

# Patterns that leak internals; messages matching these are replaced wholesale
SENSITIVE_PATTERNS = [
    r"Traceback \(most recent call last\)",
    r"File \".*\"",
    r"/[^\s]+\.py",
    r"journalq\.[a-z_.]+",
]

GENERIC_MESSAGES = {
    400: "Invalid request. Please check your input and try again.",
    429: "Too many requests. Please try again later.",
    500: "An internal error occurred. Please try again later.",
    503: "Service temporarily unavailable.",
}


def redact_credentials(text: str | None) -> str:
    """Mask substrings that look like API keys or bearer tokens."""
    if not text:
        return ""
    for pattern, replacement in CREDENTIAL_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def sanitize_error_message(message: str | None, status_code: int = 500) -> str:
    """
    Sanitize an error message for client consumption.

    Credentials are always masked. Messages that still expose stack traces,
    file paths or module names fall back to a generic message for the status.
    """
    if not message:
        return GENERIC_MESSAGES.get(status_code, "An error occurred")

    cleaned = redact_credentials(message)

    for pattern in SENSITIVE_PATTERNS:
        if re.search(pattern, cleaned):
            logger.warning("Sanitized sensitive error pattern: %s", pattern)
            return GENERIC_MESSAGES.get(status_code, "An error occurred")

    return cleaned


def get_safe_error_detail(
    error: Exception,
    status_code: int = 500,
    context: str | None = None,
) -> str:
    """
    Get a safe error detail string for responses.

    Args:
        error: The exception that occurred
        status_code: HTTP status code
        context: Optional context used as the message for 5xx errors

    Returns:
        Safe error message for client
    """
    # Full error goes to the log, credentials masked even there
    logger.error(
        "Error (status=%d): %s - %s",
        status_code,
        type(error).__name__,
        redact_credentials(str(error)),
    )

    if context and status_code >= 500:
        return context
    return sanitize_error_message(str(error) or type(error).__name__, status_code)
