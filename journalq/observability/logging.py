"""Logger factory shared by every journalq module."""

from __future__ import annotations

import logging
import os
from typing import Final

_HANDLER_ATTACHED: bool = False
_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that flood INFO with per-request lines
_NOISY_LOGGERS: Final[tuple[str, ...]] = ("httpx", "google.auth", "urllib3", "grpc")


def _resolve_level() -> int:
    level_name = os.getenv("JOURNALQ_LOG_LEVEL") or os.getenv("LOG_LEVEL", "INFO")
    return getattr(logging, level_name.upper(), logging.INFO)


def _attach_root_handler(level: int) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; the first call attaches the root stream handler."""
    global _HANDLER_ATTACHED

    level = _resolve_level()

    if not _HANDLER_ATTACHED:
        _attach_root_handler(level)
        _HANDLER_ATTACHED = True
    else:
        logging.getLogger().setLevel(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
