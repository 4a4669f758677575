"""Storage - key-value collaborator and the journal repository over it"""

from __future__ import annotations

from journalq.storage.repository import JournalRepository
from journalq.storage.store import InMemoryStore, KeyValueStore

__all__ = ["InMemoryStore", "JournalRepository", "KeyValueStore"]
