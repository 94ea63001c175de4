"""
Persistence layer for the adaptive UI engine.

- PersistenceStore: protocol the engine depends on
- InMemoryStore: dict-backed store for tests and embedding
- FileStore: one file per key on local disk
- StorageKeys: the three persisted key names
"""

from .keys import StorageKeys
from .store import FileStore, InMemoryStore, PersistenceStore

__all__ = [
    "StorageKeys",
    "PersistenceStore",
    "InMemoryStore",
    "FileStore",
]
