"""
Storage Services Package

Provides the abstract key/value interface and concrete backends for the
state snapshot, plus migration and the StateStore that ties them together.
The Google Sheets backend is imported lazily so the default file backend
works without Google credentials.
"""

from src.services.storage.interface import (
    ConnectionError,
    CorruptStateError,
    InMemoryStateStorage,
    StateStorageInterface,
    StorageError,
)
from src.services.storage.local_file import LocalFileStateStorage
from src.services.storage.migrations import migrate_state
from src.services.storage.state_store import (
    DEFAULT_STATE_KEY,
    StateStore,
    default_state,
)

__all__ = [
    # Interfaces
    "StateStorageInterface",
    # Exceptions
    "ConnectionError",
    "CorruptStateError",
    "StorageError",
    # Backends
    "InMemoryStateStorage",
    "LocalFileStateStorage",
    # State store
    "DEFAULT_STATE_KEY",
    "StateStore",
    "default_state",
    "migrate_state",
]
