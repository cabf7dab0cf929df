"""Services package."""

from src.services.storage import (
    ConnectionError,
    CorruptStateError,
    InMemoryStateStorage,
    LocalFileStateStorage,
    StateStorageInterface,
    StateStore,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "CorruptStateError",
    "InMemoryStateStorage",
    "LocalFileStateStorage",
    "StateStorageInterface",
    "StateStore",
    "StorageError",
]
