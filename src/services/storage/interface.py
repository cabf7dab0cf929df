"""
Abstract Storage Interface

DESIGN DECISION: The application state is persisted as ONE opaque blob
under ONE fixed key. Backends only need to read and write strings;
parsing, migration and validation live in StateStore.

This allows us to:
1. Swap the local JSON file for Google Sheets (or anything else)
2. Use in-memory storage for testing
3. Keep the ledger logic decoupled from persistence
"""

from abc import ABC, abstractmethod
from typing import Optional


class StateStorageInterface(ABC):
    """
    Abstract key/value storage for state snapshots.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the blob stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored blob, or None if nothing is stored yet

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, blob: str) -> None:
        """
        Replace the blob stored under a key.

        Args:
            key: Storage key
            blob: Serialized state

        Raises:
            StorageError: If the write fails
        """
        pass


class InMemoryStateStorage(StateStorageInterface):
    """Dict-backed storage. Used when no backend is configured, and in tests."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class CorruptStateError(StorageError):
    """Stored blob could not be parsed into a state snapshot."""
    pass
