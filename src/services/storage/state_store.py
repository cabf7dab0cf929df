"""
State Store

Loads and saves the whole AppState as one JSON blob under one fixed key.

GUARANTEES:
- load() never raises: missing, unreadable or corrupt data yields the
  empty default state (and is logged)
- save() never raises: a failed write is logged and reported as False,
  and the in-memory state carries on; the next mutation tries again
- Every load runs the snapshot through migrate_state first
"""

import json
from typing import Optional

import structlog
from pydantic import ValidationError

from src.models.ledger import AppState
from src.services.storage.interface import (
    CorruptStateError,
    StateStorageInterface,
    StorageError,
)
from src.services.storage.migrations import migrate_state


DEFAULT_STATE_KEY = "moneykeeper_data_v1"

logger = structlog.get_logger(__name__)


def default_state() -> AppState:
    """Empty state used on first start or when stored data is unusable."""
    return AppState()


class StateStore:
    """Persists AppState snapshots through a key/value storage backend."""

    def __init__(self, storage: StateStorageInterface, key: str = DEFAULT_STATE_KEY):
        self._storage = storage
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def parse(self, blob: str) -> AppState:
        """
        Parse, migrate and validate a stored blob.

        Raises:
            CorruptStateError: if the blob is not a usable snapshot
        """
        try:
            raw = json.loads(blob)
        except json.JSONDecodeError as e:
            raise CorruptStateError(f"State blob is not valid JSON: {e}") from e

        migrated = migrate_state(raw)
        try:
            return AppState.model_validate(migrated)
        except ValidationError as e:
            raise CorruptStateError(f"State blob failed validation: {e}") from e

    def load(self) -> AppState:
        """Load the persisted state, falling back to the empty default."""
        try:
            blob: Optional[str] = self._storage.read(self._key)
        except StorageError as e:
            logger.error("state_load_failed", key=self._key, error=str(e))
            return default_state()

        if not blob:
            logger.info("state_not_found", key=self._key)
            return default_state()

        try:
            state = self.parse(blob)
        except StorageError as e:
            logger.error("state_corrupt", key=self._key, error=str(e))
            return default_state()

        logger.info(
            "state_loaded",
            key=self._key,
            accounts=len(state.accounts),
            transactions=len(state.transactions),
            rules=len(state.automation_rules),
        )
        return state

    def save(self, state: AppState) -> bool:
        """
        Persist the state. Best effort: returns False instead of raising.
        """
        try:
            blob = json.dumps(state.to_snapshot(), ensure_ascii=False)
            self._storage.write(self._key, blob)
        except (StorageError, TypeError, ValueError) as e:
            logger.error("state_save_failed", key=self._key, error=str(e))
            return False

        return True
