"""
Local JSON File Storage

The default backend: one UTF-8 JSON file per key inside a data directory.
Writes go to a temporary file first and are then moved into place, so a
crash mid-write leaves the previous snapshot intact.
"""

import os
from pathlib import Path
from typing import Optional

from src.services.storage.interface import (
    CorruptStateError,
    StateStorageInterface,
    StorageError,
)


class LocalFileStateStorage(StateStorageInterface):
    """Stores each key as `<data_dir>/<key>.json`."""

    def __init__(self, data_dir: str | Path):
        self._data_dir = Path(data_dir)

    def _path_for(self, key: str) -> Path:
        safe_key = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return self._data_dir / f"{safe_key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CorruptStateError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def write(self, key: str, blob: str) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(blob, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e
