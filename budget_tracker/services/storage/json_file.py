"""
JSON File Storage Implementation

DESIGN DECISION: One JSON document per key, in a single directory.
1. The user can open and read their data directly
2. No database setup required
3. Writes go to a temporary file first and are moved into place,
   so a failed write never leaves a half-written snapshot behind

TRADEOFFS:
- Whole-document rewrites on every save (fine for one person's expenses)
- Keys must be safe file names
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

import structlog

from budget_tracker.config import get_settings
from budget_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    SerializationError,
    StorageConnectionError,
    StorageError,
)

logger = structlog.get_logger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStorage(KeyValueStorageInterface):
    """Stores each key as ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: Optional[str | Path] = None):
        self._data_dir = Path(data_dir or get_settings().storage.data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key) or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}.json"

    def _ensure_dir(self) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageConnectionError(f"Cannot create data directory {self._data_dir}: {e}")

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        """Read the document stored under a key."""
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            with path.open("r", encoding="utf-8") as fp:
                blob = json.load(fp)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Corrupt document in {path}: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}")

        if not isinstance(blob, dict):
            raise SerializationError(f"Expected a JSON object in {path}")
        return blob

    async def set(self, key: str, blob: dict[str, Any]) -> bool:
        """Atomically replace the document under a key."""
        path = self._path_for(key)
        self._ensure_dir()

        try:
            payload = json.dumps(blob, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Document for {key!r} is not JSON-serializable: {e}")

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._data_dir,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write {path}: {e}")

        logger.debug("document_written", key=key, path=str(path), size=len(payload))
        return True

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}")
        return True
