"""In-memory storage backend, used for tests and the ``memory`` setting."""

import copy
import json
from typing import Any, Optional

from budget_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    SerializationError,
)


class InMemoryStorage(KeyValueStorageInterface):
    """
    Keeps documents in a dict.

    Documents are round-tripped through JSON on write so that anything a
    file backend could not store is rejected here too.
    """

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        blob = self._data.get(key)
        return copy.deepcopy(blob) if blob is not None else None

    async def set(self, key: str, blob: dict[str, Any]) -> bool:
        try:
            self._data[key] = json.loads(json.dumps(blob))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Document for {key!r} is not JSON-serializable: {e}")
        return True

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)
