"""
Storage Services Package

Provides the abstract key-value interface, two backends and the
budget snapshot codec.
"""

from typing import Optional

from budget_tracker.config import get_settings
from budget_tracker.services.storage.codec import (
    decode_budget_info,
    encode_budget_info,
)
from budget_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    SerializationError,
    StorageConnectionError,
    StorageError,
)
from budget_tracker.services.storage.json_file import JsonFileStorage
from budget_tracker.services.storage.memory import InMemoryStorage


def create_storage(backend: Optional[str] = None) -> KeyValueStorageInterface:
    """Build the backend named in settings (or the one given)."""
    settings = get_settings().storage
    backend = backend or settings.backend

    if backend == "memory":
        return InMemoryStorage()
    if backend == "json":
        return JsonFileStorage(settings.data_dir)
    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "SerializationError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
    "create_storage",
    # Codec
    "decode_budget_info",
    "encode_budget_info",
]
