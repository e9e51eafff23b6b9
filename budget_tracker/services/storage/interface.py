"""
Abstract Storage Interface

DESIGN DECISION: Persistence is a plain key-value boundary.
This allows us to:
1. Swap the JSON file backend for something else later
2. Use in-memory storage for testing
3. Keep the budget logic decoupled from where bytes end up

The engine owns encoding (see codec.py); a backend only stores
JSON-compatible documents under string keys.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for the persistence boundary.

    Both operations are async: they are the only calls in the engine
    that may block or fail for reasons outside its control.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[dict[str, Any]]:
        """
        Read the document stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored document, or None if nothing is stored

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, blob: dict[str, Any]) -> bool:
        """
        Store a document under a key, replacing any previous one.

        Args:
            key: Storage key
            blob: JSON-compatible document

        Returns:
            True if stored successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove the document under a key.

        Returns:
            True if something was removed, False if the key was absent
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass


class SerializationError(StorageError):
    """A stored document could not be encoded or decoded."""
    pass
