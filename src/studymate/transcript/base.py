"""Abstract base class for key-value persistence backends.

The abstraction hides:
- Storage format (dict, SQLite table, ...)
- Persistence mechanism (in-memory, file)
- Connection management
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract string key-value store.

    Values are opaque strings; serialization belongs to the caller.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the backend."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the backend gracefully."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
