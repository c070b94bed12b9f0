"""Local key-value storage interface."""
from abc import ABC, abstractmethod
from typing import Optional


class IKeyValueStorage(ABC):
    """Interface for a local string key-value store.

    Implementations raise ``StorageError`` on read/write failure.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Get the value stored under ``key``, or None if absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key`` if present."""
        pass
