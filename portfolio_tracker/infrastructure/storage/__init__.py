"""Local key-value storage backends."""
from .sqlite_storage import SqliteKeyValueStorage
from .memory_storage import InMemoryKeyValueStorage

__all__ = ['SqliteKeyValueStorage', 'InMemoryKeyValueStorage']
