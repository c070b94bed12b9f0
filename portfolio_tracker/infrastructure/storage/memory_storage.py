"""In-process key-value storage."""
from typing import Dict, Optional

from ...domain.repositories.key_value_storage import IKeyValueStorage


class InMemoryKeyValueStorage(IKeyValueStorage):
    """Dictionary-backed storage; contents live as long as the instance."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
