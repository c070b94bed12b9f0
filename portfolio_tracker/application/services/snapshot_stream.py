"""Replay-latest publish/subscribe for portfolio snapshots."""
from typing import Callable, Generic, List, TypeVar

from ...shared.logging import get_logger

T = TypeVar('T')

Unsubscribe = Callable[[], None]


class SnapshotStream(Generic[T]):
    """Holds the latest value and pushes every new one to subscribers.

    A new subscriber is called immediately with the current value.
    """

    def __init__(self, initial: T):
        self._value = initial
        self._subscribers: List[Callable[[T], None]] = []
        self.logger = get_logger(__name__)

    @property
    def value(self) -> T:
        return self._value

    def subscribe(self, callback: Callable[[T], None]) -> Unsubscribe:
        """Register ``callback``; returns a function that removes it again."""
        self._subscribers.append(callback)
        self._deliver(callback, self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, value: T) -> None:
        self._value = value
        for callback in list(self._subscribers):
            self._deliver(callback, value)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _deliver(self, callback: Callable[[T], None], value: T) -> None:
        # A failing subscriber must not stop the others or the publisher.
        try:
            callback(value)
        except Exception:
            self.logger.exception(f"Snapshot subscriber {callback!r} failed")
