"""Minimal synchronous event bus shared by the buffer, loop, and composer."""

from __future__ import annotations

from typing import Callable, Dict

Subscriber = Callable[[object], None]


class EventBus:
    """Fan structured signals out to subscribers in registration order."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Subscriber]] = {}

    def subscribe(self, event: str, callback: Subscriber) -> Callable[[], None]:
        bucket = self._subscribers.setdefault(event, [])
        bucket.append(callback)

        def unsubscribe() -> None:
            if callback in bucket:
                bucket.remove(callback)

        return unsubscribe

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, ())):
            callback(payload)


__all__ = ["EventBus", "Subscriber"]
