"""
Synchronous observer channels.

A Channel is an ordered listener list.  publish() calls every listener
in subscription order on the caller's stack, so observers see updates
in exactly the order they were produced.  Exceptions raised by a
listener are not caught: they propagate to whoever published.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]


class Channel(Generic[T]):
    """Typed, ordered, synchronous publish/subscribe list."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener | None) -> Callable[[], None]:
        """
        Register a listener.  None is accepted and ignored so optional
        callbacks can be passed straight through.

        Returns a function that removes the listener again.
        """
        if listener is None:
            return lambda: None

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, payload: T) -> None:
        for listener in list(self._listeners):
            listener(payload)

    def __len__(self) -> int:
        return len(self._listeners)
