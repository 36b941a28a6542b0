"""Typed publish/subscribe used between the simulation stages and their observers."""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

Listener = Callable[[], None]


@runtime_checkable
class ParameterObserver(Protocol):
    def on_parameters_changed(self) -> None:
        ...


class Notifier:
    """Ordered list of payload-free listeners.

    Listeners are called synchronously in subscription order. Subscribing
    the same callable twice is a no-op, and the listener list is copied
    before each notification so callbacks may unsubscribe themselves.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self) -> None:
        self._listeners.clear()

    def notify(self) -> None:
        for listener in tuple(self._listeners):
            listener()

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners
