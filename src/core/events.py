"""Typed publish/subscribe channel.

Subscribers receive an explicit handle on subscribe and use it to
unsubscribe, so two listeners can never overwrite each other.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

_E = TypeVar("_E")


class Subscription:
    """Handle returned by ``EventChannel.subscribe``."""

    def __init__(self, detach: Callable[[], None]) -> None:
        self._detach: Callable[[], None] | None = detach

    @property
    def active(self) -> bool:
        return self._detach is not None

    def unsubscribe(self) -> None:
        """Stop receiving events. Calling twice is a no-op."""
        if self._detach is None:
            return
        detach = self._detach
        self._detach = None
        detach()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.unsubscribe()


class EventChannel(Generic[_E]):
    """Synchronous fan-out of typed events to registered callbacks."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._callbacks: dict[int, Callable[[_E], None]] = {}
        self._next_token = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._callbacks)

    def subscribe(self, callback: Callable[[_E], None]) -> Subscription:
        """Register a callback and return its subscription handle.

        Args:
            callback: Called with each emitted event.

        Returns:
            Handle used to unsubscribe.
        """
        token = self._next_token
        self._next_token += 1
        self._callbacks[token] = callback
        return Subscription(lambda: self._callbacks.pop(token, None))

    def emit(self, event: _E) -> None:
        """Deliver an event to every subscriber.

        A failing subscriber is logged and skipped; it never interrupts
        the emitter or the remaining subscribers.
        """
        for callback in list(self._callbacks.values()):
            try:
                callback(event)
            except Exception as error:
                _LOGGER.error(
                    "event_listener_failed",
                    channel=self._name,
                    error=str(error),
                    error_type=type(error).__name__,
                )
