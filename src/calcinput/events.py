from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

_LOG = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class ObserverDestroyedError(RuntimeError):
    pass


class EventObserver:
    """
    Synchronous fan-out of one event to its subscribers:
      - on(callback) registers a plain function, called in subscription order
      - off(callback) removes every registration of that function
      - trigger(payload) calls each subscriber inline with the payload
      - destroy() drops all subscribers; the observer is unusable afterwards

    Dispatch iterates over a snapshot of the subscriber list, so callbacks
    may subscribe or unsubscribe (themselves or others) while an event is
    being delivered; such changes apply from the next trigger on.
    """

    def __init__(self, name: str = "event") -> None:
        self.name = name
        self._handlers: list[Callback] | None = []

    def _live_handlers(self) -> list[Callback]:
        if self._handlers is None:
            raise ObserverDestroyedError(f"{self.name}: observer has been destroyed")
        return self._handlers

    @property
    def destroyed(self) -> bool:
        return self._handlers is None

    def destroy(self) -> None:
        self._handlers = None

    def on(self, callback: Callback) -> None:
        handlers = self._live_handlers()
        if not callable(callback):
            raise TypeError("callback must be callable")
        handlers.append(callback)

    def off(self, callback: Callback) -> None:
        self._handlers = [cb for cb in self._live_handlers() if cb is not callback]

    def count(self) -> int:
        return len(self._live_handlers())

    def trigger(self, payload: Any) -> None:
        for cb in list(self._live_handlers()):
            try:
                result = cb(payload)
            except Exception:
                _LOG.exception("%s: subscriber %r failed", self.name, cb)
                continue
            # detect accidental async def usage
            if hasattr(result, "__await__"):
                _LOG.warning(
                    "%s: subscriber %r returned an awaitable; callbacks must be sync functions",
                    self.name,
                    cb,
                )

    subscribe = on
    unsubscribe = off
    fire = trigger
