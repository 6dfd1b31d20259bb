"""Append-only output/reasoning buffers with debounced change notification."""

import asyncio
from typing import Callable

Listener = Callable[[], None]

DEBOUNCE_SECONDS = 0.016


class LogStore:
    """Two text buffers that only grow, plus subscribers told about growth.

    Notifications are coalesced: the first append schedules a notification
    one debounce window later, and appends made before it fires ride along.
    Without a running event loop, listeners are notified immediately.
    """

    def __init__(self, debounce_seconds: float = DEBOUNCE_SECONDS) -> None:
        self.debounce_seconds = debounce_seconds
        self._output: list[str] = []
        self._reasoning: list[str] = []
        self._listeners: list[Listener] = []
        self._pending: asyncio.TimerHandle | None = None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def append_output(self, text: str) -> None:
        self._output.append(text)
        self._schedule_notify()

    def append_reasoning(self, text: str) -> None:
        self._reasoning.append(text)
        self._schedule_notify()

    @property
    def output(self) -> str:
        return "".join(self._output)

    @property
    def reasoning(self) -> str:
        return "".join(self._reasoning)

    def clear(self) -> None:
        self._output.clear()
        self._reasoning.clear()
        self._cancel_pending()
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _flush(self) -> None:
        self._pending = None
        self._notify()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _schedule_notify(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._notify()
            return
        if self._pending is not None:
            return
        self._pending = loop.call_later(self.debounce_seconds, self._flush)
