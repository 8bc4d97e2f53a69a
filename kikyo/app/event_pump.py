"""Background event-stream reader and the GUI-thread pump that drains it.

The reader thread never touches widgets: ``EventHub`` hands each delivery to
``EventPump.put``, which only enqueues it. The presenter passes Tk ``after``
and ``after_cancel`` into the pump, and ``drain`` runs the queued deliveries
on the thread that owns the window.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional

from ..domain.errors import BackendError

ScheduleFn = Callable[[int, Callable[[], None]], str]
CancelFn = Callable[[str], None]

EVENT_RECONNECT_S = 5.0
PUMP_INTERVAL_MS = 50


class EventPump:
    """Thread-safe queue of deferred deliveries, drained by a UI timer."""

    def __init__(
        self,
        schedule: ScheduleFn,
        cancel: CancelFn,
        interval_ms: int = PUMP_INTERVAL_MS,
    ) -> None:
        """Store the UI scheduler callables.

        Args:
            schedule: Function compatible with ``after(delay_ms, callback)``.
            cancel: Function compatible with ``after_cancel(token)``.
            interval_ms: Delay between two drains.
        """
        self._log = logging.getLogger(__name__)
        self._schedule = schedule
        self._cancel = cancel
        self._interval_ms = max(1, int(interval_ms))
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._token: Optional[str] = None

    def put(self, delivery: Callable[[], None]) -> None:
        """Enqueue ``delivery``; safe to call from any thread."""
        self._queue.put(delivery)

    def drain(self) -> int:
        """Run every queued delivery on the calling thread; returns the count."""
        ran = 0
        while True:
            try:
                delivery = self._queue.get_nowait()
            except queue.Empty:
                return ran
            try:
                delivery()
            except Exception:
                self._log.exception("Queued event delivery failed")
            ran += 1

    def start(self) -> None:
        if self._token is None:
            self._token = self._schedule(self._interval_ms, self._tick)

    def stop(self) -> None:
        token, self._token = self._token, None
        if token is not None:
            self._cancel(token)

    @property
    def running(self) -> bool:
        return self._token is not None

    def _tick(self) -> None:
        if self._token is None:
            return
        self.drain()
        self._token = self._schedule(self._interval_ms, self._tick)


class EventListener:
    """Background reader for the backend event stream, reconnecting on drop.

    ``source`` is any object with ``listen_events(stop=...)`` (the REST
    gateway in production). Every failure ends the current connection only;
    the thread waits ``reconnect_s`` and connects again until ``stop()``.
    """

    def __init__(self, source: Any, reconnect_s: float = EVENT_RECONNECT_S) -> None:
        self._log = logging.getLogger(__name__)
        self._source = source
        self._reconnect_s = reconnect_s
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="kikyo-events", daemon=True)
        self.connects = 0

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the reader to exit; True when it has."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def _run(self) -> None:
        while not self._stop.is_set():
            self.connects += 1
            try:
                self._source.listen_events(stop=self._stop.is_set)
            except BackendError as exc:
                self._log.info("Event stream unavailable: %s", exc)
            except Exception:
                self._log.exception("Event stream reader failed; reconnecting")
            self._stop.wait(self._reconnect_s)


__all__ = ["EVENT_RECONNECT_S", "EventListener", "EventPump"]
