from __future__ import annotations

import threading
from typing import Any, Callable, List, Optional

from requests import exceptions as req_exc

from kikyo.adapters.events import EventHub
from kikyo.app.event_pump import EventListener, EventPump
from kikyo.domain.errors import BackendUnavailable
from kikyo.domain.ports import ENABLED_STATE_CHANGED


class WinStub:
    def __init__(self) -> None:
        self.after_calls: List[tuple] = []
        self.after_cancelled: List[str] = []

    def after(self, delay: int, callback: Callable[[], None]) -> str:
        self.after_calls.append((delay, callback))
        return f"after-{len(self.after_calls)}"

    def after_cancel(self, token: str) -> None:
        self.after_cancelled.append(token)


class DroppingSource:
    """Event source whose first connection emits once, then drops mid-stream."""

    def __init__(self, hub: EventHub, failures: List[Exception]) -> None:
        self.hub = hub
        self.failures = list(failures)
        self.calls = 0
        self.reconnected = threading.Event()

    def listen_events(self, stop: Optional[Callable[[], bool]] = None) -> None:
        self.calls += 1
        if self.failures:
            self.hub.emit(ENABLED_STATE_CHANGED, False)
            raise self.failures.pop(0)
        self.hub.emit(ENABLED_STATE_CHANGED, True)
        self.reconnected.set()


def test_reader_thread_only_enqueues_until_gui_drains() -> None:
    win = WinStub()
    pump = EventPump(win.after, win.after_cancel)
    hub = EventHub(dispatcher=pump.put)
    seen: List[Any] = []
    hub.subscribe(ENABLED_STATE_CHANGED, seen.append)

    reader = threading.Thread(target=lambda: hub.emit(ENABLED_STATE_CHANGED, True))
    reader.start()
    reader.join(2)

    assert seen == []
    assert win.after_calls == []
    assert pump.drain() == 1
    assert seen == [True]


def test_pump_reschedules_itself_and_stops_cleanly() -> None:
    win = WinStub()
    pump = EventPump(win.after, win.after_cancel, interval_ms=50)
    seen: List[int] = []

    pump.start()
    pump.start()
    assert len(win.after_calls) == 1
    assert win.after_calls[0][0] == 50

    pump.put(lambda: seen.append(1))
    win.after_calls[-1][1]()
    assert seen == [1]
    assert len(win.after_calls) == 2

    pump.stop()
    assert win.after_cancelled == ["after-2"]
    assert not pump.running
    win.after_calls[-1][1]()
    assert len(win.after_calls) == 2


def test_failing_delivery_does_not_block_the_queue(caplog) -> None:
    pump = EventPump(WinStub().after, WinStub().after_cancel)
    seen: List[str] = []

    def boom() -> None:
        raise RuntimeError("handler bug")

    pump.put(boom)
    pump.put(lambda: seen.append("next"))

    assert pump.drain() == 2
    assert seen == ["next"]
    assert "Queued event delivery failed" in caplog.text


def test_listener_reconnects_after_stream_drops() -> None:
    hub = EventHub()
    seen: List[Any] = []
    hub.subscribe(ENABLED_STATE_CHANGED, seen.append)
    source = DroppingSource(
        hub,
        [
            req_exc.ChunkedEncodingError("connection dropped mid-stream"),
            BackendUnavailable("events: stream dropped"),
        ],
    )
    listener = EventListener(source, reconnect_s=0.01)

    listener.start()
    try:
        assert source.reconnected.wait(2)
    finally:
        listener.stop()
    assert listener.join(2)

    assert source.calls >= 3
    assert listener.connects == source.calls
    assert seen[:3] == [False, False, True]


def test_listener_stops_without_connecting_again() -> None:
    source = DroppingSource(EventHub(), [])
    listener = EventListener(source, reconnect_s=10)

    listener.start()
    assert source.reconnected.wait(2)
    listener.stop()

    assert listener.join(2)
    assert listener.stopped
    assert source.calls == 1
