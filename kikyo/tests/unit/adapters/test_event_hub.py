from typing import Any, Callable, List

from kikyo.adapters.events import EventHub


def test_emit_reaches_subscribers_until_unsubscribed() -> None:
    hub = EventHub()
    seen: List[Any] = []
    unsubscribe = hub.subscribe("evt", seen.append)

    assert hub.emit("evt", 1) == 1
    unsubscribe()
    unsubscribe()
    assert hub.emit("evt", 2) == 0
    assert seen == [1]


def test_failing_handler_does_not_block_others(caplog) -> None:
    hub = EventHub()
    seen: List[Any] = []

    def boom(_payload: Any) -> None:
        raise RuntimeError("handler bug")

    hub.subscribe("evt", boom)
    hub.subscribe("evt", seen.append)

    assert hub.emit("evt", "x") == 1
    assert seen == ["x"]
    assert "Handler for evt failed" in caplog.text


def test_dispatcher_defers_delivery() -> None:
    queued: List[Callable[[], None]] = []
    hub = EventHub(dispatcher=queued.append)
    seen: List[Any] = []
    hub.subscribe("evt", seen.append)

    assert hub.emit("evt", True) == 1
    assert seen == []
    queued.pop()()
    assert seen == [True]
