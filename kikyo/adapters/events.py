"""Listener registry for notifications pushed by the backend."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from kikyo.domain.ports import ENABLED_STATE_CHANGED

Handler = Callable[[Any], None]
Dispatcher = Callable[[Callable[[], None]], None]


class EventHub:
    """Fan-out of named events to subscribed handlers.

    ``dispatcher`` (optional) receives a zero-argument callable per emitted
    event and decides where it runs. The Tk app passes ``EventPump.put`` so
    handlers fire on the UI thread even when events arrive on a reader thread.
    """

    def __init__(self, dispatcher: Optional[Dispatcher] = None) -> None:
        self._log = logging.getLogger(__name__)
        self._handlers: Dict[str, List[Handler]] = {}
        self._dispatcher = dispatcher

    def set_dispatcher(self, dispatcher: Optional[Dispatcher]) -> None:
        self._dispatcher = dispatcher

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        self._handlers.setdefault(event, []).append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, event: str, payload: Any = None) -> int:
        """Deliver ``payload`` to every handler of ``event``.

        Returns the number of handlers that ran without raising, or the number
        of handlers scheduled when a dispatcher is set.
        """
        if self._dispatcher is not None:
            self._dispatcher(lambda: self._deliver(event, payload))
            return self.handler_count(event)
        return self._deliver(event, payload)

    def handler_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def _deliver(self, event: str, payload: Any) -> int:
        delivered = 0
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception:
                self._log.exception("Handler for %s failed", event)
                continue
            delivered += 1
        return delivered


__all__ = ["ENABLED_STATE_CHANGED", "EventHub"]
