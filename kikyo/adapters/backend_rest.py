"""HTTP gateway to the remapping backend's command interface.

Each command is sent as ``POST {base_url}/invoke/{command}`` with the
argument record as JSON body; the JSON response body is the command result.
Backend notifications arrive as a server-sent-event stream on
``GET {base_url}/events`` and are fanned out through an ``EventHub``.

Call context:
    Constructed once by ``kikyo.app.main`` and shared by every view model of
    the settings session. Nothing here caches results.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

from requests import exceptions as req_exc

from kikyo.domain.errors import BackendUnavailable
from kikyo.domain.layout_entries import LayoutId

from .api_errors import error_from_response
from .events import EventHub
from .http_client import HttpConfig, RetryingSession

AUTOSTART_NAMESPACE = "plugin:autostart|"

StopFn = Callable[[], bool]


class BackendRestAdapter:
    """Typed request/response wrapper; the sole I/O boundary to the backend."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        request_timeout_s: int = 10,
        retries: int = 2,
        events: Optional[EventHub] = None,
    ) -> None:
        if not base_url:
            raise ValueError("BackendRestAdapter requires a base URL")
        self._log = logging.getLogger(__name__)
        self.base_url = base_url.rstrip("/")
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.http = RetryingSession(api_key, self.cfg)
        self.events = events or EventHub()

    # ---------- generic command ----------

    def call(self, command: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        url = f"{self.base_url}/invoke/{quote(command, safe='')}"
        self._log.debug("invoke %s", command)
        resp = self.http.post(url, json_body=dict(args or {}))
        if resp.status_code >= 400:
            err = error_from_response(command, resp)
            self._log.warning("%s failed: %s", command, err.message)
            raise err
        if resp.status_code == 204 or not (getattr(resp, "text", "") or "").strip():
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise BackendUnavailable(
                f"{command}: invalid JSON response", command=command, status=resp.status_code
            ) from exc

    # ---------- profile ----------

    def get_profile(self) -> Dict[str, Any]:
        payload = self.call("get_profile")
        return dict(payload or {})

    def set_profile(self, profile: Mapping[str, Any]) -> None:
        self.call("set_profile", {"profile": dict(profile)})

    # ---------- layout entries ----------

    def get_layout_entries(self) -> Dict[str, Any]:
        payload = self.call("get_layout_entries") or {}
        return {
            "entries": list(payload.get("entries") or []),
            "active_layout_id": payload.get("active_layout_id"),
        }

    def create_layout_entry_from_path(self, path: str) -> Dict[str, Any]:
        return dict(self.call("create_layout_entry_from_path", {"path": path}) or {})

    def update_layout_entry(self, id: LayoutId, alias: str, path: str) -> None:
        self.call("update_layout_entry", {"id": id, "alias": alias, "path": path})

    def delete_layout_entry(self, id: LayoutId) -> None:
        self.call("delete_layout_entry", {"id": id})

    def reorder_layout_entries(self, ordered_ids: Sequence[LayoutId]) -> None:
        self.call("reorder_layout_entries", {"ordered_ids": list(ordered_ids)})

    def activate_layout_entry(self, id: LayoutId) -> str:
        return str(self.call("activate_layout_entry", {"id": id}) or "")

    # ---------- engine ----------

    def load_yab(self, path: str) -> str:
        return str(self.call("load_yab", {"path": path}) or "")

    def get_enabled(self) -> bool:
        return bool(self.call("get_enabled"))

    def set_enabled(self, enabled: bool) -> None:
        self.call("set_enabled", {"enabled": bool(enabled)})

    def get_app_version(self) -> str:
        return str(self.call("get_app_version") or "")

    # ---------- autostart ----------

    def autostart_enable(self) -> None:
        self.call(AUTOSTART_NAMESPACE + "enable")

    def autostart_disable(self) -> None:
        self.call(AUTOSTART_NAMESPACE + "disable")

    def autostart_is_enabled(self) -> bool:
        return bool(self.call(AUTOSTART_NAMESPACE + "is_enabled"))

    # ---------- notifications ----------

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> Callable[[], None]:
        return self.events.subscribe(event, handler)

    def listen_events(self, stop: Optional[StopFn] = None) -> None:
        """Block on the event stream and dispatch until it ends or ``stop()``.

        Intended for a background thread. Handlers run on that thread unless
        the hub was given a dispatcher.

        Raises:
            BackendError: The stream could not be opened, or it dropped while
                being read (``BackendUnavailable``).
        """
        url = f"{self.base_url}/events"
        resp = self.http.get(
            url,
            accept="text/event-stream",
            timeout=(self.cfg.request_timeout_s, None),
            stream=True,
        )
        if resp.status_code >= 400:
            raise error_from_response("events", resp)
        try:
            for event, data in parse_sse(resp.iter_lines(decode_unicode=True)):
                self.events.emit(event, data)
                if stop is not None and stop():
                    break
        except req_exc.RequestException as exc:
            raise BackendUnavailable(f"events: stream dropped: {exc}", command="events") from exc
        finally:
            resp.close()


def parse_sse(lines: Iterable[Any]) -> Iterable[Tuple[str, Any]]:
    """Yield ``(event, data)`` pairs from server-sent-event lines.

    ``data`` is JSON-decoded when possible; events without a name are
    ``"message"``, matching the event-stream format.
    """
    event = "message"
    data_lines = []
    for raw in lines:
        line = raw.decode("utf-8") if isinstance(raw, bytes) else (raw or "")
        if not line:
            if data_lines:
                yield event, _decode_data("\n".join(data_lines))
            event, data_lines = "message", []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        value = value[1:] if value.startswith(" ") else value
        if name == "event":
            event = value.strip() or "message"
        elif name == "data":
            data_lines.append(value)
    if data_lines:
        yield event, _decode_data("\n".join(data_lines))


def _decode_data(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return text
