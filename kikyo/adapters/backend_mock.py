from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Sequence, Tuple

from kikyo.domain.errors import BackendError, NotFound, ValidationRejected
from kikyo.domain.layout_entries import LayoutId, fallback_alias_from_path
from kikyo.domain.profile import Profile

from .events import ENABLED_STATE_CHANGED, EventHub

DUPLICATE_LAYOUT_PATH_MESSAGE = "Layout file is already registered"


def _normalize_path_for_compare(path: str) -> str:
    if os.name == "nt":
        return path.strip().replace("/", "\\").lower()
    return path.strip()


@dataclass
class BackendMock:
    """Offline substitute for ``BackendRestAdapter`` with backend semantics.

    Keeps entries, active id, profile and flags in memory. ``fail_next`` arms
    a one-shot failure for a command so reconciliation paths can be driven
    deterministically.
    """

    profile: Dict[str, Any] = field(default_factory=lambda: Profile().to_dict())
    enabled: bool = True
    autostart: bool = False
    version: str = "0.0.0-mock"
    events: EventHub = field(default_factory=EventHub)

    def __post_init__(self) -> None:
        self.entries: List[Dict[str, Any]] = []
        self.active_layout_id: Optional[LayoutId] = None
        self.last_layout_path: Optional[str] = None
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self._failures: Dict[str, List[BackendError]] = {}
        self._hooks: Dict[str, Callable[[Dict[str, Any]], None]] = {}
        self._seq = 0

    # ---------- test controls ----------

    def fail_next(self, command: str, error: Optional[BackendError] = None) -> None:
        err = error or BackendError(f"{command}: injected failure", command=command)
        self._failures.setdefault(command, []).append(err)

    def on_call(self, command: str, hook: Callable[[Dict[str, Any]], None]) -> None:
        """Run ``hook(args)`` before ``command`` executes (one-shot)."""
        self._hooks[command] = hook

    def calls_for(self, command: str) -> List[Dict[str, Any]]:
        return [args for name, args in self.calls if name == command]

    def seed_entries(self, *paths: str) -> List[Dict[str, Any]]:
        created = [self._create(path) for path in paths]
        return copy.deepcopy(created)

    def toggle_enabled_from_hotkey(self) -> None:
        self.enabled = not self.enabled
        self.events.emit(ENABLED_STATE_CHANGED, self.enabled)

    # ---------- BackendPort ----------

    def call(self, command: str, args: Optional[Mapping[str, Any]] = None) -> Any:
        payload = dict(args or {})
        self.calls.append((command, copy.deepcopy(payload)))
        hook = self._hooks.pop(command, None)
        if hook is not None:
            hook(payload)
        pending = self._failures.get(command)
        if pending:
            raise pending.pop(0)
        handler = self._COMMANDS.get(command)
        if handler is None:
            raise NotFound(f"Unknown command: {command}", command=command)
        return handler(self, payload)

    def get_profile(self) -> Dict[str, Any]:
        return self.call("get_profile")

    def set_profile(self, profile: Mapping[str, Any]) -> None:
        self.call("set_profile", {"profile": dict(profile)})

    def get_layout_entries(self) -> Dict[str, Any]:
        return self.call("get_layout_entries")

    def create_layout_entry_from_path(self, path: str) -> Dict[str, Any]:
        return self.call("create_layout_entry_from_path", {"path": path})

    def update_layout_entry(self, id: LayoutId, alias: str, path: str) -> None:
        self.call("update_layout_entry", {"id": id, "alias": alias, "path": path})

    def delete_layout_entry(self, id: LayoutId) -> None:
        self.call("delete_layout_entry", {"id": id})

    def reorder_layout_entries(self, ordered_ids: Sequence[LayoutId]) -> None:
        self.call("reorder_layout_entries", {"ordered_ids": list(ordered_ids)})

    def activate_layout_entry(self, id: LayoutId) -> str:
        return self.call("activate_layout_entry", {"id": id})

    def load_yab(self, path: str) -> str:
        return self.call("load_yab", {"path": path})

    def get_enabled(self) -> bool:
        return self.call("get_enabled")

    def set_enabled(self, enabled: bool) -> None:
        self.call("set_enabled", {"enabled": bool(enabled)})

    def get_app_version(self) -> str:
        return self.call("get_app_version")

    def autostart_enable(self) -> None:
        self.call("plugin:autostart|enable")

    def autostart_disable(self) -> None:
        self.call("plugin:autostart|disable")

    def autostart_is_enabled(self) -> bool:
        return self.call("plugin:autostart|is_enabled")

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> Callable[[], None]:
        return self.events.subscribe(event, handler)

    # ---------- command handlers ----------

    def _get_profile(self, _args: Dict[str, Any]) -> Dict[str, Any]:
        return copy.deepcopy(self.profile)

    def _set_profile(self, args: Dict[str, Any]) -> None:
        profile = args.get("profile")
        if not isinstance(profile, Mapping):
            raise ValidationRejected("set_profile: profile must be an object", command="set_profile")
        self.profile = copy.deepcopy(dict(profile))

    def _get_layout_entries(self, _args: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "entries": copy.deepcopy(self.entries),
            "active_layout_id": self.active_layout_id,
        }

    def _create(self, path: str) -> Dict[str, Any]:
        path = (path or "").strip()
        if not path:
            raise ValidationRejected("Path is empty", command="create_layout_entry_from_path")
        normalized = _normalize_path_for_compare(path)
        if any(_normalize_path_for_compare(e["path"]) == normalized for e in self.entries):
            raise ValidationRejected(
                DUPLICATE_LAYOUT_PATH_MESSAGE, command="create_layout_entry_from_path"
            )
        self._seq += 1
        name = fallback_alias_from_path(path)
        entry = {"id": f"layout-{self._seq}", "alias": name, "layout_name": name, "path": path}
        self.entries.append(entry)
        if self.active_layout_id is None:
            self.active_layout_id = entry["id"]
            self.last_layout_path = path
        return entry

    def _create_layout_entry_from_path(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return copy.deepcopy(self._create(str(args.get("path") or "")))

    def _find(self, entry_id: Any, command: str) -> Dict[str, Any]:
        for entry in self.entries:
            if entry["id"] == entry_id:
                return entry
        raise NotFound("Layout entry not found", command=command)

    def _update_layout_entry(self, args: Dict[str, Any]) -> None:
        path = str(args.get("path") or "").strip()
        if not path:
            raise ValidationRejected("Path is empty", command="update_layout_entry")
        entry = self._find(args.get("id"), "update_layout_entry")
        if entry["path"] != path:
            entry["layout_name"] = fallback_alias_from_path(path)
        entry["path"] = path
        alias = str(args.get("alias") or "").strip()
        entry["alias"] = alias or entry["layout_name"]
        if entry["id"] == self.active_layout_id:
            self.last_layout_path = path

    def _delete_layout_entry(self, args: Dict[str, Any]) -> None:
        entry = self._find(args.get("id"), "delete_layout_entry")
        self.entries.remove(entry)
        if self.active_layout_id == entry["id"]:
            self.active_layout_id = self.entries[0]["id"] if self.entries else None
            self.last_layout_path = self.entries[0]["path"] if self.entries else self.last_layout_path

    def _reorder_layout_entries(self, args: Dict[str, Any]) -> None:
        ordered = list(args.get("ordered_ids") or [])
        if len(ordered) != len(self.entries):
            raise ValidationRejected("Invalid number of layout ids", command="reorder_layout_entries")
        by_id = {entry["id"]: entry for entry in self.entries}
        reordered = []
        for entry_id in ordered:
            entry = by_id.pop(entry_id, None)
            if entry is None:
                raise ValidationRejected("Unknown layout id", command="reorder_layout_entries")
            reordered.append(entry)
        self.entries = reordered

    def _activate_layout_entry(self, args: Dict[str, Any]) -> str:
        entry = self._find(args.get("id"), "activate_layout_entry")
        self.active_layout_id = entry["id"]
        self.last_layout_path = entry["path"]
        return f"Loaded {entry['alias'] or entry['layout_name']}"

    def _load_yab(self, args: Dict[str, Any]) -> str:
        path = str(args.get("path") or "").strip()
        if not path:
            raise ValidationRejected("Path is empty", command="load_yab")
        self.last_layout_path = path
        match = next((e for e in self.entries if e["path"] == path), None)
        self.active_layout_id = match["id"] if match else None
        return f"Loaded {fallback_alias_from_path(path)}"

    def _get_enabled(self, _args: Dict[str, Any]) -> bool:
        return self.enabled

    def _set_enabled(self, args: Dict[str, Any]) -> None:
        self.enabled = bool(args.get("enabled"))

    def _get_app_version(self, _args: Dict[str, Any]) -> str:
        return self.version

    def _autostart_enable(self, _args: Dict[str, Any]) -> None:
        self.autostart = True

    def _autostart_disable(self, _args: Dict[str, Any]) -> None:
        self.autostart = False

    def _autostart_is_enabled(self, _args: Dict[str, Any]) -> bool:
        return self.autostart

    _COMMANDS: ClassVar[Dict[str, Callable[["BackendMock", Dict[str, Any]], Any]]] = {
        "get_profile": _get_profile,
        "set_profile": _set_profile,
        "get_layout_entries": _get_layout_entries,
        "create_layout_entry_from_path": _create_layout_entry_from_path,
        "update_layout_entry": _update_layout_entry,
        "delete_layout_entry": _delete_layout_entry,
        "reorder_layout_entries": _reorder_layout_entries,
        "activate_layout_entry": _activate_layout_entry,
        "load_yab": _load_yab,
        "get_enabled": _get_enabled,
        "set_enabled": _set_enabled,
        "get_app_version": _get_app_version,
        "plugin:autostart|enable": _autostart_enable,
        "plugin:autostart|disable": _autostart_disable,
        "plugin:autostart|is_enabled": _autostart_is_enabled,
    }
