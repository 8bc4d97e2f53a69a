from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Sequence

from .layout_entries import LayoutId

PointerId = int
EventHandler = Callable[[Any], None]
Unsubscribe = Callable[[], None]

LAST_LAYOUT_PATH_KEY = "kikyo_path"
ENABLED_STATE_CHANGED = "enabled-state-changed"


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


# ---- Ports (Hexagonal boundaries) ----
class BackendPort(Protocol):
    """Command/response interface of the remapping backend.

    Every method raises ``kikyo.domain.errors.BackendError`` subclasses on
    failure. Calls are independent; no ordering or atomicity across calls.
    """

    def call(self, command: str, args: Optional[Mapping[str, Any]] = None) -> Any: ...

    def get_profile(self) -> Dict[str, Any]: ...
    def set_profile(self, profile: Mapping[str, Any]) -> None: ...
    def get_layout_entries(self) -> Dict[str, Any]: ...  # {"entries": [...], "active_layout_id": id|None}
    def create_layout_entry_from_path(self, path: str) -> Dict[str, Any]: ...
    def update_layout_entry(self, id: LayoutId, alias: str, path: str) -> None: ...
    def delete_layout_entry(self, id: LayoutId) -> None: ...
    def reorder_layout_entries(self, ordered_ids: Sequence[LayoutId]) -> None: ...
    def activate_layout_entry(self, id: LayoutId) -> str: ...  # load result text
    def load_yab(self, path: str) -> str: ...
    def get_enabled(self) -> bool: ...
    def set_enabled(self, enabled: bool) -> None: ...
    def get_app_version(self) -> str: ...
    def autostart_enable(self) -> None: ...
    def autostart_disable(self) -> None: ...
    def autostart_is_enabled(self) -> bool: ...

    def subscribe(self, event: str, handler: EventHandler) -> Unsubscribe: ...


class ClientStatePort(Protocol):
    """Device-scoped key/value store owned by the client, not the backend."""

    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...


class DragSurface(Protocol):
    """Visual and input side of a reorderable list, as seen by the drag FSM."""

    def capture_pointer(self, pointer_id: PointerId) -> None: ...
    def release_pointer(self, pointer_id: PointerId) -> None: ...
    def set_row_lifted(self, entry_id: LayoutId, lifted: bool) -> None: ...
    def translate_row(self, entry_id: LayoutId, dy: float) -> None: ...
    def set_drop_target(self, entry_id: Optional[LayoutId]) -> None: ...
    def set_dragging(self, dragging: bool) -> None: ...
    def row_at(self, x: float, y: float) -> Optional[LayoutId]: ...
    def attach_pointer_listeners(self, pointer_id: PointerId) -> Callable[[], None]: ...
