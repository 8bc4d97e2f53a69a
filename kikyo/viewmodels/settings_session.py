"""Per-window context for the settings surface.

One ``SettingsSession`` is created for each settings window. It owns the
profile store, the layout list and (once a view exists) the drag controller,
so no state lives at module level. Engine-wide toggles that are not part of
the profile document (enabled flag, autostart, app version, last layout path)
are tracked here as well.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from kikyo.domain.errors import BackendError
from kikyo.domain.ports import (
    ENABLED_STATE_CHANGED,
    LAST_LAYOUT_PATH_KEY,
    BackendPort,
    ClientStatePort,
    DragSurface,
    UseCaseError,
)
from kikyo.domain.profile import coerce_bool
from kikyo.usecases.error_mapping import map_backend_error
from kikyo.usecases.load_layout_file import LoadLayoutFile
from kikyo.usecases.set_autostart import SetAutostart
from kikyo.usecases.set_engine_enabled import SetEngineEnabled

from .drag_reorder import DragReorderController
from .layout_list_vm import LayoutEntryList
from .profile_store import ProfileStore

Listener = Callable[["SettingsSession"], None]


class SettingsSession:
    def __init__(self, backend: BackendPort, storage: ClientStatePort) -> None:
        self._log = logging.getLogger(__name__)
        self.backend = backend
        self.storage = storage
        self.profile = ProfileStore(backend)
        self.layouts = LayoutEntryList(backend)
        self.drag: Optional[DragReorderController] = None

        self.enabled: Optional[bool] = None
        self.autostart: Optional[bool] = None
        self.app_version: str = ""
        self.last_layout_path: str = ""
        self.status: str = ""

        self._load_layout_file = LoadLayoutFile(backend, storage)
        self._set_autostart = SetAutostart(backend)
        self._set_enabled = SetEngineEnabled(backend)
        self._unsubscribes: List[Callable[[], None]] = []
        self._listeners: List[Listener] = []

    def attach_surface(self, surface: DragSurface) -> DragReorderController:
        """Bind a drag controller to ``surface``, tearing down any previous one."""
        if self.drag is not None:
            self.drag.teardown()
        self.drag = DragReorderController(self.layouts, surface)
        return self.drag

    def on_changed(self, callback: Listener) -> None:
        self._listeners.append(callback)

    # ------------------------------------------------------------------
    def start(self) -> bool:
        """Load everything the window shows.

        Returns:
            ``False`` when the profile, the layout list or the engine state
            could not be read; the failure text is in ``status``.

        Side Effects:
            Replaces any earlier ``enabled-state-changed`` subscription, so
            calling ``start`` again (for example to retry) never doubles
            deliveries. Notifies listeners once at the end.
        """
        self._drop_subscriptions()
        self._unsubscribes.append(
            self.backend.subscribe(ENABLED_STATE_CHANGED, self._on_enabled_changed)
        )
        self.last_layout_path = self.storage.get_item(LAST_LAYOUT_PATH_KEY) or ""

        ok = True
        try:
            self.profile.load()
        except BackendError:
            self.status = self.profile.status
            ok = False
        if not self.layouts.refresh():
            self.status = self.layouts.status
            ok = False
        try:
            self.enabled = self.backend.get_enabled()
            self.app_version = self.backend.get_app_version()
        except BackendError as exc:
            self._report("Error reading engine state", exc)
            ok = False
        try:
            self.autostart = self.backend.autostart_is_enabled()
        except BackendError as exc:
            self._log.info("Autostart state unavailable: %s", exc)
            self.autostart = None
        self._notify()
        return ok

    def close(self) -> None:
        """End the session and release its event subscriptions and any drag."""
        if self.drag is not None:
            self.drag.teardown()
        self._drop_subscriptions()
        self._listeners.clear()

    # ------------------------------------------------------------------
    def set_enabled(self, enabled: bool) -> bool:
        """Turn remapping on or off; ``enabled`` changes only once confirmed."""
        try:
            self._set_enabled(enabled)
        except UseCaseError as err:
            self.status = f"Error: {err.message}"
            self._notify()
            return False
        self.enabled = bool(enabled)
        self.status = "Enabled" if enabled else "Disabled"
        self._notify()
        return True

    def load_layout_file(self, path: str) -> bool:
        """Load a layout file into the engine.

        Args:
            path: Layout file path as typed or picked by the user.

        Returns:
            ``True`` when the engine accepted the file.

        Side Effects:
            Remembers the path in the client-local store and refreshes the
            layout list, since loading may change the active entry.
        """
        self.status = "Loading..."
        self._notify()
        try:
            result = self._load_layout_file(path)
        except UseCaseError as err:
            self.status = f"Error: {err.message}"
            self._notify()
            return False
        self.last_layout_path = path.strip()
        self.status = f"Success: {result}"
        # load_yab may change which entry is active.
        self.layouts.refresh()
        self._notify()
        return True

    def set_autostart(self, enabled: bool) -> bool:
        try:
            self.autostart = self._set_autostart(enabled)
        except UseCaseError as err:
            self.status = f"Error: {err.message}"
            self._notify()
            return False
        self._notify()
        return True

    # ------------------------------------------------------------------
    def _on_enabled_changed(self, payload: Any) -> None:
        self.enabled = coerce_bool(payload)
        self._log.debug("enabled-state-changed: %s", self.enabled)
        self._notify()

    def _drop_subscriptions(self) -> None:
        while self._unsubscribes:
            self._unsubscribes.pop()()

    def _report(self, label: str, exc: BackendError) -> None:
        err = map_backend_error(exc, default_code="BACKEND_REQUEST_FAILED")
        self.status = f"{label}: {err.message}"
        self._log.warning("%s: %s", label, exc)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self)
