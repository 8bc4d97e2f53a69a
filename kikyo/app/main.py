# kikyo/app/main.py
from __future__ import annotations

import logging
import os
from typing import Any, Optional, Tuple

# ---- Event stream plumbing ----
from .event_pump import EventListener, EventPump

# ---- Views (UI-only) ----
from .views.layout_list_view import LayoutListView
from .views.settings_window import SettingsWindow

# ---- ViewModels ----
from ..viewmodels.about_vm import build_about
from ..viewmodels.layout_list_vm import LayoutEntryList
from ..viewmodels.profile_store import OVERLAP_FIELDS, ProfileStore
from ..viewmodels.settings_session import SettingsSession

# ---- Adapters ----
from ..adapters.backend_mock import BackendMock
from ..adapters.backend_rest import BackendRestAdapter
from ..adapters.events import EventHub
from ..adapters.storage_local import StorageLocal
from ..domain.ports import BackendPort
from ..domain.profile import ThumbSide
from ..utils import logging as logging_utils

logging_utils.configure_root()

DEFAULT_BACKEND_URL = "http://127.0.0.1:47913"


def build_backend(events: EventHub) -> Tuple[BackendPort, Optional[BackendRestAdapter]]:
    """Pick the backend from the environment; second item is set for REST."""
    if logging_utils.env_truthy(os.getenv("KIKYO_DEMO")):
        mock = BackendMock(events=events)
        mock.seed_entries(r"C:\layouts\shin-geta.yab", r"C:\layouts\nicola.yab")
        return mock, None
    rest = BackendRestAdapter(
        os.getenv("KIKYO_BACKEND_URL") or DEFAULT_BACKEND_URL,
        api_key=os.getenv("KIKYO_API_KEY") or None,
        events=events,
    )
    return rest, rest


def default_state_dir() -> str:
    return os.getenv("KIKYO_STATE_DIR") or os.path.join(os.path.expanduser("~"), ".kikyo")


class App:
    """Bootstrap: wire the settings window to one SettingsSession."""

    def __init__(self) -> None:
        self._log = logging.getLogger(__name__)
        self.events = EventHub()
        self.backend, rest = build_backend(self.events)
        self.storage = StorageLocal(default_state_dir())
        self.session = SettingsSession(self.backend, self.storage)

        self.win = SettingsWindow(
            on_toggle_enabled=self.session.set_enabled,
            on_toggle_autostart=self.session.set_autostart,
            on_load_file=self.session.load_layout_file,
            on_add_entry=self._on_add_entry,
            on_field=self._on_field,
            on_overlap=self._on_overlap,
            on_single_press=lambda side, mode: self.session.profile.set_single_press(side, mode),
            on_repeat=lambda side, checked: self.session.profile.set_repeat_checkbox(side, checked),
            on_about=self._on_about,
            on_close=self._on_close,
        )
        # The reader thread only enqueues; the Tk thread drains.
        self.pump = EventPump(self.win.after, self.win.after_cancel)
        self.events.set_dispatcher(self.pump.put)

        self.layout_view = LayoutListView(
            self.win.layout_host,
            on_activate=self.session.layouts.activate,
            on_edit=self._on_edit_entry,
            on_delete=self.session.layouts.delete,
        )
        self.win.mount_layout_list(self.layout_view)
        drag = self.session.attach_surface(self.layout_view)
        self.layout_view.on_pointer_down = drag.pointer_down
        self.layout_view.on_pointer_move = drag.pointer_move
        self.layout_view.on_pointer_up = drag.pointer_up
        self.layout_view.on_pointer_cancel = drag.pointer_cancel

        self.session.on_changed(self._apply_session)
        self.session.profile.on_changed(self._apply_profile)
        self.session.layouts.on_changed(self._apply_layouts)

        self.listener: Optional[EventListener] = EventListener(rest) if rest is not None else None

    def start(self) -> None:
        self.session.start()
        self.win.show_path(self.session.last_layout_path)
        self.pump.start()
        if self.listener is not None:
            self.listener.start()

    # ------------------------------------------------------------------
    # View -> ViewModel
    # ------------------------------------------------------------------
    def _on_field(self, field_path: str, value: Any) -> None:
        if not self.session.profile.loaded:
            self.win.set_status_message("Profile not loaded")
            return
        self.session.profile.apply_field(field_path, value)

    def _on_overlap(self, name: str, percent: int) -> None:
        if not self.session.profile.loaded or name not in OVERLAP_FIELDS:
            return
        if percent == self.session.profile.overlap_percent(name):
            return
        self.session.profile.set_overlap_percent(name, percent)

    def _on_add_entry(self, path: str) -> None:
        self.session.layouts.create(path)

    def _on_edit_entry(self, entry_id: str) -> None:
        entry = self.session.layouts.get(entry_id)
        if entry is None:
            return
        result = self.win.ask_entry_details(entry.alias, entry.path)
        if result is None:
            return
        alias, path = result
        self.session.layouts.update(entry_id, alias, path)

    def _on_about(self) -> None:
        self.win.show_about(build_about(self.session.app_version))

    def _on_close(self) -> None:
        if self.listener is not None:
            self.listener.stop()
        self.pump.stop()
        self.session.close()

    # ------------------------------------------------------------------
    # ViewModel -> View
    # ------------------------------------------------------------------
    def _apply_session(self, session: SettingsSession) -> None:
        self.win.show_engine(session.enabled, session.autostart, session.app_version)
        if session.status:
            self.win.set_status_message(session.status)

    def _apply_profile(self, store: ProfileStore) -> None:
        profile = store.profile
        if profile is None:
            return
        for side in ThumbSide:
            cfg = profile.thumb(side)
            self.win.show_thumb(
                side,
                key=cfg.key,
                continuous=cfg.continuous,
                single_press=cfg.single_press,
                repeat_checked=store.repeat_checkbox(side),
                repeat_enabled=store.repeat_enabled(side),
            )
        self.win.show_char_key(
            {
                "repeat_assigned": profile.char_key.repeat_assigned,
                "repeat_unassigned": profile.char_key.repeat_unassigned,
                "continuous": profile.char_key.continuous,
            }
        )
        for name in OVERLAP_FIELDS:
            self.win.show_overlap(name, store.overlap_percent(name))
        self.win.show_operation(profile.operation.ime_mode, profile.operation.suspend_key)
        if store.status:
            self.win.set_status_message(store.status)

    def _apply_layouts(self, layouts: LayoutEntryList) -> None:
        self.layout_view.render(layouts.entries, layouts.active_layout_id)
        if layouts.status:
            self.win.set_status_message(layouts.status)


def main() -> None:
    logging.getLogger(__name__).info(
        "Kikyo settings starting (log level %s)",
        logging_utils.level_name(logging.getLogger().getEffectiveLevel()),
    )
    app = App()
    app.start()
    app.win.mainloop()


if __name__ == "__main__":
    main()
