"""Shared builders for view model tests."""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from kikyo.adapters.backend_mock import BackendMock
from kikyo.viewmodels.layout_list_vm import LayoutEntryList

ROW_PITCH = 10


def seeded_layouts(*names: str) -> Tuple[BackendMock, LayoutEntryList, List[str]]:
    """Backend with one entry per name (first one active) and a refreshed list."""
    backend = BackendMock()
    created = backend.seed_entries(*(f"C:\\layouts\\{name}.yab" for name in names))
    layouts = LayoutEntryList(backend)
    assert layouts.refresh()
    return backend, layouts, [entry["id"] for entry in created]


class RecordingSurface:
    """DragSurface double; rows sit ``ROW_PITCH`` apart in list order."""

    def __init__(self, layouts: LayoutEntryList) -> None:
        self.layouts = layouts
        self.log: List[tuple] = []
        self.fail_on: Optional[str] = None

    def _record(self, *item) -> None:
        self.log.append(item)
        if self.fail_on == item[0]:
            raise RuntimeError(f"{item[0]} failed")

    def capture_pointer(self, pointer_id: int) -> None:
        self._record("capture", pointer_id)

    def release_pointer(self, pointer_id: int) -> None:
        self._record("release", pointer_id)

    def set_row_lifted(self, entry_id: str, lifted: bool) -> None:
        self._record("lifted", entry_id, lifted)

    def translate_row(self, entry_id: str, dy: float) -> None:
        self._record("translate", entry_id, dy)

    def set_drop_target(self, entry_id: Optional[str]) -> None:
        self._record("target", entry_id)

    def set_dragging(self, dragging: bool) -> None:
        self._record("dragging", dragging)

    def row_at(self, x: float, y: float) -> Optional[str]:
        ids = self.layouts.ids()
        idx = int(y // ROW_PITCH)
        if y < 0 or idx >= len(ids):
            return None
        return ids[idx]

    def attach_pointer_listeners(self, pointer_id: int) -> Callable[[], None]:
        self._record("attach", pointer_id)
        return lambda: self._record("detach", pointer_id)

    def names(self) -> List[str]:
        return [item[0] for item in self.log]
