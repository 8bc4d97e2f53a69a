"""Pointer-driven drag-and-drop reordering of layout entries.

One gesture at a time, scoped to the pointer id that started it::

    Idle --primary press on handle--> Dragging --up / cancel--> Idle

While dragging only visuals change (row translation, drop-target marker).
The list itself is reordered once, on release, then persisted through
``LayoutEntryList.reorder`` whose failure path refetches the true order.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, List, Optional, Tuple

from kikyo.domain.layout_entries import LayoutId
from kikyo.domain.ports import DragSurface, PointerId

from .layout_list_vm import LayoutEntryList

PRIMARY_BUTTON = 0


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class _Gesture:
    """Resources held by one drag; ``close`` releases each of them once."""

    def __init__(
        self, surface: DragSurface, pointer_id: PointerId, source_id: LayoutId, start_y: float
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.surface = surface
        self.pointer_id = pointer_id
        self.source_id = source_id
        self.start_y = start_y
        self.target_id: Optional[LayoutId] = None
        self.closed = False
        self._cleanups: List[Tuple[str, Callable[[], None]]] = []

    def acquire(self) -> None:
        surface, pid, src = self.surface, self.pointer_id, self.source_id
        try:
            surface.capture_pointer(pid)
            self._cleanups.append(("release capture", lambda: surface.release_pointer(pid)))
            surface.set_row_lifted(src, True)
            self._cleanups.append(("unlift row", lambda: self._unlift(src)))
            surface.set_dragging(True)
            self._cleanups.append(("clear dragging flag", lambda: surface.set_dragging(False)))
            self._cleanups.append(("clear drop target", lambda: surface.set_drop_target(None)))
            detach = surface.attach_pointer_listeners(pid)
            self._cleanups.append(("detach listeners", detach))
        except Exception:
            self.close()
            raise

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        while self._cleanups:
            name, cleanup = self._cleanups.pop()
            try:
                cleanup()
            except Exception:
                self._log.exception("Drag cleanup step failed: %s", name)

    def _unlift(self, entry_id: LayoutId) -> None:
        self.surface.translate_row(entry_id, 0.0)
        self.surface.set_row_lifted(entry_id, False)

    def __enter__(self) -> "_Gesture":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class DragReorderController:
    def __init__(self, layouts: LayoutEntryList, surface: DragSurface) -> None:
        self._log = logging.getLogger(__name__)
        self.layouts = layouts
        self.surface = surface
        self._gesture: Optional[_Gesture] = None

    @property
    def state(self) -> DragState:
        return DragState.DRAGGING if self._gesture is not None else DragState.IDLE

    @property
    def source_id(self) -> Optional[LayoutId]:
        return self._gesture.source_id if self._gesture else None

    @property
    def target_id(self) -> Optional[LayoutId]:
        return self._gesture.target_id if self._gesture else None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def pointer_down(
        self, pointer_id: PointerId, button: int, entry_id: LayoutId, x: float, y: float
    ) -> bool:
        """Start dragging ``entry_id``.

        Args:
            pointer_id: Pointer that pressed; later events from others are ignored.
            button: Pointer-event button number, only ``PRIMARY_BUTTON`` starts a drag.
            entry_id: Row whose handle was pressed.
            x: Pointer x in surface hit-test coordinates.
            y: Pointer y in surface hit-test coordinates.

        Returns:
            ``True`` when a gesture started. Any previous gesture is torn down
            first.
        """
        """Start dragging ``entry_id`` from its handle; True if a drag began."""
        if button != PRIMARY_BUTTON or self.layouts.get(entry_id) is None:
            return False
        self.teardown()
        gesture = _Gesture(self.surface, pointer_id, entry_id, y)
        gesture.acquire()
        self._gesture = gesture
        self._log.debug("drag start %s (pointer %s)", entry_id, pointer_id)
        return True

    def pointer_move(self, pointer_id: PointerId, x: float, y: float) -> None:
        """Follow the pointer and track the row under it as drop target."""
        gesture = self._active(pointer_id)
        if gesture is None:
            return
        self.surface.translate_row(gesture.source_id, y - gesture.start_y)
        hit = self.surface.row_at(x, y)
        target = hit if hit is not None and hit != gesture.source_id else None
        if target != gesture.target_id:
            gesture.target_id = target
            self.surface.set_drop_target(target)

    def pointer_up(self, pointer_id: PointerId, x: float, y: float) -> bool:
        """Finish the drag; True when a reorder was committed and persisted."""
        gesture = self._active(pointer_id)
        if gesture is None:
            return False
        with self._finish(gesture):
            target = gesture.target_id
        if target is None:
            target = self.surface.row_at(x, y)
        if target is None or target == gesture.source_id:
            return False
        if not self.layouts.move(gesture.source_id, target):
            return False
        self._log.debug("drag commit %s -> %s", gesture.source_id, target)
        return self.layouts.reorder(self.layouts.ids())

    def pointer_cancel(self, pointer_id: PointerId) -> None:
        """Abort without reordering (Escape, lost capture)."""
        gesture = self._active(pointer_id)
        if gesture is not None:
            with self._finish(gesture):
                self._log.debug("drag cancelled %s", gesture.source_id)

    def teardown(self) -> None:
        """Drop any active gesture without committing."""
        if self._gesture is not None:
            with self._finish(self._gesture):
                pass

    # ------------------------------------------------------------------
    def _active(self, pointer_id: PointerId) -> Optional[_Gesture]:
        gesture = self._gesture
        if gesture is None or gesture.pointer_id != pointer_id:
            return None
        return gesture

    def _finish(self, gesture: _Gesture) -> _Gesture:
        if self._gesture is gesture:
            self._gesture = None
        return gesture
