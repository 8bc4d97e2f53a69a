"""
LayoutListView
--------------
Reorderable list of layout entries drawn on a Canvas so rows can be moved
freely while a drag is in progress. View code only: it renders what
``LayoutEntryList`` holds and forwards pointer events to the
``DragReorderController``; it never talks to the backend.

Implements the ``DragSurface`` port.
"""
from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Dict, List, Optional, Sequence

from ...domain.layout_entries import LayoutEntry, LayoutId

ROW_HEIGHT = 34
MOUSE_POINTER_ID = 1
_LIFTED_BG = "#dde8f5"
_TARGET_BG = "#fff2c4"
_HOVER_BG = "#f3f3f3"
_ROW_BG = "#ffffff"


class LayoutListView(ttk.Frame):
    """Canvas-backed list with a drag handle per row."""

    OnEntry = Optional[Callable[[LayoutId], None]]
    OnPointerDown = Optional[Callable[[int, int, LayoutId, float, float], bool]]
    OnPointer = Optional[Callable[[int, float, float], None]]
    OnCancel = Optional[Callable[[int], None]]

    def __init__(
        self,
        parent: tk.Widget,
        *,
        on_activate: OnEntry = None,
        on_edit: OnEntry = None,
        on_delete: OnEntry = None,
    ) -> None:
        super().__init__(parent)
        self._on_activate = on_activate
        self._on_edit = on_edit
        self._on_delete = on_delete
        self.on_pointer_down: LayoutListView.OnPointerDown = None
        self.on_pointer_move: LayoutListView.OnPointer = None
        self.on_pointer_up: LayoutListView.OnPointer = None
        self.on_pointer_cancel: LayoutListView.OnCancel = None

        self.canvas = tk.Canvas(self, highlightthickness=0, background=_ROW_BG, height=ROW_HEIGHT * 5)
        self.canvas.pack(fill="both", expand=True)
        self.canvas.bind("<Configure>", lambda e: self._resize_rows(e.width))

        self._rows: Dict[LayoutId, tk.Frame] = {}
        self._items: Dict[LayoutId, int] = {}
        self._order: List[LayoutId] = []
        self._active_var = tk.StringVar(value="")
        self._captured: Optional[tk.Widget] = None
        self._pressed: Optional[tk.Widget] = None
        self._dragging = False
        self._target: Optional[LayoutId] = None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def render(self, entries: Sequence[LayoutEntry], active_id: Optional[LayoutId]) -> None:
        for frame in self._rows.values():
            frame.destroy()
        self.canvas.delete("all")
        self._rows.clear()
        self._items.clear()
        self._order = [entry.id for entry in entries]
        self._active_var.set(active_id or "")

        width = max(self.canvas.winfo_width(), 320)
        for idx, entry in enumerate(entries):
            row = self._build_row(entry)
            self._rows[entry.id] = row
            self._items[entry.id] = self.canvas.create_window(
                0, idx * ROW_HEIGHT, window=row, anchor="nw", width=width, height=ROW_HEIGHT
            )
        if not entries:
            self.canvas.create_text(8, 8, text="No layout files registered", anchor="nw", fill="#777")
        self.canvas.configure(scrollregion=(0, 0, width, max(1, len(entries)) * ROW_HEIGHT))

    def _build_row(self, entry: LayoutEntry) -> tk.Frame:
        row = tk.Frame(self.canvas, background=_ROW_BG, borderwidth=1, relief="flat")
        handle = tk.Label(row, text="≡", cursor="fleur", background=_ROW_BG, width=2)
        handle.pack(side="left", padx=(4, 2))
        handle.bind("<ButtonPress-1>", lambda e, eid=entry.id: self._press(e, eid))

        ttk.Radiobutton(
            row,
            variable=self._active_var,
            value=entry.id,
            command=lambda eid=entry.id: self._safe(self._on_activate, eid),
        ).pack(side="left")
        tk.Label(row, text=entry.display_name, anchor="w", background=_ROW_BG, width=18).pack(side="left")
        tk.Label(row, text=entry.path, anchor="w", foreground="#666", background=_ROW_BG).pack(
            side="left", fill="x", expand=True
        )
        ttk.Button(row, text="Delete", width=7, command=lambda eid=entry.id: self._safe(self._on_delete, eid)).pack(
            side="right", padx=2
        )
        ttk.Button(row, text="Edit", width=5, command=lambda eid=entry.id: self._safe(self._on_edit, eid)).pack(
            side="right", padx=2
        )
        row.bind("<Enter>", lambda e, r=row: self._hover(r, True))
        row.bind("<Leave>", lambda e, r=row: self._hover(r, False))
        return row

    def _resize_rows(self, width: int) -> None:
        for item in self._items.values():
            self.canvas.itemconfigure(item, width=width)

    def _hover(self, row: tk.Frame, inside: bool) -> None:
        if self._dragging:
            return
        row.configure(background=_HOVER_BG if inside else _ROW_BG)

    # ------------------------------------------------------------------
    # DragSurface
    # ------------------------------------------------------------------
    def capture_pointer(self, pointer_id: int) -> None:
        widget = self._pressed or self.canvas
        widget.grab_set()
        self._captured = widget

    def release_pointer(self, pointer_id: int) -> None:
        if self._captured is not None and self._captured.winfo_exists():
            self._captured.grab_release()
        self._captured = None

    def set_row_lifted(self, entry_id: LayoutId, lifted: bool) -> None:
        row = self._rows.get(entry_id)
        if row is None:
            return
        row.configure(relief="raised" if lifted else "flat", background=_LIFTED_BG if lifted else _ROW_BG)
        if lifted:
            self.canvas.tag_raise(self._items[entry_id])

    def translate_row(self, entry_id: LayoutId, dy: float) -> None:
        item = self._items.get(entry_id)
        if item is None:
            return
        base = self._order.index(entry_id) * ROW_HEIGHT
        self.canvas.coords(item, 0, base + dy)

    def set_drop_target(self, entry_id: Optional[LayoutId]) -> None:
        if self._target is not None and self._target in self._rows:
            self._rows[self._target].configure(background=_ROW_BG)
        self._target = entry_id
        if entry_id is not None and entry_id in self._rows:
            self._rows[entry_id].configure(background=_TARGET_BG)

    def set_dragging(self, dragging: bool) -> None:
        self._dragging = dragging

    def row_at(self, x: float, y: float) -> Optional[LayoutId]:
        """Hit-test root (screen) coordinates against the resting row slots."""
        local_y = self.canvas.canvasy(y - self.canvas.winfo_rooty())
        local_x = x - self.canvas.winfo_rootx()
        if local_x < 0 or local_x > self.canvas.winfo_width() or local_y < 0:
            return None
        idx = int(local_y // ROW_HEIGHT)
        if idx >= len(self._order):
            return None
        return self._order[idx]

    def attach_pointer_listeners(self, pointer_id: int) -> Callable[[], None]:
        widget = self._pressed or self.canvas
        toplevel = self.winfo_toplevel()
        bound = [
            (widget, "<B1-Motion>", widget.bind("<B1-Motion>", self._motion, add="+")),
            (widget, "<ButtonRelease-1>", widget.bind("<ButtonRelease-1>", self._release, add="+")),
            (toplevel, "<Escape>", toplevel.bind("<Escape>", self._cancel, add="+")),
        ]

        def detach() -> None:
            for target, sequence, funcid in bound:
                if target.winfo_exists():
                    target.unbind(sequence, funcid)

        return detach

    # ------------------------------------------------------------------
    # Tk event translation
    # ------------------------------------------------------------------
    def _press(self, event: tk.Event, entry_id: LayoutId) -> None:
        self._pressed = event.widget
        if self.on_pointer_down:
            # Tk numbers the primary button 1; pointer events use 0.
            self.on_pointer_down(MOUSE_POINTER_ID, event.num - 1, entry_id, event.x_root, event.y_root)

    def _motion(self, event: tk.Event) -> None:
        if self.on_pointer_move:
            self.on_pointer_move(MOUSE_POINTER_ID, event.x_root, event.y_root)

    def _release(self, event: tk.Event) -> None:
        self._pressed = None
        if self.on_pointer_up:
            self.on_pointer_up(MOUSE_POINTER_ID, event.x_root, event.y_root)

    def _cancel(self, _event: tk.Event) -> None:
        self._pressed = None
        if self.on_pointer_cancel:
            self.on_pointer_cancel(MOUSE_POINTER_ID)

    @staticmethod
    def _safe(callback: OnEntry, entry_id: LayoutId) -> None:
        if callback:
            callback(entry_id)
