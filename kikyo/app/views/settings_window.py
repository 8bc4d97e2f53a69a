"""
SettingsWindow
--------------
Tkinter window for the Kikyo settings surface. View code only: no backend
calls and no profile rules. Every user edit is reported through a callback
passed to the constructor; the presenter in ``kikyo.app.main`` pushes state
back in with the ``show_*`` methods.

Layout:
  * Engine row (enabled flag, autostart, version, About)
  * Layout file row (path entry, browse, load)
  * Layout entries list (drag to reorder)
  * Notebook with "Thumb keys", "Character keys" and "Operation" tabs
  * Status bar
"""
from __future__ import annotations

import tkinter as tk
from tkinter import filedialog, ttk
from typing import Any, Callable, Dict, Optional, Sequence

from ...domain.profile import ImeMode, SinglePress, SuspendKey, ThumbKey, ThumbSide
from ...viewmodels.about_vm import AboutInfo
from .about_dialog import AboutDialog
from .layout_list_view import LayoutListView

_SIDE_LABELS = {
    ThumbSide.LEFT: "Left thumb",
    ThumbSide.RIGHT: "Right thumb",
    ThumbSide.EXT1: "Extra thumb 1",
    ThumbSide.EXT2: "Extra thumb 2",
}
_SINGLE_PRESS_LABELS = {
    SinglePress.DISABLE: "Disabled",
    SinglePress.ENABLE: "Enabled",
    SinglePress.PREFIX_SHIFT: "Prefix shift",
    SinglePress.SPACE_KEY: "Space key",
}
_YAB_FILETYPES = [("Layout files", "*.yab"), ("All files", "*.*")]


class SettingsWindow(tk.Tk):
    """Top-level settings window (UI-only)."""

    OnVoid = Optional[Callable[[], None]]
    OnBool = Optional[Callable[[bool], None]]
    OnText = Optional[Callable[[str], None]]
    OnField = Optional[Callable[[str, Any], None]]
    OnOverlap = Optional[Callable[[str, int], None]]
    OnSide = Optional[Callable[[ThumbSide, Any], None]]

    def __init__(
        self,
        *,
        on_toggle_enabled: OnBool = None,
        on_toggle_autostart: OnBool = None,
        on_load_file: OnText = None,
        on_add_entry: OnText = None,
        on_field: OnField = None,
        on_overlap: OnOverlap = None,
        on_single_press: OnSide = None,
        on_repeat: OnSide = None,
        on_about: OnVoid = None,
        on_close: OnVoid = None,
    ) -> None:
        super().__init__()
        self.title("Kikyo Settings")
        self.geometry("760x680")
        self.minsize(640, 560)

        self._on_toggle_enabled = on_toggle_enabled
        self._on_toggle_autostart = on_toggle_autostart
        self._on_load_file = on_load_file
        self._on_add_entry = on_add_entry
        self._on_field = on_field
        self._on_overlap = on_overlap
        self._on_single_press = on_single_press
        self._on_repeat = on_repeat
        self._on_about = on_about
        self._on_close = on_close
        self.protocol("WM_DELETE_WINDOW", self._on_close_clicked)

        # ---- Tk variables ----
        self.enabled_var = tk.BooleanVar(value=False)
        self.autostart_var = tk.BooleanVar(value=False)
        self.path_var = tk.StringVar(value="")
        self.version_var = tk.StringVar(value="")
        self.status_message_var = tk.StringVar(value="Ready.")
        self.key_vars: Dict[ThumbSide, tk.StringVar] = {s: tk.StringVar() for s in ThumbSide}
        self.continuous_vars: Dict[ThumbSide, tk.BooleanVar] = {s: tk.BooleanVar() for s in ThumbSide}
        self.single_press_vars: Dict[ThumbSide, tk.StringVar] = {s: tk.StringVar() for s in ThumbSide}
        self.repeat_vars: Dict[ThumbSide, tk.BooleanVar] = {s: tk.BooleanVar() for s in ThumbSide}
        self._repeat_checks: Dict[ThumbSide, ttk.Checkbutton] = {}
        self.char_vars: Dict[str, tk.BooleanVar] = {
            name: tk.BooleanVar() for name in ("repeat_assigned", "repeat_unassigned", "continuous")
        }
        self.overlap_vars: Dict[str, tk.StringVar] = {
            "char_key": tk.StringVar(value="35"),
            "thumb_shift": tk.StringVar(value="35"),
        }
        self.ime_mode_var = tk.StringVar(value=ImeMode.AUTO.value)
        self.suspend_key_var = tk.StringVar(value=SuspendKey.NONE.value)

        self.rowconfigure(2, weight=1)
        self.columnconfigure(0, weight=1)

        self._build_engine_row(self)
        self._build_file_row(self)
        self._build_main_area(self)
        self._build_statusbar(self)

    # ------------------------------------------------------------------
    # Engine / file rows
    # ------------------------------------------------------------------
    def _build_engine_row(self, parent: tk.Widget) -> None:
        row = ttk.Frame(parent)
        row.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 4))
        row.columnconfigure(2, weight=1)
        ttk.Checkbutton(
            row,
            text="Remapping enabled",
            variable=self.enabled_var,
            command=lambda: self._safe_value(self._on_toggle_enabled, self.enabled_var.get()),
        ).grid(row=0, column=0, sticky="w")
        self._autostart_check = ttk.Checkbutton(
            row,
            text="Start with Windows",
            variable=self.autostart_var,
            command=lambda: self._safe_value(self._on_toggle_autostart, self.autostart_var.get()),
        )
        self._autostart_check.grid(row=0, column=1, sticky="w", padx=(16, 0))
        ttk.Label(row, textvariable=self.version_var, foreground="#666").grid(row=0, column=2, sticky="e")
        ttk.Button(row, text="About", width=7, command=self._about_clicked).grid(row=0, column=3, padx=(8, 0))

    def _build_file_row(self, parent: tk.Widget) -> None:
        row = ttk.Labelframe(parent, text="Layout file")
        row.grid(row=1, column=0, sticky="ew", padx=8, pady=4)
        row.columnconfigure(0, weight=1)
        entry = ttk.Entry(row, textvariable=self.path_var)
        entry.grid(row=0, column=0, sticky="ew", padx=(6, 4), pady=6)
        entry.bind("<Return>", lambda e: self._safe_value(self._on_load_file, self.path_var.get()))
        ttk.Button(row, text="Browse...", command=self._browse).grid(row=0, column=1, padx=4)
        ttk.Button(
            row,
            text="Load",
            command=lambda: self._safe_value(self._on_load_file, self.path_var.get()),
        ).grid(row=0, column=2, padx=4)
        ttk.Button(row, text="Add to list", command=self._add_entry).grid(row=0, column=3, padx=(4, 6))

    # ------------------------------------------------------------------
    # Main area
    # ------------------------------------------------------------------
    def _build_main_area(self, parent: tk.Widget) -> None:
        content = ttk.Frame(parent)
        content.grid(row=2, column=0, sticky="nsew", padx=8, pady=4)
        content.columnconfigure(0, weight=1)
        content.rowconfigure(0, weight=1)
        content.rowconfigure(1, weight=2)

        entries = ttk.Labelframe(content, text="Layouts")
        entries.grid(row=0, column=0, sticky="nsew", pady=(0, 6))
        self.layout_host = entries
        self.layout_list: Optional[LayoutListView] = None

        self.tabs = ttk.Notebook(content)
        self.tabs.grid(row=1, column=0, sticky="nsew")
        self.tab_thumbs = ttk.Frame(self.tabs)
        self.tab_char = ttk.Frame(self.tabs)
        self.tab_operation = ttk.Frame(self.tabs)
        self.tabs.add(self.tab_thumbs, text="Thumb keys")
        self.tabs.add(self.tab_char, text="Character keys")
        self.tabs.add(self.tab_operation, text="Operation")

        self._build_thumb_tab(self.tab_thumbs)
        self._build_char_tab(self.tab_char)
        self._build_operation_tab(self.tab_operation)

    def mount_layout_list(self, view: LayoutListView) -> None:
        self.layout_list = view
        view.pack(fill="both", expand=True, padx=4, pady=4)

    def _build_thumb_tab(self, parent: tk.Widget) -> None:
        pad = dict(padx=6, pady=4)
        for col, text in enumerate(("", "Key", "Continuous", "Single press", "Repeat")):
            ttk.Label(parent, text=text, font=("TkDefaultFont", 9, "bold")).grid(row=0, column=col, sticky="w", **pad)
        keys = [k.value for k in ThumbKey]
        modes = [_SINGLE_PRESS_LABELS[m] for m in SinglePress]
        for row, side in enumerate(ThumbSide, start=1):
            ttk.Label(parent, text=_SIDE_LABELS[side]).grid(row=row, column=0, sticky="w", **pad)

            key_box = ttk.Combobox(parent, textvariable=self.key_vars[side], values=keys, state="readonly", width=12)
            key_box.grid(row=row, column=1, sticky="w", **pad)
            key_box.bind(
                "<<ComboboxSelected>>",
                lambda e, s=side: self._safe_field(f"{s.field_name}.key", self.key_vars[s].get()),
            )
            ttk.Checkbutton(
                parent,
                variable=self.continuous_vars[side],
                command=lambda s=side: self._safe_field(
                    f"{s.field_name}.continuous", self.continuous_vars[s].get()
                ),
            ).grid(row=row, column=2, **pad)

            mode_box = ttk.Combobox(
                parent, textvariable=self.single_press_vars[side], values=modes, state="readonly", width=14
            )
            mode_box.grid(row=row, column=3, sticky="w", **pad)
            mode_box.bind("<<ComboboxSelected>>", lambda e, s=side: self._single_press_selected(s))

            check = ttk.Checkbutton(
                parent,
                variable=self.repeat_vars[side],
                command=lambda s=side: self._safe_side(self._on_repeat, s, self.repeat_vars[s].get()),
            )
            check.grid(row=row, column=4, **pad)
            self._repeat_checks[side] = check

        ttk.Label(parent, text="Thumb shift overlap (%)").grid(row=len(ThumbSide) + 1, column=0, sticky="w", **pad)
        self._overlap_spinbox(parent, "thumb_shift").grid(row=len(ThumbSide) + 1, column=1, sticky="w", **pad)

    def _build_char_tab(self, parent: tk.Widget) -> None:
        pad = dict(padx=6, pady=4)
        labels = {
            "repeat_assigned": "Repeat keys with an assignment",
            "repeat_unassigned": "Repeat keys without an assignment",
            "continuous": "Continuous character shift",
        }
        for row, (name, text) in enumerate(labels.items()):
            ttk.Checkbutton(
                parent,
                text=text,
                variable=self.char_vars[name],
                command=lambda n=name: self._safe_field(f"char_key.{n}", self.char_vars[n].get()),
            ).grid(row=row, column=0, columnspan=2, sticky="w", **pad)
        ttk.Label(parent, text="Overlap (%)").grid(row=len(labels), column=0, sticky="w", **pad)
        self._overlap_spinbox(parent, "char_key").grid(row=len(labels), column=1, sticky="w", **pad)

    def _build_operation_tab(self, parent: tk.Widget) -> None:
        pad = dict(padx=6, pady=4)
        ttk.Label(parent, text="IME detection").grid(row=0, column=0, sticky="w", **pad)
        ime = ttk.Combobox(
            parent, textvariable=self.ime_mode_var, values=[m.value for m in ImeMode], state="readonly", width=12
        )
        ime.grid(row=0, column=1, sticky="w", **pad)
        ime.bind("<<ComboboxSelected>>", lambda e: self._safe_field("operation.ime_mode", self.ime_mode_var.get()))

        ttk.Label(parent, text="Suspend key").grid(row=1, column=0, sticky="w", **pad)
        suspend = ttk.Combobox(
            parent,
            textvariable=self.suspend_key_var,
            values=[k.value for k in SuspendKey],
            state="readonly",
            width=14,
        )
        suspend.grid(row=1, column=1, sticky="w", **pad)
        suspend.bind(
            "<<ComboboxSelected>>",
            lambda e: self._safe_field("operation.suspend_key", self.suspend_key_var.get()),
        )

    def _overlap_spinbox(self, parent: tk.Widget, name: str) -> ttk.Spinbox:
        var = self.overlap_vars[name]
        spin = ttk.Spinbox(
            parent,
            from_=0,
            to=100,
            increment=1,
            width=6,
            textvariable=var,
            command=lambda: self._overlap_changed(name),
        )
        spin.bind("<Return>", lambda e: self._overlap_changed(name))
        spin.bind("<FocusOut>", lambda e: self._overlap_changed(name))
        return spin

    # ------------------------------------------------------------------
    # StatusBar
    # ------------------------------------------------------------------
    def _build_statusbar(self, parent: tk.Widget) -> None:
        status = ttk.Frame(parent)
        status.grid(row=3, column=0, sticky="ew", padx=8, pady=(4, 8))
        status.columnconfigure(0, weight=1)
        ttk.Label(status, textvariable=self.status_message_var).grid(row=0, column=0, sticky="w")

    # ------------------------------------------------------------------
    # Presenter API
    # ------------------------------------------------------------------
    def set_status_message(self, text: str) -> None:
        self.status_message_var.set(text or "")

    def show_engine(self, enabled: Optional[bool], autostart: Optional[bool], version: str) -> None:
        self.enabled_var.set(bool(enabled))
        self.autostart_var.set(bool(autostart))
        self._autostart_check.state(["disabled"] if autostart is None else ["!disabled"])
        self.version_var.set(f"v{version}" if version else "")

    def show_path(self, path: str) -> None:
        self.path_var.set(path or "")

    def show_thumb(
        self,
        side: ThumbSide,
        *,
        key: ThumbKey,
        continuous: bool,
        single_press: SinglePress,
        repeat_checked: bool,
        repeat_enabled: bool,
    ) -> None:
        self.key_vars[side].set(key.value)
        self.continuous_vars[side].set(continuous)
        self.single_press_vars[side].set(_SINGLE_PRESS_LABELS[single_press])
        self.repeat_vars[side].set(repeat_checked)
        self._repeat_checks[side].state(["!disabled"] if repeat_enabled else ["disabled"])

    def show_char_key(self, values: Dict[str, bool]) -> None:
        for name, var in self.char_vars.items():
            var.set(bool(values.get(name, False)))

    def show_overlap(self, name: str, percent: int) -> None:
        self.overlap_vars[name].set(str(percent))

    def show_operation(self, ime_mode: ImeMode, suspend_key: SuspendKey) -> None:
        self.ime_mode_var.set(ime_mode.value)
        self.suspend_key_var.set(suspend_key.value)

    def show_about(self, info: AboutInfo) -> None:
        dialog = AboutDialog(self, info)
        self.wait_window(dialog)

    def ask_entry_details(self, alias: str, path: str) -> Optional[Sequence[str]]:
        dialog = EntryEditDialog(self, alias=alias, path=path)
        self.wait_window(dialog)
        return dialog.result

    # ------------------------------------------------------------------
    # Event helpers
    # ------------------------------------------------------------------
    def _single_press_selected(self, side: ThumbSide) -> None:
        label = self.single_press_vars[side].get()
        mode = next((m for m, text in _SINGLE_PRESS_LABELS.items() if text == label), None)
        if mode is not None:
            self._safe_side(self._on_single_press, side, mode)

    def _overlap_changed(self, name: str) -> None:
        raw = self.overlap_vars[name].get().strip()
        try:
            percent = int(raw)
        except ValueError:
            self.set_status_message("Overlap must be a whole number between 0 and 100.")
            return
        if self._on_overlap:
            self._on_overlap(name, percent)

    def _browse(self) -> None:
        path = filedialog.askopenfilename(parent=self, title="Select layout file", filetypes=_YAB_FILETYPES)
        if path:
            self.path_var.set(path)

    def _add_entry(self) -> None:
        path = self.path_var.get().strip()
        if not path:
            path = filedialog.askopenfilename(parent=self, title="Add layout file", filetypes=_YAB_FILETYPES)
        if path:
            self._safe_value(self._on_add_entry, path)

    def _safe_field(self, field_path: str, value: Any) -> None:
        if self._on_field:
            self._on_field(field_path, value)

    @staticmethod
    def _safe_side(callback: OnSide, side: ThumbSide, value: Any) -> None:
        if callback:
            callback(side, value)

    @staticmethod
    def _safe_value(callback: Optional[Callable[[Any], None]], value: Any) -> None:
        if callback:
            callback(value)

    def _about_clicked(self) -> None:
        if self._on_about:
            self._on_about()

    def _on_close_clicked(self) -> None:
        if self._on_close:
            self._on_close()
        self.destroy()


class EntryEditDialog(tk.Toplevel):
    """Modal alias/path editor for one layout entry."""

    def __init__(self, parent: tk.Widget, *, alias: str, path: str) -> None:
        super().__init__(parent)
        self.title("Edit layout")
        self.transient(parent)
        self.resizable(False, False)
        self.result: Optional[Sequence[str]] = None

        self.alias_var = tk.StringVar(value=alias)
        self.path_var = tk.StringVar(value=path)

        pad = dict(padx=8, pady=4)
        ttk.Label(self, text="Alias").grid(row=0, column=0, sticky="w", **pad)
        ttk.Entry(self, textvariable=self.alias_var, width=30).grid(row=0, column=1, sticky="ew", **pad)
        ttk.Label(self, text="Path").grid(row=1, column=0, sticky="w", **pad)
        ttk.Entry(self, textvariable=self.path_var, width=50).grid(row=1, column=1, sticky="ew", **pad)
        buttons = ttk.Frame(self)
        buttons.grid(row=2, column=0, columnspan=2, sticky="e", **pad)
        ttk.Button(buttons, text="Save", command=self._ok).pack(side="right", padx=(6, 0))
        ttk.Button(buttons, text="Cancel", command=self.destroy).pack(side="right")

        self.bind("<Return>", lambda e: self._ok())
        self.bind("<Escape>", lambda e: self.destroy())
        self.grab_set()
        self.focus_set()

    def _ok(self) -> None:
        self.result = (self.alias_var.get(), self.path_var.get())
        self.destroy()
