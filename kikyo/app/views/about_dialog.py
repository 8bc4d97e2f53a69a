"""Modal About dialog: version plus the layout-testing contributor list."""
from __future__ import annotations

import tkinter as tk
from tkinter import ttk

from ...viewmodels.about_vm import CONTRIBUTORS_HEADING, CONTRIBUTORS_NOTE, AboutInfo


class AboutDialog(tk.Toplevel):
    def __init__(self, parent: tk.Widget, info: AboutInfo) -> None:
        super().__init__(parent)
        self.title("About Kikyo")
        self.transient(parent)
        self.resizable(False, False)

        body = ttk.Frame(self, padding=12)
        body.pack(fill="both", expand=True)
        ttk.Label(body, text="Kikyo", font=("TkDefaultFont", 12, "bold")).pack(anchor="w")
        ttk.Label(body, text=info.version_label, foreground="#666").pack(anchor="w", pady=(0, 8))

        # Section stays hidden until someone is listed.
        if info.has_contributors:
            section = ttk.Labelframe(body, text=CONTRIBUTORS_HEADING, padding=8)
            section.pack(fill="both", expand=True)
            ttk.Label(section, text=CONTRIBUTORS_NOTE, foreground="#666").pack(anchor="w")
            names = tk.Listbox(section, height=min(10, len(info.contributors)), activestyle="none")
            for name in info.contributors:
                names.insert("end", name)
            names.pack(fill="both", expand=True, pady=(4, 0))

        ttk.Button(body, text="Close", command=self.destroy).pack(anchor="e", pady=(10, 0))
        self.bind("<Escape>", lambda e: self.destroy())
        self.grab_set()
        self.focus_set()
