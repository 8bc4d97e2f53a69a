from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PureWindowsPath
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

LayoutId = str

FALLBACK_ALIAS = "layout"


def fallback_alias_from_path(path: str) -> str:
    """File stem of ``path`` (either slash style), or ``"layout"``."""
    stem = PureWindowsPath((path or "").strip()).stem.strip()
    return stem or FALLBACK_ALIAS


@dataclass
class LayoutEntry:
    id: LayoutId
    alias: str = ""
    path: str = ""
    layout_name: str = ""

    @property
    def display_name(self) -> str:
        alias = self.alias.strip()
        if alias:
            return alias
        layout_name = self.layout_name.strip()
        if layout_name:
            return layout_name
        return fallback_alias_from_path(self.path)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LayoutEntry":
        if not isinstance(payload, Mapping):
            raise ValueError("Layout entry must be a mapping.")
        entry_id = str(payload.get("id") or "").strip()
        if not entry_id:
            raise ValueError("Layout entry is missing its id.")
        return cls(
            id=entry_id,
            alias=str(payload.get("alias") or ""),
            path=str(payload.get("path") or ""),
            layout_name=str(payload.get("layout_name") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "alias": self.alias,
            "path": self.path,
            "layout_name": self.layout_name,
        }


@dataclass
class LayoutEntriesSnapshot:
    entries: List[LayoutEntry] = field(default_factory=list)
    active_layout_id: Optional[LayoutId] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "LayoutEntriesSnapshot":
        if not isinstance(payload, Mapping):
            raise ValueError("Layout entries payload must be a mapping.")
        raw_entries = payload.get("entries") or []
        entries = [LayoutEntry.from_dict(item) for item in raw_entries]
        active = payload.get("active_layout_id")
        return cls(entries=entries, active_layout_id=str(active) if active else None)

    def ids(self) -> List[LayoutId]:
        return [entry.id for entry in self.entries]


def index_of(entries: Sequence[LayoutEntry], entry_id: Optional[LayoutId]) -> int:
    """Index of the first entry with ``entry_id`` or ``-1``."""
    for idx, entry in enumerate(entries):
        if entry.id == entry_id:
            return idx
    return -1


def find_entry(entries: Iterable[LayoutEntry], entry_id: Optional[LayoutId]) -> Optional[LayoutEntry]:
    for entry in entries:
        if entry.id == entry_id:
            return entry
    return None


def move_entry(
    entries: Sequence[LayoutEntry], source_id: LayoutId, target_id: LayoutId
) -> List[LayoutEntry]:
    """Return a copy with ``source_id`` placed at ``target_id``'s position.

    Dragging down lands after the target, dragging up lands before it.
    Unknown ids and ``source_id == target_id`` leave the order unchanged.
    """
    moved = list(entries)
    if source_id == target_id:
        return moved
    src = index_of(moved, source_id)
    dst = index_of(moved, target_id)
    if src < 0 or dst < 0:
        return moved
    entry = moved.pop(src)
    moved.insert(dst, entry)
    return moved


__all__ = [
    "FALLBACK_ALIAS",
    "LayoutEntriesSnapshot",
    "LayoutEntry",
    "LayoutId",
    "fallback_alias_from_path",
    "find_entry",
    "index_of",
    "move_entry",
]
