"""Ordered layout entries with one active selection, mirrored to the backend.

Every mutation is applied to the in-memory list first and rendered, then sent
to the backend. When the backend call fails the list is reconciled by
refetching the authoritative state (``refresh``); if that fetch fails too the
pre-mutation state is restored locally. Expected backend failures never
propagate out of this class; they end up in ``status``.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from kikyo.domain.errors import BackendError
from kikyo.domain.layout_entries import (
    LayoutEntriesSnapshot,
    LayoutEntry,
    LayoutId,
    find_entry,
    move_entry,
)
from kikyo.domain.ports import BackendPort
from kikyo.usecases.error_mapping import map_backend_error

Listener = Callable[["LayoutEntryList"], None]


class LayoutEntryList:
    """Layout entries as shown in the list, plus the active id and status text."""

    def __init__(self, backend: BackendPort) -> None:
        self._log = logging.getLogger(__name__)
        self.backend = backend
        self.entries: List[LayoutEntry] = []
        self.active_layout_id: Optional[LayoutId] = None
        self.status: str = ""
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    def on_changed(self, callback: Listener) -> Callable[[], None]:
        """Register a re-render callback; returns an unsubscribe function."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def ids(self) -> List[LayoutId]:
        return [entry.id for entry in self.entries]

    def get(self, entry_id: LayoutId) -> Optional[LayoutEntry]:
        return find_entry(self.entries, entry_id)

    @property
    def active_entry(self) -> Optional[LayoutEntry]:
        return find_entry(self.entries, self.active_layout_id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def refresh(self) -> bool:
        """Replace list and active id wholesale with the backend's state."""
        try:
            snapshot = LayoutEntriesSnapshot.from_dict(self.backend.get_layout_entries())
        except BackendError as exc:
            self._report("Error loading layouts", exc)
            self._render()
            return False
        except ValueError as exc:
            self._log.warning("Malformed layout entries payload: %s", exc)
            self.status = f"Error loading layouts: {exc}"
            self._render()
            return False
        self.entries = snapshot.entries
        self.active_layout_id = snapshot.active_layout_id
        self._render()
        return True

    def create(self, path: str) -> Optional[LayoutEntry]:
        """Register a layout file and append it to the list.

        Args:
            path: Layout file path; the backend rejects duplicates.

        Returns:
            The created entry, or ``None`` when the backend refused it (the
            list is then refetched and the error kept in ``status``).

        Side Effects:
            Activates the new entry when the list was empty before the call.
        """
        was_empty = not self.entries
        try:
            entry = LayoutEntry.from_dict(self.backend.create_layout_entry_from_path(path))
        except BackendError as exc:
            self._reconcile("Error adding layout", exc)
            return None
        except ValueError as exc:
            self._log.warning("Malformed created entry: %s", exc)
            self.refresh()
            return None
        self.entries.append(entry)
        self.status = f"Added {entry.display_name}"
        self._render()
        if was_empty:
            self.activate(entry.id)
        return entry

    def update(self, entry_id: LayoutId, alias: str, path: str) -> bool:
        """Rename an entry or point it at another file.

        Applied locally first. A blank alias or a changed path is refetched
        after success because the backend derives names from the file.
        """
        entry = self.get(entry_id)
        previous, previous_active = list(self.entries), self.active_layout_id
        if entry is not None:
            idx = self.entries.index(entry)
            self.entries[idx] = LayoutEntry(
                id=entry.id, alias=alias, path=path, layout_name=entry.layout_name
            )
            self._render()
        try:
            self.backend.update_layout_entry(entry_id, alias, path)
        except BackendError as exc:
            self._reconcile(
                "Error updating layout",
                exc,
                rollback=lambda: self._restore(previous, previous_active),
            )
            return False
        if entry is None or not alias.strip() or entry.path != path:
            # The backend derives alias/layout name from the file; fetch them.
            self.refresh()
        self.status = "Layout updated"
        self._render()
        return True

    def delete(self, entry_id: LayoutId) -> bool:
        """Remove an entry; deleting the active one activates its successor."""
        previous = list(self.entries)
        previous_active = self.active_layout_id
        was_active = entry_id == self.active_layout_id
        self.entries = [entry for entry in self.entries if entry.id != entry_id]
        if was_active:
            self.active_layout_id = None
        self._render()
        try:
            self.backend.delete_layout_entry(entry_id)
        except BackendError as exc:
            self._reconcile(
                "Error deleting layout",
                exc,
                rollback=lambda: self._restore(previous, previous_active),
            )
            return False
        self.status = "Layout deleted"
        if was_active and self.refresh() and self.active_layout_id is not None:
            # Reload the successor so the engine matches the reported active id.
            self.activate(self.active_layout_id)
        else:
            self._render()
        return True

    def activate(self, entry_id: LayoutId) -> bool:
        """Make ``entry_id`` active and load it; the load message becomes ``status``."""
        previous, previous_active = list(self.entries), self.active_layout_id
        self.active_layout_id = entry_id
        self._render()
        try:
            message = self.backend.activate_layout_entry(entry_id)
        except BackendError as exc:
            self._reconcile(
                "Error activating layout",
                exc,
                rollback=lambda: self._restore(previous, previous_active),
            )
            return False
        self.status = message or "Layout activated"
        self._render()
        return True

    def reorder(self, new_order: Iterable[LayoutId]) -> bool:
        """Persist a new order.

        Args:
            new_order: Every entry id exactly once, in the desired order.

        Returns:
            ``False`` when the backend rejected the order; the list is then
            refetched, or restored locally if that fetch fails as well.
        """
        ordered_ids = list(new_order)
        previous, previous_active = list(self.entries), self.active_layout_id
        self.entries = _ordered(previous, ordered_ids)
        self._render()
        try:
            self.backend.reorder_layout_entries(ordered_ids)
        except BackendError as exc:
            self._reconcile(
                "Error reordering layouts",
                exc,
                rollback=lambda: self._restore(previous, previous_active),
            )
            return False
        return True

    def move(self, source_id: LayoutId, target_id: LayoutId) -> bool:
        """Move in memory only; returns False when the order did not change."""
        before = self.ids()
        moved = move_entry(self.entries, source_id, target_id)
        if [entry.id for entry in moved] == before:
            return False
        self.entries = moved
        self._render()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _report(self, label: str, exc: BackendError) -> None:
        err = map_backend_error(exc, default_code="LAYOUT_REQUEST_FAILED")
        self.status = f"{label}: {err.message}"
        self._log.warning("%s: %s", label, exc)

    def _reconcile(
        self, label: str, exc: BackendError, rollback: Optional[Callable[[], None]] = None
    ) -> None:
        self._report(label, exc)
        status = self.status
        self._log.info("Reconciling layout entries after failure")
        if not self.refresh() and rollback is not None:
            rollback()
        # Keep the mutation error visible over a successful refresh.
        self.status = status
        self._render()

    def _restore(self, entries: List[LayoutEntry], active: Optional[LayoutId]) -> None:
        self.entries = list(entries)
        self.active_layout_id = active

    def _render(self) -> None:
        for callback in list(self._listeners):
            callback(self)


def _ordered(entries: List[LayoutEntry], ordered_ids: List[LayoutId]) -> List[LayoutEntry]:
    result = []
    for entry_id in ordered_ids:
        entry = find_entry(entries, entry_id)
        if entry is not None:
            result.append(entry)
    return result
