"""In-memory profile document and its persistence to the backend.

``ProfileStore`` is the single owner of the editable ``Profile``. The form
layer reads values through the accessors here and reports every recognized
change through ``apply_field``, which mutates the document and saves it
immediately (no debounce).

Save ordering policy:
    Saves are never serialized, so two calls may be in flight at once. Each
    save takes a monotonically increasing sequence number. A result that
    settles after a newer save has already settled is stale: it cannot change
    ``status`` or ``last_saved``. If a stale save *succeeded*, the backend may
    have applied it after the newer one, so the current document is sent once
    more so the last issued state is the one that lands.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from kikyo.domain.errors import BackendError
from kikyo.domain.ports import BackendPort, UseCaseError
from kikyo.domain.profile import (
    ImeMode,
    Profile,
    SinglePress,
    SuspendKey,
    ThumbKey,
    ThumbSide,
    clamp_ratio,
    coerce_bool,
    coerce_enum,
    percent_to_ratio,
    ratio_to_percent,
    single_press_allows_repeat,
)
from kikyo.usecases.error_mapping import map_backend_error

from .derived_memory import DerivedFieldMemory

OVERLAP_FIELDS: Dict[str, str] = {
    "char_key": "char_key.overlap_ratio",
    "thumb_shift": "thumb_shift_overlap_ratio",
}

_THUMB_FIELDS = ("key", "continuous", "single_press", "repeat")
_CHAR_KEY_FIELDS = ("repeat_assigned", "repeat_unassigned", "continuous", "overlap_ratio")
_OPERATION_FIELDS = ("ime_mode", "suspend_key")


@dataclass
class SaveResult:
    ok: bool
    seq: int
    error: Optional[UseCaseError] = None
    stale: bool = False


class ProfileStore:
    """Single source of truth for the in-memory profile."""

    def __init__(
        self,
        backend: BackendPort,
        *,
        memory: Optional[DerivedFieldMemory[ThumbSide]] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.backend = backend
        self.memory: DerivedFieldMemory[ThumbSide] = memory or DerivedFieldMemory()
        self.profile: Optional[Profile] = None
        self.status: str = ""
        self.last_saved: Optional[Dict[str, Any]] = None
        self._checkbox: Dict[ThumbSide, bool] = {}
        self._issued_seq = 0
        self._settled_seq = 0
        self._listeners: List[Callable[["ProfileStore"], None]] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self) -> Profile:
        """Fetch the profile; backend errors propagate to the caller."""
        try:
            payload = self.backend.get_profile()
        except BackendError as exc:
            err = map_backend_error(exc, default_code="LOAD_PROFILE_FAILED")
            self.status = f"Error loading profile: {err.message}"
            self._log.warning("get_profile failed: %s", exc)
            raise
        try:
            profile = Profile.from_dict(payload)
        except ValueError as exc:
            raise BackendError(f"get_profile: {exc}", command="get_profile", payload=payload) from exc
        self.profile = profile
        self._sync_memory_from_document()
        self._notify()
        return profile

    def save(self) -> SaveResult:
        """Persist the whole document.

        Returns:
            The ``SaveResult`` of this call. Failures are reported in
            ``status`` and returned, never raised; the in-memory document is
            left as edited.

        Side Effects:
            Derives each side's ``repeat`` before sending. A result that
            settles after a newer save has settled is ignored, and a stale
            success re-sends the current document once.
        """
        profile = self._require_profile()
        self._derive_repeat(profile)
        payload = profile.to_dict()
        self._issued_seq += 1
        seq = self._issued_seq
        self._log.debug("set_profile #%d", seq)
        try:
            self.backend.set_profile(payload)
        except BackendError as exc:
            err = map_backend_error(exc, default_code="SAVE_PROFILE_FAILED")
            return self._settle(seq, payload, err)
        return self._settle(seq, payload, None)

    def apply_field(self, field_path: str, value: Any) -> SaveResult:
        """Mutate one field and save immediately (no debounce)."""
        self.mutate(field_path, value)
        return self.save()

    def on_changed(self, callback: Callable[["ProfileStore"], None]) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def mutate(self, field_path: str, value: Any) -> None:
        """Apply one field change in memory, e.g. ``"thumb_left.single_press"``."""
        profile = self._require_profile()
        head, _, leaf = field_path.partition(".")

        side = _side_for_field(head)
        if side is not None and leaf in _THUMB_FIELDS:
            cfg = profile.thumb(side)
            if leaf == "key":
                cfg.key = coerce_enum(ThumbKey, value, cfg.key)
            elif leaf == "continuous":
                cfg.continuous = coerce_bool(value)
            elif leaf == "single_press":
                cfg.single_press = coerce_enum(SinglePress, value, cfg.single_press)
                remembered = self.memory.get(side)
                if single_press_allows_repeat(cfg.single_press) and remembered is not None:
                    self._checkbox[side] = remembered
            else:
                cfg.repeat = coerce_bool(value)
                self._checkbox[side] = cfg.repeat
        elif head == "char_key" and leaf in _CHAR_KEY_FIELDS:
            if leaf == "overlap_ratio":
                profile.char_key.overlap_ratio = clamp_ratio(value)
            else:
                setattr(profile.char_key, leaf, coerce_bool(value))
        elif head == "operation" and leaf in _OPERATION_FIELDS:
            op = profile.operation
            if leaf == "ime_mode":
                op.ime_mode = coerce_enum(ImeMode, value, op.ime_mode)
            else:
                op.suspend_key = coerce_enum(SuspendKey, value, op.suspend_key)
        elif field_path == "thumb_shift_overlap_ratio":
            profile.thumb_shift_overlap_ratio = clamp_ratio(value)
        else:
            raise KeyError(f"Unknown profile field: {field_path}")
        self._notify()

    # ------------------------------------------------------------------
    # Form accessors
    # ------------------------------------------------------------------
    def overlap_percent(self, name: str) -> int:
        profile = self._require_profile()
        if name not in OVERLAP_FIELDS:
            raise KeyError(f"Unknown overlap field: {name}")
        ratio = (
            profile.char_key.overlap_ratio
            if name == "char_key"
            else profile.thumb_shift_overlap_ratio
        )
        return ratio_to_percent(ratio)

    def set_overlap_percent(self, name: str, percent: Any) -> SaveResult:
        """Store a 0..100 percent as a ratio and save; unknown ``name`` raises ``KeyError``."""
        if name not in OVERLAP_FIELDS:
            raise KeyError(f"Unknown overlap field: {name}")
        return self.apply_field(OVERLAP_FIELDS[name], percent_to_ratio(percent))

    def set_single_press(self, side: ThumbSide, mode: SinglePress) -> SaveResult:
        return self.apply_field(f"{side.field_name}.single_press", mode)

    def set_repeat_checkbox(self, side: ThumbSide, checked: bool) -> SaveResult:
        return self.apply_field(f"{side.field_name}.repeat", checked)

    def repeat_checkbox(self, side: ThumbSide) -> bool:
        """Value shown in the checkbox, remembered even while it is disabled."""
        self._require_profile()
        return bool(self._checkbox.get(side, False))

    def repeat_enabled(self, side: ThumbSide) -> bool:
        """Whether the repeat checkbox for ``side`` is editable."""
        profile = self._require_profile()
        return single_press_allows_repeat(profile.thumb(side).single_press)

    @property
    def loaded(self) -> bool:
        return self.profile is not None

    @property
    def pending_seq(self) -> Tuple[int, int]:
        """``(issued, settled)`` sequence numbers, for diagnostics."""
        return self._issued_seq, self._settled_seq

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_profile(self) -> Profile:
        if self.profile is None:
            raise RuntimeError("Profile not loaded")
        return self.profile

    def _sync_memory_from_document(self) -> None:
        assert self.profile is not None
        for side in ThumbSide:
            cfg = self.profile.thumb(side)
            if single_press_allows_repeat(cfg.single_press):
                self.memory.set(side, cfg.repeat)
            else:
                self.memory.seed(side, cfg.repeat)
            self._checkbox[side] = bool(self.memory.get(side))

    def _derive_repeat(self, profile: Profile) -> None:
        for side in ThumbSide:
            cfg = profile.thumb(side)
            cfg.repeat = self.memory.reconcile(
                side,
                single_press_allows_repeat(cfg.single_press),
                self._checkbox.get(side, cfg.repeat),
            )

    def _settle(
        self, seq: int, payload: Dict[str, Any], error: Optional[UseCaseError]
    ) -> SaveResult:
        if seq < self._settled_seq:
            self._log.debug("set_profile #%d settled after #%d; ignored", seq, self._settled_seq)
            if error is None:
                self._log.info("Re-sending profile so the newest document lands last")
                self.save()
            return SaveResult(ok=error is None, seq=seq, error=error, stale=True)
        self._settled_seq = seq
        if error is not None:
            self.status = f"Error applying settings: {error.message}"
            self._log.warning("set_profile #%d failed: %s", seq, error.message)
        else:
            self.status = "Settings applied"
            self.last_saved = payload
        self._notify()
        return SaveResult(ok=error is None, seq=seq, error=error)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self)


def _side_for_field(name: str) -> Optional[ThumbSide]:
    for side in ThumbSide:
        if side.field_name == name:
            return side
    return None
