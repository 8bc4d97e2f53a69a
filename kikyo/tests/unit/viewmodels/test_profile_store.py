from __future__ import annotations

import pytest

from kikyo.adapters.backend_mock import BackendMock
from kikyo.domain.errors import BackendError, BackendUnavailable
from kikyo.domain.profile import Profile, SinglePress, ThumbSide
from kikyo.viewmodels.profile_store import ProfileStore


def _backend_with(**thumb_left) -> BackendMock:
    doc = Profile().to_dict()
    doc["thumb_left"].update(thumb_left)
    return BackendMock(profile=doc)


def _loaded(backend: BackendMock) -> ProfileStore:
    store = ProfileStore(backend)
    store.load()
    return store


def test_repeat_choice_survives_disable_enable_cycle() -> None:
    backend = _backend_with(single_press="Enable", repeat=True)
    store = _loaded(backend)

    store.set_single_press(ThumbSide.LEFT, SinglePress.DISABLE)
    assert backend.profile["thumb_left"]["repeat"] is False
    assert backend.profile["thumb_left"]["single_press"] == "None"
    assert store.repeat_checkbox(ThumbSide.LEFT) is True
    assert store.repeat_enabled(ThumbSide.LEFT) is False

    store.set_single_press(ThumbSide.LEFT, SinglePress.ENABLE)
    assert backend.profile["thumb_left"]["repeat"] is True
    assert store.repeat_enabled(ThumbSide.LEFT) is True


def test_unchecked_repeat_stays_unchecked_after_cycle() -> None:
    backend = _backend_with(single_press="Enable", repeat=True)
    store = _loaded(backend)

    store.set_repeat_checkbox(ThumbSide.LEFT, False)
    store.set_single_press(ThumbSide.LEFT, SinglePress.PREFIX_SHIFT)
    store.set_single_press(ThumbSide.LEFT, SinglePress.SPACE_KEY)

    assert backend.profile["thumb_left"]["repeat"] is False
    assert store.repeat_checkbox(ThumbSide.LEFT) is False


def test_stored_repeat_under_disabled_mode_seeds_memory() -> None:
    backend = _backend_with(single_press="None", repeat=True)
    store = _loaded(backend)

    assert store.repeat_checkbox(ThumbSide.LEFT) is True
    store.save()
    assert backend.profile["thumb_left"]["repeat"] is False

    store.set_single_press(ThumbSide.LEFT, SinglePress.ENABLE)
    assert backend.profile["thumb_left"]["repeat"] is True


def test_overlap_percent_roundtrip_keeps_default_ratio() -> None:
    backend = BackendMock()
    store = _loaded(backend)

    assert store.overlap_percent("char_key") == 35
    assert store.overlap_percent("thumb_shift") == 35
    store.set_overlap_percent("char_key", store.overlap_percent("char_key"))

    assert backend.profile["char_key"]["overlap_ratio"] == 0.35
    store.set_overlap_percent("thumb_shift", 60)
    assert backend.profile["thumb_shift_overlap_ratio"] == 0.6


def test_successful_save_reports_applied() -> None:
    backend = BackendMock()
    store = _loaded(backend)
    seen = []
    store.on_changed(lambda s: seen.append(s.status))

    result = store.apply_field("operation.ime_mode", "Imm")

    assert result.ok and not result.stale
    assert store.status == "Settings applied"
    assert store.last_saved["operation"]["ime_mode"] == "Imm"
    assert backend.profile["operation"]["ime_mode"] == "Imm"
    assert seen[-1] == "Settings applied"


def test_failed_save_reports_error_and_keeps_document() -> None:
    backend = BackendMock()
    store = _loaded(backend)
    store.apply_field("char_key.continuous", True)
    saved = store.last_saved
    backend.fail_next("set_profile", BackendUnavailable("connection refused"))

    result = store.apply_field("char_key.continuous", False)

    assert not result.ok
    assert result.error.code == "BACKEND_UNAVAILABLE"
    assert store.status == "Error applying settings: Backend unavailable: connection refused"
    assert store.last_saved is saved
    assert store.profile.char_key.continuous is False


def test_older_save_settling_late_is_resent() -> None:
    backend = BackendMock()
    store = _loaded(backend)
    nested = []
    backend.on_call("set_profile", lambda args: nested.append(store.set_overlap_percent("thumb_shift", 50)))

    first = store.apply_field("char_key.repeat_assigned", True)

    assert nested[0].ok and nested[0].seq == 2
    assert first.stale and first.seq == 1
    assert backend.profile["thumb_shift_overlap_ratio"] == 0.5
    assert backend.profile["char_key"]["repeat_assigned"] is True
    assert len(backend.calls_for("set_profile")) == 3
    assert store.pending_seq == (3, 3)
    assert store.status == "Settings applied"


def test_stale_failure_does_not_override_newer_success() -> None:
    backend = BackendMock()
    store = _loaded(backend)

    def newer_save_then_fail(_args) -> None:
        store.set_overlap_percent("thumb_shift", 70)
        backend.fail_next("set_profile", BackendUnavailable("late failure"))

    backend.on_call("set_profile", newer_save_then_fail)

    first = store.apply_field("char_key.continuous", True)

    assert first.stale and not first.ok
    assert store.status == "Settings applied"
    assert store.last_saved["thumb_shift_overlap_ratio"] == 0.7
    assert len(backend.calls_for("set_profile")) == 2


def test_load_failure_sets_status_and_propagates() -> None:
    backend = BackendMock()
    backend.fail_next("get_profile", BackendUnavailable("down"))
    store = ProfileStore(backend)

    with pytest.raises(BackendError):
        store.load()

    assert store.status == "Error loading profile: Backend unavailable: down"
    assert not store.loaded


def test_mutation_guards() -> None:
    store = ProfileStore(BackendMock())
    with pytest.raises(RuntimeError):
        store.mutate("thumb_left.key", "Space")

    store.load()
    with pytest.raises(KeyError):
        store.mutate("thumb_left.nonsense", 1)
    with pytest.raises(KeyError):
        store.overlap_percent("elsewhere")


def test_thumb_key_and_extras_are_saved_together() -> None:
    doc = Profile().to_dict()
    doc["experimental"] = {"keep": True}
    backend = BackendMock(profile=doc)
    store = _loaded(backend)

    store.apply_field("thumb_ext1.key", "RAlt")

    assert backend.profile["thumb_ext1"]["key"] == "RAlt"
    assert backend.profile["experimental"] == {"keep": True}
