from __future__ import annotations

import pytest

from kikyo.domain.errors import BackendUnavailable
from kikyo.viewmodels.drag_reorder import PRIMARY_BUTTON, DragReorderController, DragState

from kikyo.tests.unit.viewmodels.helpers import ROW_PITCH, RecordingSurface, seeded_layouts

POINTER = 7


def _setup(*names: str):
    backend, layouts, ids = seeded_layouts(*names)
    surface = RecordingSurface(layouts)
    return backend, layouts, ids, surface, DragReorderController(layouts, surface)


def _y(index: int) -> float:
    return index * ROW_PITCH + ROW_PITCH / 2


def test_drag_first_onto_last_persists_new_order() -> None:
    backend, layouts, (a, b, c), surface, drag = _setup("a", "b", "c")

    assert drag.pointer_down(POINTER, PRIMARY_BUTTON, a, 0, _y(0))
    assert drag.state is DragState.DRAGGING
    drag.pointer_move(POINTER, 0, _y(1))
    drag.pointer_move(POINTER, 0, _y(2))
    assert drag.target_id == c

    assert drag.pointer_up(POINTER, 0, _y(2))

    assert layouts.ids() == [b, c, a]
    assert backend.calls_for("reorder_layout_entries") == [{"ordered_ids": [b, c, a]}]
    assert drag.state is DragState.IDLE


def test_gesture_resources_are_released_in_reverse_order() -> None:
    backend, layouts, (a, b), surface, drag = _setup("a", "b")

    drag.pointer_down(POINTER, PRIMARY_BUTTON, a, 0, _y(0))
    surface.log.clear()
    drag.pointer_cancel(POINTER)

    assert surface.log == [
        ("detach", POINTER),
        ("target", None),
        ("dragging", False),
        ("translate", a, 0.0),
        ("lifted", a, False),
        ("release", POINTER),
    ]
    assert backend.calls_for("reorder_layout_entries") == []


def test_move_translates_row_and_marks_target_once() -> None:
    backend, layouts, (a, b, c), surface, drag = _setup("a", "b", "c")
    drag.pointer_down(POINTER, PRIMARY_BUTTON, a, 0, _y(0))
    surface.log.clear()

    drag.pointer_move(POINTER, 0, _y(0) + 3)
    drag.pointer_move(POINTER, 0, _y(1))
    drag.pointer_move(POINTER, 0, _y(1) + 2)

    assert ("translate", a, 3.0) in surface.log
    assert [item for item in surface.log if item[0] == "target"] == [("target", b)]


def test_secondary_button_and_unknown_row_do_not_start() -> None:
    backend, layouts, (a,), surface, drag = _setup("a")

    assert not drag.pointer_down(POINTER, 2, a, 0, 0)
    assert not drag.pointer_down(POINTER, PRIMARY_BUTTON, "ghost", 0, 0)

    assert drag.state is DragState.IDLE
    assert surface.log == []


def test_events_from_other_pointers_are_ignored() -> None:
    backend, layouts, (a, b), surface, drag = _setup("a", "b")
    drag.pointer_down(POINTER, PRIMARY_BUTTON, a, 0, _y(0))

    drag.pointer_move(POINTER + 1, 0, _y(1))
    assert not drag.pointer_up(POINTER + 1, 0, _y(1))

    assert drag.state is DragState.DRAGGING
    assert drag.target_id is None


def test_drop_on_itself_commits_nothing() -> None:
    backend, layouts, (a, b), surface, drag = _setup("a", "b")
    drag.pointer_down(POINTER, PRIMARY_BUTTON, a, 0, _y(0))

    assert not drag.pointer_up(POINTER, 0, _y(0))

    assert layouts.ids() == [a, b]
    assert backend.calls_for("reorder_layout_entries") == []
    assert drag.state is DragState.IDLE


def test_release_without_move_hit_tests_drop_point() -> None:
    backend, layouts, (a, b), surface, drag = _setup("a", "b")
    drag.pointer_down(POINTER, PRIMARY_BUTTON, b, 0, _y(1))

    assert drag.pointer_up(POINTER, 0, _y(0))

    assert layouts.ids() == [b, a]


def test_failed_reorder_after_drop_restores_backend_order() -> None:
    backend, layouts, ids, surface, drag = _setup("a", "b", "c")
    backend.fail_next("reorder_layout_entries", BackendUnavailable("down"))
    drag.pointer_down(POINTER, PRIMARY_BUTTON, ids[0], 0, _y(0))
    drag.pointer_move(POINTER, 0, _y(2))

    assert not drag.pointer_up(POINTER, 0, _y(2))

    assert layouts.ids() == ids
    assert layouts.status.startswith("Error reordering layouts")
    assert drag.state is DragState.IDLE


def test_failing_cleanup_step_does_not_skip_others(caplog) -> None:
    backend, layouts, (a, b), surface, drag = _setup("a", "b")
    drag.pointer_down(POINTER, PRIMARY_BUTTON, a, 0, _y(0))
    surface.fail_on = "dragging"

    drag.pointer_cancel(POINTER)

    assert surface.names()[-3:] == ["translate", "lifted", "release"]
    assert "clear dragging flag" in caplog.text
    assert drag.state is DragState.IDLE


def test_failed_acquire_unwinds_what_was_taken() -> None:
    backend, layouts, (a,), surface, drag = _setup("a")
    surface.fail_on = "attach"

    with pytest.raises(RuntimeError):
        drag.pointer_down(POINTER, PRIMARY_BUTTON, a, 0, _y(0))

    assert drag.state is DragState.IDLE
    assert surface.names()[-4:] == ["dragging", "translate", "lifted", "release"]


def test_new_press_tears_down_stale_gesture() -> None:
    backend, layouts, (a, b), surface, drag = _setup("a", "b")
    drag.pointer_down(POINTER, PRIMARY_BUTTON, a, 0, _y(0))

    assert drag.pointer_down(POINTER + 1, PRIMARY_BUTTON, b, 0, _y(1))

    assert surface.names().count("release") == 1
    assert drag.source_id == b
    drag.teardown()
    drag.teardown()
    assert surface.names().count("release") == 2
