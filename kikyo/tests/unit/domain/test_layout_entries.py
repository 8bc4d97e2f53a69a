import pytest

from kikyo.domain.layout_entries import (
    LayoutEntriesSnapshot,
    LayoutEntry,
    fallback_alias_from_path,
    index_of,
    move_entry,
)


def _entries(*ids: str):
    return [LayoutEntry(id=i, alias=i.upper(), path=f"C:\\layouts\\{i}.yab") for i in ids]


def _ids(entries):
    return [e.id for e in entries]


def test_move_down_lands_after_target() -> None:
    assert _ids(move_entry(_entries("a", "b", "c"), "a", "c")) == ["b", "c", "a"]


def test_move_up_lands_before_target() -> None:
    assert _ids(move_entry(_entries("a", "b", "c"), "c", "a")) == ["c", "a", "b"]


def test_move_to_neighbour() -> None:
    assert _ids(move_entry(_entries("a", "b", "c"), "a", "b")) == ["b", "a", "c"]


@pytest.mark.parametrize("source,target", [("a", "a"), ("zz", "b"), ("a", "zz")])
def test_move_noop_cases(source: str, target: str) -> None:
    entries = _entries("a", "b", "c")
    moved = move_entry(entries, source, target)
    assert _ids(moved) == ["a", "b", "c"]
    assert moved is not entries


def test_display_name_prefers_alias_then_layout_name_then_stem() -> None:
    assert LayoutEntry(id="1", alias="Mine", layout_name="Shin", path="x.yab").display_name == "Mine"
    assert LayoutEntry(id="1", alias="  ", layout_name="Shin", path="x.yab").display_name == "Shin"
    assert LayoutEntry(id="1", path=r"C:\layouts\nicola.yab").display_name == "nicola"
    assert LayoutEntry(id="1").display_name == "layout"


def test_fallback_alias_handles_both_separators() -> None:
    assert fallback_alias_from_path("/home/u/tsuki.yab") == "tsuki"
    assert fallback_alias_from_path(r"D:\x\y\z.yab") == "z"
    assert fallback_alias_from_path("") == "layout"


def test_entry_without_id_is_rejected() -> None:
    with pytest.raises(ValueError):
        LayoutEntry.from_dict({"alias": "x", "path": "x.yab"})


def test_snapshot_parses_entries_and_active_id() -> None:
    snap = LayoutEntriesSnapshot.from_dict(
        {
            "entries": [{"id": "a", "path": "a.yab"}, {"id": "b", "path": "b.yab", "alias": "Bee"}],
            "active_layout_id": "b",
        }
    )
    assert snap.ids() == ["a", "b"]
    assert snap.active_layout_id == "b"
    assert snap.entries[1].alias == "Bee"
    assert index_of(snap.entries, "b") == 1
    assert index_of(snap.entries, "missing") == -1


def test_snapshot_without_active_id() -> None:
    snap = LayoutEntriesSnapshot.from_dict({"entries": [], "active_layout_id": None})
    assert snap.entries == []
    assert snap.active_layout_id is None
