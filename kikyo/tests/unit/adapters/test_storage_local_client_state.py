import json
import os
from pathlib import Path

from kikyo.adapters.storage_local import StorageLocal
from kikyo.domain.ports import LAST_LAYOUT_PATH_KEY


def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path))

    assert storage.get_item(LAST_LAYOUT_PATH_KEY) is None
    assert not (tmp_path / "client_state.json").exists()


def test_set_item_persists_json_without_temp_leftovers(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path / "state"))

    storage.set_item(LAST_LAYOUT_PATH_KEY, r"C:\layouts\shin.yab")
    storage.set_item("other", "1")

    raw = json.loads((tmp_path / "state" / "client_state.json").read_text(encoding="utf-8"))
    assert raw == {LAST_LAYOUT_PATH_KEY: r"C:\layouts\shin.yab", "other": "1"}
    assert os.listdir(tmp_path / "state") == ["client_state.json"]
    assert StorageLocal(str(tmp_path / "state")).get_item(LAST_LAYOUT_PATH_KEY) == r"C:\layouts\shin.yab"


def test_remove_item(tmp_path: Path) -> None:
    storage = StorageLocal(root_dir=str(tmp_path))
    storage.set_item("k", "v")

    storage.remove_item("k")
    storage.remove_item("never-set")

    assert storage.get_item("k") is None


def test_corrupt_file_is_treated_as_empty(tmp_path: Path) -> None:
    (tmp_path / "client_state.json").write_text("{not json", encoding="utf-8")
    storage = StorageLocal(root_dir=str(tmp_path))

    assert storage.get_item("k") is None
    storage.set_item("k", "v")
    assert storage.get_item("k") == "v"
