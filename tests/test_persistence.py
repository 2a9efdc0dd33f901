import json
from pathlib import Path

import pytest

from idlegame.persistence import (
    JsonFileStorage,
    MemoryStorage,
    SaveCorruptError,
    SaveError,
    normalize_key,
)
from idlegame.state import default_state_dict
from idlegame.store import SAVE_KEY, StateStore


def test_file_storage_round_trip(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "saves")
    blob = default_state_dict()

    assert storage.load(SAVE_KEY) is None
    storage.save(SAVE_KEY, blob)

    assert storage.load(SAVE_KEY) == blob
    assert storage.path_for(SAVE_KEY).name == "idle-coding-legend.json"
    assert not storage.backup_path_for(SAVE_KEY).exists()


def test_second_write_keeps_backup(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    storage.save("slot", {"resources": {"lines_of_code": 1.0}})
    storage.save("slot", {"resources": {"lines_of_code": 2.0}})

    backup = json.loads(storage.backup_path_for("slot").read_text(encoding="utf-8"))
    assert backup == {"resources": {"lines_of_code": 1.0}}
    assert storage.load("slot") == {"resources": {"lines_of_code": 2.0}}
    assert not list(tmp_path.glob("*.tmp"))


def test_corrupt_save_falls_back_to_backup(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    storage.save("slot", {"generation": 1})
    storage.save("slot", {"generation": 2})
    storage.path_for("slot").write_text("{not json", encoding="utf-8")

    assert storage.load("slot") == {"generation": 1}


def test_corrupt_save_without_backup_raises(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    storage.path_for("slot").write_text("{not json", encoding="utf-8")

    with pytest.raises(SaveCorruptError, match="Invalid JSON"):
        storage.load("slot")


def test_store_survives_corrupt_file(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    storage.path_for(SAVE_KEY).write_text("[[[", encoding="utf-8")
    messages = []

    store = StateStore(storage, print_func=messages.append)

    assert store.snapshot() == default_state_dict()
    assert messages and messages[0].startswith("[Load]")


def test_unwritable_location_raises_save_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("occupied", encoding="utf-8")
    storage = JsonFileStorage(blocker / "saves")

    with pytest.raises(SaveError):
        storage.save("slot", {"ok": True})


@pytest.mark.parametrize("key", ["", "   ", "!!!", ".."])
def test_invalid_keys_are_rejected(tmp_path: Path, key: str) -> None:
    with pytest.raises(SaveError):
        JsonFileStorage(tmp_path).path_for(key)


def test_key_is_normalized(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    assert storage.path_for(" Main Slot/../x ") == tmp_path / "mainslot..x.json"


def test_memory_storage_copies_blobs() -> None:
    storage = MemoryStorage()
    blob = {"resources": {"lines_of_code": 3.0}}
    storage.save("slot", blob)
    blob["resources"]["lines_of_code"] = 99.0

    loaded = storage.load("slot")
    loaded["resources"]["lines_of_code"] = 42.0

    assert storage.load("slot") == {"resources": {"lines_of_code": 3.0}}
    assert storage.load("missing") is None


def test_normalize_key_strips_unsafe_characters() -> None:
    assert normalize_key("  My Save.. ") == "mysave"
    assert normalize_key("slot_2-b") == "slot_2-b"

    with pytest.raises(SaveError):
        normalize_key("../")
