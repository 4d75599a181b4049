import json

import pytest

from clippocket.exceptions import BackupImportError
from clippocket.models.clipboarditem import ClipboardItem, ItemType
from clippocket.models.pinneditem import PinnedClipboardItem
from clippocket.utils.backup import (export_backup, import_backup,
                                     read_backup, write_backup)

ONE_MB = 1_048_576


def _history(count):
    return [ClipboardItem.from_text(f"entry {i}") for i in range(count)]


def test_export_layout():
    history = _history(2)
    pinned = [PinnedClipboardItem.pin(history[0], custom_title="Top")]

    document = json.loads(export_backup(history, pinned, max_history=10, max_pinned=10))
    assert document["version"] == 1
    assert len(document["history"]) == 2
    assert document["pinned"][0]["customTitle"] == "Top"
    assert document["pinned"][0]["originalItem"]["content"] == "entry 0"


def test_export_applies_limits_and_drops_large_images():
    history = [ClipboardItem.from_image(b"\x00" * (ONE_MB + 1))] + _history(5)
    pinned = [PinnedClipboardItem.pin(item) for item in _history(4)]

    document = json.loads(export_backup(history, pinned, max_history=3, max_pinned=2))
    assert [r["content"] for r in document["history"]] == ["entry 0", "entry 1"]
    assert len(document["pinned"]) == 2


def test_import_restores_bundle():
    history = _history(3)
    pinned = [PinnedClipboardItem.pin(history[1])]
    data = export_backup(history, pinned, max_history=10, max_pinned=10)

    restored_history, restored_pinned = import_backup(data, max_history=10, max_pinned=10)
    assert restored_history == history
    assert restored_pinned == pinned


def test_import_reapplies_limits():
    data = export_backup(_history(5), [], max_history=10, max_pinned=10)
    history, pinned = import_backup(data, max_history=2, max_pinned=10)
    assert [item.text for item in history] == ["entry 0", "entry 1"]
    assert pinned == []


def test_import_bundle_without_pinned():
    record = ClipboardItem.from_text("solo").to_record()
    data = json.dumps({"version": 1, "history": [record]}).encode("utf-8")

    history, pinned = import_backup(data, max_history=10, max_pinned=10)
    assert [item.text for item in history] == ["solo"]
    assert pinned == []


def test_import_bare_history_array():
    records = [item.to_record() for item in _history(3)]
    history, pinned = import_backup(json.dumps(records).encode("utf-8"), max_history=10, max_pinned=10)
    assert len(history) == 3
    assert pinned == []


def test_import_newer_version_still_loads(caplog):
    record = ClipboardItem.from_text("future").to_record()
    data = json.dumps({"version": 7, "history": [record], "pinned": []}).encode("utf-8")

    history, _ = import_backup(data, max_history=10, max_pinned=10)
    assert len(history) == 1
    assert "newer than supported" in caplog.text


@pytest.mark.parametrize("data", [
    b"not json at all",
    b'{"something": "else"}',
    b'[{"type": "text"}]',
])
def test_import_rejects_unreadable_backups(data):
    with pytest.raises(BackupImportError):
        import_backup(data, max_history=10, max_pinned=10)


def test_file_round_trip(tmp_path):
    history = [ClipboardItem.from_text("#00FF00", ItemType.COLOR), ClipboardItem.from_image(b"\x89PNG")]
    path = write_backup(tmp_path / "backup.json", history, [], max_history=10, max_pinned=10)

    restored, pinned = read_backup(path, max_history=10, max_pinned=10)
    assert restored == history
    assert pinned == []


def test_image_limit_is_configurable():
    image = ClipboardItem.from_image(b"\x89PNG" + b"\x00" * 60)
    history = [image, ClipboardItem.from_text("text stays")]

    document = json.loads(export_backup(history, [], max_history=10, max_pinned=10, max_image_bytes=32))
    assert [r["type"] for r in document["history"]] == ["text"]

    data = export_backup(history, [], max_history=10, max_pinned=10)
    restored, _ = import_backup(data, max_history=10, max_pinned=10, max_image_bytes=32)
    assert [item.type for item in restored] == [ItemType.TEXT]
