import json

import pytest

from clippocket import main as cli
from clippocket.database.persistence import PersistenceGateway
from clippocket.main import ClipPocketApp, main, parse_args, run_command
from clippocket.models.clipboarditem import ClipboardItem, ItemType
from clippocket.models.pinneditem import PinnedClipboardItem


@pytest.fixture(autouse=True)
def no_signal_handlers(monkeypatch):
    monkeypatch.setattr(cli.signal, "signal", lambda signum, handler: None)


@pytest.fixture
def app(settings):
    return ClipPocketApp(settings)


def _seed(settings, history=(), pinned=()):
    PersistenceGateway(settings).save(list(history), list(pinned))


def _exit_code(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    return excinfo.value.code


def test_classify_command(tmp_path, capsys):
    assert _exit_code(["--data-dir", str(tmp_path), "classify", "hello@example.com"]) == 0
    assert capsys.readouterr().out.startswith("email")


def test_classify_blank_text(tmp_path, capsys):
    assert _exit_code(["--data-dir", str(tmp_path), "classify", "   "]) == 1
    assert "no item" in capsys.readouterr().out


def test_list_command_filters_by_type(settings, app, capsys):
    _seed(settings, history=[
        ClipboardItem.from_text("https://example.com", ItemType.URL),
        ClipboardItem.from_text("plain words"),
    ])

    assert run_command(parse_args(["list", "--type", "url"]), app) == 0
    out = capsys.readouterr().out
    assert "https://example.com" in out
    assert "plain words" not in out


def test_pinned_command_shows_titles(settings, app, capsys):
    item = ClipboardItem.from_text("ssh deploy@10.0.0.5")
    _seed(settings, pinned=[PinnedClipboardItem.pin(item, custom_title="Deploy")])

    assert run_command(parse_args(["pinned"]), app) == 0
    assert "Deploy" in capsys.readouterr().out


def test_export_then_import(settings, tmp_path, capsys):
    history = [ClipboardItem.from_text(f"entry {i}") for i in range(3)]
    pinned = [PinnedClipboardItem.pin(history[0])]
    _seed(settings, history=history, pinned=pinned)
    backup = tmp_path / "backup.json"

    assert run_command(parse_args(["export", str(backup)]), ClipPocketApp(settings)) == 0
    assert len(json.loads(backup.read_text(encoding="utf-8"))["history"]) == 3

    fresh = settings.with_changes(data_dir=tmp_path / "fresh")
    assert run_command(parse_args(["import", str(backup)]), ClipPocketApp(fresh)) == 0
    assert "Imported 3 history items and 1 pinned items" in capsys.readouterr().out

    restored_history, restored_pinned = PersistenceGateway(fresh).load()
    assert restored_history == history
    assert restored_pinned == pinned


def test_import_rejects_bad_file(app, tmp_path):
    backup = tmp_path / "broken.json"
    backup.write_text("{nope", encoding="utf-8")
    assert run_command(parse_args(["import", str(backup)]), app) == 1


def test_clear_command(settings, app):
    _seed(settings, history=[ClipboardItem.from_text("bye")])
    assert run_command(parse_args(["clear"]), app) == 0
    assert PersistenceGateway(settings).load_history() == []


def test_check_command_on_loaded_pins(settings, app, capsys):
    pinned = [
        PinnedClipboardItem.pin(ClipboardItem.from_text("twice")),
        PinnedClipboardItem.pin(ClipboardItem.from_text("twice")),
        PinnedClipboardItem.pin(ClipboardItem.from_text("once")),
    ]
    _seed(settings, pinned=pinned)
    assert run_command(parse_args(["check"]), app) == 0
    assert "Pinned items OK" in capsys.readouterr().out
    assert len(app.pinned) == 2


def test_invalid_configuration_exits_with_2(monkeypatch, tmp_path):
    monkeypatch.setenv("CLIPPOCKET_MAX_PINNED", "0")
    assert _exit_code(["--data-dir", str(tmp_path), "list"]) == 2


def test_watch_without_pasteboard_support(monkeypatch, tmp_path):
    def unsupported():
        raise NotImplementedError("Pasteboard access is not supported on this platform")

    monkeypatch.setattr(cli, "get_pasteboard_source", unsupported)
    assert _exit_code(["--data-dir", str(tmp_path), "watch"]) == 1


def test_export_honours_image_limit(settings, tmp_path):
    app = ClipPocketApp(settings.with_changes(max_image_bytes=16))
    app.history.replace_all([ClipboardItem.from_image(b"\x01" * 8), ClipboardItem.from_text("kept")])
    backup = tmp_path / "backup.json"

    app.apply_settings(app.settings.with_changes(max_image_bytes=4))
    app.export_backup(backup)

    records = json.loads(backup.read_text(encoding="utf-8"))["history"]
    assert [r["type"] for r in records] == ["text"]
