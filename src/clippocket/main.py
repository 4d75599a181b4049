#!/usr/bin/env python3

import argparse
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Optional

from clippocket.clipboard import classify, get_pasteboard_source
from clippocket.clipboard.base import PasteboardSource
from clippocket.clipboard.classifier import count_code_indicators
from clippocket.config import Settings
from clippocket.database.persistence import PersistenceGateway
from clippocket.exceptions import BackupImportError, ClipPocketError
from clippocket.models.clipboarditem import ItemType
from clippocket.services.clipboard_service import ClipboardMonitor
from clippocket.services.history_store import HistoryStore
from clippocket.services.pinned_store import PinnedStore
from clippocket.utils.backup import read_backup, write_backup

logger = logging.getLogger(__name__)


class ClipPocketApp:

    def __init__(self, settings: Optional[Settings] = None, source: Optional[PasteboardSource] = None):
        self.settings = settings or Settings.from_env()
        self.gateway = PersistenceGateway(self.settings)
        self.history = HistoryStore(self.settings, self.gateway)
        self.pinned = PinnedStore(self.settings, self.gateway)
        self.source = source
        self.monitor: Optional[ClipboardMonitor] = None
        self.running = False

    def load(self) -> None:
        history_count = self.history.load()
        pinned_count = self.pinned.load()
        logger.info(f"Loaded {history_count} history items and {pinned_count} pinned items")

    def apply_settings(self, settings: Settings) -> None:
        self.settings = settings
        self.history.apply_settings(settings)
        self.pinned.settings = settings
        if self.monitor is not None:
            self.monitor.settings = settings

    def export_backup(self, path: Path) -> Path:
        return write_backup(
            path,
            self.history.snapshot(),
            self.pinned.items,
            max_history=self.settings.history_cap,
            max_pinned=self.settings.max_pinned,
            max_image_bytes=self.settings.max_image_bytes,
        )

    def import_backup(self, path: Path) -> None:
        history, pinned = read_backup(
            path,
            max_history=self.settings.history_cap,
            max_pinned=self.settings.max_pinned,
            max_image_bytes=self.settings.max_image_bytes,
        )
        self.history.replace_all(history)
        self.pinned.replace_all(pinned)
        logger.info(f"Imported {len(history)} history items and {len(pinned)} pinned items")

    def start(self) -> None:
        if self.running:
            return

        self.load()
        if self.source is None:
            self.source = get_pasteboard_source()
        self.monitor = ClipboardMonitor(self.source, self.history, self.settings, auto_start=True)
        self.running = True
        print("ClipPocket running. Press Ctrl+C to stop")

    def stop(self) -> None:
        if not self.running:
            return

        self.running = False
        if self.monitor is not None:
            self.monitor.stop()
        self.shutdown()
        print("ClipPocket stopped")

    def shutdown(self) -> None:
        """Write pending history synchronously so nothing is lost on exit."""
        self.history.flush()

    def run_forever(self) -> None:
        self.start()

        try:
            while self.running:
                time.sleep(1.0)
        except KeyboardInterrupt:
            print("\nStopping...")
        finally:
            self.stop()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="clippocket",
        description="ClipPocket - clipboard history manager"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose debug logging"
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file with CLIPPOCKET_* settings"
    )

    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding history and pinned items (default: ~/.clippocket)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show stored clipboard history")
    list_parser.add_argument("--type", choices=[t.value for t in ItemType], default=None)
    list_parser.add_argument("--limit", type=int, default=20)

    subparsers.add_parser("pinned", help="Show pinned items")

    classify_parser = subparsers.add_parser("classify", help="Classify a piece of text")
    classify_parser.add_argument("text")

    export_parser = subparsers.add_parser("export", help="Export history and pinned items")
    export_parser.add_argument("path", type=Path)

    import_parser = subparsers.add_parser("import", help="Import a backup file")
    import_parser.add_argument("path", type=Path)

    subparsers.add_parser("clear", help="Delete clipboard history")
    subparsers.add_parser("check", help="Check pinned items for duplicates and empty entries")
    subparsers.add_parser("watch", help="Monitor the clipboard until interrupted")

    return parser.parse_args(argv)


def _print_items(items) -> None:
    for index, item in enumerate(items):
        stamp = item.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        preview = item.display_string.replace("\n", " ")[:70]
        print(f"{index:>3}  {stamp}  {item.type_display_name:<6} {preview}")


def run_command(args, app: ClipPocketApp) -> int:
    if args.command == "classify":
        item_type = classify(args.text)
        if item_type is None:
            print("empty: no item would be created")
            return 1
        print(f"{item_type.value} (code indicators: {count_code_indicators(args.text)})")
        return 0

    if args.command == "watch":
        app.run_forever()
        return 0

    app.load()

    if args.command == "list":
        items = app.history.snapshot()
        if args.type:
            items = [item for item in items if item.type is ItemType(args.type)]
        _print_items(items[:args.limit])
    elif args.command == "pinned":
        for index, pinned in enumerate(app.pinned.items):
            print(f"{index:>3}  {pinned.content_type.display_name:<6} {pinned.display_title[:70]}")
    elif args.command == "export":
        path = app.export_backup(args.path)
        print(f"Exported to {path}")
    elif args.command == "import":
        try:
            app.import_backup(args.path)
        except (BackupImportError, OSError) as e:
            logger.error(f"Import failed: {e}")
            return 1
        app.shutdown()
        print(f"Imported {len(app.history)} history items and {len(app.pinned)} pinned items")
    elif args.command == "clear":
        app.history.clear()
        print("Cleared clipboard history")
    elif args.command == "check":
        ok = app.pinned.validate_integrity()
        print("Pinned items OK" if ok else "Pinned items have duplicate or empty entries")
        return 0 if ok else 1
    return 0


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s'
    )

    try:
        settings = Settings.from_env(env_path=args.env_file)
    except ClipPocketError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    if args.data_dir is not None:
        settings = settings.with_changes(data_dir=args.data_dir)

    app = ClipPocketApp(settings)

    def signal_handler(signum, frame):
        app.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        sys.exit(run_command(args, app))
    except NotImplementedError as e:
        logger.error(f"{e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
