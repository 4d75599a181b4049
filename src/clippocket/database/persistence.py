"""On-disk persistence for clipboard history and pinned items.

History lives in ``clipboardHistory.json`` inside the application directory.
Pinned items live under the ``PinnedClipboardItems`` key of the flat
key-value store. Loading is best-effort: anything that cannot be decoded is
logged and discarded so the app always starts with usable, if partial, data.
"""

import json
import logging
import threading
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import TypeAdapter

from clippocket.config import Settings
from clippocket.database.defaults_store import DefaultsStore
from clippocket.exceptions import PersistenceError
from clippocket.models.clipboarditem import ClipboardItem, ItemType
from clippocket.models.pinneditem import PinnedClipboardItem
from clippocket.utils.file_manager import FileManager

logger = logging.getLogger(__name__)

HISTORY_FILE_NAME = "clipboardHistory.json"
LEGACY_HISTORY_FILE_NAME = "ClipboardHistory.json"
LEGACY_HISTORY_KEY = "ClipboardHistory"
PINNED_ITEMS_KEY = "PinnedClipboardItems"

# Present in files written before source icons stopped being embedded.
LEGACY_ICON_MARKER = '"sourceIcon"'

_history_adapter = TypeAdapter(List[ClipboardItem])
_pinned_adapter = TypeAdapter(List[PinnedClipboardItem])


def encode_history(items: Iterable[ClipboardItem]) -> bytes:
    records = [item.to_record() for item in items]
    return json.dumps(records, indent=2, ensure_ascii=False).encode("utf-8")


def decode_history(raw: str) -> List[ClipboardItem]:
    return _history_adapter.validate_python(json.loads(raw))


def encode_pinned(items: Iterable[PinnedClipboardItem]) -> str:
    return json.dumps([item.to_record() for item in items], indent=2, ensure_ascii=False)


def decode_pinned(raw: str) -> List[PinnedClipboardItem]:
    return _pinned_adapter.validate_python(json.loads(raw))


def is_oversized_image(item: ClipboardItem, max_image_bytes: int) -> bool:
    return item.type is ItemType.IMAGE and item.byte_size > max_image_bytes


def clean_history(items: Sequence[ClipboardItem], max_image_bytes: int) -> List[ClipboardItem]:
    """Drop oversized images and items that would display as nothing."""
    cleaned = []
    for item in items:
        if is_oversized_image(item, max_image_bytes):
            logger.warning(
                f"Dropping large image ({item.byte_size // 1024}KB) from history")
            continue
        if not item.display_string:
            logger.warning("Dropping corrupted history item with empty content")
            continue
        cleaned.append(item)
    return cleaned


class PersistenceGateway:
    """Loads and saves the history and pinned stores."""

    def __init__(
        self,
        settings: Settings,
        file_manager: Optional[FileManager] = None,
        defaults: Optional[DefaultsStore] = None,
    ) -> None:
        self.settings = settings
        self.file_manager = file_manager or FileManager(settings.data_dir)
        self.defaults = defaults or DefaultsStore(self.file_manager)
        self._write_lock = threading.Lock()

    @property
    def history_path(self):
        return self.file_manager.path_for(HISTORY_FILE_NAME)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    def load_history(self) -> List[ClipboardItem]:
        settings = self.settings
        if not settings.remember_history:
            logger.info("Remember history is disabled, skipping load")
            return []

        fm = self.file_manager
        if not fm.exists(HISTORY_FILE_NAME) and fm.exists(LEGACY_HISTORY_FILE_NAME):
            fm.move(LEGACY_HISTORY_FILE_NAME, HISTORY_FILE_NAME)

        if not fm.exists(HISTORY_FILE_NAME):
            migrated = self._migrate_legacy_history()
            if migrated is not None:
                return migrated
            logger.info("No clipboard history file found")
            return []

        file_size = fm.size(HISTORY_FILE_NAME)
        if file_size > settings.max_history_file_bytes:
            logger.error(
                f"Clipboard history file is too large ({file_size // (1024 * 1024)}MB), skipping load")
            return []

        try:
            raw = fm.read_text(HISTORY_FILE_NAME)
            contains_legacy_icons = LEGACY_ICON_MARKER in raw
            loaded = decode_history(raw)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load clipboard history: {e}")
            fm.remove(HISTORY_FILE_NAME)
            return []

        items = clean_history(loaded, settings.max_image_bytes)
        items = items[:settings.history_cap]
        logger.info(
            f"Loaded {len(items)} clipboard items from history (limit: {settings.history_cap})")

        if contains_legacy_icons or len(items) != len(loaded):
            if contains_legacy_icons:
                logger.info("Rewriting clipboard history without embedded icons")
            self.save_history(items)
        return items

    def _migrate_legacy_history(self) -> Optional[List[ClipboardItem]]:
        raw = self.defaults.get(LEGACY_HISTORY_KEY)
        if raw is None:
            return None

        try:
            legacy_items = decode_history(raw)
        except ValueError as e:
            logger.error(f"Failed to migrate legacy history: {e}")
            return None

        items = clean_history(legacy_items, self.settings.max_image_bytes)
        items = items[:self.settings.history_cap]
        self.save_history(items)
        logger.info(f"Migrated clipboard history from legacy store ({len(items)} items)")
        return items

    def save_history(self, items: Sequence[ClipboardItem]) -> bool:
        settings = self.settings
        if not settings.remember_history:
            logger.debug("Remember history is disabled, skipping save")
            return False

        to_save = [
            item for item in list(items)
            if not is_oversized_image(item, settings.max_image_bytes)
        ][:settings.history_hard_limit]

        try:
            data = encode_history(to_save)
            with self._write_lock:
                self.file_manager.write_atomic(HISTORY_FILE_NAME, data)
        except PersistenceError as e:
            logger.error(f"Failed to save clipboard history: {e}")
            return False

        logger.info(f"Saved {len(to_save)} clipboard items to history ({len(data) // 1024}KB)")
        return True

    def clear_history(self) -> None:
        self.file_manager.remove(HISTORY_FILE_NAME)
        self.file_manager.remove(LEGACY_HISTORY_FILE_NAME)
        self.defaults.remove(LEGACY_HISTORY_KEY)
        logger.info("Cleared clipboard history")

    # ------------------------------------------------------------------
    # Pinned items
    # ------------------------------------------------------------------
    def load_pinned(self) -> List[PinnedClipboardItem]:
        raw = self.defaults.get(PINNED_ITEMS_KEY)
        if raw is None:
            logger.info("No saved pinned items found")
            return []

        contains_legacy_icons = LEGACY_ICON_MARKER in raw
        try:
            loaded = decode_pinned(raw)
        except ValueError as e:
            logger.error(f"Failed to load pinned items: {e}")
            self.defaults.remove(PINNED_ITEMS_KEY)
            return []

        items = []
        for pinned in loaded:
            if not pinned.original_item.display_string:
                logger.warning("Removing corrupted pinned item with empty content")
                continue
            items.append(pinned)
        items = items[:self.settings.max_pinned]
        logger.info(f"Loaded {len(items)} pinned items")

        if contains_legacy_icons or len(items) != len(loaded):
            if contains_legacy_icons:
                logger.info("Rewriting pinned items without embedded icons")
            self.save_pinned(items)
        return items

    def save_pinned(self, items: Sequence[PinnedClipboardItem]) -> bool:
        to_save = list(items)[:self.settings.max_pinned]
        if not self.defaults.set(PINNED_ITEMS_KEY, encode_pinned(to_save)):
            return False
        logger.info(f"Saved {len(to_save)} pinned items")
        return True

    # ------------------------------------------------------------------
    # Both stores
    # ------------------------------------------------------------------
    def load(self) -> Tuple[List[ClipboardItem], List[PinnedClipboardItem]]:
        return self.load_history(), self.load_pinned()

    def save(self, history: Sequence[ClipboardItem], pinned: Sequence[PinnedClipboardItem]) -> bool:
        history_saved = self.save_history(history)
        pinned_saved = self.save_pinned(pinned)
        return history_saved and pinned_saved
