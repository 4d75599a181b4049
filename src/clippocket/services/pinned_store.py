import logging
import threading
from typing import List, Optional, Sequence

from clippocket.config import Settings
from clippocket.database.persistence import PersistenceGateway
from clippocket.models.clipboarditem import ClipboardItem, ItemType
from clippocket.models.pinneditem import PinnedClipboardItem

logger = logging.getLogger(__name__)


class PinnedStore:
    """User-ordered pinned items, at most one per distinct content.

    Each mutation is written through the gateway straight away; pinning is a
    deliberate user action, so there is no burst to coalesce.
    """

    def __init__(self, settings: Settings, gateway: Optional[PersistenceGateway] = None) -> None:
        self.settings = settings
        self.gateway = gateway
        self._items: List[PinnedClipboardItem] = []
        self._lock = threading.RLock()

    @property
    def items(self) -> List[PinnedClipboardItem]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, pinned_id: str) -> Optional[PinnedClipboardItem]:
        with self._lock:
            for pinned in self._items:
                if pinned.id == pinned_id:
                    return pinned
        return None

    def is_pinned(self, item: ClipboardItem) -> bool:
        return self.get_pinned_item_for(item) is not None

    def get_pinned_item_for(self, item: ClipboardItem) -> Optional[PinnedClipboardItem]:
        with self._lock:
            for pinned in self._items:
                if pinned.original_item.is_equal(item):
                    return pinned
        return None

    def search(self, text: str) -> List[PinnedClipboardItem]:
        if not text:
            return self.items
        needle = text.lower()
        return [
            pinned for pinned in self.items
            if needle in pinned.display_string.lower() or needle in pinned.display_title.lower()
        ]

    def items_by_type(self, item_type: ItemType) -> List[PinnedClipboardItem]:
        return [pinned for pinned in self.items if pinned.content_type is item_type]

    def pin(self, item: ClipboardItem, custom_title: Optional[str] = None) -> Optional[PinnedClipboardItem]:
        """Pin ``item`` at the front. Returns None if equal content is already pinned."""
        with self._lock:
            if any(pinned.original_item.is_equal(item) for pinned in self._items):
                return None
            pinned = PinnedClipboardItem.pin(item, custom_title)
            self._items.insert(0, pinned)
            del self._items[self.settings.max_pinned:]

        logger.info(f"Pinned item: {item.display_string!r}")
        self._save()
        return pinned

    def unpin(self, pinned_id: str) -> bool:
        return self._remove_first(lambda pinned: pinned.id == pinned_id)

    def unpin_by_original_id(self, original_id: str) -> bool:
        return self._remove_first(lambda pinned: pinned.original_item.id == original_id)

    def set_title(self, pinned_id: str, title: Optional[str]) -> bool:
        with self._lock:
            for index, pinned in enumerate(self._items):
                if pinned.id == pinned_id:
                    self._items[index] = pinned.with_title(title)
                    break
            else:
                return False

        logger.info(f"Updated title for pinned item: {title or 'No title'}")
        self._save()
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move the item at ``from_index`` so it ends up at ``to_index``."""
        with self._lock:
            count = len(self._items)
            if not (0 <= from_index < count and 0 <= to_index < count):
                return False
            if from_index != to_index:
                self._items.insert(to_index, self._items.pop(from_index))

        self._save()
        return True

    def move_to_top(self, pinned_id: str) -> bool:
        with self._lock:
            for index, pinned in enumerate(self._items):
                if pinned.id == pinned_id:
                    self._items.insert(0, self._items.pop(index))
                    break
            else:
                return False

        self._save()
        return True

    def replace_all(self, items: Sequence[PinnedClipboardItem]) -> None:
        with self._lock:
            self._items = self._unique(items)[:self.settings.max_pinned]
        logger.info("Replaced pinned items from import")
        self._save()

    def clear(self) -> None:
        with self._lock:
            self._items = []
        logger.info("Cleared all pinned items")
        self._save()

    def validate_integrity(self) -> bool:
        """Read-only scan for duplicate or empty entries."""
        seen: List[ClipboardItem] = []
        for pinned in self.items:
            original = pinned.original_item
            if not original.display_string:
                logger.warning("Found pinned item with empty content")
                return False
            if any(existing.is_equal(original) for existing in seen):
                logger.warning("Found duplicate pinned item content")
                return False
            seen.append(original)
        return True

    def load(self) -> int:
        if self.gateway is None:
            return 0
        loaded = self.gateway.load_pinned()
        with self._lock:
            self._items = self._unique(loaded)[:self.settings.max_pinned]
            return len(self._items)

    @staticmethod
    def _unique(items: Sequence[PinnedClipboardItem]) -> List[PinnedClipboardItem]:
        """Keep the first pinned item for each distinct content."""
        unique: List[PinnedClipboardItem] = []
        for pinned in items:
            original = pinned.original_item
            if any(existing.original_item.is_equal(original) for existing in unique):
                logger.warning("Dropping duplicate pinned item")
                continue
            unique.append(pinned)
        return unique

    def _remove_first(self, predicate) -> bool:
        with self._lock:
            for index, pinned in enumerate(self._items):
                if predicate(pinned):
                    removed = self._items.pop(index)
                    break
            else:
                return False

        logger.info(f"Unpinned item: {removed.display_string!r}")
        self._save()
        return True

    def _save(self) -> None:
        if self.gateway is not None:
            self.gateway.save_pinned(self.items)
