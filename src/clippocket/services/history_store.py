import logging
import threading
from typing import Iterator, List, Optional, Sequence

from clippocket.config import Settings
from clippocket.database.persistence import PersistenceGateway, clean_history
from clippocket.models.clipboarditem import ClipboardItem, ItemType
from clippocket.services.save_scheduler import (DEFAULT_DEBOUNCE_SECONDS,
                                                SaveScheduler)

logger = logging.getLogger(__name__)


class HistoryStore:
    """Most-recent-first clipboard history without content duplicates.

    When a gateway is supplied every mutation schedules a debounced save of a
    point-in-time snapshot; ``flush()`` writes synchronously for shutdown.
    """

    def __init__(
        self,
        settings: Settings,
        gateway: Optional[PersistenceGateway] = None,
        save_delay: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self.settings = settings
        self.gateway = gateway
        self._items: List[ClipboardItem] = []
        self._lock = threading.RLock()
        # Held across snapshot-and-write and across clear().
        self._persist_lock = threading.Lock()
        self._scheduler: Optional[SaveScheduler] = None
        if gateway is not None:
            self._scheduler = SaveScheduler(self._persist, delay=save_delay)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def items(self) -> List[ClipboardItem]:
        return self.snapshot()

    def snapshot(self) -> List[ClipboardItem]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ClipboardItem]:
        return iter(self.snapshot())

    def get(self, item_id: str) -> Optional[ClipboardItem]:
        with self._lock:
            for item in self._items:
                if item.id == item_id:
                    return item
        return None

    def find_equal(self, item: ClipboardItem) -> Optional[ClipboardItem]:
        with self._lock:
            for existing in self._items:
                if existing.is_equal(item):
                    return existing
        return None

    def contains_equal(self, item: ClipboardItem) -> bool:
        return self.find_equal(item) is not None

    def search(self, text: str) -> List[ClipboardItem]:
        if not text:
            return self.snapshot()
        needle = text.lower()
        return [
            item for item in self.snapshot()
            if needle in item.display_string.lower()
            or (item.text is not None and needle in item.text.lower())
        ]

    def items_by_type(self, item_type: ItemType) -> List[ClipboardItem]:
        return [item for item in self.snapshot() if item.type is item_type]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def insert(self, item: ClipboardItem) -> bool:
        """Prepend ``item`` unless equal content is already stored.

        A duplicate is discarded and the existing entry keeps its position.
        """
        with self._lock:
            if any(existing.is_equal(item) for existing in self._items):
                logger.debug(f"Ignoring duplicate clipboard item: {item.display_string!r}")
                return False
            self._items.insert(0, item)
            self._trim()

        logger.info(f"Added new clipboard item: {item.type.value}")
        if self._scheduler is not None:
            self._scheduler.notify_insert()
        return True

    def promote(self, item_id: str) -> bool:
        with self._lock:
            for index, item in enumerate(self._items):
                if item.id == item_id:
                    if index > 0:
                        self._items.insert(0, self._items.pop(index))
                    break
            else:
                return False
        self._schedule_save()
        return True

    def delete(self, item_id: str) -> bool:
        with self._lock:
            before = len(self._items)
            self._items = [item for item in self._items if item.id != item_id]
            removed = len(self._items) != before
        if removed:
            self._schedule_save()
        return removed

    def replace_all(self, items: Sequence[ClipboardItem]) -> None:
        cleaned = clean_history(items, self.settings.max_image_bytes)
        unique: List[ClipboardItem] = []
        for item in cleaned:
            if not any(existing.is_equal(item) for existing in unique):
                unique.append(item)

        with self._lock:
            self._items = unique
            self._trim()
            count = len(self._items)
        logger.info(f"Replaced clipboard history ({count} items)")
        self._schedule_save()

    def clear(self) -> None:
        if self._scheduler is not None:
            self._scheduler.cancel()
        with self._persist_lock:
            with self._lock:
                self._items = []
            if self.gateway is not None:
                self.gateway.clear_history()

    def apply_settings(self, settings: Settings) -> None:
        self.settings = settings
        if self.gateway is not None:
            self.gateway.settings = settings

        if not settings.remember_history:
            self.clear()
            return

        with self._lock:
            before = len(self._items)
            self._trim()
            trimmed = len(self._items) != before
        if trimmed:
            self._schedule_save()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> int:
        if self.gateway is None:
            return 0
        loaded = self.gateway.load_history()
        with self._lock:
            self._items = list(loaded)
            self._trim()
            return len(self._items)

    def flush(self) -> bool:
        if self._scheduler is not None:
            return self._scheduler.flush()
        return self._persist()

    def _persist(self) -> bool:
        if self.gateway is None:
            return False
        with self._persist_lock:
            return self.gateway.save_history(self.snapshot())

    def _schedule_save(self) -> None:
        if self._scheduler is not None:
            self._scheduler.schedule()

    def _trim(self) -> None:
        cap = self.settings.history_cap
        if len(self._items) > cap:
            del self._items[cap:]
