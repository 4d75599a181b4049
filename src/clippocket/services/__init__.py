"""Service layer for ClipPocket."""

from .history_store import HistoryStore
from .pinned_store import PinnedStore
from .save_scheduler import SaveScheduler
from .clipboard_service import ClipboardMonitor

__all__ = ["ClipboardMonitor", "HistoryStore", "PinnedStore", "SaveScheduler"]
