"""Clipboard monitor for ClipPocket.

Polls a ``PasteboardSource`` on a background thread, turns new content into
history items and inserts them. Items re-copied by the user are promoted and
written back to the pasteboard without being captured a second time.
"""

import logging
import threading
from typing import Callable, Optional, Union

from clippocket.clipboard.base import (PasteboardKind, PasteboardSnapshot,
                                       PasteboardSource)
from clippocket.clipboard.capture import capture_item
from clippocket.config import Settings
from clippocket.models.clipboarditem import ClipboardItem
from clippocket.services.history_store import HistoryStore

logger = logging.getLogger(__name__)


class ClipboardMonitor:

    def __init__(
        self,
        source: PasteboardSource,
        history: HistoryStore,
        settings: Optional[Settings] = None,
        on_capture: Optional[Callable[[ClipboardItem], None]] = None,
        auto_start: bool = False,
    ) -> None:
        self.source = source
        self.history = history
        self.settings = settings or history.settings
        self._on_capture = on_capture or self._default_handler
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self._is_running = False
        self._last_fingerprint: Optional[str] = None
        self._first_run = True

        if auto_start:
            self.start()

    @property
    def is_running(self) -> bool:
        return self._is_running

    # ---------------------------------------------------------------------
    # Lifecycle management
    # ---------------------------------------------------------------------
    def start(self) -> None:
        with self._lock:
            if self._is_running:
                logger.debug("ClipboardMonitor already running")
                return

            logger.info("Starting clipboard monitor (interval=%ss)", self.settings.poll_interval)
            self._stop_event.clear()
            self._is_running = True
            self._first_run = True
            self._poll_thread = threading.Thread(target=self._poll_loop, daemon=True)
            self._poll_thread.start()

    def stop(self) -> None:
        with self._lock:
            if not self._is_running:
                return

            logger.info("Stopping clipboard monitor")
            self._is_running = False
            self._stop_event.set()

        if self._poll_thread is not None:
            self._poll_thread.join(timeout=2.0)
            self._poll_thread = None

    def run_forever(self) -> None:
        try:
            if not self._is_running:
                self.start()

            while not self._stop_event.wait(timeout=self.settings.poll_interval):
                continue
        except KeyboardInterrupt:
            logger.info("Clipboard monitor interrupted by user")
        finally:
            self.stop()

    # ---------------------------------------------------------------------
    # Capture
    # ---------------------------------------------------------------------
    def on_new_content(
        self,
        payload: Union[bytes, str],
        kind: PasteboardKind,
        source_app_id: Optional[str] = None,
    ) -> Optional[ClipboardItem]:
        """Classify raw pasteboard content and insert it into history.

        Returns the inserted item, or None when the content was skipped or
        duplicated stored content.
        """
        settings = self.settings
        if settings.incognito:
            return None
        if settings.is_app_excluded(source_app_id):
            logger.info(f"Skipping clipboard from excluded app: {source_app_id}")
            return None

        item = capture_item(payload, kind, source_app_id, settings.max_image_bytes)
        if item is None:
            return None
        if not self.history.insert(item):
            return None

        try:
            self._on_capture(item)
        except Exception:
            logger.exception("Error while calling on_capture")
        return item

    def check_once(self) -> Optional[ClipboardItem]:
        """Read the pasteboard once and capture it if it changed since the last check."""
        snapshot = self.source.read()
        if snapshot is None:
            return None

        fingerprint = snapshot.fingerprint()
        with self._lock:
            if fingerprint == self._last_fingerprint:
                return None
            self._last_fingerprint = fingerprint

        return self._capture_snapshot(snapshot)

    def copy_to_clipboard(self, item_id: str) -> bool:
        """Promote a stored item and place it back on the pasteboard."""
        item = self.history.get(item_id)
        if item is None:
            return False

        self.history.promote(item_id)
        if not self.source.write(item):
            return False

        # Remember what was just written so the next poll does not capture it.
        written = self.source.read()
        if written is not None:
            with self._lock:
                self._last_fingerprint = written.fingerprint()
        return True

    def _capture_snapshot(self, snapshot: PasteboardSnapshot) -> Optional[ClipboardItem]:
        return self.on_new_content(snapshot.payload, snapshot.kind, snapshot.source_app_id)

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            if self._first_run:
                snapshot = self.source.read()
                with self._lock:
                    self._last_fingerprint = snapshot.fingerprint() if snapshot else None
                self._first_run = False
            else:
                try:
                    self.check_once()
                except Exception:
                    logger.exception("Clipboard check failed")

            self._stop_event.wait(self.settings.poll_interval)

    @staticmethod
    def _default_handler(item: ClipboardItem) -> None:
        logger.info(
            "Clipboard captured @ %s | type=%s | preview=%r",
            item.timestamp.isoformat(),
            item.type.value,
            item.display_string[:60],
        )

    # ---------------------------------------------------------------------
    # Context manager helpers
    # ---------------------------------------------------------------------
    def __enter__(self) -> "ClipboardMonitor":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
