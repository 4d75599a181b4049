import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5
DEFAULT_FORCE_EVERY = 30


class SaveScheduler:
    """Single-slot debounced save job.

    Each ``schedule()`` bumps a generation counter and arms a timer tagged with
    that generation; a timer that fires after a newer ``schedule()`` finds its
    generation stale and does nothing. ``notify_insert()`` also forces a
    background save every ``force_every`` insertions so a long burst cannot
    postpone persistence indefinitely.
    """

    def __init__(
        self,
        save: Callable[[], object],
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        force_every: int = DEFAULT_FORCE_EVERY,
    ) -> None:
        self._save = save
        self.delay = delay
        self.force_every = force_every
        self._lock = threading.RLock()
        self._generation = 0
        self._timer: Optional[threading.Timer] = None
        self._insert_count = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    @property
    def generation(self) -> int:
        return self._generation

    def schedule(self) -> int:
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire, args=(generation,))
            self._timer.daemon = True
            self._timer.start()
            return generation

    def notify_insert(self) -> None:
        with self._lock:
            self._insert_count += 1
            force = self.force_every > 0 and self._insert_count % self.force_every == 0
        if force:
            logger.debug(f"Forcing save after {self._insert_count} insertions")
            self.save_in_background()
        self.schedule()

    def save_in_background(self) -> threading.Thread:
        thread = threading.Thread(target=self._run_save, daemon=True)
        thread.start()
        return thread

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> bool:
        """Drop any pending job and save synchronously (shutdown path)."""
        self.cancel()
        return self._run_save()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        self._run_save()

    def _run_save(self) -> bool:
        try:
            return bool(self._save())
        except Exception:
            logger.exception("Scheduled save failed")
            return False
