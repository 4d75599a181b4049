import json
import logging
import threading
from typing import Dict, Optional

from clippocket.exceptions import PersistenceError
from clippocket.utils.file_manager import FileManager

logger = logging.getLogger(__name__)

DEFAULTS_FILE_NAME = "defaults.json"


class DefaultsStore:
    """Flat key-value store kept in a single JSON file.

    Values are encoded JSON documents stored as strings, the way the old app
    kept data blobs in its preferences domain.
    """

    def __init__(self, file_manager: FileManager, file_name: str = DEFAULTS_FILE_NAME):
        self.file_manager = file_manager
        self.file_name = file_name
        self._lock = threading.RLock()

    def _read_all(self) -> Dict[str, str]:
        if not self.file_manager.exists(self.file_name):
            return {}
        try:
            data = json.loads(self.file_manager.read_text(self.file_name))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {self.file_name}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Ignoring {self.file_name}: expected an object")
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _write_all(self, values: Dict[str, str]) -> None:
        payload = json.dumps(values, indent=2, sort_keys=True).encode("utf-8")
        self.file_manager.write_atomic(self.file_name, payload)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> bool:
        with self._lock:
            values = self._read_all()
            values[key] = value
            try:
                self._write_all(values)
            except PersistenceError as e:
                logger.error(f"Failed to store {key}: {e}")
                return False
            return True

    def remove(self, key: str) -> bool:
        with self._lock:
            values = self._read_all()
            if key not in values:
                return False
            del values[key]
            try:
                self._write_all(values)
            except PersistenceError as e:
                logger.error(f"Failed to remove {key}: {e}")
                return False
            return True

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
