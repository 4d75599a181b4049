import logging
import os
import tempfile
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from clippocket.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class FileManager:
    """Application data directory with atomic, best-effort file operations."""

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            base_dir = Path.home() / ".clippocket"
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, file_name: str) -> Path:
        return self.base_dir / file_name

    def exists(self, file_name: str) -> bool:
        return self.path_for(file_name).is_file()

    def size(self, file_name: str) -> int:
        try:
            return self.path_for(file_name).stat().st_size
        except OSError:
            return 0

    def read_text(self, file_name: str) -> str:
        return self.path_for(file_name).read_text(encoding="utf-8")

    def write_atomic(self, file_name: str, data: bytes) -> Path:
        """Write through a temp file and rename it into place.

        A crash mid-write leaves the previous file untouched.
        """
        target = self.path_for(file_name)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{file_name}.", suffix=".tmp", dir=str(self.base_dir))
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise PersistenceError(f"Failed to write {target}", e)
        return target

    def move(self, source_name: str, target_name: str) -> bool:
        try:
            os.replace(self.path_for(source_name), self.path_for(target_name))
            logger.info(f"Renamed {source_name} to {target_name}")
            return True
        except OSError as e:
            logger.error(f"Failed to rename {source_name}: {e}")
            return False

    def remove(self, file_name: str) -> bool:
        path = self.path_for(file_name)
        try:
            path.unlink()
            logger.info(f"Removed {path}")
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(f"Failed to remove {path}: {e}")
            return False

    def get_file_uri(self, file_path: Path) -> str:
        return Path(file_path).absolute().as_uri()


def path_from_file_url(value: str) -> str:
    """Filesystem path for a ``file://`` URL; plain paths are returned as given."""
    if value.lower().startswith("file://"):
        return unquote(urlparse(value).path)
    return value
