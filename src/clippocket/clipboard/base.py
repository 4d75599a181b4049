import hashlib
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from clippocket.models.clipboarditem import ClipboardItem

logger = logging.getLogger(__name__)


class PasteboardKind(str, Enum):
    """Representation flag reported by the pasteboard, not sniffed from content."""
    TEXT = "text"
    IMAGE = "image"
    FILE_URL = "file_url"


@dataclass(frozen=True)
class PasteboardSnapshot:
    payload: Union[bytes, str]
    kind: PasteboardKind
    source_app_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def fingerprint(self) -> str:
        if isinstance(self.payload, str):
            payload_bytes = self.payload.encode("utf-8")
        else:
            payload_bytes = bytes(self.payload)
        return hashlib.md5(self.kind.value.encode("utf-8") + b":" + payload_bytes).hexdigest()


class PasteboardSource(ABC):
    """Platform pasteboard access used by the clipboard monitor."""

    @abstractmethod
    def _read(self) -> Optional[PasteboardSnapshot]:
        pass

    @abstractmethod
    def _write(self, item: ClipboardItem) -> bool:
        pass

    def read(self) -> Optional[PasteboardSnapshot]:
        try:
            return self._read()
        except Exception:
            logger.exception("Failed to read pasteboard")
            return None

    def write(self, item: ClipboardItem) -> bool:
        try:
            return self._write(item)
        except Exception:
            logger.exception("Failed to write %s item to pasteboard", item.type.value)
            return False
