from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from clippocket.models.clipboarditem import ClipboardItem
from clippocket.models.pinneditem import PinnedClipboardItem

BACKUP_VERSION = 1


class BackupBundle(BaseModel):
    """Versioned export envelope holding history and pinned items."""

    model_config = ConfigDict(frozen=True)

    version: int = BACKUP_VERSION
    history: List[ClipboardItem]
    pinned: Optional[List[PinnedClipboardItem]] = None
