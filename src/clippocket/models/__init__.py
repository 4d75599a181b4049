from clippocket.models.clipboarditem import (ClipboardItem, FileContent,
                                             ImageContent, ItemContent,
                                             ItemType, TextContent)
from clippocket.models.pinneditem import PinnedClipboardItem
from clippocket.models.backup import BACKUP_VERSION, BackupBundle

__all__ = [
    'BACKUP_VERSION',
    'BackupBundle',
    'ClipboardItem',
    'FileContent',
    'ImageContent',
    'ItemContent',
    'ItemType',
    'PinnedClipboardItem',
    'TextContent',
]
