import os
from typing import Optional

try:
    from AppKit import (NSImage, NSPasteboard, NSPasteboardTypePNG,
                        NSPasteboardTypeString, NSPasteboardTypeTIFF,
                        NSWorkspace)
    from Foundation import NSURL, NSData
    HAS_APPKIT = True
except ImportError:
    HAS_APPKIT = False

from clippocket.clipboard.base import (PasteboardKind, PasteboardSnapshot,
                                       PasteboardSource)
from clippocket.models.clipboarditem import ClipboardItem, ItemType


class MacOSPasteboard(PasteboardSource):
    """General pasteboard access through PyObjC.

    Representations are checked in the order file URL, image, string, which is
    the order the pasteboard flags take priority in.
    """

    def _read(self) -> Optional[PasteboardSnapshot]:
        if not HAS_APPKIT:
            return None

        pasteboard = NSPasteboard.generalPasteboard()
        source_app_id = self._frontmost_bundle_id()
        types = pasteboard.types() or []

        file_urls = pasteboard.readObjectsForClasses_options_([NSURL], None) or []
        for url in file_urls:
            if url.isFileURL():
                return PasteboardSnapshot(str(url.path()), PasteboardKind.FILE_URL, source_app_id)

        for pb_type in (NSPasteboardTypePNG, NSPasteboardTypeTIFF):
            if pb_type in types:
                data = pasteboard.dataForType_(pb_type)
                if data:
                    return PasteboardSnapshot(bytes(data), PasteboardKind.IMAGE, source_app_id)

        if NSPasteboardTypeString in types:
            text = pasteboard.stringForType_(NSPasteboardTypeString)
            if text:
                return PasteboardSnapshot(str(text), PasteboardKind.TEXT, source_app_id)

        return None

    def _write(self, item: ClipboardItem) -> bool:
        if not HAS_APPKIT:
            return False

        pasteboard = NSPasteboard.generalPasteboard()
        pasteboard.clearContents()

        if item.type is ItemType.IMAGE:
            data = item.image_data
            ns_data = NSData.dataWithBytes_length_(data, len(data))
            image = NSImage.alloc().initWithData_(ns_data)
            if image is None:
                return False
            return bool(pasteboard.writeObjects_([image]))

        if item.type is ItemType.FILE:
            if not os.path.exists(item.file_path):
                return False
            file_url = NSURL.fileURLWithPath_(item.file_path)
            return bool(pasteboard.writeObjects_([file_url]))

        return bool(pasteboard.setString_forType_(item.text, NSPasteboardTypeString))

    @staticmethod
    def _frontmost_bundle_id() -> Optional[str]:
        app = NSWorkspace.sharedWorkspace().frontmostApplication()
        if app is None:
            return None
        bundle_id = app.bundleIdentifier()
        return str(bundle_id) if bundle_id else None
