from clippocket.clipboard.base import (PasteboardKind, PasteboardSnapshot,
                                       PasteboardSource)
from clippocket.clipboard.capture import capture_item, compress_image
from clippocket.clipboard.classifier import classify, classify_binary
from clippocket.clipboard.factory import (get_pasteboard_class,
                                          get_pasteboard_source)

__all__ = [
    'PasteboardKind',
    'PasteboardSnapshot',
    'PasteboardSource',
    'capture_item',
    'classify',
    'classify_binary',
    'compress_image',
    'get_pasteboard_class',
    'get_pasteboard_source',
]
