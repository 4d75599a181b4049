import platform
from typing import Type

from clippocket.clipboard.base import PasteboardSource


def get_pasteboard_class() -> Type[PasteboardSource]:
    system = platform.system()

    if system == "Darwin":
        from clippocket.clipboard.macos import MacOSPasteboard
        return MacOSPasteboard
    else:
        raise NotImplementedError(f"Platform '{system}' is not supported")


def get_pasteboard_source() -> PasteboardSource:
    pasteboard_class = get_pasteboard_class()
    return pasteboard_class()
