"""Content classification for clipboard text.

Checks run in a fixed order and the first match wins, because the patterns
overlap: an address that is also a link is an email, a link containing code
keywords is a URL, and so on. Anything that matches nothing is plain text.
"""

import json
import re
from typing import List, Optional

from clippocket.clipboard.base import PasteboardKind
from clippocket.models.clipboarditem import ItemType
from clippocket.utils.patterns import EMAIL_PATTERN, is_color_string

CODE_INDICATOR_THRESHOLD = 2

_SCHEME_URL_PATTERN = re.compile(r"^([a-z][a-z0-9+.\-]*)://\S+$", re.IGNORECASE)
_MAILTO_PATTERN = re.compile(r"^mailto:[^\s@]+@[^\s@]+$", re.IGNORECASE)
_HOST_PATTERN = re.compile(
    r"^(www\.)?(?:[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?\.)+([a-z]{2,63})"
    r"(?::\d{1,5})?(?:[/?#]\S*)?$",
    re.IGNORECASE,
)

# Bare host names without a scheme only count as links on these domains.
_KNOWN_TLDS = frozenset({
    "com", "org", "net", "edu", "gov", "mil", "int", "io", "dev", "app",
    "ai", "co", "me", "info", "biz", "xyz", "tech", "site", "online",
    "uk", "us", "de", "fr", "es", "it", "nl", "eu", "ca", "au", "jp",
    "cn", "in", "br", "ru", "ch", "se", "no", "tv", "ly", "gg",
})

_PHONE_PATTERN = re.compile(r"^\+?[\d ().\-]+$")
_NOT_PHONE_PATTERNS = (
    re.compile(r"^\d+\.\d+$"),
    re.compile(r"^\d{1,3}(\.\d{1,3}){3}$"),
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
)
_MIN_PHONE_DIGITS = 7
_MAX_PHONE_DIGITS = 15

_CONTROL_FLOW_PATTERN = re.compile(r"^\s*(if|for|while)\s*\(")


def link_scheme(text: str) -> Optional[str]:
    """Scheme of ``text`` when the whole string is a single link, else None."""
    if _MAILTO_PATTERN.match(text):
        return "mailto"

    match = _SCHEME_URL_PATTERN.match(text)
    if match:
        return match.group(1).lower()

    match = _HOST_PATTERN.match(text)
    if match and (match.group(1) or match.group(2).lower() in _KNOWN_TLDS):
        return "http"
    return None


def is_phone_number(text: str) -> bool:
    if not _PHONE_PATTERN.match(text):
        return False
    if any(pattern.match(text) for pattern in _NOT_PHONE_PATTERNS):
        return False
    digits = sum(ch.isdigit() for ch in text)
    return _MIN_PHONE_DIGITS <= digits <= _MAX_PHONE_DIGITS


def is_json_document(text: str) -> bool:
    if not ((text.startswith("{") and text.endswith("}")) or
            (text.startswith("[") and text.endswith("]"))):
        return False
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def code_indicators(text: str) -> List[bool]:
    lines = [line for line in text.split("\n") if line]
    return [
        "func " in text or "function " in text,
        "class " in text or "struct " in text,
        "import " in text or "package " in text,
        "const " in text or "let " in text or "var " in text,
        "def " in text or "=>" in text,
        len(lines) >= 3 and ("{" in text or ":" in text),
        "public " in text or "private " in text,
        bool(_CONTROL_FLOW_PATTERN.match(text)),
    ]


def count_code_indicators(text: str) -> int:
    return sum(code_indicators(text.strip()))


def classify(raw_text: str) -> Optional[ItemType]:
    """Classify pasteboard text. Returns None for blank input, which must not become an item."""
    trimmed = raw_text.strip()
    if not trimmed:
        return None

    if EMAIL_PATTERN.match(trimmed):
        return ItemType.EMAIL

    scheme = link_scheme(trimmed)
    if scheme is not None:
        return ItemType.EMAIL if scheme == "mailto" else ItemType.URL

    if is_phone_number(trimmed):
        return ItemType.PHONE

    if is_json_document(trimmed):
        return ItemType.JSON

    if is_color_string(trimmed):
        return ItemType.COLOR

    if count_code_indicators(trimmed) >= CODE_INDICATOR_THRESHOLD:
        return ItemType.CODE

    return ItemType.TEXT


def classify_binary(kind: PasteboardKind) -> Optional[ItemType]:
    if kind is PasteboardKind.FILE_URL:
        return ItemType.FILE
    if kind is PasteboardKind.IMAGE:
        return ItemType.IMAGE
    return None
