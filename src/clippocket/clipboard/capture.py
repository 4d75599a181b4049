import io
import logging
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from clippocket.clipboard.base import PasteboardKind, PasteboardSnapshot
from clippocket.clipboard.classifier import classify, classify_binary
from clippocket.config import ONE_MEGABYTE
from clippocket.models.clipboarditem import ClipboardItem, ItemType
from clippocket.utils.file_manager import path_from_file_url

logger = logging.getLogger(__name__)

JPEG_QUALITY = 70


def compress_image(data: bytes, quality: int = JPEG_QUALITY) -> Optional[bytes]:
    """Re-encode image bytes as JPEG. Returns None when Pillow cannot read them."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            if image.mode in ("RGBA", "LA", "P"):
                rgba = image.convert("RGBA")
                background = Image.new("RGB", rgba.size, (255, 255, 255))
                background.paste(rgba, mask=rgba.split()[-1])
                image = background
            elif image.mode != "RGB":
                image = image.convert("RGB")

            output = io.BytesIO()
            image.save(output, format="JPEG", quality=quality)
            return output.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.debug(f"Image compression skipped: {e}")
        return None


def capture_item(
    payload: Union[bytes, str],
    kind: PasteboardKind,
    source_app_id: Optional[str] = None,
    max_image_bytes: int = ONE_MEGABYTE,
) -> Optional[ClipboardItem]:
    """Build a history item from raw pasteboard data, or None when it must be skipped."""
    if kind is PasteboardKind.TEXT:
        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        item_type = classify(text)
        if item_type is None:
            return None
        return ClipboardItem.from_text(text, item_type, source_app_id=source_app_id)

    item_type = classify_binary(kind)

    if item_type is ItemType.FILE:
        raw_path = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        path = path_from_file_url(raw_path.strip())
        if not path:
            return None
        return ClipboardItem.from_file(path, source_app_id=source_app_id)

    if item_type is ItemType.IMAGE:
        if not isinstance(payload, (bytes, bytearray)):
            logger.warning("Image payload is not binary, skipping")
            return None
        data = compress_image(bytes(payload)) or bytes(payload)
        if len(data) > max_image_bytes:
            logger.warning(
                f"Skipping large image ({len(data) // 1024}KB > {max_image_bytes // 1024}KB)")
            return None
        return ClipboardItem.from_image(data, source_app_id=source_app_id)

    logger.warning(f"Unrecognized pasteboard content kind: {kind!r}")
    return None


def capture_snapshot(snapshot: PasteboardSnapshot, max_image_bytes: int = ONE_MEGABYTE) -> Optional[ClipboardItem]:
    return capture_item(snapshot.payload, snapshot.kind, snapshot.source_app_id, max_image_bytes)
