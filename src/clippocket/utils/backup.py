import json
import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from clippocket.config import ONE_MEGABYTE
from clippocket.exceptions import BackupImportError
from clippocket.models.backup import BACKUP_VERSION, BackupBundle
from clippocket.models.clipboarditem import ClipboardItem, ItemType
from clippocket.models.pinneditem import PinnedClipboardItem

logger = logging.getLogger(__name__)

_history_adapter = TypeAdapter(List[ClipboardItem])


def filtered_history(items: Sequence[ClipboardItem], max_items: int,
                     max_image_bytes: int = ONE_MEGABYTE) -> List[ClipboardItem]:
    limited = list(items)[:max_items]
    return [
        item for item in limited
        if not (item.type is ItemType.IMAGE and item.byte_size > max_image_bytes)
    ]


def filtered_pinned(items: Sequence[PinnedClipboardItem], max_items: int) -> List[PinnedClipboardItem]:
    return list(items)[:max_items]


def export_backup(
    history: Sequence[ClipboardItem],
    pinned: Sequence[PinnedClipboardItem],
    max_history: int,
    max_pinned: int,
    max_image_bytes: int = ONE_MEGABYTE,
) -> bytes:
    bundle = BackupBundle(
        version=BACKUP_VERSION,
        history=filtered_history(history, max_history, max_image_bytes),
        pinned=filtered_pinned(pinned, max_pinned),
    )
    record = bundle.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(record, indent=2, sort_keys=True, ensure_ascii=False).encode("utf-8")


def import_backup(
    data: bytes,
    max_history: int,
    max_pinned: int,
    max_image_bytes: int = ONE_MEGABYTE,
) -> Tuple[List[ClipboardItem], List[PinnedClipboardItem]]:
    """Decode a backup bundle, falling back to a bare array of history items.

    Limits are re-applied whatever the file claims.
    """
    try:
        document = json.loads(data)
    except ValueError as e:
        raise BackupImportError("Backup is not valid JSON", e)

    try:
        bundle = BackupBundle.model_validate(document)
    except ValidationError as bundle_error:
        try:
            history = _history_adapter.validate_python(document)
        except ValidationError:
            raise BackupImportError("Backup is neither a bundle nor a history array", bundle_error)
        logger.info("Imported legacy history-only backup")
        return filtered_history(history, max_history, max_image_bytes), []

    if bundle.version > BACKUP_VERSION:
        logger.warning(f"Backup version {bundle.version} is newer than supported version {BACKUP_VERSION}")

    history = filtered_history(bundle.history, max_history, max_image_bytes)
    pinned = filtered_pinned(bundle.pinned or [], max_pinned)
    return history, pinned


def write_backup(path: Path, history: Sequence[ClipboardItem], pinned: Sequence[PinnedClipboardItem],
                 max_history: int, max_pinned: int, max_image_bytes: int = ONE_MEGABYTE) -> Path:
    path = Path(path)
    path.write_bytes(export_backup(history, pinned, max_history, max_pinned, max_image_bytes))
    logger.info(f"Exported backup to {path}")
    return path


def read_backup(path: Path, max_history: int, max_pinned: int,
                max_image_bytes: int = ONE_MEGABYTE) -> Tuple[List[ClipboardItem], List[PinnedClipboardItem]]:
    return import_backup(Path(path).read_bytes(), max_history, max_pinned, max_image_bytes)
