from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from ulid import ULID

from clippocket.models.clipboarditem import (ClipboardItem, ItemType,
                                             from_legacy_date)


def new_pinned_id() -> str:
    return f"p_{ULID.from_datetime(datetime.now())}"


class PinnedClipboardItem(BaseModel):
    """A pinned copy of a clipboard item, independent of the history entry it came from."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_pinned_id)
    original_item: ClipboardItem = Field(alias="originalItem")
    pinned_date: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="pinnedDate")
    custom_title: Optional[str] = Field(default=None, alias="customTitle")

    @model_validator(mode="before")
    @classmethod
    def _convert_legacy_date(cls, data: Any) -> Any:
        if isinstance(data, dict) and "pinnedDate" in data:
            data = dict(data)
            data["pinnedDate"] = from_legacy_date(data["pinnedDate"])
        return data

    @classmethod
    def pin(cls, item: ClipboardItem, custom_title: Optional[str] = None) -> "PinnedClipboardItem":
        return cls(original_item=item, custom_title=custom_title or None)

    @property
    def display_title(self) -> str:
        return self.custom_title or self.original_item.display_string

    @property
    def display_string(self) -> str:
        return self.original_item.display_string

    @property
    def content_type(self) -> ItemType:
        return self.original_item.type

    def with_title(self, title: Optional[str]) -> "PinnedClipboardItem":
        return self.model_copy(update={"custom_title": title or None})

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
