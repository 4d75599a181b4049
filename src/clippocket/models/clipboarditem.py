import base64
import os
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (AliasChoices, BaseModel, ConfigDict, Field,
                      field_serializer, model_validator)
from ulid import ULID

from clippocket.utils.patterns import is_color_string

DISPLAY_PREFIX_LENGTH = 100

# Date values written by the old app are seconds since this reference date.
LEGACY_REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)


class ItemType(str, Enum):
    TEXT = "text"
    CODE = "code"
    COLOR = "color"
    URL = "url"
    EMAIL = "email"
    PHONE = "phone"
    JSON = "json"
    IMAGE = "image"
    FILE = "file"

    @property
    def is_textual(self) -> bool:
        return self not in (ItemType.IMAGE, ItemType.FILE)

    @property
    def display_name(self) -> str:
        return _TYPE_DISPLAY_NAMES[self]


_TYPE_DISPLAY_NAMES = {
    ItemType.TEXT: "Text",
    ItemType.CODE: "Code",
    ItemType.COLOR: "Color",
    ItemType.URL: "URL",
    ItemType.EMAIL: "Email",
    ItemType.PHONE: "Phone",
    ItemType.JSON: "JSON",
    ItemType.IMAGE: "Image",
    ItemType.FILE: "File",
}

# Type tags used by the old app, keyed to the current names.
_LEGACY_TYPE_NAMES = {
    "doc.text": ItemType.TEXT,
    "chevron.left.forwardslash.chevron.right": ItemType.CODE,
    "paintpalette": ItemType.COLOR,
    "link": ItemType.URL,
    "envelope": ItemType.EMAIL,
    "phone": ItemType.PHONE,
    "curlybraces": ItemType.JSON,
    "photo": ItemType.IMAGE,
}


def from_legacy_date(value: Any) -> Any:
    """Convert a numeric reference-date timestamp; other values pass through."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return LEGACY_REFERENCE_DATE + timedelta(seconds=value)
    return value


def new_item_id() -> str:
    return f"i_{ULID.from_datetime(datetime.now())}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TextContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    value: str


class ImageContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["image"] = "image"
    data: bytes


class FileContent(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["file"] = "file"
    path: str


ItemContent = Annotated[
    Union[TextContent, ImageContent, FileContent],
    Field(discriminator="kind"),
]


def _content_record(item_type: ItemType, content: Any) -> Any:
    """Turn the flat ``content`` value of a stored record into its tagged form."""
    if isinstance(content, (TextContent, ImageContent, FileContent)):
        return content
    if isinstance(content, dict) and "kind" in content:
        return content

    if item_type is ItemType.IMAGE:
        if content is None:
            data = b""
        elif isinstance(content, str):
            data = base64.b64decode(content, validate=True)
        else:
            data = bytes(content)
        return {"kind": "image", "data": data}

    if item_type is ItemType.FILE:
        if not isinstance(content, str):
            raise ValueError("file content must be a path string")
        return {"kind": "file", "path": os.path.abspath(os.path.expanduser(content))}

    return {"kind": "text", "value": content}


class ClipboardItem(BaseModel):
    """Immutable clipboard history entry.

    ``content`` is a tagged union whose variant always matches ``type``: images
    carry bytes, files carry an absolute path, every other type carries text.
    On the wire ``content`` is flattened to a string (base64 for images).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_item_id)
    type: ItemType
    content: ItemContent
    timestamp: datetime = Field(default_factory=_now)
    source_app_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "sourceBundleIdentifier", "sourceApplication", "source_app_id"),
        serialization_alias="sourceBundleIdentifier",
    )

    @model_validator(mode="before")
    @classmethod
    def _expand_record(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        raw_type = data.get("type")
        try:
            if isinstance(raw_type, str) and raw_type in _LEGACY_TYPE_NAMES:
                item_type = _LEGACY_TYPE_NAMES[raw_type]
            else:
                item_type = ItemType(raw_type)
        except ValueError:
            return data

        data = dict(data)
        data["type"] = item_type
        if "content" in data or item_type is ItemType.IMAGE:
            data["content"] = _content_record(item_type, data.get("content"))

        if "timestamp" in data:
            data["timestamp"] = from_legacy_date(data["timestamp"])
        return data

    @model_validator(mode="after")
    def _check_content_shape(self) -> "ClipboardItem":
        if self.type is ItemType.IMAGE:
            expected = ImageContent
        elif self.type is ItemType.FILE:
            expected = FileContent
        else:
            expected = TextContent

        if not isinstance(self.content, expected):
            raise ValueError(
                f"{self.type.value} item cannot hold {self.content.kind} content")
        if self.type is ItemType.COLOR:
            value = self.content.value.strip()
            # Empty content is accepted here and dropped by history cleanup.
            if value and not is_color_string(value):
                raise ValueError(f"not a color value: {self.content.value!r}")
        return self

    @field_serializer("content")
    def _flatten_content(self, content: Union[TextContent, ImageContent, FileContent]) -> str:
        if isinstance(content, ImageContent):
            return base64.b64encode(content.data).decode("ascii")
        if isinstance(content, FileContent):
            return content.path
        return content.value

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------
    @classmethod
    def from_text(cls, text: str, item_type: ItemType = ItemType.TEXT,
                  source_app_id: Optional[str] = None) -> "ClipboardItem":
        return cls(type=item_type, content=TextContent(value=text), source_app_id=source_app_id)

    @classmethod
    def from_image(cls, data: bytes, source_app_id: Optional[str] = None) -> "ClipboardItem":
        return cls(type=ItemType.IMAGE, content=ImageContent(data=data), source_app_id=source_app_id)

    @classmethod
    def from_file(cls, path: Union[str, os.PathLike], source_app_id: Optional[str] = None) -> "ClipboardItem":
        absolute = os.path.abspath(os.path.expanduser(os.fspath(path)))
        return cls(type=ItemType.FILE, content=FileContent(path=absolute), source_app_id=source_app_id)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def text(self) -> Optional[str]:
        if isinstance(self.content, TextContent):
            return self.content.value
        return None

    @property
    def image_data(self) -> Optional[bytes]:
        if isinstance(self.content, ImageContent):
            return self.content.data
        return None

    @property
    def file_path(self) -> Optional[str]:
        if isinstance(self.content, FileContent):
            return self.content.path
        return None

    @property
    def byte_size(self) -> int:
        if isinstance(self.content, ImageContent):
            return len(self.content.data)
        if isinstance(self.content, FileContent):
            return len(self.content.path.encode("utf-8"))
        return len(self.content.value.encode("utf-8"))

    @property
    def display_string(self) -> str:
        if self.type is ItemType.IMAGE:
            return "Image"
        if self.type is ItemType.FILE:
            return os.path.basename(self.content.path.rstrip(os.sep)) or self.content.path
        if self.type is ItemType.COLOR:
            return self.content.value
        return self.content.value[:DISPLAY_PREFIX_LENGTH]

    @property
    def type_display_name(self) -> str:
        return self.type.display_name

    def is_equal(self, other: "ClipboardItem") -> bool:
        """Content equality used for de-duplication; ignores id, timestamp and source."""
        if self.type is not other.type:
            return False
        return self.content == other.content

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
