from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import FrozenSet, Optional

from dotenv import load_dotenv

from clippocket.exceptions import ConfigurationError

DEFAULT_EXCLUDED_APPS = frozenset({
    "com.agilebits.onepassword7",
    "com.lastpass.LastPass",
    "com.dashlane.dashlanephonefinal",
    "com.bitwarden.desktop",
    "com.apple.keychainaccess",
})

ONE_MEGABYTE = 1_048_576


def _to_bool(value: Optional[str], default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _to_int(name: str, value: Optional[str], default: int) -> int:
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", exc)


def _to_float(name: str, value: Optional[str], default: float) -> float:
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {value!r}", exc)


def _default_data_dir() -> Path:
    return Path.home() / ".clippocket"


@dataclass(frozen=True)
class Settings:
    """User-facing configuration read by the stores and the persistence layer.

    Stores keep a reference to a ``Settings`` value and read it at call time,
    so swapping in a new value (``dataclasses.replace``) takes effect on the
    next operation.
    """

    remember_history: bool = True
    max_history_items: int = 100
    enable_history_limit: bool = False
    max_pinned: int = 50
    history_hard_limit: int = 500
    max_image_bytes: int = ONE_MEGABYTE
    max_history_file_bytes: int = 250 * 1024 * 1024
    excluded_apps: FrozenSet[str] = DEFAULT_EXCLUDED_APPS
    incognito: bool = False
    poll_interval: float = 1.0
    data_dir: Path = field(default_factory=_default_data_dir)

    @property
    def history_cap(self) -> int:
        """Effective history size: the user's limit when enabled, clamped to the hard limit."""
        if self.enable_history_limit:
            return max(0, min(self.max_history_items, self.history_hard_limit))
        return self.history_hard_limit

    def is_app_excluded(self, bundle_id: Optional[str]) -> bool:
        if not bundle_id:
            return False
        return bundle_id in self.excluded_apps

    def with_changes(self, **changes) -> "Settings":
        return replace(self, **changes)

    @classmethod
    def from_env(cls, *, env_path: Optional[Path] = None) -> "Settings":
        load_dotenv(dotenv_path=env_path)

        data_dir_raw = os.getenv("CLIPPOCKET_DATA_DIR")
        excluded_raw = os.getenv("CLIPPOCKET_EXCLUDED_APPS")
        if excluded_raw is None:
            excluded = DEFAULT_EXCLUDED_APPS
        else:
            excluded = frozenset(
                part.strip() for part in excluded_raw.split(",") if part.strip())

        settings = cls(
            remember_history=_to_bool(
                os.getenv("CLIPPOCKET_REMEMBER_HISTORY"), default=True),
            max_history_items=_to_int(
                "CLIPPOCKET_MAX_HISTORY_ITEMS", os.getenv("CLIPPOCKET_MAX_HISTORY_ITEMS"), cls.max_history_items),
            enable_history_limit=_to_bool(
                os.getenv("CLIPPOCKET_ENABLE_HISTORY_LIMIT"), default=False),
            max_pinned=_to_int(
                "CLIPPOCKET_MAX_PINNED", os.getenv("CLIPPOCKET_MAX_PINNED"), cls.max_pinned),
            history_hard_limit=_to_int(
                "CLIPPOCKET_HISTORY_HARD_LIMIT", os.getenv("CLIPPOCKET_HISTORY_HARD_LIMIT"), cls.history_hard_limit),
            max_image_bytes=_to_int(
                "CLIPPOCKET_MAX_IMAGE_BYTES", os.getenv("CLIPPOCKET_MAX_IMAGE_BYTES"), cls.max_image_bytes),
            excluded_apps=excluded,
            incognito=_to_bool(os.getenv("CLIPPOCKET_INCOGNITO"), default=False),
            poll_interval=_to_float(
                "CLIPPOCKET_POLL_INTERVAL", os.getenv("CLIPPOCKET_POLL_INTERVAL"), cls.poll_interval),
            data_dir=Path(data_dir_raw).expanduser() if data_dir_raw else _default_data_dir(),
        )

        if settings.max_history_items < 1:
            raise ConfigurationError("CLIPPOCKET_MAX_HISTORY_ITEMS must be at least 1")
        if settings.max_pinned < 1:
            raise ConfigurationError("CLIPPOCKET_MAX_PINNED must be at least 1")
        return settings
