"""WebDAV types and file information."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Stats:
    """Information about a WebDAV file or collection.

    ``path`` is relative to the client's base URL and identifies the entry
    within a listing. ``is_file`` is always ``not is_dir``.
    """

    name: str
    path: str
    is_dir: bool = False
    size: int = 0
    mod_time: datetime | None = None
    created_at: datetime | None = None
    mime_type: str | None = None
    etag: str | None = None
    display_name: str | None = None

    def __post_init__(self) -> None:
        if self.size < 0:
            object.__setattr__(self, "size", 0)

    @property
    def is_file(self) -> bool:
        return not self.is_dir


@dataclass
class CopyOptions:
    """Options for copying files."""

    no_recursive: bool = False
    no_overwrite: bool = False


@dataclass
class MoveOptions:
    """Options for moving files."""

    no_overwrite: bool = False
