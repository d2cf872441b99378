"""Path and URL helpers for WebDAV resources."""

from __future__ import annotations

import mimetypes
import re
from urllib.parse import urlsplit, urlunsplit

_SLASHES = re.compile(r"/{2,}")

# Types commonly served from WebDAV shares that the platform mime.types
# database does not always know about.
_CONTENT_TYPES = {
    ".md": "text/markdown",
    ".json": "application/json",
    ".yaml": "application/yaml",
    ".yml": "application/yaml",
    ".ics": "text/calendar",
    ".vcf": "text/vcard",
    ".webp": "image/webp",
    ".7z": "application/x-7z-compressed",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def normalize(path: str) -> str:
    """Normalize a WebDAV path.

    The result always starts with "/", contains no consecutive slashes and
    never ends with "/" unless it is exactly "/".

    Args:
        path: Path to normalize

    Returns:
        Normalized path
    """
    path = _SLASHES.sub("/", "/" + path)
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return path


def join_path(*parts: str) -> str:
    """Join path parts and normalize the result."""
    return normalize("/".join(part for part in parts if part))


def parent_of(path: str) -> str:
    """Return the parent directory of a path ("/" for top-level entries)."""
    path = normalize(path)
    idx = path.rfind("/")
    if idx <= 0:
        return "/"
    return path[:idx]


def basename(path: str) -> str:
    """Return the last segment of a path ("" for the root)."""
    path = normalize(path)
    if path == "/":
        return ""
    return path[path.rfind("/") + 1 :]


def _leading_segment(path: str) -> str:
    stripped = path.strip("/")
    return stripped.split("/", 1)[0] if stripped else ""


def join_url(base: str, *segments: str) -> str:
    """Join a base URL with path segments.

    If the first segment starts with the same leading component as the base
    URL's own path, that component is dropped from the segment so a mount
    prefix is not doubled::

        join_url("http://h/webdav", "/webdav/file.txt")
        # -> "http://h/webdav/file.txt"

    Double slashes are collapsed (the scheme's "//" is untouched) and a
    trailing slash on the last segment is preserved.

    Args:
        base: Absolute base URL
        segments: Path segments to append

    Returns:
        Joined URL
    """
    parts = urlsplit(base)
    segs = [seg for seg in segments if seg]
    if not segs:
        return urlunsplit(parts._replace(path=_SLASHES.sub("/", parts.path)))

    lead = _leading_segment(parts.path)
    if lead:
        first = segs[0].lstrip("/")
        if first == lead or first.startswith(lead + "/"):
            segs[0] = first[len(lead) :] or "/"

    path = _SLASHES.sub("/", "/".join([parts.path, *segs]))
    if not path.startswith("/"):
        path = "/" + path
    return urlunsplit(parts._replace(path=path))


def strip_base(path: str, base_path: str) -> str:
    """Make a server path relative to the mount point of the base URL.

    Args:
        path: Decoded path from a response href
        base_path: Path component of the configured base URL

    Returns:
        Normalized path relative to the mount point
    """
    path = normalize(path)
    base_path = normalize(base_path)
    if base_path == "/":
        return path
    if path == base_path:
        return "/"
    if path.startswith(base_path + "/"):
        return normalize(path[len(base_path) :])
    return path


def content_type_for(filename: str) -> str:
    """Guess a MIME type from a file name's extension.

    Args:
        filename: File name or path

    Returns:
        MIME type, "application/octet-stream" when unknown
    """
    name = basename(filename).lower()
    dot = name.rfind(".")
    if dot > 0:
        known = _CONTENT_TYPES.get(name[dot:])
        if known:
            return known
    mime_type, _ = mimetypes.guess_type(name, strict=False)
    return mime_type or DEFAULT_CONTENT_TYPE
