"""Low-level helpers for WebDAV requests."""

from __future__ import annotations

import re
from enum import IntEnum

_STATUS_LINE = re.compile(r"HTTP/\d+(?:\.\d+)?\s+(\d{3})")


class Depth(IntEnum):
    """Depth indicates whether a request applies to the resource's members.

    Defined in RFC 4918 section 10.2.
    """

    ZERO = 0  # Request applies only to the resource
    ONE = 1  # Request applies to resource and its internal members only
    INFINITY = -1  # Request applies to resource and all of its members


def depth_to_string(d: Depth) -> str:
    """Format the depth."""
    if d == Depth.ZERO:
        return "0"
    elif d == Depth.ONE:
        return "1"
    elif d == Depth.INFINITY:
        return "infinity"
    else:
        raise ValueError("webdav: invalid Depth value")


def format_overwrite(overwrite: bool) -> str:
    """Format an Overwrite header."""
    return "T" if overwrite else "F"


def parse_status_line(s: str | None) -> int | None:
    """Extract the code from a ``HTTP/1.1 200 OK`` status line.

    Returns None when the line is missing or malformed.
    """
    if not s:
        return None
    match = _STATUS_LINE.search(s)
    if match is None:
        return None
    return int(match.group(1))


XML_CONTENT_TYPE = "application/xml; charset=utf-8"


def propfind_headers(depth: Depth) -> dict[str, str]:
    """Headers for a PROPFIND request."""
    return {"Depth": depth_to_string(depth), "Content-Type": XML_CONTENT_TYPE}


def proppatch_headers() -> dict[str, str]:
    """Headers for a PROPPATCH request."""
    return {"Content-Type": XML_CONTENT_TYPE}


def copy_headers(destination: str, overwrite: bool, depth: Depth) -> dict[str, str]:
    """Headers for a COPY request.

    Args:
        destination: Absolute URL of the target
        overwrite: Whether an existing target may be replaced
        depth: ``Depth.ZERO`` or ``Depth.INFINITY``
    """
    if depth == Depth.ONE:
        raise ValueError("webdav: COPY only supports Depth 0 or infinity")
    return {
        "Destination": destination,
        "Overwrite": format_overwrite(overwrite),
        "Depth": depth_to_string(depth),
    }


def move_headers(destination: str, overwrite: bool) -> dict[str, str]:
    """Headers for a MOVE request."""
    return {
        "Destination": destination,
        "Overwrite": format_overwrite(overwrite),
    }
