"""Internal WebDAV protocol helpers."""

from .client import Client, basic_auth_header
from .elements import MultiStatus, PropFind, PropertyUpdate, Response, parse_multistatus
from .internal import Depth, depth_to_string, format_overwrite

__all__ = [
    "Client",
    "basic_auth_header",
    "MultiStatus",
    "PropFind",
    "PropertyUpdate",
    "Response",
    "parse_multistatus",
    "Depth",
    "depth_to_string",
    "format_overwrite",
]
