"""A filesystem-style client library for WebDAV servers."""

from .client import Client
from .config import ClientConfig
from .errors import ErrorKind, WebDAVError
from .paths import basename, join_path, normalize, parent_of
from .stream import ReadStream, WriteStream
from .webdav import CopyOptions, MoveOptions, Stats

__version__ = "0.1.0"

__all__ = [
    "Client",
    "ClientConfig",
    "ErrorKind",
    "WebDAVError",
    "basename",
    "join_path",
    "normalize",
    "parent_of",
    "ReadStream",
    "WriteStream",
    "CopyOptions",
    "MoveOptions",
    "Stats",
]
