"""Error taxonomy for WebDAV operations."""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus

import httpx


class ErrorKind(str, Enum):
    """Kind of a WebDAV failure."""

    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    PERMISSION_DENIED = "permission_denied"
    ALREADY_EXISTS = "already_exists"
    LOCKED = "locked"
    TIMEOUT = "timeout"
    NETWORK = "network"
    SERVER = "server"
    INVALID_ARGUMENT = "invalid_argument"
    PROTOCOL = "protocol"


class WebDAVError(Exception):
    """Failure of a WebDAV operation.

    All failures raised by this package are instances of this class. Use
    ``kind`` (or ``status``) to tell them apart.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status: int | None = None,
        path: str | None = None,
        cause: BaseException | None = None,
    ):
        self.kind = kind
        self.message = message
        self.status = status
        self.path = path
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status:
            return f"{self.message} (status {self.status})"
        return self.message

    def __repr__(self) -> str:
        return f"WebDAVError({self.kind.value!r}, {self.message!r}, status={self.status!r})"

    @classmethod
    def not_found(cls, path: str) -> WebDAVError:
        return cls(ErrorKind.NOT_FOUND, f"webdav: not found: {path}", 404, path)

    @classmethod
    def authentication_failed(cls, path: str | None = None) -> WebDAVError:
        return cls(ErrorKind.AUTHENTICATION, "webdav: authentication failed", 401, path)

    @classmethod
    def permission_denied(cls, path: str) -> WebDAVError:
        return cls(ErrorKind.PERMISSION_DENIED, f"webdav: permission denied: {path}", 403, path)

    @classmethod
    def already_exists(cls, path: str, status: int = 412) -> WebDAVError:
        return cls(ErrorKind.ALREADY_EXISTS, f"webdav: already exists: {path}", status, path)

    @classmethod
    def locked(cls, path: str) -> WebDAVError:
        return cls(ErrorKind.LOCKED, f"webdav: resource is locked: {path}", 423, path)

    @classmethod
    def timeout(cls, path: str | None = None, cause: BaseException | None = None) -> WebDAVError:
        target = f": {path}" if path else ""
        return cls(ErrorKind.TIMEOUT, f"webdav: request timed out{target}", 408, path, cause)

    @classmethod
    def network(cls, cause: BaseException, path: str | None = None) -> WebDAVError:
        return cls(ErrorKind.NETWORK, f"webdav: network error: {cause}", None, path, cause)

    @classmethod
    def server(cls, status: int, path: str | None = None) -> WebDAVError:
        try:
            phrase = HTTPStatus(status).phrase
        except ValueError:
            phrase = "Unknown"
        return cls(ErrorKind.SERVER, f"webdav: server error: {status} {phrase}", status, path)

    @classmethod
    def invalid_argument(cls, message: str, path: str | None = None) -> WebDAVError:
        return cls(ErrorKind.INVALID_ARGUMENT, f"webdav: invalid argument: {message}", None, path)

    @classmethod
    def protocol(
        cls,
        message: str,
        status: int | None = None,
        path: str | None = None,
        cause: BaseException | None = None,
    ) -> WebDAVError:
        return cls(ErrorKind.PROTOCOL, message, status, path, cause)


def error_from_status(status: int, path: str | None = None, detail: str = "") -> WebDAVError:
    """Map an HTTP error status to a WebDAVError.

    Args:
        status: HTTP status code (>= 400)
        path: Path the request was made for
        detail: Optional text from the response body

    Returns:
        Matching WebDAVError
    """
    target = path or "/"
    if status == 401:
        err = WebDAVError.authentication_failed(path)
    elif status == 403:
        err = WebDAVError.permission_denied(target)
    elif status == 404:
        err = WebDAVError.not_found(target)
    elif status in (409, 412):
        err = WebDAVError.already_exists(target, status)
    elif status == 423:
        err = WebDAVError.locked(target)
    else:
        err = WebDAVError.server(status, path)

    if detail:
        err.message = f"{err.message}: {detail}"
        err.args = (str(err),)
    return err


def error_from_exception(exc: BaseException, path: str | None = None) -> WebDAVError:
    """Map a transport exception to a WebDAVError."""
    if isinstance(exc, WebDAVError):
        return exc
    if isinstance(exc, httpx.TimeoutException):
        return WebDAVError.timeout(path, exc)
    return WebDAVError.network(exc, path)


def is_not_found(err: BaseException | None) -> bool:
    """Check if an error is a 404 Not Found."""
    return isinstance(err, WebDAVError) and err.kind is ErrorKind.NOT_FOUND
