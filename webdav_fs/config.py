"""Client configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import unquote, urlsplit

from .errors import WebDAVError

DEFAULT_TIMEOUT = 30.0  # seconds, per request
DEFAULT_CACHE_TTL = 300.0  # seconds

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for a WebDAV client.

    When both a bearer token and username/password are given, the token is
    used.
    """

    base_url: str
    username: str | None = None
    password: str | None = None
    token: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    timeout: float = DEFAULT_TIMEOUT
    cache: bool = False
    cache_ttl: float = DEFAULT_CACHE_TTL

    def __post_init__(self) -> None:
        if not self.base_url:
            raise WebDAVError.invalid_argument("base_url is required")

        parts = urlsplit(self.base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise WebDAVError.invalid_argument(f"base_url must be an http(s) URL: {self.base_url!r}")
        if self.timeout <= 0:
            raise WebDAVError.invalid_argument("timeout must be positive")
        if self.cache_ttl <= 0:
            raise WebDAVError.invalid_argument("cache_ttl must be positive")
        if (self.username is None) != (self.password is None):
            raise WebDAVError.invalid_argument("username and password must be given together")

        # Canonical form always ends with a slash
        if not self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url + "/")
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def base_path(self) -> str:
        """Path component of the base URL (the server-side mount point)."""
        return unquote(urlsplit(self.base_url).path) or "/"

    @classmethod
    def from_env(cls, **overrides: object) -> ClientConfig:
        """Build a configuration from ``WEBDAV_*`` environment variables.

        Keyword arguments that are not None take precedence over the
        environment.
        """
        values: dict[str, object] = {
            "base_url": os.getenv("WEBDAV_URL", ""),
            "username": os.getenv("WEBDAV_USERNAME") or None,
            "password": os.getenv("WEBDAV_PASSWORD") or None,
            "token": os.getenv("WEBDAV_TOKEN") or None,
            "cache": os.getenv("WEBDAV_CACHE", "").lower() in _TRUE_VALUES,
        }
        try:
            if os.getenv("WEBDAV_TIMEOUT"):
                values["timeout"] = float(os.environ["WEBDAV_TIMEOUT"])
            if os.getenv("WEBDAV_CACHE_TTL"):
                values["cache_ttl"] = float(os.environ["WEBDAV_CACHE_TTL"])
        except ValueError as e:
            raise WebDAVError.invalid_argument(f"invalid number in environment: {e}") from e

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]
