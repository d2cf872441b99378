"""Internal HTTP transport for WebDAV requests."""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping, Sequence
from urllib.parse import quote

import httpx

from ..config import ClientConfig
from ..debug import log_request, log_response, logger
from ..errors import WebDAVError, error_from_exception, error_from_status
from ..paths import join_url, normalize
from .elements import MultiStatus, parse_multistatus, propfind_body, proppatch_body
from .internal import Depth, propfind_headers, proppatch_headers

# Largest slice of a textual error body appended to an error message
ERROR_BODY_LIMIT = 1024


def basic_auth_header(username: str, password: str) -> str:
    """Build a Basic Authorization header value."""
    credentials = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {credentials}"


def _error_detail(resp: httpx.Response) -> str:
    content_type = resp.headers.get("content-type", "")
    if not content_type.startswith("text/"):
        return ""
    text = resp.text[:ERROR_BODY_LIMIT].strip()
    if text and len(resp.text) > ERROR_BODY_LIMIT:
        text += " […]"
    return text


class Client:
    """WebDAV HTTP client.

    Issues exactly one HTTP request per call and converts every failure into a
    WebDAVError. Nothing is retried.
    """

    def __init__(self, config: ClientConfig, http_client: httpx.AsyncClient | None = None):
        """Initialize client.

        Args:
            config: Client configuration
            http_client: HTTP client to use (creates and owns a default if None)
        """
        self.config = config
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient()
        self._default_headers = dict(config.headers)
        self._auth = self._auth_header()

    def _auth_header(self) -> str | None:
        if self.config.token:
            return f"Bearer {self.config.token}"
        if self.config.username is not None and self.config.password is not None:
            return basic_auth_header(self.config.username, self.config.password)
        return None

    def resolve_href(self, path: str) -> str:
        """Resolve a path relative to the endpoint.

        Args:
            path: Path to resolve

        Returns:
            Full URL, with the path percent-encoded
        """
        return join_url(self.config.base_url, quote(normalize(path)))

    def build_headers(self, headers: Mapping[str, str] | None = None) -> dict[str, str]:
        """Merge default and per-call headers; authorization always comes last."""
        merged = {**self._default_headers, **(headers or {})}
        if self._auth:
            for key in [k for k in merged if k.lower() == "authorization"]:
                del merged[key]
            merged["Authorization"] = self._auth
        return merged

    async def request(
        self,
        method: str,
        path: str,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Make an HTTP request.

        Args:
            method: HTTP method
            path: Request path, relative to the base URL
            content: Request body
            headers: Request headers
            timeout: Override of the configured timeout, in seconds

        Returns:
            HTTP response with a 2xx status

        Raises:
            WebDAVError: On transport failures and non-2xx statuses
        """
        url = self.resolve_href(path)
        req_headers = self.build_headers(headers)

        if logger.isEnabledFor(logging.DEBUG):
            log_request(method, url, req_headers, content)

        try:
            resp = await self.http_client.request(
                method,
                url,
                content=content,
                headers=req_headers,
                timeout=timeout or self.config.timeout,
            )
        except (httpx.HTTPError, OSError) as e:
            raise error_from_exception(e, normalize(path)) from e

        if logger.isEnabledFor(logging.DEBUG):
            log_response(resp.status_code, resp.headers, resp.content)

        if resp.status_code // 100 != 2:
            raise error_from_status(resp.status_code, normalize(path), _error_detail(resp))

        return resp

    async def do_multistatus(
        self, method: str, path: str, body: bytes, headers: Mapping[str, str]
    ) -> MultiStatus:
        """Perform a request expecting a multistatus response.

        Args:
            method: HTTP method
            path: Request path
            body: XML request body
            headers: Request headers

        Returns:
            Parsed multistatus response
        """
        resp = await self.request(method, path, content=body, headers=headers)

        # Some servers answer 200 OK with a multistatus body
        if resp.status_code not in (200, 207):
            raise WebDAVError.protocol(
                f"webdav: {method} expected 207 Multi-Status, got {resp.status_code}",
                status=resp.status_code,
                path=normalize(path),
            )

        return parse_multistatus(resp.content)

    async def propfind(self, path: str, depth: Depth, names: Sequence[str] = ()) -> MultiStatus:
        """Perform a PROPFIND request.

        Args:
            path: Resource path
            depth: Depth header value
            names: Properties to request (all properties if empty)

        Returns:
            Multistatus response
        """
        return await self.do_multistatus(
            "PROPFIND", path, propfind_body(names), propfind_headers(depth)
        )

    async def proppatch(self, path: str, values: Mapping[str, str]) -> MultiStatus:
        """Perform a PROPPATCH request setting the given properties."""
        return await self.do_multistatus(
            "PROPPATCH", path, proppatch_body(values), proppatch_headers()
        )

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_http_client:
            await self.http_client.aclose()
