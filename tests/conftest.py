"""Shared fixtures: an in-memory WebDAV server behind httpx.MockTransport."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import quote

import httpx
import pytest
from lxml import etree

from webdav_fs import Client
from webdav_fs.paths import normalize, parent_of

BASE_URL = "http://dav.test/webdav/"
MOUNT = "/webdav"
LAST_MODIFIED = "Mon, 12 Jan 2026 10:00:00 GMT"
DAV = "DAV:"


def _d(name: str) -> str:
    return f"{{{DAV}}}{name}"


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: httpx.Headers
    body: bytes


@dataclass
class FakeDAVServer:
    """Minimal RFC 4918 server keeping files and collections in memory.

    Paths are relative to the ``/webdav`` mount. ``failures`` maps
    ``(method, path)`` to a status code returned instead of the real result.
    """

    files: dict[str, bytes] = field(default_factory=dict)
    dirs: set[str] = field(default_factory=lambda: {"/"})
    props: dict[str, dict[str, str]] = field(default_factory=dict)
    requests: list[RecordedRequest] = field(default_factory=list)
    failures: dict[tuple[str, str], int] = field(default_factory=dict)

    # Fixture helpers

    def add_dir(self, path: str) -> None:
        path = normalize(path)
        while path not in self.dirs:
            self.dirs.add(path)
            path = parent_of(path)

    def add_file(self, path: str, content: bytes | str = b"") -> None:
        path = normalize(path)
        self.add_dir(parent_of(path))
        self.files[path] = content.encode() if isinstance(content, str) else content

    def calls(self, *methods: str) -> list[tuple[str, str]]:
        """Recorded (method, path) pairs, optionally filtered by method."""
        return [(r.method, r.path) for r in self.requests if not methods or r.method in methods]

    def exists(self, path: str) -> bool:
        return path in self.files or path in self.dirs

    # Request handling

    def _local(self, url_path: str) -> str:
        if url_path == MOUNT or url_path.startswith(MOUNT + "/"):
            url_path = url_path[len(MOUNT) :]
        return normalize(url_path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = self._local(request.url.path)
        self.requests.append(RecordedRequest(request.method, path, request.headers, request.content))

        status = self.failures.get((request.method, path))
        if status is not None:
            return httpx.Response(status, text=f"injected failure for {path}")

        method = getattr(self, "do_" + request.method.lower(), None)
        if method is None:
            return httpx.Response(405)
        return method(request, path)

    def _subtree(self, path: str) -> list[str]:
        prefix = path.rstrip("/") + "/"
        entries = sorted(self.dirs | set(self.files))
        return [p for p in entries if p != path and p.startswith(prefix)]

    def _href(self, path: str) -> str:
        href = quote(MOUNT + path)
        if path in self.dirs and not href.endswith("/"):
            href += "/"
        return href

    def _response_xml(self, parent: etree._Element, path: str) -> None:
        resp = etree.SubElement(parent, _d("response"))
        etree.SubElement(resp, _d("href")).text = self._href(path)
        propstat = etree.SubElement(resp, _d("propstat"))
        prop = etree.SubElement(propstat, _d("prop"))
        restype = etree.SubElement(prop, _d("resourcetype"))
        if path in self.dirs:
            etree.SubElement(restype, _d("collection"))
        else:
            etree.SubElement(prop, _d("getcontentlength")).text = str(len(self.files[path]))
            etree.SubElement(prop, _d("getcontenttype")).text = "application/octet-stream"
            etree.SubElement(prop, _d("getetag")).text = f'"{len(self.files[path])}-etag"'
        etree.SubElement(prop, _d("getlastmodified")).text = LAST_MODIFIED
        for name, value in self.props.get(path, {}).items():
            etree.SubElement(prop, _d(name)).text = value
        etree.SubElement(propstat, _d("status")).text = "HTTP/1.1 200 OK"

    def _multistatus(self, root: etree._Element) -> httpx.Response:
        body = etree.tostring(root, encoding="utf-8", xml_declaration=True)
        return httpx.Response(
            207, content=body, headers={"Content-Type": "application/xml; charset=utf-8"}
        )

    def do_propfind(self, request: httpx.Request, path: str) -> httpx.Response:
        if not self.exists(path):
            return httpx.Response(404)
        depth = request.headers.get("Depth", "infinity")
        entries = [path]
        if path in self.dirs and depth == "1":
            entries += [p for p in self._subtree(path) if parent_of(p) == path]
        elif path in self.dirs and depth == "infinity":
            entries += self._subtree(path)

        root = etree.Element(_d("multistatus"), nsmap={"D": DAV})
        for entry in entries:
            self._response_xml(root, entry)
        return self._multistatus(root)

    def do_proppatch(self, request: httpx.Request, path: str) -> httpx.Response:
        if not self.exists(path):
            return httpx.Response(404)
        update = etree.fromstring(request.content)
        root = etree.Element(_d("multistatus"), nsmap={"D": DAV})
        resp = etree.SubElement(root, _d("response"))
        etree.SubElement(resp, _d("href")).text = self._href(path)
        propstat = etree.SubElement(resp, _d("propstat"))
        prop = etree.SubElement(propstat, _d("prop"))
        for el in update.iterfind(f"{_d('set')}/{_d('prop')}/*"):
            name = etree.QName(el).localname
            self.props.setdefault(path, {})[name] = el.text or ""
            etree.SubElement(prop, el.tag)
        etree.SubElement(propstat, _d("status")).text = "HTTP/1.1 200 OK"
        return self._multistatus(root)

    def do_get(self, request: httpx.Request, path: str) -> httpx.Response:
        if path in self.dirs:
            return httpx.Response(405)
        if path not in self.files:
            return httpx.Response(404, text="Not Found", headers={"Content-Type": "text/plain"})
        return httpx.Response(200, content=self.files[path])

    def do_put(self, request: httpx.Request, path: str) -> httpx.Response:
        if path in self.dirs:
            return httpx.Response(405)
        if parent_of(path) not in self.dirs:
            return httpx.Response(409)
        created = path not in self.files
        self.files[path] = request.content
        return httpx.Response(201 if created else 204)

    def do_delete(self, request: httpx.Request, path: str) -> httpx.Response:
        if not self.exists(path):
            return httpx.Response(404)
        for entry in [*self._subtree(path), path]:
            self.files.pop(entry, None)
            self.dirs.discard(entry)
        return httpx.Response(204)

    def do_mkcol(self, request: httpx.Request, path: str) -> httpx.Response:
        if self.exists(path):
            return httpx.Response(405)
        if parent_of(path) not in self.dirs:
            return httpx.Response(409)
        self.dirs.add(path)
        return httpx.Response(201)

    def _transfer(self, request: httpx.Request, path: str, remove_source: bool) -> httpx.Response:
        if not self.exists(path):
            return httpx.Response(404)
        dest = self._local(httpx.URL(request.headers["Destination"]).path)
        existed = self.exists(dest)
        if existed and request.headers.get("Overwrite", "T") == "F":
            return httpx.Response(412)
        if parent_of(dest) not in self.dirs:
            return httpx.Response(409)
        if existed:
            self.do_delete(request, dest)

        shallow = request.headers.get("Depth") == "0"
        entries = [path] if shallow else [path, *self._subtree(path)]
        for entry in entries:
            target = dest + entry[len(path) :]
            if entry in self.dirs:
                self.dirs.add(target)
            else:
                self.files[target] = self.files[entry]
        if remove_source:
            self.do_delete(request, path)
        return httpx.Response(204 if existed else 201)

    def do_copy(self, request: httpx.Request, path: str) -> httpx.Response:
        return self._transfer(request, path, remove_source=False)

    def do_move(self, request: httpx.Request, path: str) -> httpx.Response:
        return self._transfer(request, path, remove_source=True)


@pytest.fixture
def server():
    """Empty in-memory WebDAV server."""
    return FakeDAVServer()


@pytest.fixture
async def http_client(server):
    """HTTP client routed to the in-memory server."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(server.handler))
    yield client
    await client.aclose()


@pytest.fixture
async def fs(http_client):
    """Uncached WebDAV filesystem client."""
    client = Client(BASE_URL, http_client=http_client)
    yield client
    await client.close()


@pytest.fixture
async def cached_fs(http_client):
    """WebDAV filesystem client with caching enabled."""
    client = Client(BASE_URL, http_client=http_client, cache=True)
    yield client
    await client.close()
