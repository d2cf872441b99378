"""WebDAV client implementation."""

from __future__ import annotations

import codecs
import contextlib
from collections.abc import Iterator, Mapping
from typing import Any

import httpx

from .cache import CacheKind, ExpiringCache
from .config import ClientConfig
from .debug import logger
from .errors import WebDAVError, error_from_status, is_not_found
from .internal import Client as InternalClient
from .internal import Depth
from .internal import elements as elem
from .internal.internal import copy_headers, move_headers
from .paths import basename, content_type_for, join_path, normalize, parent_of, strip_base
from .stream import DEFAULT_CHUNK_SIZE, ReadStream, WriteStream
from .webdav import CopyOptions, MoveOptions, Stats

# Deepest directory nesting a recursive removal will follow
MAX_TREE_DEPTH = 64

_BINARY_TYPES = (bytes, bytearray, memoryview)


def stats_from_response(resp: elem.Response, path: str) -> Stats:
    """Convert an internal Response to Stats.

    Args:
        resp: Internal response
        path: Path of the resource relative to the base URL

    Returns:
        Stats object
    """
    prop = resp.prop
    is_dir = prop.is_collection
    return Stats(
        name=basename(path),
        path=path,
        is_dir=is_dir,
        size=0 if is_dir else prop.content_length,
        mod_time=prop.last_modified,
        created_at=prop.creation_date,
        mime_type=prop.content_type,
        etag=prop.etag,
        display_name=prop.display_name,
    )


@contextlib.contextmanager
def _wrap_errors(action: str, path: str) -> Iterator[None]:
    """Pass WebDAVErrors through, turn anything else into a protocol error."""
    try:
        yield
    except WebDAVError:
        raise
    except Exception as e:
        raise WebDAVError.protocol(
            f"webdav: {action} failed for {path}: {e}", path=path, cause=e
        ) from e


def _check_data(data: Any) -> None:
    if not isinstance(data, (str, *_BINARY_TYPES)):
        raise WebDAVError.invalid_argument(
            f"data must be str or bytes, not {type(data).__name__}"
        )


class Client:
    """Filesystem-style client for a WebDAV server.

    Every operation is a sequence of awaited requests issued one at a time.
    Paths are relative to the configured base URL.
    """

    def __init__(
        self,
        endpoint: str | ClientConfig,
        http_client: httpx.AsyncClient | None = None,
        **options: Any,
    ):
        """Initialize WebDAV client.

        Args:
            endpoint: WebDAV server base URL, or a complete ClientConfig
            http_client: HTTP client to use; an injected client is not closed
                by ``close()``
            **options: Remaining ClientConfig fields (username, password,
                token, headers, timeout, cache, cache_ttl)
        """
        if isinstance(endpoint, ClientConfig):
            if options:
                raise WebDAVError.invalid_argument(
                    "options cannot be combined with a ClientConfig"
                )
            config = endpoint
        else:
            config = ClientConfig(base_url=endpoint, **options)

        self.config = config
        self.internal_client = InternalClient(config, http_client)
        self.cache = ExpiringCache(config.cache_ttl) if config.cache else None

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the client."""
        await self.internal_client.close()

    def _invalidate(self, path: str, tree: bool = False) -> None:
        if self.cache is None:
            return
        if tree:
            self.cache.invalidate_tree(path)
        else:
            self.cache.invalidate(path)

    async def stat(self, path: str) -> Stats:
        """Get file information.

        Args:
            path: File or directory path

        Returns:
            Stats object

        Raises:
            WebDAVError: NOT_FOUND if the resource doesn't exist
        """
        path = normalize(path)
        if self.cache is not None:
            cached = self.cache.get(CacheKind.STAT, path)
            if cached is not None:
                return cached

        with _wrap_errors("stat", path):
            ms = await self.internal_client.propfind(path, Depth.ZERO, elem.FILE_INFO_PROPS)
            if not ms.responses or ms.responses[0].status_code == 404:
                raise WebDAVError.not_found(path)
            fi = stats_from_response(ms.responses[0], path)

        if self.cache is not None:
            self.cache.set(CacheKind.STAT, path, fi)
        return fi

    async def exists(self, path: str) -> bool:
        """Check whether a file or directory exists.

        Only NOT_FOUND means False; every other failure is raised.
        """
        try:
            await self.stat(path)
        except WebDAVError as e:
            if is_not_found(e):
                return False
            raise
        return True

    async def _read_bytes(self, path: str, use_cache: bool = True) -> bytes:
        if self.cache is not None and use_cache:
            cached = self.cache.get(CacheKind.READ, path)
            if cached is not None:
                return cached

        with _wrap_errors("read", path):
            resp = await self.internal_client.request("GET", path)
            content = resp.content

        if self.cache is not None:
            self.cache.set(CacheKind.READ, path, content)
        return content

    async def read_file(
        self, path: str, encoding: str | None = None, use_cache: bool = True
    ) -> bytes | str:
        """Read a file.

        Args:
            path: File path
            encoding: Decode the content with this encoding and return str
            use_cache: Whether a cached copy may be returned

        Returns:
            File content as bytes, or str when an encoding is given
        """
        path = normalize(path)
        if encoding is not None:
            try:
                codecs.lookup(encoding)
            except LookupError as e:
                raise WebDAVError.invalid_argument(f"unknown encoding {encoding!r}", path) from e

        content = await self._read_bytes(path, use_cache)
        if encoding is None:
            return content

        with _wrap_errors("read", path):
            return content.decode(encoding)

    async def write_file(
        self,
        path: str,
        data: bytes | str,
        overwrite: bool = True,
        content_type: str | None = None,
        encoding: str = "utf-8",
    ) -> None:
        """Create or replace a file.

        With ``overwrite=False`` the path is probed first and ALREADY_EXISTS
        is raised without uploading. The probe and the PUT are separate
        requests, so a concurrent writer can still slip in between.

        Args:
            path: File path
            data: Content; str is encoded with ``encoding``
            overwrite: Whether an existing file may be replaced
            content_type: MIME type, guessed from the extension if None
            encoding: Encoding for str data
        """
        path = normalize(path)
        _check_data(data)
        if path == "/":
            raise WebDAVError.invalid_argument("cannot write to the root collection", path)

        if not overwrite and await self.exists(path):
            raise WebDAVError.already_exists(path)

        with _wrap_errors("write", path):
            body = data.encode(encoding) if isinstance(data, str) else bytes(data)
            headers = {"Content-Type": content_type or content_type_for(path)}
            await self.internal_client.request("PUT", path, content=body, headers=headers)

        self._invalidate(path)

    async def append_file(self, path: str, data: bytes | str, encoding: str = "utf-8") -> None:
        """Append to a file, creating it if needed.

        Implemented as read, concatenate, write. A concurrent writer between
        the read and the write is overwritten.
        """
        path = normalize(path)
        _check_data(data)

        if not await self.exists(path):
            await self.write_file(path, data, encoding=encoding)
            return

        new_content: bytes | str
        if isinstance(data, str):
            existing = await self.read_file(path, encoding=encoding, use_cache=False)
            new_content = str(existing) + data
        else:
            existing_bytes = await self._read_bytes(path, use_cache=False)
            new_content = existing_bytes + bytes(data)

        logger.debug(f"append: rewriting {path} with {len(data)} more bytes/chars")
        await self.write_file(path, new_content, encoding=encoding)

    async def unlink(self, path: str) -> None:
        """Delete a file.

        Raises:
            WebDAVError: INVALID_ARGUMENT if the path is a directory
        """
        path = normalize(path)
        fi = await self.stat(path)
        if fi.is_dir:
            raise WebDAVError.invalid_argument(f"{path} is a directory, use rmdir", path)

        with _wrap_errors("delete", path):
            await self.internal_client.request("DELETE", path)

        self._invalidate(path)

    async def delete_file(self, path: str) -> None:
        """Delete a file (alias of unlink)."""
        await self.unlink(path)

    async def mkdir(self, path: str, recursive: bool = False) -> None:
        """Create a directory.

        An existing directory is left alone; an existing file raises
        ALREADY_EXISTS. With ``recursive`` missing ancestors are created
        first, outermost first.
        """
        path = normalize(path)
        try:
            fi = await self.stat(path)
        except WebDAVError as e:
            if not is_not_found(e):
                raise
        else:
            if fi.is_dir:
                return
            raise WebDAVError.already_exists(path)

        if recursive:
            parent = parent_of(path)
            if parent != "/":
                logger.debug(f"mkdir: ensuring parent {parent}")
                await self.mkdir(parent, recursive=True)

        with _wrap_errors("mkdir", path):
            await self.internal_client.request("MKCOL", path)

        self._invalidate(path)

    async def _stat_for_removal(self, path: str, force: bool) -> Stats | None:
        if path == "/":
            raise WebDAVError.invalid_argument("refusing to remove the root collection", path)
        try:
            return await self.stat(path)
        except WebDAVError as e:
            if force and is_not_found(e):
                return None
            raise

    async def rmdir(self, path: str, recursive: bool = False, force: bool = False) -> None:
        """Remove a directory.

        Args:
            path: Directory path
            recursive: Remove the contents first; otherwise the directory
                must be empty
            force: Treat a missing path as success
        """
        path = normalize(path)
        fi = await self._stat_for_removal(path, force)
        if fi is None:
            return
        if not fi.is_dir:
            raise WebDAVError.invalid_argument(f"{path} is not a directory, use unlink", path)

        await self._remove_dir(path, recursive, force, 0)

    async def rm(self, path: str, recursive: bool = False, force: bool = False) -> None:
        """Remove a file or directory.

        Args:
            path: Path to remove
            recursive: Remove directory contents first
            force: Treat a missing path as success
        """
        path = normalize(path)
        fi = await self._stat_for_removal(path, force)
        if fi is None:
            return

        if fi.is_dir:
            await self._remove_dir(path, recursive, force, 0)
        else:
            await self._delete(path, force)

    async def _remove_dir(self, path: str, recursive: bool, force: bool, depth: int) -> None:
        if depth > MAX_TREE_DEPTH:
            raise WebDAVError.protocol(
                f"webdav: directory tree under {path} is deeper than {MAX_TREE_DEPTH} levels",
                path=path,
            )

        children = await self.read_dir(path, include_hidden=True, use_cache=False)
        if children and not recursive:
            raise WebDAVError.invalid_argument(f"directory not empty: {path}", path)

        # Children go first, one at a time, in listing order
        for child in children:
            if child.is_dir:
                await self._remove_dir(child.path, True, force, depth + 1)
            else:
                await self._delete(child.path, force)

        await self._delete(path, force, tree=True)

    async def _delete(self, path: str, force: bool, tree: bool = False) -> None:
        logger.debug(f"rm: deleting {path}")
        try:
            with _wrap_errors("delete", path):
                await self.internal_client.request("DELETE", path)
        except WebDAVError as e:
            if not (force and is_not_found(e)):
                raise
        self._invalidate(path, tree=tree)

    def _entries(self, ms: elem.MultiStatus, path: str) -> Iterator[Stats]:
        for resp in ms.responses:
            entry_path = strip_base(resp.path, self.config.base_path)
            # The collection's own entry has the queried path (or no name)
            if entry_path == path or not basename(entry_path):
                continue
            if resp.status_code is not None and resp.status_code // 100 != 2:
                raise error_from_status(resp.status_code, entry_path)
            yield stats_from_response(resp, entry_path)

    async def read_dir(
        self,
        path: str,
        recursive: bool = False,
        include_hidden: bool = False,
        use_cache: bool = True,
    ) -> list[Stats]:
        """List directory contents.

        Args:
            path: Directory path
            recursive: Whether to list the whole subtree (Depth: infinity)
            include_hidden: Whether to include names starting with "."
            use_cache: Whether a cached listing may be returned

        Returns:
            Entries in the order the server reported them, without the
            directory itself
        """
        path = normalize(path)
        cacheable = self.cache is not None and not recursive

        entries: tuple[Stats, ...] | None = None
        if cacheable and use_cache:
            entries = self.cache.get(CacheKind.READDIR, path)  # type: ignore[union-attr]

        if entries is None:
            depth = Depth.INFINITY if recursive else Depth.ONE
            with _wrap_errors("readdir", path):
                ms = await self.internal_client.propfind(path, depth, elem.FILE_INFO_PROPS)
                entries = tuple(self._entries(ms, path))
            if cacheable:
                self.cache.set(CacheKind.READDIR, path, entries)  # type: ignore[union-attr]

        return [fi for fi in entries if include_hidden or not fi.name.startswith(".")]

    async def copy(self, src: str, dest: str, options: CopyOptions | None = None) -> None:
        """Copy a file or directory.

        Args:
            src: Source path
            dest: Destination path
            options: Copy options
        """
        if options is None:
            options = CopyOptions()

        src, dest = normalize(src), normalize(dest)
        if src == dest:
            raise WebDAVError.invalid_argument("source and destination are the same", src)

        await self.stat(src)
        if options.no_overwrite and await self.exists(dest):
            raise WebDAVError.already_exists(dest)

        depth = Depth.ZERO if options.no_recursive else Depth.INFINITY
        headers = copy_headers(
            self.internal_client.resolve_href(dest), not options.no_overwrite, depth
        )

        with _wrap_errors("copy", src):
            await self.internal_client.request("COPY", src, headers=headers)

        self._invalidate(dest, tree=True)

    async def move(self, src: str, dest: str, options: MoveOptions | None = None) -> None:
        """Move a file or directory.

        Args:
            src: Source path
            dest: Destination path
            options: Move options
        """
        if options is None:
            options = MoveOptions()

        src, dest = normalize(src), normalize(dest)
        if src == dest:
            raise WebDAVError.invalid_argument("source and destination are the same", src)

        await self.stat(src)
        if options.no_overwrite and await self.exists(dest):
            raise WebDAVError.already_exists(dest)

        headers = move_headers(self.internal_client.resolve_href(dest), not options.no_overwrite)

        with _wrap_errors("move", src):
            await self.internal_client.request("MOVE", src, headers=headers)

        self._invalidate(src, tree=True)
        self._invalidate(dest, tree=True)

    async def rename(self, path: str, new_name: str, options: MoveOptions | None = None) -> None:
        """Rename a file or directory within its parent directory.

        Args:
            path: Current path
            new_name: New last path segment
            options: Move options
        """
        if not new_name or "/" in new_name or new_name in (".", ".."):
            raise WebDAVError.invalid_argument(f"invalid name {new_name!r}", path)

        path = normalize(path)
        if path == "/":
            raise WebDAVError.invalid_argument("cannot rename the root collection", path)

        await self.move(path, join_path(parent_of(path), new_name), options)

    async def proppatch(self, path: str, values: Mapping[str, str]) -> None:
        """Set dead properties on a resource.

        Args:
            path: Resource path
            values: Property name to text value; plain names are in the DAV:
                namespace, ``{namespace}name`` selects another one
        """
        path = normalize(path)
        if not values:
            raise WebDAVError.invalid_argument("no properties to set", path)

        with _wrap_errors("proppatch", path):
            ms = await self.internal_client.proppatch(path, values)

        for resp in ms.responses:
            if resp.status_code is not None and resp.status_code // 100 != 2:
                raise error_from_status(resp.status_code, path)
            for propstat in resp.propstats:
                if not propstat.ok:
                    names = ", ".join(propstat.prop.raw) or "properties"
                    raise error_from_status(
                        propstat.status_code or 500, path, f"failed to set {names}"
                    )

        if self.cache is not None:
            self.cache.delete(CacheKind.STAT, path)

    async def create_read_stream(
        self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> ReadStream:
        """Open a file for sequential, chunked reading."""
        path = normalize(path)
        return ReadStream(await self._read_bytes(path), chunk_size)

    def create_write_stream(
        self, path: str, overwrite: bool = True, content_type: str | None = None
    ) -> WriteStream:
        """Open a file for writing; content is uploaded when the stream closes."""
        return WriteStream(self, normalize(path), overwrite, content_type)
