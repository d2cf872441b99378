"""Sequential byte streams layered over read_file / write_file."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from .errors import WebDAVError

if TYPE_CHECKING:
    from .client import Client

DEFAULT_CHUNK_SIZE = 64 * 1024


class ReadStream:
    """Chunked reader over content that has already been fetched."""

    def __init__(self, content: bytes, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise WebDAVError.invalid_argument("chunk_size must be positive")
        self._content = content
        self._chunk_size = chunk_size
        self._pos = 0

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        chunk = await self.read(self._chunk_size)
        if not chunk:
            raise StopAsyncIteration
        return chunk

    async def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes (everything left if negative)."""
        if size < 0:
            end = len(self._content)
        else:
            end = min(self._pos + size, len(self._content))
        chunk = self._content[self._pos : end]
        self._pos = end
        return chunk


class WriteStream:
    """Buffers written chunks and uploads them with one PUT on close."""

    def __init__(
        self,
        client: Client,
        path: str,
        overwrite: bool = True,
        content_type: str | None = None,
    ):
        self._client = client
        self._path = path
        self._overwrite = overwrite
        self._content_type = content_type
        self._chunks: list[bytes] = []
        self.closed = False

    async def write(self, chunk: bytes | str) -> int:
        """Buffer a chunk; text is encoded as UTF-8."""
        if self.closed:
            raise WebDAVError.invalid_argument("write to closed stream", self._path)
        if isinstance(chunk, str):
            data = chunk.encode("utf-8")
        elif isinstance(chunk, (bytes, bytearray, memoryview)):
            data = bytes(chunk)
        else:
            raise WebDAVError.invalid_argument(f"unsupported chunk type {type(chunk).__name__}")
        self._chunks.append(data)
        return len(data)

    async def close(self) -> None:
        """Upload the buffered content. Closing twice is a no-op."""
        if self.closed:
            return
        self.closed = True
        await self._client.write_file(
            self._path,
            b"".join(self._chunks),
            overwrite=self._overwrite,
            content_type=self._content_type,
        )

    async def __aenter__(self) -> WriteStream:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        # Nothing is uploaded when the block failed
        if exc_type is None:
            await self.close()
        else:
            self.closed = True
