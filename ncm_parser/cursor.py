"""Byte cursors over in-memory buffers and lazily read streams.

The container parser only ever asks for "the next N bytes" or "everything
left", so both input modes share one small interface.
"""

import struct
from abc import ABC, abstractmethod
from typing import BinaryIO, Iterator

from .errors import TruncatedInput

BUFFER_SIZE = 0x8000


class ByteCursor(ABC):
    """Forward-only reader with an absolute offset."""

    @abstractmethod
    def tell(self) -> int:
        ...

    @abstractmethod
    def read_exact(self, size: int) -> bytes:
        ...

    @abstractmethod
    def read_all(self) -> bytes:
        ...

    @abstractmethod
    def iter_remaining(self, size: int = BUFFER_SIZE) -> Iterator[bytes]:
        ...

    def skip(self, size: int) -> None:
        self.read_exact(size)

    def read_u32(self) -> int:
        return struct.unpack("<I", self.read_exact(4))[0]


class BufferCursor(ByteCursor):
    def __init__(self, data: bytes, offset: int = 0):
        self._data = memoryview(data)
        self._pos = offset

    def tell(self) -> int:
        return self._pos

    def read_exact(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise TruncatedInput(size, len(self._data) - self._pos, self._pos)
        chunk = self._data[self._pos:end].tobytes()
        self._pos = end
        return chunk

    def read_all(self) -> bytes:
        chunk = self._data[self._pos:].tobytes()
        self._pos = len(self._data)
        return chunk

    def iter_remaining(self, size: int = BUFFER_SIZE) -> Iterator[bytes]:
        while self._pos < len(self._data):
            end = min(self._pos + size, len(self._data))
            chunk = self._data[self._pos:end].tobytes()
            self._pos = end
            yield chunk


class ReaderCursor(ByteCursor):
    """Cursor over a binary file object, read on demand."""

    def __init__(self, reader: BinaryIO):
        self._reader = reader
        self._pos = 0

    def tell(self) -> int:
        return self._pos

    def _read(self, size: int) -> bytes:
        # raw streams and pipes may return short reads before EOF
        parts = []
        remaining = size
        while remaining > 0:
            data = self._reader.read(remaining)
            if not data:
                break
            parts.append(data)
            remaining -= len(data)
        chunk = b"".join(parts)
        self._pos += len(chunk)
        return chunk

    def read_exact(self, size: int) -> bytes:
        start = self._pos
        chunk = self._read(size)
        if len(chunk) != size:
            raise TruncatedInput(size, len(chunk), start)
        return chunk

    def read_all(self) -> bytes:
        return b"".join(self.iter_remaining())

    def iter_remaining(self, size: int = BUFFER_SIZE) -> Iterator[bytes]:
        while True:
            chunk = self._reader.read(size)
            if not chunk:
                break
            self._pos += len(chunk)
            yield chunk
